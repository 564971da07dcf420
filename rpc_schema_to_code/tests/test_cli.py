"""
End-to-end tests of the command line interface.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path

from click.testing import CliRunner

from rpc_schema_to_code.rpc_schema_to_code import rpc_schema_to_code

TEST_DATA_DIR = Path(__file__).with_name("test_data")


def copy_schema(name: str, tmp_path: Path) -> Path:
    target = tmp_path / name
    shutil.copy(TEST_DATA_DIR / name, target)
    return target


class TestCli:
    def test_generates_python(self, tmp_path):
        schema = copy_schema("posts.json", tmp_path)
        output = tmp_path / "posts.py"

        result = CliRunner().invoke(rpc_schema_to_code, [str(schema), str(output)])

        assert result.exit_code == 0, result.output
        code = output.read_text(encoding="utf-8")
        assert code.startswith("# AUTOGENERATED FILE - DO NOT EDIT\n# Generated by rpc_schema_to_code posts.json posts.py\n")
        assert "class PostServiceConsumer:" in code

    def test_generates_typescript(self, tmp_path):
        schema = copy_schema("todo.json", tmp_path)
        output = tmp_path / "todo.ts"

        result = CliRunner().invoke(rpc_schema_to_code, ["--language", "typescript", str(schema), str(output)])

        assert result.exit_code == 0, result.output
        code = output.read_text(encoding="utf-8")
        assert "// Generated by rpc_schema_to_code todo.json todo.ts --language typescript\n" in code
        assert 'import { Instant } from "./todo.external";' in code

    def test_language_from_output_extension(self, tmp_path):
        schema = copy_schema("posts.json", tmp_path)
        output = tmp_path / "posts.ts"

        result = CliRunner().invoke(rpc_schema_to_code, [str(schema), str(output)])

        assert result.exit_code == 0, result.output
        code = output.read_text(encoding="utf-8")
        assert "export class Post {" in code
        assert "@dataclass" not in code

    def test_config_language_wins_over_extension(self, tmp_path):
        schema = copy_schema("posts.json", tmp_path)
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"language": "python"}))
        output = tmp_path / "posts.ts"

        result = CliRunner().invoke(rpc_schema_to_code, ["--config", str(config), str(schema), str(output)])

        assert result.exit_code == 0, result.output
        assert "@dataclass" in output.read_text(encoding="utf-8")

    def test_regenerating_is_repeatable(self, tmp_path):
        schema = copy_schema("posts.json", tmp_path)
        output = tmp_path / "posts.py"
        runner = CliRunner()

        assert runner.invoke(rpc_schema_to_code, [str(schema), str(output)]).exit_code == 0
        first = output.read_text(encoding="utf-8")
        assert runner.invoke(rpc_schema_to_code, [str(schema), str(output)]).exit_code == 0
        assert output.read_text(encoding="utf-8") == first

    def test_refuses_hand_written_output(self, tmp_path):
        schema = copy_schema("posts.json", tmp_path)
        output = tmp_path / "posts.py"
        output.write_text("HANDWRITTEN = True\n", encoding="utf-8")
        runner = CliRunner()

        result = runner.invoke(rpc_schema_to_code, [str(schema), str(output)])
        assert result.exit_code == 1
        assert "Refusing to overwrite" in result.output
        assert output.read_text(encoding="utf-8") == "HANDWRITTEN = True\n"

        result = runner.invoke(rpc_schema_to_code, ["--force", str(schema), str(output)])
        assert result.exit_code == 0, result.output
        assert "class Post:" in output.read_text(encoding="utf-8")

    def test_schema_error_is_reported(self, tmp_path):
        schema = tmp_path / "broken.json"
        schema.write_text(json.dumps({"models": {"Post": {"type": "struct", "fields": {"author": "Author"}}}}))
        output = tmp_path / "broken.py"

        result = CliRunner().invoke(rpc_schema_to_code, [str(schema), str(output)])

        assert result.exit_code == 1
        assert "Post.author" in result.output
        assert "'Author'" in result.output
        assert not output.exists()

    def test_alias_cycle_is_reported(self, tmp_path):
        schema = tmp_path / "cycle.json"
        schema.write_text(json.dumps({"models": {"A": {"type": "alias", "inner": "B"}, "B": {"type": "alias", "inner": "A"}}}))

        result = CliRunner().invoke(rpc_schema_to_code, [str(schema), str(tmp_path / "cycle.py")])

        assert result.exit_code == 1
        assert "A -> B -> A" in result.output

    def test_config_file(self, tmp_path):
        schema = copy_schema("posts.json", tmp_path)
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"add_generation_comment": False, "consumer_suffix": "Client"}))
        output = tmp_path / "posts.py"

        result = CliRunner().invoke(rpc_schema_to_code, ["--config", str(config), str(schema), str(output)])

        assert result.exit_code == 0, result.output
        code = output.read_text(encoding="utf-8")
        assert "# Generated by" not in code
        assert "class PostServiceClient:" in code

    def test_invalid_config(self, tmp_path):
        schema = copy_schema("posts.json", tmp_path)
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"language": "cobol"}))

        result = CliRunner().invoke(rpc_schema_to_code, ["--config", str(config), str(schema), str(tmp_path / "x.py")])

        assert result.exit_code == 2

    def test_name_option(self, tmp_path):
        schema = copy_schema("todo.json", tmp_path)
        output = tmp_path / "todo.py"

        result = CliRunner().invoke(rpc_schema_to_code, ["--name", "tasks", str(schema), str(output)])

        assert result.exit_code == 0, result.output
        assert "from .tasks_external import Instant" in output.read_text(encoding="utf-8")
