import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .pipeline import AtomicWriter, CodeGeneratorConfig, OutputMode, PipelineGenerator
from .pipeline.config import LANGUAGES
from .pipeline.errors import SchemaError, WriteError
from .pipeline.schema_ast import load_document

logger = logging.getLogger("rpc_schema_to_code")

# Output file suffix -> target language, used when neither --language nor the
# config file names one
EXTENSION_LANGUAGES = {".py": "python", ".ts": "typescript"}


@click.command()
@click.option("--name", "-n", default=None, type=str, help="Generation unit name (defaults to the schema file stem)")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--language", "-l", default=None, type=click.Choice(LANGUAGES))
@click.option("--force", "-f", is_flag=True, default=False, help="Overwrite the output even if it was not generated")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output", type=click.Path(dir_okay=False, resolve_path=True))
def rpc_schema_to_code(name, config, language, force, verbose, path, output):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config_language = None
    if config is not None:
        with open(config) as f:
            try:
                data = json.load(f)
                config_language = data.get("language") if isinstance(data, dict) else None
                config = CodeGeneratorConfig.from_dict(data)
            except (ValueError, TypeError) as e:
                raise click.BadParameter(str(e), param_hint="--config") from e
    else:
        config = CodeGeneratorConfig()

    if language is None and config_language is None:
        language = EXTENSION_LANGUAGES.get(Path(output).suffix.lower())
    if language is not None:
        config.language = language
    if force:
        config.output.mode = OutputMode.FORCE
    if not config.command_line:
        config.command_line = reconstruct_command_line(rpc_schema_to_code)

    if name is None:
        name = Path(path).stem

    try:
        with open(path, encoding="utf-8") as f:
            document = load_document(f.read())
        codegen = PipelineGenerator(name, document, config)
        out = codegen.generate()
        AtomicWriter(config.output).write(Path(output), out, config.language)
    except (SchemaError, WriteError) as e:
        raise click.ClickException(str(e)) from e

    logger.info("generated %s from %s", output, path)
