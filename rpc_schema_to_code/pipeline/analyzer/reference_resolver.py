"""
Reference resolver for named type references.

Resolves reference leaves against the namespace of declared models and
rejects alias chains that loop back on themselves.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from ..errors import AliasCycle, DanglingReference, InvalidMapKey
from .ir_nodes import AliasDecl, EnumDecl, ExternalDecl, ModelDecl, ServiceDecl, StructDecl
from .type_nodes import (
    SCALAR_KINDS,
    AliasType,
    ExternalType,
    MapType,
    PrimitiveType,
    ReferenceType,
    TypeNode,
    walk,
)


class ReferenceResolver:
    """Resolves references to declared models."""

    def __init__(self, models: Mapping[str, ModelDecl], services: Mapping[str, ServiceDecl] | None = None):
        """
        Initialize the resolver.

        Args:
            models: Every top-level model declaration, by name
            services: Service declarations whose signatures are checked too
        """
        self.services = services or {}
        self._index: dict[str, ModelDecl] = {}
        self._build_index(models)

    def _build_index(self, models: Mapping[str, ModelDecl]) -> None:
        """Build the name -> declaration index in one pass."""
        for name, decl in models.items():
            self._index[name] = decl

    def resolve(self, name: str, declaration: str | None = None) -> ModelDecl:
        """
        Look up a declaration by name.

        Raises:
            DanglingReference: If no model of that name is declared
        """
        decl = self._index.get(name)
        if decl is None:
            raise DanglingReference(name, declaration)
        return decl

    def sites(self) -> Iterator[tuple[str, TypeNode]]:
        """Every type tree of the unit with its declaration path, in declaration order."""
        for name, decl in self._index.items():
            if isinstance(decl, StructDecl):
                for field_name, field_decl in decl.fields.items():
                    yield f"{name}.{field_name}", field_decl.type
            elif isinstance(decl, AliasDecl):
                yield name, decl.inner
            elif isinstance(decl, ExternalDecl):
                yield name, decl.representation

        for service_name, service in self.services.items():
            for method_name, method in service.methods.items():
                site = f"{service_name}.{method_name}"
                for input_name, input_type in method.inputs.items():
                    yield f"{site}({input_name})", input_type
                yield site, method.output

    def check_references(self) -> None:
        """Verify every reference leaf of every type tree."""
        for site, node in self.sites():
            for sub in walk(node):
                if isinstance(sub, ReferenceType):
                    self.resolve(sub.name, site)

    def _alias_target(self, inner: TypeNode) -> str | None:
        if isinstance(inner, ReferenceType) and isinstance(self._index.get(inner.name), AliasDecl):
            return inner.name
        if isinstance(inner, AliasType):
            return inner.name
        return None

    def alias_edges(self) -> dict[str, list[str]]:
        """
        Edges of the alias graph.

        ``A -> B`` when the immediate inner node of alias ``A`` is a
        reference to alias ``B`` or an inline alias named ``B``. Only this
        chain needs eager expansion; references through composites do not
        create edges.
        """
        edges: dict[str, list[str]] = {}

        def add(source: str, inner: TypeNode) -> None:
            targets = edges.setdefault(source, [])
            target = self._alias_target(inner)
            if target is not None and target not in targets:
                targets.append(target)

        for name, decl in self._index.items():
            if isinstance(decl, AliasDecl):
                add(name, decl.inner)

        for _, node in self.sites():
            for sub in walk(node):
                if isinstance(sub, AliasType):
                    add(sub.name, sub.inner)

        return edges

    def check_alias_cycles(self) -> None:
        """
        Reject alias chains that revisit an alias on the current path.

        Raises:
            AliasCycle: With the full chain, first and last names equal
        """
        edges = self.alias_edges()
        done: set[str] = set()

        def visit(name: str, path: list[str]) -> None:
            if name in path:
                cycle = path[path.index(name) :] + [name]
                raise AliasCycle(cycle, cycle[0])
            if name in done:
                return
            path.append(name)
            for target in edges.get(name, []):
                visit(target, path)
            path.pop()
            done.add(name)

        for name in edges:
            visit(name, [])

    def terminal(self, node: TypeNode) -> TypeNode:
        """
        Follow alias declarations and inline aliases to the first non-alias node.

        Only valid once ``check_alias_cycles`` passed; the hop count is
        still bounded by the size of the namespace.
        """
        for _ in range(len(self._index) + 1):
            if isinstance(node, AliasType):
                node = node.inner
            elif isinstance(node, ReferenceType) and isinstance(self._index.get(node.name), AliasDecl):
                node = self._index[node.name].inner
            else:
                return node
        raise AliasCycle([getattr(node, "name", "?")])

    def check_map_keys(self) -> None:
        """Map keys must end in a scalar primitive, an enum, or an external with a scalar representation."""
        for site, node in self.sites():
            for sub in walk(node):
                if isinstance(sub, MapType):
                    self._check_map_key(sub.key, site)

    def _check_map_key(self, key: TypeNode, declaration: str) -> None:
        target = self.terminal(key)
        if isinstance(target, ReferenceType):
            decl = self._index.get(target.name)
            if isinstance(decl, EnumDecl):
                return
            if isinstance(decl, ExternalDecl):
                target = self.terminal(decl.representation)
        elif isinstance(target, ExternalType):
            target = self.terminal(target.representation)

        if isinstance(target, PrimitiveType) and target.primitive in SCALAR_KINDS:
            return
        raise InvalidMapKey(
            f"map key must be a string, bool, integer or enum type, got {target.kind.value}",
            declaration,
        )

    def check(self) -> None:
        """Run all resolution checks in order: references, alias cycles, map keys."""
        self.check_references()
        self.check_alias_cycles()
        self.check_map_keys()
