"""
Error taxonomy for schema building and code emission.

Errors are raised as early as possible (registration, then resolution,
then emission) and abort the whole generation unit.
"""

from __future__ import annotations


class SchemaError(Exception):
    """Base class for user-facing schema errors.

    Attributes:
        declaration: Dotted path of the offending declaration
            (e.g. "Post.author" or "PostService.findOne"), if known
    """

    def __init__(self, message: str, declaration: str | None = None):
        self.declaration = declaration
        if declaration:
            message = f"{declaration}: {message}"
        super().__init__(message)


class StructuralError(SchemaError):
    """A type expression has an invalid shape."""


class UnknownPrimitiveKind(StructuralError):
    """A primitive kind string is not part of the type algebra."""

    def __init__(self, kind: str, declaration: str | None = None):
        self.kind = kind
        super().__init__(f"unknown primitive kind {kind!r}", declaration)


class MalformedType(StructuralError):
    """A composite type expression is missing a child or has a bad payload."""


class InvalidMapKey(StructuralError):
    """A map key type is not scalar-like."""


class NamespaceError(SchemaError):
    """Names collide inside one generation unit."""


class DuplicateName(NamespaceError):
    """Two top-level declarations (models or services) share a name."""

    def __init__(self, name: str, declaration: str | None = None):
        self.name = name
        super().__init__(f"duplicate name {name!r}", declaration)


class DuplicateField(NamespaceError):
    """A field, input, method or variant name appears twice in its owner."""

    def __init__(self, name: str, declaration: str | None = None):
        self.name = name
        super().__init__(f"duplicate member {name!r}", declaration)


class DuplicateEnumValue(NamespaceError):
    """Two variants of one enum share a raw value."""

    def __init__(self, value: str, declaration: str | None = None):
        self.value = value
        super().__init__(f"duplicate enum value {value!r}", declaration)


class ResolutionError(SchemaError):
    """A reference or alias chain cannot be resolved."""


class DanglingReference(ResolutionError):
    """A reference names no declared model."""

    def __init__(self, name: str, declaration: str | None = None):
        self.name = name
        super().__init__(f"reference to undeclared model {name!r}", declaration)


class AliasCycle(ResolutionError):
    """An alias chain revisits itself.

    Attributes:
        path: The full chain, starting and ending with the same alias name
    """

    def __init__(self, path: list[str], declaration: str | None = None):
        self.path = list(path)
        super().__init__(f"alias cycle {' -> '.join(self.path)}", declaration)


class SchemaDocumentError(SchemaError):
    """A schema document does not have the expected shape."""


class UnsupportedSchemaVersion(SchemaDocumentError):
    """A runtime schema representation carries an unknown version."""

    def __init__(self, version: object):
        self.version = version
        super().__init__(f"unsupported runtime schema version {version!r}")


class EmissionError(Exception):
    """Raised when emission meets an IR it cannot render.

    Emission is total over a built schema, so this always indicates an
    internal defect rather than a problem with the user's declarations.
    """


class WriteError(Exception):
    """Raised when a generated file cannot be written.

    This can happen when:
    - The target exists and the output mode forbids replacing it
    - The target exists but was not produced by the generator
    - The generated content fails validation
    """
