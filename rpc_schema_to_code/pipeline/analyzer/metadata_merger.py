"""
Metadata merger.

Combines annotations declared at several sites (schema-wide defaults,
owner defaults, the item itself) into one ordered mapping. Metadata is
opaque here: values are never validated or interpreted.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .type_nodes import freeze


class MetadataMerger:
    """Merges metadata sources, least specific first."""

    SITES = ("fields", "methods", "models", "services")

    def __init__(self, defaults: Mapping[str, Mapping[str, Any]] | None = None):
        """
        Args:
            defaults: Schema-wide defaults by site kind
        """
        self.defaults = {site: dict((defaults or {}).get(site, {})) for site in self.SITES}

    @staticmethod
    def merge(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
        """
        Merge sources in order; later sources override earlier ones on key collision.

        A key keeps the position of its first appearance, so the result is
        stable for unchanged input.
        """
        merged: dict[str, Any] = {}
        for source in sources:
            if source:
                merged.update(source)
        return merged

    def for_site(self, site: str, *sources: Mapping[str, Any] | None) -> Mapping[str, Any]:
        """Merge the schema-wide defaults of ``site`` with more specific sources, frozen."""
        return freeze(self.merge(self.defaults[site], *sources))

    def field(self, struct_defaults: Mapping[str, Any] | None, own: Mapping[str, Any] | None) -> Mapping[str, Any]:
        return self.for_site("fields", struct_defaults, own)

    def method(self, service_defaults: Mapping[str, Any] | None, own: Mapping[str, Any] | None) -> Mapping[str, Any]:
        return self.for_site("methods", service_defaults, own)

    def model(self, own: Mapping[str, Any] | None) -> Mapping[str, Any]:
        return self.for_site("models", own)

    def service(self, own: Mapping[str, Any] | None) -> Mapping[str, Any]:
        return self.for_site("services", own)
