"""
File emission.

Writes generated artifacts with full-overwrite semantics.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter

__all__ = ["AtomicWriter"]
