"""Exceptions raised on API misuse.

Per-call resolution outcomes are never exceptions; they are returned as
:mod:`depgraph_cli.models` resolution values.
"""

from __future__ import annotations


class DepGraphError(Exception):
    """Base class for depgraph errors."""


class UnknownEntityError(DepGraphError, KeyError):
    """An entity id does not exist in the store."""

    def __init__(self, entity_id: object) -> None:
        super().__init__(entity_id)
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"unknown entity id: {self.entity_id!r}"


class StoreFrozenError(DepGraphError):
    """The entity store was finalized and no longer accepts declarations."""


class StoreNotFinalizedError(DepGraphError):
    """Call resolution was requested before ``finalize_parse()``."""


class NotCallableError(DepGraphError, TypeError):
    """The entity kind does not own a call list."""
