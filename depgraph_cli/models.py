"""Core data models shared by the entity store, the resolver and the front ends."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from .errors import NotCallableError


class EntityKind(str, Enum):
    PACKAGE = "package"
    MODULE = "module"
    FILE = "file"
    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    FIELD = "field"
    VARIABLE = "variable"
    BLOCK = "block"


SCOPE_KINDS = frozenset({
    EntityKind.PACKAGE,
    EntityKind.MODULE,
    EntityKind.FILE,
    EntityKind.CLASS,
    EntityKind.FUNCTION,
    EntityKind.METHOD,
    EntityKind.BLOCK,
})

# Entities that own a list of raw call expressions.
CALLABLE_KINDS = frozenset({EntityKind.FUNCTION, EntityKind.METHOD, EntityKind.MODULE})

# Lexical lookup stops after the first scope of one of these kinds.
ROOT_SCOPE_KINDS = frozenset({EntityKind.MODULE, EntityKind.PACKAGE})


class RelationKind(str, Enum):
    CALL = "Call"
    CALLED_BY = "CalledBy"
    IMPLICIT_INTERNAL_CALL = "ImplicitInternalCall"
    IMPLICIT_INTERNAL_CALLED_BY = "ImplicitInternalCalledBy"
    IMPLICIT_EXTERNAL_CALL = "ImplicitExternalCall"
    IMPLICIT_EXTERNAL_CALLED_BY = "ImplicitExternalCalledBy"
    IMPORT = "Import"
    IMPORTED_BY = "ImportedBy"

    @property
    def inverse(self) -> "RelationKind":
        return _INVERSE[self]

    @property
    def is_forward(self) -> bool:
        return self in _FORWARD


_FORWARD = {
    RelationKind.CALL: RelationKind.CALLED_BY,
    RelationKind.IMPLICIT_INTERNAL_CALL: RelationKind.IMPLICIT_INTERNAL_CALLED_BY,
    RelationKind.IMPLICIT_EXTERNAL_CALL: RelationKind.IMPLICIT_EXTERNAL_CALLED_BY,
    RelationKind.IMPORT: RelationKind.IMPORTED_BY,
}
_INVERSE = {**_FORWARD, **{inv: fwd for fwd, inv in _FORWARD.items()}}

CALL_KINDS = frozenset({
    RelationKind.CALL,
    RelationKind.IMPLICIT_INTERNAL_CALL,
    RelationKind.IMPLICIT_EXTERNAL_CALL,
})


@dataclass
class Entity:
    """A declared program element.

    ``id`` doubles as the index of the entity inside its :class:`EntityStore`.
    ``calls`` is only populated for callable containers (function, method,
    module); it holds raw call text until the chain normalizer rewrites it.
    """

    id: int
    kind: EntityKind
    name: str
    parent_id: Optional[int]
    qualname: str
    language: str = "python"
    file_path: str = ""
    line: int = 0
    child_ids: List[int] = field(default_factory=list)
    calls: Optional[List[str]] = None
    calls_normalized: bool = False
    is_variable: bool = False
    is_type_resolved: bool = False
    declared_type: Optional[str] = None
    type_id: Optional[int] = None

    @property
    def is_scope(self) -> bool:
        return self.kind in SCOPE_KINDS

    @property
    def is_callable_container(self) -> bool:
        return self.kind in CALLABLE_KINDS

    def call_list(self) -> List[str]:
        if self.calls is None:
            raise NotCallableError(f"{self.kind.value} '{self.qualname}' has no call list")
        return self.calls


@dataclass(frozen=True)
class Relation:
    src: int
    dst: int
    kind: RelationKind


# ---------------------------------------------------------------------------
# Resolution outcomes
# ---------------------------------------------------------------------------

class UnresolvedReason(str, Enum):
    BUILTIN = "builtin"
    SUPER = "super"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Resolved:
    entity_id: int
    kind: RelationKind


@dataclass(frozen=True)
class Ambiguous:
    """Whole-program by-name fallback; every candidate is a possible target.

    ``kind`` is ``ImplicitInternalCall`` when the receiver is ``self`` or a
    type-resolved variable whose members could not be looked up directly.
    """

    candidates: Tuple[int, ...]
    kind: RelationKind = RelationKind.IMPLICIT_EXTERNAL_CALL


@dataclass(frozen=True)
class Unresolved:
    reason: UnresolvedReason


Resolution = Union[Resolved, Ambiguous, Unresolved]


@dataclass(frozen=True)
class CallSite:
    index: int
    text: str
    reduced: str
    resolution: Resolution

    @property
    def target_ids(self) -> Tuple[int, ...]:
        if isinstance(self.resolution, Resolved):
            return (self.resolution.entity_id,)
        if isinstance(self.resolution, Ambiguous):
            return self.resolution.candidates
        return ()
