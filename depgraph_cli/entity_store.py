"""Arena of parsed entities plus the deferred bindings the front ends register.

Front ends call :meth:`EntityStore.declare` / :meth:`EntityStore.add_raw_call`
while walking source files, then :meth:`EntityStore.finalize_parse` once every
file has been seen. After that the store is frozen and only the chain
normalizer may rewrite call lists (once per entity).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .errors import StoreFrozenError, StoreNotFinalizedError, UnknownEntityError
from .models import CALLABLE_KINDS, Entity, EntityKind
from .scope_index import NameIndex, ScopeIndex

logger = logging.getLogger(__name__)

_TYPED_KINDS = (EntityKind.VARIABLE, EntityKind.FIELD)


@dataclass
class _PendingImport:
    scope_id: int
    alias: str
    target: str
    suffix_match: bool


@dataclass
class _PendingMember:
    owner_scope_id: int
    type_name: str
    member_name: str
    member_id: int


class EntityStore:
    """Owns every entity by integer id; append-only until finalized."""

    def __init__(self) -> None:
        self._entities: List[Entity] = []
        self._by_qualname: Dict[str, int] = {}
        self._pending_imports: List[_PendingImport] = []
        self._pending_members: List[_PendingMember] = []
        self._names: Optional[NameIndex] = None
        self._finalized = False
        self.scopes = ScopeIndex(self)
        self.import_links: List[Tuple[int, int]] = []

    # ------------------------------------------------------------------
    # Parse-phase API
    # ------------------------------------------------------------------

    def declare(
        self,
        kind: Union[EntityKind, str],
        name: str,
        parent_id: Optional[int] = None,
        declared_type_known: Optional[bool] = None,
        *,
        declared_type: Optional[str] = None,
        qualname: Optional[str] = None,
        language: Optional[str] = None,
        file_path: str = "",
        line: int = 0,
    ) -> int:
        """Create an entity and bind its name in the parent's scope."""
        self._check_open()
        kind = EntityKind(kind)
        parent = self.get(parent_id) if parent_id is not None else None

        if qualname is None:
            qualname = f"{parent.qualname}.{name}" if parent is not None else name
        is_variable = kind in _TYPED_KINDS
        if declared_type_known is None:
            declared_type_known = declared_type is not None

        entity = Entity(
            id=len(self._entities),
            kind=kind,
            name=name,
            parent_id=parent_id,
            qualname=qualname,
            language=language or (parent.language if parent is not None else "python"),
            file_path=file_path or (parent.file_path if parent is not None else ""),
            line=line,
            calls=[] if kind in CALLABLE_KINDS else None,
            is_variable=is_variable,
            is_type_resolved=is_variable and bool(declared_type_known),
            declared_type=declared_type,
        )
        self._entities.append(entity)
        self._by_qualname[qualname] = entity.id
        if parent is not None:
            parent.child_ids.append(entity.id)
            if name:
                self.scopes.bind(parent.id, name, entity.id)
        return entity.id

    def add_raw_call(self, entity_id: int, text: str) -> None:
        self._check_open()
        self.get(entity_id).call_list().append(text)

    def bind(self, scope_id: int, name: str, entity_id: int) -> None:
        """Bind an extra name (alias) for an existing entity inside a scope."""
        self._check_open()
        self.get(scope_id)
        self.get(entity_id)
        self.scopes.bind(scope_id, name, entity_id)

    def add_import(
        self,
        scope_id: int,
        alias: str,
        target: str,
        suffix_match: bool = False,
    ) -> None:
        """Bind *alias* in *scope_id* to the entity named *target* at finalize time."""
        self._check_open()
        self.get(scope_id)
        self._pending_imports.append(_PendingImport(scope_id, alias, target, suffix_match))

    def add_member(
        self,
        owner_scope_id: int,
        type_name: str,
        member_name: str,
        member_id: int,
    ) -> None:
        """Bind *member_id* into the scope of the type *type_name* names from *owner_scope_id*."""
        self._check_open()
        self.get(owner_scope_id)
        self.get(member_id)
        self._pending_members.append(
            _PendingMember(owner_scope_id, type_name, member_name, member_id)
        )

    def finalize_parse(self) -> None:
        """Resolve deferred bindings, build the name index and freeze the store."""
        if self._finalized:
            return

        for imp in self._pending_imports:
            target_id = self._resolve_import_target(imp)
            if target_id is None:
                logger.debug("Import %r -> %r not found in project", imp.alias, imp.target)
                continue
            self.scopes.bind(imp.scope_id, imp.alias, target_id)
            link = (self._import_source(imp.scope_id), target_id)
            if link not in self.import_links:
                self.import_links.append(link)

        for member in self._pending_members:
            type_id = self.scopes.resolve_dotted(member.type_name, member.owner_scope_id)
            if type_id is None or self._entities[type_id].kind != EntityKind.CLASS:
                logger.debug("Receiver type %r not found for %r", member.type_name, member.member_name)
                continue
            self.scopes.bind(type_id, member.member_name, member.member_id)

        for entity in self._entities:
            if entity.kind not in _TYPED_KINDS or not entity.declared_type:
                continue
            if entity.parent_id is None:
                continue
            type_id = self.scopes.resolve_dotted(entity.declared_type, entity.parent_id)
            if type_id is not None and self._entities[type_id].kind == EntityKind.CLASS:
                entity.type_id = type_id

        self._pending_imports.clear()
        self._pending_members.clear()
        self._names = NameIndex.build(self._entities)
        self._finalized = True
        logger.info(
            "Entity graph finalized: %d entities, %d import links",
            len(self._entities), len(self.import_links),
        )

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def names(self) -> NameIndex:
        if self._names is None:
            raise StoreNotFinalizedError("name index is built by finalize_parse()")
        return self._names

    def get(self, entity_id: Optional[int]) -> Entity:
        entity = self.find(entity_id)
        if entity is None:
            raise UnknownEntityError(entity_id)
        return entity

    def find(self, entity_id: Optional[int]) -> Optional[Entity]:
        if not isinstance(entity_id, int) or not 0 <= entity_id < len(self._entities):
            return None
        return self._entities[entity_id]

    def by_qualname(self, qualname: str) -> Optional[int]:
        return self._by_qualname.get(qualname)

    def children(self, entity_id: int) -> List[Entity]:
        return [self._entities[cid] for cid in self.get(entity_id).child_ids]

    def callable_ids(self) -> List[int]:
        return [e.id for e in self._entities if e.is_callable_container]

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return self.find(entity_id) is not None  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._finalized:
            raise StoreFrozenError("entity store is finalized")

    def _resolve_import_target(self, imp: _PendingImport) -> Optional[int]:
        if not imp.suffix_match:
            return self._by_qualname.get(imp.target)
        parts = imp.target.split(".")
        for start in range(len(parts)):
            candidate = self._by_qualname.get(".".join(parts[start:]))
            if candidate is not None and self._entities[candidate].kind == EntityKind.PACKAGE:
                return candidate
        return None

    def _import_source(self, scope_id: int) -> int:
        entity = self._entities[scope_id]
        while entity.kind not in (EntityKind.MODULE, EntityKind.FILE) and entity.parent_id is not None:
            entity = self._entities[entity.parent_id]
        if entity.kind in (EntityKind.MODULE, EntityKind.FILE):
            return entity.id
        return scope_id
