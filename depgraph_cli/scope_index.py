"""Name lookup structures: per-scope local maps and the whole-program name index."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .models import ROOT_SCOPE_KINDS, Entity, EntityKind

if TYPE_CHECKING:
    from .entity_store import EntityStore

_EMPTY: Mapping[str, int] = MappingProxyType({})


class ScopeIndex:
    """Local ``name -> entity id`` maps, one per scope entity.

    :meth:`lookup` never walks to a parent scope; callers that need lexical
    resolution use :meth:`resolve_lexically`, which hops one scope at a time.
    A variable whose declared type was bound to a class forwards member
    lookups to that class's map.
    """

    def __init__(self, store: "EntityStore") -> None:
        self._store = store
        self._maps: Dict[int, Dict[str, int]] = {}

    def bind(self, scope_id: int, name: str, entity_id: int) -> None:
        # Re-binding keeps the key's position; the newest id shadows.
        self._maps.setdefault(scope_id, {})[name] = entity_id

    def _member_scope(self, scope_id: int) -> int:
        entity = self._store.find(scope_id)
        if entity is not None and entity.type_id is not None:
            return entity.type_id
        return scope_id

    def lookup(self, name: str, scope_id: int) -> Optional[int]:
        return self._maps.get(self._member_scope(scope_id), {}).get(name)

    def local_map_of(self, scope_id: int) -> Mapping[str, int]:
        scope_map = self._maps.get(self._member_scope(scope_id))
        if scope_map is None:
            return _EMPTY
        return MappingProxyType(scope_map)

    # ------------------------------------------------------------------
    # Lexical helpers
    # ------------------------------------------------------------------

    def enclosing_chain(self, scope_id: int) -> Iterator[int]:
        """Yield the scopes visible from *scope_id*, innermost first.

        Class scopes are only visible from their own body, never from the
        methods nested in them. The walk ends after the first module or
        package scope.
        """
        entity = self._store.find(scope_id)
        if entity is not None and not entity.is_scope:
            entity = self._parent_of(entity)
        if entity is None:
            return
        start = entity.id
        while entity is not None:
            if entity.kind != EntityKind.CLASS or entity.id == start:
                yield entity.id
            if entity.kind in ROOT_SCOPE_KINDS:
                return
            entity = self._parent_of(entity)

    def resolve_lexically(self, name: str, scope_id: int) -> Optional[int]:
        for sid in self.enclosing_chain(scope_id):
            found = self.lookup(name, sid)
            if found is not None:
                return found
        return None

    def resolve_dotted(self, dotted: str, scope_id: int) -> Optional[int]:
        """Resolve ``a.b.c``: ``a`` lexically, then each member in turn."""
        head, *rest = dotted.split(".")
        current = self.resolve_lexically(head, scope_id)
        for part in rest:
            if current is None:
                return None
            current = self.lookup(part, current)
        return current

    def enclosing_of_kind(self, entity_id: int, kind: EntityKind) -> Optional[int]:
        entity = self._store.find(entity_id)
        while entity is not None:
            if entity.kind == kind:
                return entity.id
            entity = self._parent_of(entity)
        return None

    def _parent_of(self, entity: Entity) -> Optional[Entity]:
        if entity.parent_id is None:
            return None
        return self._store.find(entity.parent_id)


class NameIndex:
    """Whole-program ``simple name -> function/method ids`` index.

    Built once from a finalized store; read-only afterwards.
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, List[int]] = {}

    @classmethod
    def build(cls, entities: Iterable[Entity]) -> "NameIndex":
        index = cls()
        for entity in entities:
            if entity.kind in (EntityKind.FUNCTION, EntityKind.METHOD):
                index._add(entity.name, entity.id)
        return index

    def _add(self, name: str, entity_id: int) -> None:
        ids = self._by_name.setdefault(name, [])
        if entity_id not in ids:
            ids.append(entity_id)

    def lookup(self, name: str) -> Tuple[int, ...]:
        return tuple(self._by_name.get(name, ()))

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)
