"""Call-target resolution over a finalized entity graph.

For each callable container (function, method, module) the raw call list is
split and reduced by the :class:`ChainNormalizer`, then every entry is
classified in order:

1. builtin function name -> no edge
2. bare ``super`` call -> no edge
3. regular lexical resolution -> ``Call``, or ``ImplicitInternalCall`` when
   the receiver is ``self`` or a variable whose type is already known
4. otherwise every function/method in the program sharing the simple name
   -> one ``ImplicitExternalCall`` edge each, or ``ImplicitInternalCall``
   when the receiver is ``self`` or a type-resolved variable
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

from .chain_normalizer import (
    ChainNormalizer,
    is_balanced,
    placeholder_id,
    split_placeholder,
    strip_arguments,
)
from .entity_store import EntityStore
from .errors import StoreNotFinalizedError
from .languages import PLACEHOLDER_PREFIX, SUPER_TOKEN, LanguageProfile, get_profile
from .models import (
    Ambiguous,
    CallSite,
    Entity,
    EntityKind,
    RelationKind,
    Resolution,
    Resolved,
    Unresolved,
    UnresolvedReason,
)
from .relations import RelationStore

logger = logging.getLogger(__name__)

_SUPER_PLACEHOLDER = PLACEHOLDER_PREFIX + SUPER_TOKEN


class CallResolver:
    """Resolves the call lists of a frozen :class:`EntityStore`.

    Stateless across entities: the only state carried between entries of
    one source entity is the list of earlier resolutions the normalizer
    uses to reduce chained calls.
    """

    def __init__(
        self,
        store: EntityStore,
        relations: RelationStore,
        normalizer: Optional[ChainNormalizer] = None,
        extra_builtins: Iterable[str] = (),
    ) -> None:
        if not store.finalized:
            raise StoreNotFinalizedError("call finalize_parse() before resolving calls")
        self.store = store
        self.scopes = store.scopes
        self.names = store.names
        self.relations = relations
        self.normalizer = normalizer or ChainNormalizer()
        self._extra_builtins = frozenset(extra_builtins)
        self._profiles: Dict[str, LanguageProfile] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_calls(self, source_id: int) -> List[CallSite]:
        """Resolve every call of *source_id* and record the resulting edges."""
        source = self.store.get(source_id)
        calls = self.normalizer.normalize(source)
        profile = self.profile_for(source)

        resolutions: List[Resolution] = []
        sites: List[CallSite] = []
        for index, text in enumerate(calls):
            reduced = self.normalizer.reduce(index, calls, resolutions)
            resolution = self._classify(reduced, source, profile)
            resolutions.append(resolution)
            self._record(source_id, resolution)
            sites.append(CallSite(index=index, text=text, reduced=reduced, resolution=resolution))
            logger.debug("%s: %r -> %s", source.qualname, reduced, resolution)
        return sites

    def resolve_all(self, max_workers: int = 1) -> Dict[int, List[CallSite]]:
        """Resolve every callable container, optionally on a thread pool."""
        ids = self.store.callable_ids()
        if max_workers <= 1:
            return {source_id: self.resolve_calls(source_id) for source_id in ids}
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="resolve") as pool:
            return dict(zip(ids, pool.map(self.resolve_calls, ids)))

    def profile_for(self, entity: Entity) -> LanguageProfile:
        profile = self._profiles.get(entity.language)
        if profile is None:
            profile = get_profile(entity.language).with_extra_builtins(self._extra_builtins)
            self._profiles[entity.language] = profile
        return profile

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _classify(self, reduced: str, source: Entity, profile: LanguageProfile) -> Resolution:
        if not is_balanced(reduced):
            logger.warning("Skipping malformed call expression in %s: %r", source.qualname, reduced)
            return Unresolved(UnresolvedReason.MALFORMED)

        name = strip_arguments(reduced).strip()
        if self.is_builtin_function(name, profile):
            return Unresolved(UnresolvedReason.BUILTIN)
        if self.is_super_callee(name, profile):
            return Unresolved(UnresolvedReason.SUPER)
        if not name:
            return Unresolved(UnresolvedReason.NOT_FOUND)

        target = self.search_callee_regular_case(name, source.id, profile)
        if target is not None:
            if self.is_local_init_var_callee(name, source.id, profile):
                return Resolved(target, RelationKind.IMPLICIT_INTERNAL_CALL)
            return Resolved(target, RelationKind.CALL)

        candidates = self.search_callee_by_name(name)
        if candidates:
            if self.is_local_init_var_callee(name, source.id, profile):
                return Ambiguous(candidates, RelationKind.IMPLICIT_INTERNAL_CALL)
            return Ambiguous(candidates)
        return Unresolved(UnresolvedReason.NOT_FOUND)

    def _record(self, source_id: int, resolution: Resolution) -> None:
        if isinstance(resolution, Resolved):
            self.relations.record(source_id, resolution.entity_id, resolution.kind, resolution.kind.inverse)
        elif isinstance(resolution, Ambiguous):
            for candidate in resolution.candidates:
                self.relations.record(source_id, candidate, resolution.kind, resolution.kind.inverse)

    def is_builtin_function(self, name: str, profile: LanguageProfile) -> bool:
        return "." not in name and name in profile.builtins

    def is_super_callee(self, name: str, profile: LanguageProfile) -> bool:
        """Bare ``super(...)``, or a call on the result of one.

        Which parent a super call dispatches to depends on the invoked method
        and the whole parent list, so neither form is resolved here.
        """
        if profile.super_keyword is not None and name == profile.super_keyword:
            return True
        return name == _SUPER_PLACEHOLDER or name.startswith(_SUPER_PLACEHOLDER + ".")

    def is_local_init_var_callee(self, name: str, source_id: int, profile: LanguageProfile) -> bool:
        """``self.m()`` or ``var.m()`` where ``var`` has a known type.

        With more than one dot the receiver type cannot be pinned down.
        """
        segments = name.split(".")
        if len(segments) != 2:
            return False
        head = segments[0]
        if profile.self_keyword is not None and head == profile.self_keyword:
            return True
        if head.startswith(PLACEHOLDER_PREFIX):
            return False
        head_entity = self.store.find(self.scopes.resolve_lexically(head, source_id))
        return head_entity is not None and head_entity.is_variable and head_entity.is_type_resolved

    # ------------------------------------------------------------------
    # Regular (lexical) resolution
    # ------------------------------------------------------------------

    def search_callee_regular_case(
        self,
        name: str,
        source_id: int,
        profile: Optional[LanguageProfile] = None,
    ) -> Optional[int]:
        """Walk the dotted segments of *name*; return the final scope id or None."""
        if profile is None:
            profile = self.profile_for(self.store.get(source_id))
        text = name
        scope_id = source_id
        first = True
        while text:
            if text.startswith("."):
                text = text[1:]
                continue
            if text.startswith(PLACEHOLDER_PREFIX):
                token, text = split_placeholder(text)
                receiver = placeholder_id(token)
                if receiver is None or receiver not in self.store:
                    if receiver is not None:
                        logger.debug("Placeholder refers to unknown entity %s", receiver)
                    return None
                scope_id = receiver
            else:
                match = self._find_match_in_scope(first, text, scope_id, profile)
                if match is None:
                    return None
                scope_id, matched = match
                text = text[len(matched):]
            first = False
        return None if first else scope_id

    def _find_match_in_scope(
        self,
        first: bool,
        text: str,
        scope_id: int,
        profile: LanguageProfile,
    ) -> Optional[Tuple[int, str]]:
        if not first:
            return self._find_name_without_dot(text, scope_id)

        for sid in self.scopes.enclosing_chain(scope_id):
            match = self._find_name_with_dot(text, sid) or self._find_name_without_dot(text, sid)
            if match is not None:
                return match

        head = text.split(".")[0]
        if profile.self_keyword is not None and head == profile.self_keyword:
            class_id = self.scopes.enclosing_of_kind(scope_id, EntityKind.CLASS)
            if class_id is not None:
                return class_id, head
        return None

    def _find_name_with_dot(self, text: str, scope_id: int) -> Optional[Tuple[int, str]]:
        """Composite local names (qualified imports/aliases) win over plain ones."""
        for local_name, entity_id in self.scopes.local_map_of(scope_id).items():
            if "." in local_name and text.startswith(local_name):
                return entity_id, local_name
        return None

    def _find_name_without_dot(self, text: str, scope_id: int) -> Optional[Tuple[int, str]]:
        segment = text.split(".")[0]
        if not segment:
            return None
        entity_id = self.scopes.lookup(segment, scope_id)
        if entity_id is None:
            return None
        return entity_id, segment

    # ------------------------------------------------------------------
    # Whole-program fallback
    # ------------------------------------------------------------------

    def search_callee_by_name(self, name: str) -> Tuple[int, ...]:
        simple = name.split(".")[-1]
        if not simple or simple.startswith(PLACEHOLDER_PREFIX):
            return ()
        return self.names.lookup(simple)
