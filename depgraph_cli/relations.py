"""Append-only store of directed, paired relation edges."""

from __future__ import annotations

import threading
from collections import Counter
from typing import Iterable, Iterator, List, Optional, Tuple

from .models import Relation, RelationKind


class RelationStore:
    """Every recorded edge is stored with its mirror inverse edge.

    Multiplicity is kept: the same call appearing at two call sites yields
    the same edge twice. :meth:`record` is safe to call from several
    threads.
    """

    def __init__(self) -> None:
        self._relations: List[Relation] = []
        self._lock = threading.Lock()

    def record(
        self,
        source_id: int,
        target_id: int,
        forward_kind: RelationKind,
        inverse_kind: Optional[RelationKind] = None,
    ) -> None:
        inverse_kind = inverse_kind or forward_kind.inverse
        with self._lock:
            self._relations.append(Relation(source_id, target_id, forward_kind))
            self._relations.append(Relation(target_id, source_id, inverse_kind))

    def __iter__(self) -> Iterator[Relation]:
        with self._lock:
            snapshot = list(self._relations)
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._relations)

    def as_tuples(self) -> List[Tuple[int, int, str]]:
        return [(r.src, r.dst, r.kind.value) for r in self]

    def multiset(self) -> Counter:
        return Counter(self)

    def of_kind(self, *kinds: RelationKind) -> List[Relation]:
        wanted = set(kinds)
        return [r for r in self if r.kind in wanted]

    def forward(self) -> List[Relation]:
        return [r for r in self if r.kind.is_forward]

    def outgoing(self, source_id: int, kinds: Optional[Iterable[RelationKind]] = None) -> List[Relation]:
        wanted = set(kinds) if kinds is not None else None
        return [
            r for r in self
            if r.src == source_id and (wanted is None or r.kind in wanted)
        ]

    def incoming(self, target_id: int, kinds: Optional[Iterable[RelationKind]] = None) -> List[Relation]:
        wanted = set(kinds) if kinds is not None else None
        return [
            r for r in self
            if r.dst == target_id and (wanted is None or r.kind in wanted)
        ]
