"""Split chained call expressions and reduce them to one call per entry.

``x().y()`` is split into ``x()`` and ``x().y()``. Once ``x()`` has been
resolved, the second entry is reduced by replacing the ``x()`` text with a
placeholder token that carries the resolved id: ``$ref17.y()``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .languages import PLACEHOLDER_PREFIX, SUPER_TOKEN, UNRESOLVED_TOKEN
from .models import Entity, Resolution, Resolved, Unresolved, UnresolvedReason

logger = logging.getLogger(__name__)


def is_balanced(text: str) -> bool:
    return text.count("(") == text.count(")")


def is_single_call(text: str) -> bool:
    return text.count("(") == 1 and text.count(")") == 1


def strip_arguments(callee: str) -> str:
    """``a.b(x, y)`` -> ``a.b``."""
    return callee.split("(", 1)[0]


def placeholder_for(resolution: Optional[Resolution]) -> str:
    if isinstance(resolution, Resolved):
        return f"{PLACEHOLDER_PREFIX}{resolution.entity_id}"
    if isinstance(resolution, Unresolved) and resolution.reason == UnresolvedReason.SUPER:
        return PLACEHOLDER_PREFIX + SUPER_TOKEN
    return PLACEHOLDER_PREFIX + UNRESOLVED_TOKEN


def split_placeholder(text: str) -> Tuple[str, str]:
    """Split ``$ref17.y`` into ``("17", ".y")``.

    *text* must start with the placeholder prefix.
    """
    body = text[len(PLACEHOLDER_PREFIX):]
    end = len(body)
    for stop in (".", "("):
        pos = body.find(stop)
        if pos != -1:
            end = min(end, pos)
    return body[:end], body[end:]


def placeholder_id(token: str) -> Optional[int]:
    """Entity id carried by a placeholder token value, or None."""
    if token.isdigit():
        return int(token)
    return None


class ChainNormalizer:
    """Rewrites an entity's call list into independently resolvable entries."""

    def split(self, raw_calls: Sequence[str]) -> List[str]:
        """Split dotted chains; every balanced call prefix becomes an entry."""
        result: List[str] = []
        for callee in raw_calls:
            atoms = callee.split(".")
            last_emitted = False
            for index, atom in enumerate(atoms):
                if "(" not in atom or ")" not in atom:
                    continue
                prefix = ".".join(atoms[: index + 1])
                if is_balanced(prefix):
                    result.append(prefix)
                    last_emitted = index == len(atoms) - 1
            if not last_emitted:
                # trailing property access or no balanced prefix at all
                result.append(callee)
        return result

    def normalize(self, entity: Entity) -> List[str]:
        """Split *entity*'s call list in place, once."""
        calls = entity.call_list()
        if not entity.calls_normalized:
            calls[:] = self.split(calls)
            entity.calls_normalized = True
        return calls

    def reduce(
        self,
        index: int,
        calls: Sequence[str],
        resolutions: Sequence[Resolution],
    ) -> str:
        """Replace already-resolved earlier entries inside ``calls[index]``.

        Scans backward from *index*; stops when the text is down to a single
        call or no earlier entry remains.
        """
        current = calls[index]
        scan = index
        while scan > 0 and "(" in current and ")" in current and not is_single_call(current):
            scan -= 1
            earlier = calls[scan]
            if not earlier:
                continue
            pos = current.find(earlier)
            if pos == -1:
                continue
            resolution = resolutions[scan] if scan < len(resolutions) else None
            current = current[:pos] + placeholder_for(resolution) + current[pos + len(earlier):]

        if current != calls[index]:
            logger.debug("Reduced %r -> %r", calls[index], current)
        return current
