"""Project analysis pipeline: parse, finalize, link imports, resolve calls."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .call_resolver import CallResolver
from .entity_store import EntityStore
from .models import Ambiguous, CallSite, RelationKind, Resolved, Unresolved
from .parser import ProjectParser
from .relations import RelationStore

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything one analysis run produced."""

    store: EntityStore
    relations: RelationStore
    reports: Dict[int, List[CallSite]] = field(default_factory=dict)
    files: Dict[str, int] = field(default_factory=dict)

    def call_sites(self) -> List[CallSite]:
        return [site for sites in self.reports.values() for site in sites]

    def unresolved(self) -> List[tuple]:
        """``(qualname, call text, reason)`` for every call that produced no edge."""
        rows = []
        for source_id, sites in self.reports.items():
            qualname = self.store.get(source_id).qualname
            for site in sites:
                if isinstance(site.resolution, Unresolved):
                    rows.append((qualname, site.text, site.resolution.reason.value))
        return rows

    def summary(self) -> Dict[str, Dict[str, int]]:
        sites = self.call_sites()
        return {
            "files": dict(self.files),
            "entities": dict(Counter(e.kind.value for e in self.store)),
            "relations": dict(Counter(r.kind.value for r in self.relations)),
            "calls": {
                "total": len(sites),
                "resolved": sum(isinstance(s.resolution, Resolved) for s in sites),
                "ambiguous": sum(isinstance(s.resolution, Ambiguous) for s in sites),
                "unresolved": sum(isinstance(s.resolution, Unresolved) for s in sites),
            },
        }


def link_imports(store: EntityStore, relations: RelationStore) -> int:
    """Record an Import/ImportedBy pair for every resolved import link."""
    for source_id, target_id in store.import_links:
        relations.record(source_id, target_id, RelationKind.IMPORT, RelationKind.IMPORTED_BY)
    return len(store.import_links)


def analyze_project(
    root: Path,
    languages: Optional[Sequence[str]] = None,
    workers: Optional[int] = None,
    extra_builtins: Optional[Iterable[str]] = None,
    skip_dirs: Iterable[str] = (),
) -> AnalysisResult:
    root = Path(root).resolve()
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    store = EntityStore()
    files = ProjectParser(root, store, languages=languages, skip_dirs=skip_dirs).parse_project()
    logger.info("Parsed %s", ", ".join(f"{n} {lang} file(s)" for lang, n in files.items()) or "nothing")
    store.finalize_parse()

    relations = RelationStore()
    imports = link_imports(store, relations)

    resolver = CallResolver(store, relations, extra_builtins=extra_builtins or ())
    reports = resolver.resolve_all(max_workers=workers or 1)
    logger.info("Resolved calls of %d containers (%d import links)", len(reports), imports)
    return AnalysisResult(store=store, relations=relations, reports=reports, files=files)
