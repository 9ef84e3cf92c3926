"""SQLite persistence for analysed entity graphs.

One database holds the ``entities`` and ``relations`` tables of the last
analysis; a JSON side file next to it records run metadata (project root,
counts). Rows come back as :class:`sqlite3.Row` so callers can index by
column name.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .entity_store import EntityStore
from .models import RelationKind
from .relations import RelationStore

logger = logging.getLogger(__name__)


class GraphStore:
    """Structured store for entities and relations."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.meta_path = self.db_path.with_suffix(".json")
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "GraphStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def _init_schema(self) -> None:
        cur = self.conn.cursor()
        cur.execute("""
            CREATE TABLE IF NOT EXISTS entities (
                entity_id  INTEGER PRIMARY KEY,
                kind       TEXT NOT NULL,
                name       TEXT NOT NULL,
                qualname   TEXT NOT NULL,
                parent_id  INTEGER,
                language   TEXT NOT NULL,
                file_path  TEXT NOT NULL,
                line       INTEGER NOT NULL,
                declared_type TEXT,
                type_id    INTEGER
            )
        """)
        cur.execute("""
            CREATE TABLE IF NOT EXISTS relations (
                src       INTEGER NOT NULL,
                dst       INTEGER NOT NULL,
                kind      TEXT NOT NULL
            )
        """)
        cur.execute("CREATE INDEX IF NOT EXISTS idx_relations_src ON relations(src)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_relations_dst ON relations(dst)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_entities_name ON entities(name)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_entities_qualname ON entities(qualname)")
        self.conn.commit()

    # ------------------------------------------------------------------
    # Clear / metadata
    # ------------------------------------------------------------------

    def clear(self) -> None:
        cur = self.conn.cursor()
        cur.execute("DELETE FROM relations")
        cur.execute("DELETE FROM entities")
        self.conn.commit()

    def set_metadata(self, payload: Dict[str, Any]) -> None:
        self.meta_path.write_text(
            json.dumps(payload, indent=2), encoding="utf-8",
        )

    def get_metadata(self) -> Dict[str, Any]:
        if not self.meta_path.exists():
            return {}
        try:
            return json.loads(self.meta_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}

    # ------------------------------------------------------------------
    # Insert
    # ------------------------------------------------------------------

    def save_analysis(
        self,
        store: EntityStore,
        relations: RelationStore,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, int]:
        """Replace the stored graph with *store* and *relations*."""
        self.clear()
        self.conn.executemany(
            """
            INSERT INTO entities (
                entity_id, kind, name, qualname, parent_id,
                language, file_path, line, declared_type, type_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    e.id,
                    e.kind.value,
                    e.name,
                    e.qualname,
                    e.parent_id,
                    e.language,
                    e.file_path,
                    e.line,
                    e.declared_type,
                    e.type_id,
                )
                for e in store
            ],
        )
        self.insert_relations(relations.as_tuples())
        counts = {"entities": len(store), "relations": len(relations)}
        self.set_metadata({**(metadata or {}), **counts})
        logger.info("Saved %d entities and %d relations to %s", counts["entities"], counts["relations"], self.db_path)
        return counts

    def insert_relations(self, rows: Iterable[tuple]) -> None:
        self.conn.executemany(
            "INSERT INTO relations (src, dst, kind) VALUES (?, ?, ?)",
            list(rows),
        )
        self.conn.commit()

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def get_entities(self) -> List[sqlite3.Row]:
        return self.conn.execute("SELECT * FROM entities ORDER BY entity_id").fetchall()

    def get_entity(self, entity_id: int) -> Optional[sqlite3.Row]:
        return self.conn.execute(
            "SELECT * FROM entities WHERE entity_id = ?", (entity_id,),
        ).fetchone()

    def find_entities(self, symbol: str) -> List[sqlite3.Row]:
        """Entities whose qualname or simple name equals *symbol*."""
        return self.conn.execute(
            "SELECT * FROM entities WHERE qualname = ? OR name = ? ORDER BY entity_id",
            (symbol, symbol),
        ).fetchall()

    def get_relations(self, kind: Optional[RelationKind] = None) -> List[sqlite3.Row]:
        if kind is None:
            return self.conn.execute("SELECT * FROM relations").fetchall()
        return self.conn.execute(
            "SELECT * FROM relations WHERE kind = ?", (RelationKind(kind).value,),
        ).fetchall()

    def outgoing(self, src_id: int, kinds: Optional[Iterable[RelationKind]] = None) -> List[sqlite3.Row]:
        rows = self.conn.execute("SELECT * FROM relations WHERE src = ?", (src_id,)).fetchall()
        return _filter_kinds(rows, kinds)

    def incoming(self, dst_id: int, kinds: Optional[Iterable[RelationKind]] = None) -> List[sqlite3.Row]:
        rows = self.conn.execute("SELECT * FROM relations WHERE dst = ?", (dst_id,)).fetchall()
        return _filter_kinds(rows, kinds)


def _filter_kinds(rows: List[sqlite3.Row], kinds: Optional[Iterable[RelationKind]]) -> List[sqlite3.Row]:
    if kinds is None:
        return rows
    wanted = {RelationKind(k).value for k in kinds}
    return [row for row in rows if row["kind"] in wanted]
