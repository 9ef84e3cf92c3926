"""Graph export helpers for DOT and JSON outputs.

Only forward edges (Call, ImplicitInternalCall, ImplicitExternalCall,
Import) are exported; the inverse edges carry no extra information.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

from .models import RelationKind
from .storage import GraphStore

# variables, fields and blocks are never call targets and only add noise
_HIDDEN_KINDS = {"variable", "field", "block"}

_EDGE_STYLE = {
    RelationKind.CALL.value: "solid",
    RelationKind.IMPLICIT_INTERNAL_CALL.value: "dashed",
    RelationKind.IMPLICIT_EXTERNAL_CALL.value: "dotted",
    RelationKind.IMPORT.value: "bold",
}


def export_dot(store: GraphStore, output_file: Path, focus: str = "") -> None:
    nodes = {row["entity_id"]: dict(row) for row in store.get_entities()}
    edges = _forward_edges(store)

    selected = _focused_subgraph(nodes, edges, focus)

    lines = ["digraph DepGraph {"]
    lines.append("  rankdir=LR;")

    for node_id in selected["nodes"]:
        node = nodes[node_id]
        label = f"{node['kind']}\\n{node['qualname']}"
        lines.append(f'  "{node_id}" [label="{_esc(label)}"];')

    for edge in selected["edges"]:
        style = _EDGE_STYLE.get(edge["kind"], "solid")
        lines.append(
            f'  "{edge["src"]}" -> "{edge["dst"]}" [label="{_esc(edge["kind"])}", style={style}];'
        )

    lines.append("}")
    output_file.write_text("\n".join(lines), encoding="utf-8")


def export_json(store: GraphStore, output_file: Path, focus: str = "") -> None:
    nodes = {row["entity_id"]: dict(row) for row in store.get_entities()}
    edges = _forward_edges(store)

    selected = _focused_subgraph(nodes, edges, focus)
    payload = {
        "nodes": [
            {
                "id": node_id,
                "kind": nodes[node_id]["kind"],
                "name": nodes[node_id]["name"],
                "qualname": nodes[node_id]["qualname"],
                "language": nodes[node_id]["language"],
                "file_path": nodes[node_id]["file_path"],
                "line": nodes[node_id]["line"],
            }
            for node_id in selected["nodes"]
        ],
        "edges": selected["edges"],
    }
    output_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _forward_edges(store: GraphStore) -> List[dict]:
    return [
        dict(row) for row in store.get_relations()
        if RelationKind(row["kind"]).is_forward
    ]


def _focused_subgraph(nodes: Dict[int, dict], edges: List[dict], focus: str) -> Dict[str, List]:
    edges = [e for e in edges if e["src"] in nodes and e["dst"] in nodes]
    if not focus:
        endpoints = {e["src"] for e in edges} | {e["dst"] for e in edges}
        visible = [
            node_id for node_id, node in nodes.items()
            if node["kind"] not in _HIDDEN_KINDS or node_id in endpoints
        ]
        return {"nodes": visible, "edges": edges}

    focus_ids = {
        node_id
        for node_id, node in nodes.items()
        if node["kind"] not in _HIDDEN_KINDS and (focus == node["name"] or focus in node["qualname"])
    }

    edge_subset = [e for e in edges if e["src"] in focus_ids or e["dst"] in focus_ids]
    node_subset = set(focus_ids)
    for e in edge_subset:
        node_subset.add(e["src"])
        node_subset.add(e["dst"])
    return {"nodes": sorted(node_subset), "edges": edge_subset}


def _esc(text: str) -> str:
    return text.replace('"', '\\"')
