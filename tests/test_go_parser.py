"""Tests for the Go front end and Go call resolution."""

from pathlib import Path

import pytest

pytest.importorskip("tree_sitter")
pytest.importorskip("tree_sitter_go")

from depgraph_cli.call_resolver import CallResolver  # noqa: E402
from depgraph_cli.entity_store import EntityStore  # noqa: E402
from depgraph_cli.go_parser import GoParser  # noqa: E402
from depgraph_cli.models import (  # noqa: E402
    Ambiguous,
    EntityKind,
    RelationKind,
    Resolved,
    Unresolved,
    UnresolvedReason,
)
from depgraph_cli.relations import RelationStore  # noqa: E402


@pytest.fixture
def go_store(sample_project_path: Path) -> EntityStore:
    store = EntityStore()
    parser = GoParser(sample_project_path, store)
    assert parser.available
    assert parser.parse_project() == 2
    store.finalize_parse()
    return store


def _sites(store: EntityStore, qualname: str):
    entity_id = store.by_qualname(qualname)
    assert entity_id is not None, qualname
    sites = CallResolver(store, RelationStore()).resolve_calls(entity_id)
    return {site.reduced: site.resolution for site in sites}


def test_packages_and_files(go_store: EntityStore):
    server_pkg = go_store.get(go_store.by_qualname("server"))
    cmd_pkg = go_store.get(go_store.by_qualname("cmd"))

    assert server_pkg.kind == EntityKind.PACKAGE
    assert server_pkg.language == "go"
    assert cmd_pkg.name == "main"
    files = go_store.children(server_pkg.id)
    assert [(f.kind, f.name) for f in files] == [(EntityKind.FILE, "server.go")]


def test_types_fields_and_methods(go_store: EntityStore):
    server_cls = go_store.by_qualname("server.server.go.Server")
    store_cls = go_store.by_qualname("server.server.go.Store")
    greet = go_store.by_qualname("server.server.go.Greet")

    assert go_store.get(server_cls).kind == EntityKind.CLASS
    assert go_store.get(greet).kind == EntityKind.METHOD
    # methods are attached to their receiver type
    assert go_store.scopes.lookup("Greet", server_cls) == greet
    assert go_store.scopes.lookup("Put", store_cls) == go_store.by_qualname("server.server.go.Put")

    field = go_store.get(go_store.by_qualname("server.server.go.Server.store"))
    assert field.kind == EntityKind.FIELD
    assert field.declared_type == "Store"
    assert field.type_id == store_cls

    receiver = go_store.get(go_store.by_qualname("server.server.go.Greet.s"))
    assert receiver.type_id == server_cls


def test_top_level_names_bound_in_package(go_store: EntityStore):
    package_id = go_store.by_qualname("server")
    assert go_store.scopes.lookup("NewServer", package_id) == go_store.by_qualname("server.server.go.NewServer")
    assert go_store.scopes.lookup("Server", package_id) == go_store.by_qualname("server.server.go.Server")


def test_import_matched_by_path_suffix(go_store: EntityStore):
    main_file = go_store.by_qualname("cmd.main.go")
    server_pkg = go_store.by_qualname("server")

    assert go_store.scopes.lookup("server", main_file) == server_pkg
    assert go_store.scopes.lookup("fmt", main_file) is None
    assert (main_file, server_pkg) in go_store.import_links


def test_block_scopes(go_store: EntityStore):
    main_fn = go_store.by_qualname("cmd.main.go.main")
    blocks = [e for e in go_store.children(main_fn) if e.kind == EntityKind.BLOCK]
    assert len(blocks) == 1
    assert blocks[0].qualname == "cmd.main.go.main.<for:11>"
    assert sorted(c.name for c in go_store.children(blocks[0].id)) == ["i", "msg"]


def test_local_type_from_composite_literal(go_store: EntityStore):
    s = go_store.get(go_store.by_qualname("cmd.main.go.main.s"))
    assert s.declared_type == "server.Server"
    assert s.type_id == go_store.by_qualname("server.server.go.Server")
    srv = go_store.get(go_store.by_qualname("cmd.main.go.main.srv"))
    assert srv.type_id is None


def test_call_lists(go_store: EntityStore):
    main_fn = go_store.get(go_store.by_qualname("cmd.main.go.main"))
    assert main_fn.calls == [
        'server.NewServer("")',
        'srv.Greet("")',
        "len(msg)",
        "fmt.Println(len(msg))",
        's.Greet("")',
    ]
    greet = go_store.get(go_store.by_qualname("server.server.go.Greet"))
    assert greet.calls == ['s.store.Put(who, "")', 'fmt.Sprintf("", who, s.Name)']


def test_main_resolution(go_store: EntityStore):
    greet = go_store.by_qualname("server.server.go.Greet")
    resolved = _sites(go_store, "cmd.main.go.main")

    assert resolved['server.NewServer("")'] == Resolved(
        go_store.by_qualname("server.server.go.NewServer"), RelationKind.CALL,
    )
    assert resolved['srv.Greet("")'] == Ambiguous((greet,))
    assert resolved["len(msg)"] == Unresolved(UnresolvedReason.BUILTIN)
    assert resolved["fmt.Println($ref?)"] == Unresolved(UnresolvedReason.NOT_FOUND)
    assert resolved['s.Greet("")'] == Resolved(greet, RelationKind.IMPLICIT_INTERNAL_CALL)


def test_field_chain_resolution(go_store: EntityStore):
    resolved = _sites(go_store, "server.server.go.Greet")
    assert resolved['s.store.Put(who, "")'] == Resolved(
        go_store.by_qualname("server.server.go.Put"), RelationKind.CALL,
    )


def test_missing_package_clause_skipped(temp_dir: Path, caplog):
    (temp_dir / "broken.go").write_text("func f() {}\n", encoding="utf-8")
    store = EntityStore()
    with caplog.at_level("WARNING"):
        assert GoParser(temp_dir, store).parse_project() == 0
    assert "No package clause" in caplog.text
    assert len(store) == 0


def test_package_level_calls_not_recorded(temp_dir: Path):
    (temp_dir / "vars.go").write_text(
        'package vars\n\nvar cfg = load()\n\nfunc load() int { return helper() }\n\nfunc helper() int { return 1 }\n',
        encoding="utf-8",
    )
    store = EntityStore()
    GoParser(temp_dir, store).parse_project()
    store.finalize_parse()

    assert store.get(store.by_qualname("vars.vars.go.load")).calls == ["helper()"]
    assert store.scopes.lookup("cfg", store.by_qualname("vars")) == store.by_qualname("vars.vars.go.cfg")
