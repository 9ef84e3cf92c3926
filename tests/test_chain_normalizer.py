"""Tests for call-chain splitting and placeholder reduction."""

import pytest

from depgraph_cli.chain_normalizer import (
    ChainNormalizer,
    is_balanced,
    placeholder_for,
    placeholder_id,
    split_placeholder,
    strip_arguments,
)
from depgraph_cli.entity_store import EntityStore
from depgraph_cli.models import (
    Ambiguous,
    EntityKind,
    RelationKind,
    Resolved,
    Unresolved,
    UnresolvedReason,
)


@pytest.fixture
def normalizer() -> ChainNormalizer:
    return ChainNormalizer()


class TestSplit:
    def test_chain_becomes_prefix_entries(self, normalizer: ChainNormalizer):
        assert normalizer.split(["a().b().c()"]) == ["a()", "a().b()", "a().b().c()"]

    def test_single_call_untouched(self, normalizer: ChainNormalizer):
        assert normalizer.split(["os.path.join(a, b)"]) == ["os.path.join(a, b)"]

    def test_trailing_property_appended_verbatim(self, normalizer: ChainNormalizer):
        assert normalizer.split(["make().size"]) == ["make()", "make().size"]

    def test_dotted_arguments_left_unsplit(self, normalizer: ChainNormalizer):
        # no balanced prefix exists, so the whole text stays one entry
        assert normalizer.split(["f(a.b, c.d)"]) == ["f(a.b, c.d)"]

    def test_order_is_preserved_across_raw_calls(self, normalizer: ChainNormalizer):
        raw = ["x()", "os.path.join(a, b).upper()"]
        assert normalizer.split(raw) == [
            "x()",
            "os.path.join(a, b)",
            "os.path.join(a, b).upper()",
        ]

    @pytest.mark.parametrize("raw", ["a().b()", "p.q(r).s(t)", "f(g(1)).h()", "x.y(z)"])
    def test_balanced_input_gives_balanced_entries(self, normalizer: ChainNormalizer, raw: str):
        for entry in normalizer.split([raw]):
            assert is_balanced(entry)


class TestNormalize:
    def test_rewrites_in_place_once(self, normalizer: ChainNormalizer):
        store = EntityStore()
        fn = store.declare(EntityKind.FUNCTION, "f")
        store.add_raw_call(fn, "a().b()")
        entity = store.get(fn)

        assert normalizer.normalize(entity) == ["a()", "a().b()"]
        assert entity.calls_normalized
        assert normalizer.normalize(entity) == ["a()", "a().b()"]
        assert entity.calls == ["a()", "a().b()"]


class TestReduce:
    def test_resolved_receiver_becomes_placeholder(self, normalizer: ChainNormalizer):
        calls = ["a()", "a().b()"]
        resolutions = [Resolved(5, RelationKind.CALL)]
        assert normalizer.reduce(1, calls, resolutions) == "$ref5.b()"

    def test_unresolved_receiver_uses_unknown_token(self, normalizer: ChainNormalizer):
        calls = ["a()", "a().b()"]
        assert normalizer.reduce(1, calls, [Ambiguous((3, 4))]) == "$ref?.b()"
        assert normalizer.reduce(1, calls, [Unresolved(UnresolvedReason.NOT_FOUND)]) == "$ref?.b()"

    def test_super_receiver_uses_super_token(self, normalizer: ChainNormalizer):
        calls = ["super()", "super().save()"]
        resolution = [Unresolved(UnresolvedReason.SUPER)]
        assert normalizer.reduce(1, calls, resolution) == "$refsuper.save()"

    def test_nested_argument_reduced(self, normalizer: ChainNormalizer):
        calls = ["g(1)", "f(g(1))"]
        assert normalizer.reduce(1, calls, [Resolved(9, RelationKind.CALL)]) == "f($ref9)"

    def test_three_level_chain(self, normalizer: ChainNormalizer):
        calls = ["a()", "a().b()", "a().b().c()"]
        resolutions = [Resolved(1, RelationKind.CALL), Resolved(2, RelationKind.CALL)]
        assert normalizer.reduce(2, calls, resolutions) == "$ref2.c()"

    def test_first_entry_never_reduced(self, normalizer: ChainNormalizer):
        assert normalizer.reduce(0, ["a(b())"], []) == "a(b())"

    def test_stops_when_nothing_matches(self, normalizer: ChainNormalizer):
        calls = ["z()", "a(b())"]
        assert normalizer.reduce(1, calls, [Resolved(1, RelationKind.CALL)]) == "a(b())"


class TestPlaceholderHelpers:
    def test_placeholder_for(self):
        assert placeholder_for(Resolved(17, RelationKind.CALL)) == "$ref17"
        assert placeholder_for(None) == "$ref?"

    def test_split_placeholder(self):
        assert split_placeholder("$ref17.y") == ("17", ".y")
        assert split_placeholder("$ref?") == ("?", "")
        assert split_placeholder("$refsuper.save") == ("super", ".save")

    def test_placeholder_id(self):
        assert placeholder_id("17") == 17
        assert placeholder_id("?") is None
        assert placeholder_id("super") is None

    def test_strip_arguments(self):
        assert strip_arguments("a.b(x, y.z)") == "a.b"
        assert strip_arguments("name") == "name"
