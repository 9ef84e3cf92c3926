"""Tests for RelationStore and relation kinds."""

import threading

from depgraph_cli.models import CALL_KINDS, Relation, RelationKind
from depgraph_cli.relations import RelationStore


def test_record_appends_forward_and_inverse(relations: RelationStore):
    relations.record(1, 2, RelationKind.CALL, RelationKind.CALLED_BY)
    assert list(relations) == [
        Relation(1, 2, RelationKind.CALL),
        Relation(2, 1, RelationKind.CALLED_BY),
    ]


def test_inverse_defaults_from_kind(relations: RelationStore):
    relations.record(3, 4, RelationKind.IMPORT)
    assert relations.as_tuples() == [(3, 4, "Import"), (4, 3, "ImportedBy")]


def test_inverse_pairs():
    for kind in CALL_KINDS | {RelationKind.IMPORT}:
        assert kind.is_forward
        assert not kind.inverse.is_forward
        assert kind.inverse.inverse is kind


def test_multiplicity_kept(relations: RelationStore):
    relations.record(1, 2, RelationKind.CALL)
    relations.record(1, 2, RelationKind.CALL)
    assert len(relations) == 4
    assert relations.multiset()[Relation(1, 2, RelationKind.CALL)] == 2


def test_views(relations: RelationStore):
    relations.record(1, 2, RelationKind.CALL)
    relations.record(1, 3, RelationKind.IMPLICIT_EXTERNAL_CALL)
    relations.record(4, 1, RelationKind.IMPORT)

    assert [r.dst for r in relations.outgoing(1)] == [2, 3, 4]
    assert [r.dst for r in relations.outgoing(1, kinds=CALL_KINDS)] == [2, 3]
    assert [r.src for r in relations.incoming(1, kinds=[RelationKind.IMPORT])] == [4]
    assert len(relations.forward()) == 3
    assert relations.of_kind(RelationKind.IMPORTED_BY) == [Relation(1, 4, RelationKind.IMPORTED_BY)]


def test_concurrent_record(relations: RelationStore):
    def worker(offset: int) -> None:
        for i in range(200):
            relations.record(offset, i, RelationKind.CALL)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(relations) == 8 * 200 * 2
    # every forward edge is immediately followed by its inverse
    snapshot = list(relations)
    for forward, inverse in zip(snapshot[::2], snapshot[1::2]):
        assert (inverse.src, inverse.dst) == (forward.dst, forward.src)


def test_len_sees_whole_pairs_while_recording(relations: RelationStore):
    seen = []
    done = threading.Event()

    def reader() -> None:
        while not done.is_set():
            seen.append(len(relations))

    def writer(offset: int) -> None:
        for i in range(200):
            relations.record(offset, i, RelationKind.CALL)

    watcher = threading.Thread(target=reader)
    watcher.start()
    writers = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for t in writers:
        t.start()
    for t in writers:
        t.join()
    done.set()
    watcher.join()

    assert len(relations) == 4 * 200 * 2
    assert all(count % 2 == 0 for count in seen)
    assert seen == sorted(seen)
