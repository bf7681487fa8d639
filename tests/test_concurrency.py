"""Readers racing a writer must never see two generations in one pass."""

import threading

from tokenmeta.registry.query import QueryEngine
from tokenmeta.registry.store import MetadataRegistry

SUBJECTS = [f"subject-{i}" for i in range(50)]


def _generation(gen: int) -> dict:
    return {s: {"generation": gen, "subject": s} for s in SUBJECTS}


def test_batch_never_mixes_generations():
    reg = MetadataRegistry()
    reg.replace(_generation(0))
    engine = QueryEngine(reg)

    stop = threading.Event()
    torn = []
    passes = []

    def reader():
        count = 0
        while not stop.is_set():
            docs = engine.batch(SUBJECTS)
            generations = {d["generation"] for d in docs}
            if len(docs) != len(SUBJECTS) or len(generations) != 1:
                torn.append(generations)
            count += 1
        passes.append(count)

    def writer():
        for gen in range(1, 200):
            reg.replace(_generation(gen))
        stop.set()

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    w = threading.Thread(target=writer)
    w.start()
    w.join(timeout=30)
    stop.set()
    for t in readers:
        t.join(timeout=30)

    assert torn == []
    assert len(passes) == 4
    assert reg.get("subject-0") == {"generation": 199, "subject": "subject-0"}


def test_snapshot_is_stable_across_replace():
    reg = MetadataRegistry()
    reg.replace(_generation(1))
    snap = reg.snapshot()

    reg.replace({"other": {}})

    assert len(snap) == len(SUBJECTS)
    assert snap.generation == 1
    assert reg.snapshot().generation == 2
    assert "other" not in snap


def test_get_after_replace_sees_new_snapshot():
    reg = MetadataRegistry()
    reg.replace({"a": {"generation": 1}})
    done = threading.Event()

    def writer():
        reg.replace({"a": {"generation": 2}})
        done.set()

    t = threading.Thread(target=writer)
    t.start()
    t.join(timeout=5)

    assert done.is_set()
    assert reg.get("a") == {"generation": 2}
