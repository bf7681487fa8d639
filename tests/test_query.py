"""Tests for the query engine."""

from tokenmeta.registry.models import QueryRequest
from tokenmeta.registry.query import QueryEngine, project
from tokenmeta.registry.store import MetadataRegistry


def _engine(documents) -> QueryEngine:
    reg = MetadataRegistry()
    reg.replace(documents)
    return QueryEngine(reg)


def test_resolve_single():
    engine = _engine({"a": {"p1": 1}})
    assert engine.resolve_single("a") == {"p1": 1}
    assert engine.resolve_single("missing") is None


def test_resolve_properties():
    engine = _engine({"a": {"p1": 1, "p2": {"nested": True}}})
    assert engine.resolve_properties("a", "p1") == 1
    assert engine.resolve_properties("a", "p2") == {"nested": True}
    assert engine.resolve_properties("a", "p3") is None


def test_resolve_properties_missing_subject_is_not_found():
    engine = _engine({})
    assert engine.resolve_properties("missing-subject", "anything") is None


def test_resolve_properties_on_non_object_document():
    engine = _engine({"list": [1, 2], "text": "hello"})
    assert engine.resolve_properties("list", "0") is None
    assert engine.resolve_properties("text", "length") is None


def test_batch_drops_missing_and_keeps_order():
    engine = _engine({"a": {"id": "a"}, "b": {"id": "b"}})
    result = engine.batch(["a", "missing", "b"])
    assert result == [{"id": "a"}, {"id": "b"}]


def test_batch_respects_input_order():
    engine = _engine({"a": {"id": "a"}, "b": {"id": "b"}})
    assert engine.batch(["b", "a"]) == [{"id": "b"}, {"id": "a"}]


def test_batch_projection_excludes_unrequested_and_missing():
    engine = _engine({"a": {"p1": 1, "p2": 2}})
    assert engine.batch(["a"], properties=["p1"]) == [{"p1": 1}]
    assert engine.batch(["a"], properties=["p1", "nope"]) == [{"p1": 1}]


def test_batch_empty_projection_list():
    engine = _engine({"a": {"p1": 1}})
    assert engine.batch(["a"], properties=[]) == [{}]


def test_batch_duplicates_are_repeated():
    engine = _engine({"a": {"p1": 1}})
    assert engine.batch(["a", "a"]) == [{"p1": 1}, {"p1": 1}]


def test_batch_results_are_copies():
    reg = MetadataRegistry()
    reg.replace({"a": {"p1": [1]}})
    engine = QueryEngine(reg)

    engine.batch(["a"])[0]["p1"].append(2)
    engine.batch(["a"], properties=["p1"])[0]["p1"].append(3)

    assert reg.get("a") == {"p1": [1]}


def test_project_non_object():
    assert project([1, 2], ["0"]) == {}
    assert project({"a": 1, "b": 2}, ["b"]) == {"b": 2}


def test_run_query_request():
    engine = _engine({"a": {"p1": 1, "p2": 2}, "b": {"p2": 3}})
    request = QueryRequest(subjects=["a", "b", "c"], properties=["p2"])
    assert engine.run(request) == [{"p2": 2}, {"p2": 3}]


def test_batch_keeps_null_documents():
    engine = _engine({"n": None, "a": {"p": None}})
    assert engine.batch(["n", "a"]) == [None, {"p": None}]
    assert engine.batch(["n", "a"], properties=["p"]) == [{}, {"p": None}]


def test_null_property_differs_from_absent_with_default():
    engine = _engine({"a": {"p": None}})
    missing = object()

    assert engine.resolve_properties("a", "p", missing) is None
    assert engine.resolve_properties("a", "q", missing) is missing
    assert engine.resolve_properties("zzz", "p", missing) is missing
    assert engine.resolve_single("zzz", missing) is missing
