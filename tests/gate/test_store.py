"""Tests for the JSON fingerprint store."""

import json

import pytest

from archgraph.exceptions import ErrorCode, PersistenceError
from archgraph.gate import JsonFingerprintStore, TrackedState


class TestJsonFingerprintStore:
    def test_missing_file_is_empty(self, tmp_path):
        state = JsonFingerprintStore(tmp_path / ".fingerprints.json").load()
        assert state.is_empty
        assert state.fact_digest is None

    def test_commit_then_load(self, tmp_path):
        path = tmp_path / "diagrams" / ".fingerprints.json"
        store = JsonFingerprintStore(path)
        store.commit(TrackedState({"b": "2", "a": "1"}, "abc"))
        loaded = store.load()
        assert dict(loaded.fingerprints) == {"a": "1", "b": "2"}
        assert loaded.fact_digest == "abc"
        data = json.loads(path.read_text())
        assert data["version"] == 1
        assert list(data["fingerprints"]) == ["a", "b"]
        assert [p.name for p in path.parent.iterdir()] == [".fingerprints.json"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / ".fingerprints.json"
        path.write_text("not json")
        with pytest.raises(PersistenceError) as excinfo:
            JsonFingerprintStore(path).load()
        assert excinfo.value.code is ErrorCode.AG400

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / ".fingerprints.json"
        path.write_text(json.dumps({"fingerprints": {"a": 1}}))
        with pytest.raises(PersistenceError):
            JsonFingerprintStore(path).load()

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = JsonFingerprintStore(blocker / ".fingerprints.json")
        with pytest.raises(PersistenceError) as excinfo:
            store.commit(TrackedState({"a": "1"}))
        assert excinfo.value.code is ErrorCode.AG401
