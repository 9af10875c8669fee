"""Tests for the anonymous session identity and its stores."""

import json
import re

import pytest

from ordering.session import (
    CART_SESSION_KEY,
    FileSessionStore,
    MemorySessionStore,
    get_or_create_session_id,
    new_session_id,
)
from storefront.errors import StoreUnavailableError


class TestSessionId:
    def test_format(self):
        assert re.fullmatch(r"session_\d+_[0-9a-f]{8}", new_session_id())

    def test_ids_are_unique(self):
        assert new_session_id() != new_session_id()


class TestGetOrCreate:
    def test_creates_once_then_reuses(self):
        store = MemorySessionStore()
        first = get_or_create_session_id(store)
        second = get_or_create_session_id(store)

        assert first == second
        assert store.get(CART_SESSION_KEY) == first

    def test_existing_identity_is_never_rewritten(self):
        store = MemorySessionStore({CART_SESSION_KEY: "session_1_cafebabe"})
        assert get_or_create_session_id(store) == "session_1_cafebabe"


class TestFileSessionStore:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "state" / "session.json"
        session_id = get_or_create_session_id(FileSessionStore(path))

        assert get_or_create_session_id(FileSessionStore(path)) == session_id
        assert json.loads(path.read_text()) == {CART_SESSION_KEY: session_id}

    def test_missing_file_reads_as_empty(self, tmp_path):
        assert FileSessionStore(tmp_path / "absent.json").get(CART_SESSION_KEY) is None

    def test_keeps_unrelated_keys(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"theme": "dark"}))

        FileSessionStore(path).set(CART_SESSION_KEY, "session_1_00000000")

        assert json.loads(path.read_text()) == {"theme": "dark", CART_SESSION_KEY: "session_1_00000000"}

    def test_corrupt_file_is_a_store_failure(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        with pytest.raises(StoreUnavailableError):
            FileSessionStore(path).get(CART_SESSION_KEY)

    def test_failed_write_leaves_no_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "session.json"
        path.write_text(json.dumps({CART_SESSION_KEY: "session_1_00000000"}))

        def _refuse(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("ordering.session.os.replace", _refuse)
        with pytest.raises(StoreUnavailableError):
            FileSessionStore(path).set(CART_SESSION_KEY, "session_2_00000000")

        assert [p.name for p in tmp_path.iterdir()] == ["session.json"]
        assert json.loads(path.read_text()) == {CART_SESSION_KEY: "session_1_00000000"}
