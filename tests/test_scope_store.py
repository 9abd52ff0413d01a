"""Tests for scope persistence."""

import json
from pathlib import Path

import pytest

from pos_dashboard.scope_store import SCOPE_KEY, InMemoryScopeStore, JsonFileScopeStore


def test_in_memory_store() -> None:
    store = InMemoryScopeStore()
    assert store.load() is None

    store.save(4)
    assert store.load() == 4

    store.clear()
    assert store.load() is None


def test_json_store_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "scope.json"
    store = JsonFileScopeStore(path)

    store.save(7)

    assert json.loads(path.read_text(encoding="utf-8")) == {SCOPE_KEY: 7}
    assert store.load() == 7


def test_json_store_missing_file(tmp_path: Path) -> None:
    assert JsonFileScopeStore(tmp_path / "scope.json").load() is None


def test_json_store_clear_is_idempotent(tmp_path: Path) -> None:
    store = JsonFileScopeStore(tmp_path / "scope.json")
    store.save(1)

    store.clear()
    store.clear()

    assert not (tmp_path / "scope.json").exists()
    assert store.load() is None


def test_json_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "scope.json"
    path.write_text("{not json", encoding="utf-8")

    assert JsonFileScopeStore(path).load() is None


def test_json_store_ignores_unexpected_shape(tmp_path: Path) -> None:
    path = tmp_path / "scope.json"
    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    assert JsonFileScopeStore(path).load() is None

    path.write_text(json.dumps({SCOPE_KEY: "abc"}), encoding="utf-8")
    assert JsonFileScopeStore(path).load() is None

    path.write_text(json.dumps({SCOPE_KEY: None}), encoding="utf-8")
    assert JsonFileScopeStore(path).load() is None


@pytest.mark.parametrize("value", [3.7, 3.0, True, False, "3", [3]])
def test_json_store_rejects_non_integer_ids(tmp_path: Path, value) -> None:
    """Only a JSON integer counts as a stored branch id."""
    path = tmp_path / "scope.json"
    path.write_text(json.dumps({SCOPE_KEY: value}), encoding="utf-8")

    assert JsonFileScopeStore(path).load() is None
