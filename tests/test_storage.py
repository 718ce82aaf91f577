"""Tests for durable client storage backends."""

from __future__ import annotations

import json
import logging

from storefront.client.storage import InMemoryStorage, JsonFileStorage


def test_in_memory_storage_basic_operations():
    storage = InMemoryStorage({"a": "1"})

    storage.set("b", "2")
    storage.remove("a")
    storage.remove("missing")

    assert storage.get("a") is None
    assert storage.get("b") == "2"
    assert storage.snapshot() == {"b": "2"}


def test_json_file_storage_persists_across_instances(tmp_path):
    path = tmp_path / "state" / "storage.json"

    first = JsonFileStorage(path)
    first.set("user_info", '{"id": "u1"}')
    first.set("payment_method", "PayPal")
    first.remove("payment_method")

    second = JsonFileStorage(path)

    assert second.get("user_info") == '{"id": "u1"}'
    assert second.get("payment_method") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {"user_info": '{"id": "u1"}'}


def test_json_file_storage_missing_file_is_empty(tmp_path):
    storage = JsonFileStorage(tmp_path / "nope.json")

    assert storage.get("anything") is None
    assert not (tmp_path / "nope.json").exists()


def test_json_file_storage_corrupt_file_is_empty(tmp_path, caplog):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        storage = JsonFileStorage(path)

    assert storage.get("user_info") is None
    assert "storage.corrupted_file" in caplog.text


def test_json_file_storage_ignores_non_string_values(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({"ok": "yes", "bad": 3}), encoding="utf-8")

    storage = JsonFileStorage(path)

    assert storage.get("ok") == "yes"
    assert storage.get("bad") is None


def test_json_file_storage_leaves_no_temp_files(tmp_path):
    storage = JsonFileStorage(tmp_path / "storage.json")

    for i in range(3):
        storage.set("k", str(i))

    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]
