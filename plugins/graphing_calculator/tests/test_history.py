import json
from datetime import datetime

import pytest

from plugins.graphing_calculator.core import (
    CipherError,
    HistoryError,
    HistoryItem,
    HistoryStore,
    TextCipher,
)
from plugins.graphing_calculator.core import history as history_module


def test_cipher_round_trip_and_format(tmp_path):
    cipher = TextCipher(tmp_path / "history.key")
    token = cipher.encrypt("hello")
    nonce, _, body = token.partition(":")
    assert nonce and body
    assert cipher.decrypt(token) == "hello"
    assert (tmp_path / "history.key").exists()


def test_cipher_key_is_reused_across_instances(tmp_path):
    token = TextCipher(tmp_path / "k").encrypt("persisted")
    assert TextCipher(tmp_path / "k").decrypt(token) == "persisted"


def test_cipher_rotation_invalidates_old_tokens():
    cipher = TextCipher()
    token = cipher.encrypt("secret")
    cipher.rotate()
    with pytest.raises(CipherError):
        cipher.decrypt(token)


def test_cipher_reset_removes_key_file(tmp_path):
    cipher = TextCipher(tmp_path / "k")
    cipher.encrypt("x")
    cipher.reset()
    assert not (tmp_path / "k").exists()


@pytest.mark.parametrize("token", ["", "no-separator", "!!!:???", "AAAA:AAAA"])
def test_cipher_rejects_malformed_tokens(token):
    with pytest.raises(CipherError):
        TextCipher().decrypt(token)


def test_history_item_record_shape():
    item = HistoryItem.create("2+2", 4)
    record = item.to_dict()
    assert set(record) == {"id", "expression", "result", "timestamp"}
    assert record["result"] == 4.0
    assert datetime.fromisoformat(record["timestamp"]).tzinfo is not None
    assert HistoryItem.from_dict(record) == item


def test_memory_store_is_newest_first():
    store = HistoryStore()
    first = store.add("1+1", 2)
    second = store.add("2*3", 6)
    assert [item.id for item in store.load()] == [second.id, first.id]


def test_store_delete_and_clear():
    store = HistoryStore()
    item = store.add("x", 1)
    store.add("y", 2)
    store.delete(item.id)
    assert [i.expression for i in store.load()] == ["y"]
    with pytest.raises(KeyError):
        store.delete(item.id)
    store.clear()
    assert store.load() == []


def test_store_caps_items():
    store = HistoryStore(max_items=3)
    for value in range(5):
        store.add(str(value), value)
    assert [i.expression for i in store.load()] == ["4", "3", "2"]


def test_file_store_is_encrypted_at_rest(tmp_path):
    path = tmp_path / "history.enc"
    store = HistoryStore(path, TextCipher(tmp_path / "history.key"))
    store.add("sqrt(2)", 1.4142135623730951)
    raw = path.read_text(encoding="utf-8")
    assert "sqrt" not in raw

    reopened = HistoryStore(path, TextCipher(tmp_path / "history.key"))
    items = reopened.load()
    assert len(items) == 1
    assert items[0].expression == "sqrt(2)"


def test_rotate_key_reencrypts_existing_items(tmp_path):
    path = tmp_path / "history.enc"
    store = HistoryStore(path, TextCipher(tmp_path / "history.key"))
    store.add("1+2", 3)
    before = path.read_text(encoding="utf-8")
    assert store.rotate_key() == 1
    assert path.read_text(encoding="utf-8") != before
    assert [i.expression for i in HistoryStore(path, TextCipher(tmp_path / "history.key")).load()] == ["1+2"]


def test_unreadable_history_raises(tmp_path):
    path = tmp_path / "history.enc"
    path.write_text(TextCipher().encrypt(json.dumps([])), encoding="utf-8")
    store = HistoryStore(path, TextCipher(tmp_path / "other.key"))
    with pytest.raises(HistoryError):
        store.load()
    store.clear()
    assert store.load() == []


def test_malformed_records_raise(tmp_path):
    path = tmp_path / "history.enc"
    cipher = TextCipher(tmp_path / "history.key")
    path.write_text(cipher.encrypt(json.dumps([{"id": "1"}])), encoding="utf-8")
    with pytest.raises(HistoryError):
        HistoryStore(path, cipher).load()


def test_key_file_is_private(tmp_path):
    key_path = tmp_path / "history.key"
    TextCipher(key_path).encrypt("x")
    assert key_path.stat().st_mode & 0o777 == 0o600
    assert sorted(p.name for p in tmp_path.iterdir()) == ["history.key"]


def test_truncated_key_file_is_reported(tmp_path):
    key_path = tmp_path / "history.key"
    key_path.write_text("AAAA", encoding="utf-8")
    with pytest.raises(CipherError):
        TextCipher(key_path).encrypt("x")
    store = HistoryStore(tmp_path / "history.enc", TextCipher(key_path))
    with pytest.raises(HistoryError):
        store.add("1+1", 2)


def test_failed_rotation_keeps_previous_key(tmp_path, monkeypatch):
    path = tmp_path / "history.enc"
    key_path = tmp_path / "history.key"
    store = HistoryStore(path, TextCipher(key_path))
    store.add("1+2", 3)
    key_before = key_path.read_text(encoding="utf-8")
    history_before = path.read_text(encoding="utf-8")

    def refuse(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(history_module, "write_private_text", refuse)
    with pytest.raises(HistoryError):
        store.rotate_key()
    monkeypatch.undo()

    assert key_path.read_text(encoding="utf-8") == key_before
    assert path.read_text(encoding="utf-8") == history_before
    assert [i.expression for i in store.load()] == ["1+2"]
    assert [i.expression for i in HistoryStore(path, TextCipher(key_path)).load()] == ["1+2"]
