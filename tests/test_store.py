import threading

import orjson
import pytest

from showready.model.order import empty_state, seed_state
from showready.model.store import LastEventStore, StateStore


def test_missing_file_reads_as_empty_state(tmp_path):
    store = StateStore(tmp_path / "nope" / "db.json")
    assert store.read() == {
        "orders": [], "users": [], "stats": {"purchases": 0, "refunds": 0}
    }
    assert not store.path.exists()


def test_write_creates_directory_and_indents(tmp_path):
    store = StateStore(tmp_path / "fixtures" / "db.json")
    store.write(seed_state())

    raw = store.path.read_text()
    assert raw.startswith("{\n  ")
    assert store.read()["users"] == [
        {"id": "u_demo", "email": "demo@example.com"}
    ]
    # no temp files left behind by the atomic rename
    assert [p.name for p in store.path.parent.iterdir()] == ["db.json"]


def test_malformed_document_is_not_swallowed(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{not json")
    with pytest.raises(orjson.JSONDecodeError):
        StateStore(path).read()


def test_transaction_writes_back_on_clean_exit(tmp_path):
    store = StateStore(tmp_path / "db.json")
    with store.transaction() as state:
        state["stats"]["purchases"] = 7

    assert store.read()["stats"]["purchases"] == 7


def test_transaction_discards_changes_on_error(tmp_path):
    store = StateStore(tmp_path / "db.json")
    store.write(empty_state())

    with pytest.raises(RuntimeError):
        with store.transaction() as state:
            state["stats"]["refunds"] = 3
            raise RuntimeError("boom")

    assert store.read()["stats"]["refunds"] == 0


def test_transactions_from_many_threads_lose_no_updates(tmp_path):
    store = StateStore(tmp_path / "db.json")

    def bump():
        for _ in range(25):
            with store.transaction() as state:
                state["stats"]["purchases"] += 1

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.read()["stats"]["purchases"] == 200


def test_last_event_store_lifecycle(tmp_path):
    last = LastEventStore(tmp_path / "last_event.json")
    assert last.read() is None

    event = {"type": "charge.refunded", "data": {"orderId": "ord_abc123"}}
    last.write(event)
    assert last.read() == event

    last.clear()
    assert last.read() is None
    # clearing twice is fine
    last.clear()
