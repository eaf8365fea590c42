import threading

import pytest

from app.services.users.record_store import RecordNotFoundError, RecordStore


def test_create_assigns_sequential_ids_from_one(record_factory):
    store = RecordStore()

    first = store.create(record_factory(email="a@x.com"))
    second = store.create(record_factory(email="b@x.com"))

    assert (first, second) == (1, 2)
    assert store.get(1).email == "a@x.com"
    assert store.get(2).id == 2


def test_create_ignores_caller_supplied_id(record_factory):
    store = RecordStore()

    record_id = store.create(record_factory(id=99))

    assert record_id == 1
    assert 99 not in store


def test_get_missing_returns_none():
    assert RecordStore().get(1) is None


def test_mutate_is_copy_on_write(record_factory):
    store = RecordStore()
    record_id = store.create(record_factory())
    before = store.get(record_id)

    def rename(record):
        record.first_name = "Changed"

    after = store.mutate(record_id, rename)

    assert before.first_name == "Alice"
    assert after.first_name == "Changed"
    assert store.get(record_id) is after


def test_mutate_cannot_change_id(record_factory):
    store = RecordStore()
    record_id = store.create(record_factory())

    def tamper(record):
        record.id = 500

    updated = store.mutate(record_id, tamper)

    assert updated.id == record_id
    assert store.get(record_id).id == record_id


def test_mutate_unknown_id_raises():
    store = RecordStore()

    with pytest.raises(RecordNotFoundError) as exc_info:
        store.mutate(7, lambda record: None)

    assert exc_info.value.record_id == 7
    assert "7" in str(exc_info.value)


def test_ids_are_not_reused_after_clear(record_factory):
    store = RecordStore()
    store.create(record_factory())
    store.clear()

    assert len(store) == 0
    assert store.create(record_factory()) == 2


def test_start_id_must_be_positive():
    with pytest.raises(ValueError):
        RecordStore(start_id=0)


def test_concurrent_creates_get_distinct_ids(record_factory):
    store = RecordStore()
    ids: list[int] = []
    lock = threading.Lock()

    def worker(n):
        for i in range(50):
            record_id = store.create(record_factory(email=f"w{n}-{i}@x.com"))
            with lock:
                ids.append(record_id)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ids) == 400
    assert len(set(ids)) == 400
    assert sorted(ids) == list(range(1, 401))
