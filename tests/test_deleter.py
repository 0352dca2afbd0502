import threading

import pytest

from storagegc.core.deleter import BoundedDeleter, delete_each


def test_bounded_deleter_rejects_non_positive_timeout():
    with pytest.raises(ValueError, match="timeout_seconds"):
        BoundedDeleter(0)


def test_bounded_deleter_runs_one_item_at_a_time():
    active = 0
    peak = 0
    lock = threading.Lock()

    def _delete(target: str) -> bool:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        with lock:
            active -= 1
        return True

    with BoundedDeleter(5) as deleter:
        results = deleter.delete_all(["a", "b", "c"], _delete)

    assert [r.target for r in results] == ["a", "b", "c"]
    assert all(r.deleted for r in results)
    assert peak == 1


def test_timed_out_item_does_not_block_the_next_one():
    release = threading.Event()
    seen: list[str] = []

    def _delete(target: str) -> bool:
        if target == "stuck":
            release.wait(5)
        seen.append(target)
        return True

    try:
        with BoundedDeleter(0.1) as deleter:
            stuck = deleter.delete("stuck", _delete)
            after = deleter.delete("next", _delete)
    finally:
        release.set()

    assert stuck.timed_out is True
    assert stuck.ok is False
    assert after.deleted is True
    assert "next" in seen


def test_delete_each_records_errors_and_continues():
    def _delete(target: str) -> bool:
        if target == "bad":
            raise RuntimeError("boom")
        return target != "missing"

    results = delete_each(["good", "bad", "missing"], _delete)

    assert [(r.target, r.deleted, r.error) for r in results] == [
        ("good", True, None),
        ("bad", False, "boom"),
        ("missing", False, None),
    ]
