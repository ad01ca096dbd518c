# catchlog/services/test_counter_sync.py
import logging

from catchlog.conftest import build_new_report
from catchlog.core.exceptions import ConsistencyWarning, WriteError
from catchlog.models.report import COMMENTS_COUNT, LIKES_COUNT
from catchlog.services.counter_sync import CounterSynchronizer


def test_adjust_applies_delta(store):
    report_id = store.create_report(build_new_report())
    sync = CounterSynchronizer(store)

    assert sync.adjust(report_id, COMMENTS_COUNT, 1) is None
    assert store.get_report(report_id).comments_count == 1


def test_adjust_below_zero_is_clamped_and_warned(store, caplog):
    report_id = store.create_report(build_new_report())
    sync = CounterSynchronizer(store)

    with caplog.at_level(logging.WARNING, logger="catchlog.services.counter_sync"):
        warning = sync.adjust(report_id, LIKES_COUNT, -1)

    assert isinstance(warning, ConsistencyWarning)
    assert warning.delta == -1
    assert store.get_report(report_id).likes_count == 0
    assert report_id in caplog.text


def test_adjust_converts_write_error_into_warning(store, monkeypatch):
    report_id = store.create_report(build_new_report())

    def unavailable(*args):
        raise WriteError("저장소에 연결할 수 없습니다.")

    monkeypatch.setattr(store, "increment_counter", unavailable)

    warning = CounterSynchronizer(store).adjust(report_id, LIKES_COUNT, 1)

    assert warning.reason == "저장소에 연결할 수 없습니다."


def test_reconcile_recounts_from_ledger(store):
    report_id = store.create_report(build_new_report())
    store.insert_like(report_id, "u1")
    store.insert_like(report_id, "u2")
    store.insert_comment(report_id, "u1", "Sam", None, "nice")
    store.set_counters(report_id, likes_count=9, comments_count=0)

    assert CounterSynchronizer(store).reconcile(report_id) == (2, 1)

    report = store.get_report(report_id)
    assert (report.likes_count, report.comments_count) == (2, 1)


def test_reconcile_all_visits_every_report(store):
    ids = [store.create_report(build_new_report()) for _ in range(3)]
    for report_id in ids:
        store.set_counters(report_id, likes_count=4, comments_count=4)

    assert CounterSynchronizer(store).reconcile_all() == 3
    assert all(store.get_report(rid).likes_count == 0 for rid in ids)
