# catchlog/services/test_engagement_ledger.py
"""
좋아요/댓글 원장 테스트.

사용법: python -m pytest catchlog/services/test_engagement_ledger.py -v
"""
import threading

import pytest

from catchlog.conftest import build_new_report
from catchlog.core.exceptions import ValidationError, WriteError
from catchlog.models.like import LikeState
from catchlog.services.counter_sync import CounterSynchronizer
from catchlog.services.engagement_ledger import EngagementLedger
from catchlog.stores.sql_store import SqlReportStore


@pytest.fixture
def report_id(store):
    return store.create_report(build_new_report())


def test_like_then_unlike_restores_counter(ledger, store, report_id):
    first = ledger.toggle_like(report_id, "u1")
    assert first.state is LikeState.LIKED
    assert first.counter_synced
    assert store.get_report(report_id).likes_count == 1
    assert ledger.has_liked(report_id, "u1")

    second = ledger.toggle_like(report_id, "u1")
    assert second.state is LikeState.UNLIKED
    assert store.get_report(report_id).likes_count == 0
    assert not ledger.has_liked(report_id, "u1")


@pytest.mark.parametrize("toggles, expected", [(1, LikeState.LIKED), (2, LikeState.UNLIKED), (5, LikeState.LIKED)])
def test_toggle_parity(ledger, store, report_id, toggles, expected):
    for _ in range(toggles):
        result = ledger.toggle_like(report_id, "u1")

    assert result.state is expected
    assert ledger.has_liked(report_id, "u1") == (expected is LikeState.LIKED)
    assert store.get_report(report_id).likes_count == (1 if expected is LikeState.LIKED else 0)


def test_likes_from_different_users_are_independent(ledger, store, report_id):
    ledger.toggle_like(report_id, "A")
    ledger.toggle_like(report_id, "B")
    ledger.toggle_like(report_id, "A")

    assert store.get_report(report_id).likes_count == 1
    assert not ledger.has_liked(report_id, "A")
    assert ledger.has_liked(report_id, "B")


def test_liked_report_ids_for_anonymous_user_is_empty(ledger, report_id):
    ledger.toggle_like(report_id, "u1")
    assert ledger.liked_report_ids(None, [report_id]) == set()
    assert ledger.liked_report_ids("u1", [report_id]) == {report_id}


def test_toggle_on_missing_report_returns_none(ledger, store):
    assert ledger.toggle_like("ghost", "u1") is None
    assert store.count_likes("ghost") == 0


def test_concurrent_toggles_from_unliked_state_create_one_like(tmp_path):
    store = SqlReportStore(f"sqlite+pysqlite:///{tmp_path / 'race.db'}")
    ledger = EngagementLedger(store)
    report_id = store.create_report(build_new_report())

    # 두 요청 모두 "좋아요 안 함" 상태를 읽은 뒤에야 쓰기를 시작하도록 맞춥니다.
    barrier = threading.Barrier(2, timeout=5)
    real_like_exists = store.like_exists

    def like_exists_after_both_read(rid, uid):
        exists = real_like_exists(rid, uid)
        barrier.wait()
        return exists

    store.like_exists = like_exists_after_both_read

    results, errors = [], []

    def toggle():
        try:
            results.append(ledger.toggle_like(report_id, "u1"))
        except Exception as e:  # 스레드 안의 예외를 본 스레드로 전달
            errors.append(e)

    threads = [threading.Thread(target=toggle) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert [r.state for r in results] == [LikeState.LIKED, LikeState.LIKED]
    assert store.count_likes(report_id) == 1
    assert store.get_report(report_id).likes_count == 1


def test_counter_failure_returns_warning_but_keeps_like(ledger, store, report_id, monkeypatch):
    monkeypatch.setattr(store, "increment_counter", lambda *args: False)

    result = ledger.toggle_like(report_id, "u1")

    assert result.is_liked
    assert not result.counter_synced
    assert result.warning.report_id == report_id
    assert store.like_exists(report_id, "u1")


def test_add_comment_increments_counter(ledger, store, report_id):
    comment = ledger.add_comment(report_id, "u2", "Alex", None, "Cracking fish!")

    assert comment.comment_id
    assert comment.text == "Cracking fish!"
    assert store.get_report(report_id).comments_count == 1
    assert [c.comment_id for c in ledger.list_comments(report_id)] == [comment.comment_id]


def test_comment_at_max_length_is_accepted(ledger, report_id):
    comment = ledger.add_comment(report_id, "u2", "Alex", None, "x" * 300)
    assert len(comment.text) == 300


@pytest.mark.parametrize("text", ["x" * 301, "", "   "])
def test_invalid_comment_is_rejected_without_side_effects(ledger, store, report_id, text):
    with pytest.raises(ValidationError) as exc_info:
        ledger.add_comment(report_id, "u2", "Alex", None, text)

    assert "text" in exc_info.value.messages
    assert store.count_comments(report_id) == 0
    assert store.get_report(report_id).comments_count == 0


def test_comment_requires_author(ledger, report_id):
    with pytest.raises(ValidationError):
        ledger.add_comment(report_id, "", "Alex", None, "hello")


def test_comment_on_missing_report_returns_none(ledger, store):
    assert ledger.add_comment("ghost", "u2", "Alex", None, "hello") is None
    assert store.count_comments("ghost") == 0


def test_comment_write_failure_propagates(ledger, store, report_id, monkeypatch):
    def broken(*args):
        raise WriteError("저장소에 연결할 수 없습니다.")

    monkeypatch.setattr(store, "insert_comment", broken)

    with pytest.raises(WriteError):
        ledger.add_comment(report_id, "u2", "Alex", None, "hello")
    assert store.get_report(report_id).comments_count == 0


def test_ledger_builds_default_synchronizer(store):
    assert isinstance(EngagementLedger(store).synchronizer, CounterSynchronizer)
