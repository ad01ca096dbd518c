# catchlog/services/counter_sync.py
import logging
from typing import Optional, Tuple

from catchlog.core.exceptions import ConsistencyWarning, WriteError
from catchlog.models.report import COMMENTS_COUNT, LIKES_COUNT
from catchlog.stores.base import ReportStore

logger = logging.getLogger(__name__)


class CounterSynchronizer:
    """
    게시물의 비정규화 카운터(likes_count, comments_count)를 원장과 맞추는 서비스.

    - 증감은 항상 저장소의 원자적 연산으로 처리합니다 (애플리케이션에서 읽고-더하고-쓰지 않음).
    - 카운터는 0 미만이 될 수 없으며, 그런 시도는 ConsistencyWarning 으로 보고됩니다.
    - 조정 실패는 좋아요/댓글 작업 자체를 실패시키지 않습니다.
    """
    def __init__(self, store: ReportStore):
        self.store = store

    def adjust(self, report_id: str, field: str, delta: int) -> Optional[ConsistencyWarning]:
        """카운터를 delta 만큼 조정합니다. 실패 시 경고 객체를 반환하고, 성공 시 None."""
        try:
            applied = self.store.increment_counter(report_id, field, delta)
        except WriteError as e:
            warning = ConsistencyWarning(report_id, field, delta, e.message)
        else:
            if applied:
                return None
            warning = ConsistencyWarning(
                report_id, field, delta, "게시물이 없거나 카운터가 0 미만이 되는 갱신이라 적용하지 않았습니다"
            )

        logger.warning(str(warning))
        return warning

    def reconcile(self, report_id: str) -> Tuple[int, int]:
        """좋아요/댓글 레코드 수를 다시 세어 게시물 카운터를 덮어씁니다."""
        likes = self.store.count_likes(report_id)
        comments = self.store.count_comments(report_id)
        self.store.set_counters(report_id, likes_count=likes, comments_count=comments)
        logger.info(f"카운터 재계산 완료 (report_id: {report_id}, {LIKES_COUNT}={likes}, {COMMENTS_COUNT}={comments})")
        return likes, comments

    def reconcile_all(self) -> int:
        report_ids = self.store.list_report_ids()
        for report_id in report_ids:
            self.reconcile(report_id)
        return len(report_ids)
