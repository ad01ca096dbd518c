# catchlog/stores/base.py
"""
관계형 저장소와 문서 저장소(Firestore)가 함께 따르는 저장소 계약.

ReportService, EngagementLedger, CounterSynchronizer 는 이 프로토콜에만 의존하며
어떤 백엔드가 설정되었는지에 따라 분기하지 않습니다.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Set, Tuple

from catchlog.models.comment import Comment
from catchlog.models.report import NewReport, Report
from catchlog.utils.cursor import FeedCursor


class ReportStore(Protocol):
    """게시물/좋아요/댓글 영속화 인터페이스."""

    # --- 게시물 ---

    def create_report(self, report: NewReport) -> str:
        """id 와 created_at 을 부여하고 두 카운터를 0으로 시작합니다."""
        ...

    def get_report(self, report_id: str) -> Optional[Report]:
        ...

    def list_reports_page(
        self, cursor: Optional[FeedCursor], page_size: int
    ) -> Tuple[List[Report], Optional[FeedCursor]]:
        """
        created_at 내림차순, 같은 시각이면 report_id 내림차순.
        다음 페이지가 없으면 반환 커서는 None 입니다.
        """
        ...

    def list_reports_by_author(self, user_id: str) -> List[Report]:
        ...

    def list_recent_reports(self, limit: int) -> List[Report]:
        ...

    def list_report_ids(self) -> List[str]:
        ...

    # --- 카운터 ---

    def increment_counter(self, report_id: str, field: str, delta: int) -> bool:
        """
        저장소 차원에서 원자적으로 delta 를 더합니다.
        게시물이 없거나 결과가 0 미만이 되는 경우 아무것도 바꾸지 않고 False 를 반환합니다.
        """
        ...

    def set_counters(self, report_id: str, likes_count: int, comments_count: int) -> None:
        ...

    # --- 좋아요 ---

    def insert_like(self, report_id: str, user_id: str) -> bool:
        """결정적 like id 로 insert-or-fail. 이미 있으면 False."""
        ...

    def delete_like(self, report_id: str, user_id: str) -> bool:
        """실제로 삭제된 레코드가 있을 때만 True."""
        ...

    def like_exists(self, report_id: str, user_id: str) -> bool:
        ...

    def liked_report_ids(self, user_id: str, report_ids: Iterable[str]) -> Set[str]:
        ...

    def count_likes(self, report_id: str) -> int:
        ...

    # --- 댓글 ---

    def insert_comment(
        self,
        report_id: str,
        user_id: str,
        user_name: str,
        user_avatar: Optional[str],
        text: str,
    ) -> Comment:
        ...

    def list_comments(self, report_id: str) -> List[Comment]:
        """작성 순서(오래된 것부터)."""
        ...

    def count_comments(self, report_id: str) -> int:
        ...
