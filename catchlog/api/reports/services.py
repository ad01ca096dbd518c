# catchlog/api/reports/services.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from marshmallow import ValidationError as MarshmallowValidationError

from catchlog.api.reports.schemas import ReportCreateSchema
from catchlog.core.exceptions import ValidationError
from catchlog.models.report import NewReport, Report
from catchlog.stores.base import ReportStore
from catchlog.utils.cursor import FeedCursor
from catchlog.utils.datetime_utils import DateTimeUtils


class ReportService:
    """
    조과 게시물 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 입력 검증 후 저장소에 위임합니다.
    - 피드 조회는 커서 기반입니다. 바깥에는 불투명한 문자열 커서만 노출합니다.
    """
    def __init__(self, store: ReportStore, page_size: int = 10, max_page_size: int = 50, map_limit: int = 200):
        self.store = store
        self.page_size = page_size
        self.max_page_size = max_page_size
        self.map_limit = map_limit

    def create(self, user_id: str, user_name: str, user_avatar: Optional[str], payload: Dict[str, Any]) -> str:
        """새로운 조과 게시물을 검증하고 저장한 뒤 ID 를 반환합니다."""
        if not user_id or not user_name:
            raise ValidationError("작성자 정보가 필요합니다.", {"author": ["required"]})
        try:
            data = ReportCreateSchema().load(payload or {})
        except MarshmallowValidationError as err:
            raise ValidationError("게시물 입력값이 올바르지 않습니다.", err.messages) from err

        data['caught_at'] = DateTimeUtils.ensure_utc(data['caught_at'])
        new_report = NewReport(user_id=user_id, user_name=user_name, user_avatar=user_avatar, **data)
        report_id = self.store.create_report(new_report)
        logging.info(f"게시물 생성 완료 (report_id: {report_id}, user_id: {user_id})")
        return report_id

    def get_by_id(self, report_id: str) -> Optional[Report]:
        # 없는 게시물은 오류가 아니라 None 입니다.
        return self.store.get_report(report_id)

    def list_page(self, cursor: Optional[str] = None, page_size: Optional[int] = None) -> Tuple[List[Report], Optional[str]]:
        """피드 한 페이지와 다음 페이지 커서(없으면 None)를 반환합니다."""
        size = self.page_size if page_size is None else page_size
        if size < 1:
            raise ValidationError("페이지 크기는 1 이상이어야 합니다.", {"limit": ["must be >= 1"]})
        size = min(size, self.max_page_size)

        position = FeedCursor.decode(cursor) if cursor else None
        reports, next_position = self.store.list_reports_page(position, size)
        return reports, next_position.encode() if next_position else None

    def list_by_author(self, author_id: str) -> List[Report]:
        return self.store.list_reports_by_author(author_id)

    def list_recent(self, limit: Optional[int] = None) -> List[Report]:
        """지도 표시용 최근 게시물 스냅샷."""
        size = self.map_limit if limit is None else limit
        if size < 1:
            raise ValidationError("조회 개수는 1 이상이어야 합니다.", {"limit": ["must be >= 1"]})
        return self.store.list_recent_reports(min(size, self.map_limit))
