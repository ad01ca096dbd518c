# catchlog/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. 모든 시각을 timezone-aware UTC datetime 으로 통일
2. Firestore / 관계형 DB 양쪽 저장 형식과의 호환성 보장
3. ISO 포맷 파싱/생성 통일
"""

import logging
from datetime import datetime, date, timezone, time
from typing import Any
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """timezone-naive 는 UTC로 간주하고, aware 는 UTC로 변환"""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_naive_utc(dt: datetime) -> datetime:
        """
        관계형 DB 저장용 naive UTC datetime 으로 변환.
        SQLite 는 timezone 정보를 보존하지 않으므로 항상 UTC 기준 naive 값으로 저장합니다.
        """
        return DateTimeUtils.ensure_utc(dt).replace(tzinfo=None)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+01:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)
            return DateTimeUtils.ensure_utc(dt)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 ISO 포맷 문자열로 변환 (Z 접미사)"""
        try:
            return DateTimeUtils.ensure_utc(dt).isoformat().replace('+00:00', 'Z')
        except Exception as e:
            logger.error(f"ISO 문자열 변환 실패: {dt} - {e}")
            raise ValueError(f"datetime 객체를 ISO 문자열로 변환할 수 없습니다: {dt}")

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.ensure_utc(obj)
        elif isinstance(obj, date):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 적절히 변환

        변환 규칙:
        - Firestore timestamp(DatetimeWithNanoseconds) -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.ensure_utc(obj)
        elif hasattr(obj, 'timestamp') and callable(obj.timestamp):
            return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

