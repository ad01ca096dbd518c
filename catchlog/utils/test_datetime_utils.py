# catchlog/utils/test_datetime_utils.py
"""
통합 시간 관리 유틸리티 기능 테스트

사용법: python -m pytest catchlog/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from catchlog.utils.datetime_utils import DateTimeUtils

def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+01:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc  # UTC로 정규화되어야 함

def test_parse_iso_datetime_converts_offset_to_utc():
    dt = DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+01:00")
    assert dt == datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)

def test_to_iso_string_uses_z_suffix():
    dt = datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)
    assert DateTimeUtils.to_iso_string(dt) == "2024-01-15T10:30:00.123456Z"

def test_to_naive_utc():
    """관계형 DB 저장용 naive UTC 변환 테스트"""
    aware = datetime(2024, 1, 15, 11, 30, tzinfo=timezone(timedelta(hours=1)))
    naive = DateTimeUtils.to_naive_utc(aware)
    assert naive.tzinfo is None
    assert naive == datetime(2024, 1, 15, 10, 30)

def test_for_firestore():
    """Firestore 변환 테스트"""
    test_data = {
        'caught_on': date(2020, 1, 15),
        'timestamp': datetime(2024, 1, 15, 10, 30),
        'nested': {
            'event_date': date(2023, 12, 25)
        },
        'list_data': [
            {'created_at': datetime(2024, 1, 1)}
        ]
    }

    converted = DateTimeUtils.for_firestore(test_data)

    # date는 datetime으로 변환되어야 함
    assert isinstance(converted['caught_on'], datetime)
    assert isinstance(converted['nested']['event_date'], datetime)
    assert isinstance(converted['list_data'][0]['created_at'], datetime)

    # 모든 datetime은 timezone-aware여야 함
    assert converted['caught_on'].tzinfo == timezone.utc
    assert converted['timestamp'].tzinfo == timezone.utc

def test_from_firestore_keeps_other_values():
    data = {'created_at': datetime(2024, 1, 1), 'likes_count': 3, 'notes': 'misty morning'}
    converted = DateTimeUtils.from_firestore(data)
    assert converted['created_at'].tzinfo == timezone.utc
    assert converted['likes_count'] == 3
    assert converted['notes'] == 'misty morning'

def test_error_handling():
    """오류 처리 테스트"""
    # 잘못된 ISO 포맷
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    # 빈 문자열
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")

def test_from_firestore_propagates_conversion_errors():
    """변환 실패는 원본을 그대로 돌려주지 않고 예외로 전달되어야 함"""
    class BrokenTimestamp:
        def timestamp(self):
            raise OverflowError("timestamp out of range")

    with pytest.raises(OverflowError):
        DateTimeUtils.from_firestore({'created_at': BrokenTimestamp()})
