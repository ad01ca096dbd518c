# catchlog/utils/cursor.py
"""
피드 페이지네이션용 불투명(opaque) 커서 인코딩.

커서는 직전 페이지의 마지막 게시물의 (created_at, report_id) 쌍을 담습니다.
오프셋이 아니라 위치를 가리키므로, 스캔 도중 새 게시물이 추가되어도
중복되거나 건너뛰는 항목이 생기지 않습니다.
"""
import base64
import binascii
import json
from datetime import datetime
from typing import NamedTuple

from catchlog.core.exceptions import ValidationError
from catchlog.utils.datetime_utils import DateTimeUtils


class FeedCursor(NamedTuple):
    created_at: datetime
    report_id: str

    def encode(self) -> str:
        payload = json.dumps(
            {"t": DateTimeUtils.to_iso_string(self.created_at), "id": self.report_id},
            separators=(",", ":"),
        )
        return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")

    @classmethod
    def decode(cls, token: str) -> "FeedCursor":
        try:
            padded = token + "=" * (-len(token) % 4)
            payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
            return cls(DateTimeUtils.parse_iso_datetime(payload["t"]), str(payload["id"]))
        except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
            raise ValidationError("유효하지 않은 커서입니다.", {"cursor": [str(e) or "invalid"]})
