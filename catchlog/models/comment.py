# catchlog/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from catchlog.utils.datetime_utils import DateTimeUtils

COMMENT_MAX_LENGTH = 300


@dataclass
class Comment:
    """
    'comments' 컬렉션/테이블의 레코드 구조를 정의하는 데이터클래스.
    댓글은 추가만 가능하며 수정/삭제하지 않습니다.
    """
    comment_id: str
    report_id: str
    user_id: str
    user_name: str
    text: str
    user_avatar: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
