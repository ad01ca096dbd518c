# catchlog/models/like.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from catchlog.utils.datetime_utils import DateTimeUtils


def like_id_for(report_id: str, user_id: str) -> str:
    """(report_id, user_id) 쌍마다 하나뿐인 좋아요 문서 ID."""
    return f"{report_id}_{user_id}"


class LikeState(str, Enum):
    LIKED = "liked"
    UNLIKED = "unliked"


@dataclass
class Like:
    """'likes' 컬렉션/테이블의 레코드. 좋아요 시 생성, 취소 시 삭제됩니다."""
    report_id: str
    user_id: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    @property
    def like_id(self) -> str:
        return like_id_for(self.report_id, self.user_id)
