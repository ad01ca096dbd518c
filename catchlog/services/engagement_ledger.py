# catchlog/services/engagement_ledger.py
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from marshmallow import ValidationError as MarshmallowValidationError, validate

from catchlog.core.exceptions import ConsistencyWarning, ValidationError
from catchlog.models.comment import COMMENT_MAX_LENGTH, Comment
from catchlog.models.like import LikeState
from catchlog.models.report import COMMENTS_COUNT, LIKES_COUNT
from catchlog.services.counter_sync import CounterSynchronizer
from catchlog.stores.base import ReportStore

logger = logging.getLogger(__name__)

_comment_length = validate.Length(
    min=1, max=COMMENT_MAX_LENGTH, error=f"댓글은 1~{COMMENT_MAX_LENGTH}자 사이여야 합니다."
)


@dataclass
class LikeToggle:
    """toggle_like 결과. 화면은 state 로 낙관적 상태를 맞추고, warning 이 있으면 카운터가 아직 반영되지 않은 것입니다."""
    state: LikeState
    warning: Optional[ConsistencyWarning] = None

    @property
    def is_liked(self) -> bool:
        return self.state is LikeState.LIKED

    @property
    def counter_synced(self) -> bool:
        return self.warning is None


class EngagementLedger:
    """
    좋아요/댓글 원장. "사용자 X가 게시물 Y를 좋아요 했는가" 의 기준 데이터입니다.
    원장 기록이 성공하면 같은 작업 안에서 CounterSynchronizer 로 카운터를 조정합니다.
    """
    def __init__(self, store: ReportStore, synchronizer: Optional[CounterSynchronizer] = None):
        self.store = store
        self.synchronizer = synchronizer or CounterSynchronizer(store)

    def _report_exists(self, report_id: str) -> bool:
        return self.store.get_report(report_id) is not None

    # --- 좋아요 ---

    def has_liked(self, report_id: str, user_id: str) -> bool:
        return self.store.like_exists(report_id, user_id)

    def liked_report_ids(self, user_id: Optional[str], report_ids: Iterable[str]) -> Set[str]:
        """피드 페이지의 is_liked 표시용 일괄 조회. 비로그인 사용자는 빈 집합."""
        if not user_id:
            return set()
        return self.store.liked_report_ids(user_id, report_ids)

    def toggle_like(self, report_id: str, user_id: str) -> Optional[LikeToggle]:
        """
        좋아요 상태를 뒤집습니다.

        생성은 결정적 ID 에 대한 insert-or-fail 이므로, 같은 (report, user) 에 대해 동시에
        두 요청이 "좋아요 안 함" 상태를 보고 들어와도 레코드는 하나만 생깁니다.
        삽입에 진 쪽은 이미 같은 의도가 반영된 것으로 보고 카운터를 건드리지 않습니다.
        삭제도 실제로 지운 경우에만 카운터를 감소시킵니다.
        게시물이 없으면 None 을 반환합니다.
        """
        if not self._report_exists(report_id):
            return None

        warning = None
        if self.store.like_exists(report_id, user_id):
            state = LikeState.UNLIKED
            if self.store.delete_like(report_id, user_id):
                warning = self.synchronizer.adjust(report_id, LIKES_COUNT, -1)
        else:
            state = LikeState.LIKED
            if self.store.insert_like(report_id, user_id):
                warning = self.synchronizer.adjust(report_id, LIKES_COUNT, 1)

        logger.info(f"좋아요 토글 (report_id: {report_id}, user_id: {user_id}) -> {state.value}")
        return LikeToggle(state=state, warning=warning)

    # --- 댓글 ---

    def add_comment(
        self,
        report_id: str,
        author_id: str,
        author_name: str,
        author_avatar: Optional[str],
        text: str,
    ) -> Optional[Comment]:
        """
        댓글을 추가하고 comments_count 를 1 증가시킵니다.
        생성된 댓글(comment_id 포함)을 반환하며, 게시물이 없으면 None.
        """
        if not author_id or not author_name:
            raise ValidationError("댓글 작성자 정보가 필요합니다.", {"author": ["required"]})
        try:
            _comment_length(text or "")
        except MarshmallowValidationError as err:
            raise ValidationError(str(err.messages[0]), {"text": err.messages}) from err
        if not text.strip():
            raise ValidationError("댓글 내용이 비어 있습니다.", {"text": ["blank"]})

        if not self._report_exists(report_id):
            return None

        comment = self.store.insert_comment(report_id, author_id, author_name, author_avatar, text)
        self.synchronizer.adjust(report_id, COMMENTS_COUNT, 1)
        logger.info(f"댓글 작성 완료 (report_id: {report_id}, comment_id: {comment.comment_id})")
        return comment

    def list_comments(self, report_id: str) -> List[Comment]:
        return self.store.list_comments(report_id)
