# catchlog/stores/firestore_store.py
import logging
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from catchlog.core.exceptions import ValidationError, WriteError
from catchlog.models.comment import Comment
from catchlog.models.like import Like, like_id_for
from catchlog.models.report import COUNTER_FIELDS, NewReport, Report
from catchlog.utils.cursor import FeedCursor
from catchlog.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

# Firestore 'in' / get_all 요청 한 번에 묻는 문서 수
_BATCH_SIZE = 30


@firestore.transactional
def _decrement_in_transaction(transaction, report_ref, field: str, delta: int) -> bool:
    """
    트랜잭션 안에서 현재 값을 확인한 뒤 감소시킵니다.
    결과가 0 미만이 되면 갱신하지 않고 False 를 반환합니다.
    """
    snapshot = report_ref.get(transaction=transaction)
    if not snapshot.exists:
        return False
    current = snapshot.to_dict().get(field) or 0
    if current + delta < 0:
        return False
    transaction.update(report_ref, {field: firestore.Increment(delta)})
    return True


@firestore.transactional
def _delete_like_in_transaction(transaction, like_ref) -> bool:
    like_doc = like_ref.get(transaction=transaction)
    if not like_doc.exists:
        return False
    transaction.delete(like_ref)
    return True


class FirestoreReportStore:
    """
    ReportStore 의 Firestore 구현.
    - 'reports' / 'likes' / 'comments' 컬렉션을 사용합니다.
    - 좋아요 문서 ID 는 f"{report_id}_{user_id}" 로 고정되어 쌍마다 하나만 존재합니다.
    - 카운터 증가는 firestore.Increment 로 서버에서 원자적으로 처리합니다.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.reports_ref = self.db.collection('reports')
        self.likes_ref = self.db.collection('likes')
        self.comments_ref = self.db.collection('comments')

    def _to_report(self, doc) -> Report:
        data = DateTimeUtils.from_firestore(doc.to_dict())
        data['report_id'] = doc.id
        return Report(**data)

    def _to_comment(self, doc) -> Comment:
        data = DateTimeUtils.from_firestore(doc.to_dict())
        data['comment_id'] = doc.id
        return Comment(**data)

    # --- 게시물 ---

    def create_report(self, report: NewReport) -> str:
        try:
            doc_ref = self.reports_ref.document()
            new_report = Report(report_id=doc_ref.id, **asdict(report))
            doc_ref.set(DateTimeUtils.for_firestore(asdict(new_report)))
            logger.info(f"게시물 저장 성공 (report_id: {doc_ref.id})")
            return doc_ref.id
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"게시물 저장 실패 (user_id: {report.user_id}): {e}", exc_info=True)
            raise WriteError("게시물을 저장하지 못했습니다.") from e

    def get_report(self, report_id: str) -> Optional[Report]:
        doc = self.reports_ref.document(report_id).get()
        if not doc.exists:
            return None
        return self._to_report(doc)

    def _feed_query(self):
        # created_at 이 같은 문서는 문서 ID 로 순서를 고정합니다.
        return (
            self.reports_ref
            .order_by('created_at', direction=firestore.Query.DESCENDING)
            .order_by(FieldPath.document_id(), direction=firestore.Query.DESCENDING)
        )

    def list_reports_page(
        self, cursor: Optional[FeedCursor], page_size: int
    ) -> Tuple[List[Report], Optional[FeedCursor]]:
        query = self._feed_query()
        if cursor:
            cursor_doc = self.reports_ref.document(cursor.report_id).get()
            if not cursor_doc.exists:
                raise ValidationError("커서가 가리키는 게시물을 찾을 수 없습니다.", {"cursor": ["unknown position"]})
            query = query.start_after(cursor_doc)

        docs = list(query.limit(page_size + 1).stream())
        reports = [self._to_report(doc) for doc in docs[:page_size]]

        next_cursor = None
        if len(docs) > page_size and reports:
            last = reports[-1]
            next_cursor = FeedCursor(last.created_at, last.report_id)
        return reports, next_cursor

    def list_reports_by_author(self, user_id: str) -> List[Report]:
        query = (
            self.reports_ref
            .where(filter=FieldFilter('user_id', '==', user_id))
            .order_by('created_at', direction=firestore.Query.DESCENDING)
            .order_by(FieldPath.document_id(), direction=firestore.Query.DESCENDING)
        )
        return [self._to_report(doc) for doc in query.stream()]

    def list_recent_reports(self, limit: int) -> List[Report]:
        return [self._to_report(doc) for doc in self._feed_query().limit(limit).stream()]

    def list_report_ids(self) -> List[str]:
        return [doc_ref.id for doc_ref in self.reports_ref.list_documents()]

    # --- 카운터 ---

    def increment_counter(self, report_id: str, field: str, delta: int) -> bool:
        if field not in COUNTER_FIELDS:
            raise ValueError(f"알 수 없는 카운터 필드입니다: {field}")
        report_ref = self.reports_ref.document(report_id)
        try:
            if delta < 0:
                return _decrement_in_transaction(self.db.transaction(), report_ref, field, delta)
            report_ref.update({field: firestore.Increment(delta)})
            return True
        except google_exceptions.NotFound:
            return False
        except google_exceptions.GoogleAPICallError as e:
            raise WriteError(f"카운터 갱신 실패 (report_id: {report_id})") from e

    def set_counters(self, report_id: str, likes_count: int, comments_count: int) -> None:
        try:
            self.reports_ref.document(report_id).update({
                'likes_count': likes_count,
                'comments_count': comments_count,
            })
        except google_exceptions.GoogleAPICallError as e:
            raise WriteError(f"카운터 재설정 실패 (report_id: {report_id})") from e

    # --- 좋아요 ---

    def insert_like(self, report_id: str, user_id: str) -> bool:
        like = Like(report_id=report_id, user_id=user_id)
        try:
            # create() 는 문서가 이미 있으면 AlreadyExists 로 실패합니다 (insert-or-fail).
            self.likes_ref.document(like.like_id).create(DateTimeUtils.for_firestore(asdict(like)))
            return True
        except google_exceptions.AlreadyExists:
            return False
        except google_exceptions.GoogleAPICallError as e:
            raise WriteError(f"좋아요 저장 실패 (report_id: {report_id})") from e

    def delete_like(self, report_id: str, user_id: str) -> bool:
        like_ref = self.likes_ref.document(like_id_for(report_id, user_id))
        try:
            return _delete_like_in_transaction(self.db.transaction(), like_ref)
        except google_exceptions.GoogleAPICallError as e:
            raise WriteError(f"좋아요 취소 실패 (report_id: {report_id})") from e

    def like_exists(self, report_id: str, user_id: str) -> bool:
        return self.likes_ref.document(like_id_for(report_id, user_id)).get().exists

    def liked_report_ids(self, user_id: str, report_ids: Iterable[str]) -> Set[str]:
        """주어진 게시물 ID 목록에 대해 사용자의 좋아요 여부를 일괄 확인합니다."""
        report_ids = list(report_ids)
        liked: Set[str] = set()
        for i in range(0, len(report_ids), _BATCH_SIZE):
            chunk = report_ids[i:i + _BATCH_SIZE]
            refs = [self.likes_ref.document(like_id_for(rid, user_id)) for rid in chunk]
            for doc in self.db.get_all(refs):
                if doc.exists:
                    liked.add(doc.to_dict().get('report_id'))
        return liked

    def _count(self, collection_ref, report_id: str) -> int:
        # count() 집계 쿼리는 문서를 내려받지 않고 개수만 계산합니다.
        query = collection_ref.where(filter=FieldFilter('report_id', '==', report_id))
        result = query.count().get()
        return int(result[0][0].value)

    def count_likes(self, report_id: str) -> int:
        return self._count(self.likes_ref, report_id)

    # --- 댓글 ---

    def insert_comment(
        self,
        report_id: str,
        user_id: str,
        user_name: str,
        user_avatar: Optional[str],
        text: str,
    ) -> Comment:
        try:
            doc_ref = self.comments_ref.document()
            comment = Comment(
                comment_id=doc_ref.id,
                report_id=report_id,
                user_id=user_id,
                user_name=user_name,
                user_avatar=user_avatar,
                text=text,
            )
            data: Dict[str, Any] = asdict(comment)
            doc_ref.set(DateTimeUtils.for_firestore(data))
            return comment
        except google_exceptions.GoogleAPICallError as e:
            raise WriteError(f"댓글 저장 실패 (report_id: {report_id})") from e

    def list_comments(self, report_id: str) -> List[Comment]:
        query = (
            self.comments_ref
            .where(filter=FieldFilter('report_id', '==', report_id))
            .order_by('created_at')
        )
        return [self._to_comment(doc) for doc in query.stream()]

    def count_comments(self, report_id: str) -> int:
        return self._count(self.comments_ref, report_id)
