# catchlog/stores/sql_store.py
"""
SQLAlchemy 기반 관계형 저장소 구현.
PostgreSQL 을 기본으로 하며, 테스트에서는 SQLite URL 을 그대로 사용할 수 있습니다.
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    String,
    and_,
    create_engine,
    delete,
    func,
    or_,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from catchlog.core.exceptions import WriteError
from catchlog.models.comment import Comment
from catchlog.models.like import like_id_for
from catchlog.models.report import COUNTER_FIELDS, NewReport, Report
from catchlog.utils.cursor import FeedCursor
from catchlog.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

Base = declarative_base()


class ReportRow(Base):
    __tablename__ = "reports"

    report_id = Column(String(64), primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)
    user_name = Column(String(128), nullable=False)
    user_avatar = Column(String(1024), nullable=True)
    photo_url = Column(String(1024), nullable=False)
    species = Column(String(128), nullable=False)
    weight_lb = Column(Float, nullable=True)
    weight_oz = Column(Float, nullable=True)
    length_inches = Column(Float, nullable=True)
    location_name = Column(String(256), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    notes = Column(String(500), nullable=False, default="")
    caught_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    likes_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)


class LikeRow(Base):
    __tablename__ = "likes"

    # (report_id, user_id) 당 하나. 기본키 충돌이 곧 "이미 좋아요" 입니다.
    like_id = Column(String(256), primary_key=True)
    report_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(128), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)


class CommentRow(Base):
    __tablename__ = "comments"

    # 삽입 순서. created_at 이 같은 댓글의 순서를 정합니다.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(String(64), nullable=False, unique=True)
    report_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(128), nullable=False)
    user_name = Column(String(128), nullable=False)
    user_avatar = Column(String(1024), nullable=True)
    text = Column(String(300), nullable=False)
    created_at = Column(DateTime, nullable=False)


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:")
    )


class SqlReportStore:
    """
    ReportStore 의 관계형 구현. 임의의 SQLAlchemy URL 을 받습니다 (Postgres, 테스트용 SQLite 등).
    카운터는 `UPDATE ... SET n = n + :delta` 로 DB 에서 원자적으로 갱신합니다.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("SQL 백엔드에는 DATABASE_URL 이 필요합니다.")
        if _is_memory_sqlite(database_url):
            # 메모리 DB 는 연결마다 별개이므로 하나의 연결을 공유합니다.
            self.engine = create_engine(
                database_url,
                future=True,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                database_url,
                future=True,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    # --- 변환 ---

    def _to_report(self, row: ReportRow) -> Report:
        return Report(
            report_id=row.report_id,
            user_id=row.user_id,
            user_name=row.user_name,
            user_avatar=row.user_avatar,
            photo_url=row.photo_url,
            species=row.species,
            weight_lb=row.weight_lb,
            weight_oz=row.weight_oz,
            length_inches=row.length_inches,
            location_name=row.location_name,
            latitude=row.latitude,
            longitude=row.longitude,
            notes=row.notes or "",
            caught_at=DateTimeUtils.ensure_utc(row.caught_at),
            created_at=DateTimeUtils.ensure_utc(row.created_at),
            likes_count=row.likes_count,
            comments_count=row.comments_count,
        )

    def _to_comment(self, row: CommentRow) -> Comment:
        return Comment(
            comment_id=row.comment_id,
            report_id=row.report_id,
            user_id=row.user_id,
            user_name=row.user_name,
            user_avatar=row.user_avatar,
            text=row.text,
            created_at=DateTimeUtils.ensure_utc(row.created_at),
        )

    # --- 게시물 ---

    def create_report(self, report: NewReport) -> str:
        report_id = uuid.uuid4().hex
        try:
            with self.Session() as session:
                session.add(
                    ReportRow(
                        report_id=report_id,
                        user_id=report.user_id,
                        user_name=report.user_name,
                        user_avatar=report.user_avatar,
                        photo_url=report.photo_url,
                        species=report.species,
                        weight_lb=report.weight_lb,
                        weight_oz=report.weight_oz,
                        length_inches=report.length_inches,
                        location_name=report.location_name,
                        latitude=report.latitude,
                        longitude=report.longitude,
                        notes=report.notes or "",
                        caught_at=DateTimeUtils.to_naive_utc(report.caught_at),
                        created_at=DateTimeUtils.to_naive_utc(DateTimeUtils.now()),
                        likes_count=0,
                        comments_count=0,
                    )
                )
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"게시물 저장 실패 (user_id: {report.user_id}): {e}", exc_info=True)
            raise WriteError("게시물을 저장하지 못했습니다.") from e
        return report_id

    def get_report(self, report_id: str) -> Optional[Report]:
        with self.Session() as session:
            row = session.get(ReportRow, report_id)
            return self._to_report(row) if row else None

    def list_reports_page(
        self, cursor: Optional[FeedCursor], page_size: int
    ) -> Tuple[List[Report], Optional[FeedCursor]]:
        stmt = select(ReportRow).order_by(
            ReportRow.created_at.desc(), ReportRow.report_id.desc()
        )
        if cursor:
            ts = DateTimeUtils.to_naive_utc(cursor.created_at)
            stmt = stmt.where(
                or_(
                    ReportRow.created_at < ts,
                    and_(ReportRow.created_at == ts, ReportRow.report_id < cursor.report_id),
                )
            )
        # 한 건 더 읽어 다음 페이지 존재 여부를 판단합니다.
        with self.Session() as session:
            rows = session.execute(stmt.limit(page_size + 1)).scalars().all()
            reports = [self._to_report(row) for row in rows[:page_size]]

        next_cursor = None
        if len(rows) > page_size and reports:
            last = reports[-1]
            next_cursor = FeedCursor(last.created_at, last.report_id)
        return reports, next_cursor

    def list_reports_by_author(self, user_id: str) -> List[Report]:
        stmt = (
            select(ReportRow)
            .where(ReportRow.user_id == user_id)
            .order_by(ReportRow.created_at.desc(), ReportRow.report_id.desc())
        )
        with self.Session() as session:
            return [self._to_report(row) for row in session.execute(stmt).scalars()]

    def list_recent_reports(self, limit: int) -> List[Report]:
        stmt = (
            select(ReportRow)
            .order_by(ReportRow.created_at.desc(), ReportRow.report_id.desc())
            .limit(limit)
        )
        with self.Session() as session:
            return [self._to_report(row) for row in session.execute(stmt).scalars()]

    def list_report_ids(self) -> List[str]:
        with self.Session() as session:
            return list(session.execute(select(ReportRow.report_id)).scalars())

    # --- 카운터 ---

    def increment_counter(self, report_id: str, field: str, delta: int) -> bool:
        if field not in COUNTER_FIELDS:
            raise ValueError(f"알 수 없는 카운터 필드입니다: {field}")
        column = getattr(ReportRow, field)
        stmt = update(ReportRow).where(ReportRow.report_id == report_id)
        if delta < 0:
            # 0 미만으로 내려가는 갱신은 DB 가 거부하도록 조건에 포함합니다.
            stmt = stmt.where(column + delta >= 0)
        stmt = stmt.values({field: column + delta}).execution_options(synchronize_session=False)
        try:
            with self.Session() as session:
                result = session.execute(stmt)
                session.commit()
                return (result.rowcount or 0) == 1
        except SQLAlchemyError as e:
            raise WriteError(f"카운터 갱신 실패 (report_id: {report_id})") from e

    def set_counters(self, report_id: str, likes_count: int, comments_count: int) -> None:
        stmt = (
            update(ReportRow)
            .where(ReportRow.report_id == report_id)
            .values(likes_count=likes_count, comments_count=comments_count)
            .execution_options(synchronize_session=False)
        )
        try:
            with self.Session() as session:
                session.execute(stmt)
                session.commit()
        except SQLAlchemyError as e:
            raise WriteError(f"카운터 재설정 실패 (report_id: {report_id})") from e

    # --- 좋아요 ---

    def insert_like(self, report_id: str, user_id: str) -> bool:
        try:
            with self.Session() as session:
                session.add(
                    LikeRow(
                        like_id=like_id_for(report_id, user_id),
                        report_id=report_id,
                        user_id=user_id,
                        created_at=DateTimeUtils.to_naive_utc(DateTimeUtils.now()),
                    )
                )
                session.commit()
                return True
        except IntegrityError:
            return False
        except SQLAlchemyError as e:
            raise WriteError(f"좋아요 저장 실패 (report_id: {report_id})") from e

    def delete_like(self, report_id: str, user_id: str) -> bool:
        stmt = delete(LikeRow).where(LikeRow.like_id == like_id_for(report_id, user_id))
        try:
            with self.Session() as session:
                result = session.execute(stmt)
                session.commit()
                return (result.rowcount or 0) == 1
        except SQLAlchemyError as e:
            raise WriteError(f"좋아요 취소 실패 (report_id: {report_id})") from e

    def like_exists(self, report_id: str, user_id: str) -> bool:
        with self.Session() as session:
            return session.get(LikeRow, like_id_for(report_id, user_id)) is not None

    def liked_report_ids(self, user_id: str, report_ids: Iterable[str]) -> Set[str]:
        report_ids = list(report_ids)
        if not report_ids:
            return set()
        stmt = select(LikeRow.report_id).where(
            LikeRow.user_id == user_id, LikeRow.report_id.in_(report_ids)
        )
        with self.Session() as session:
            return set(session.execute(stmt).scalars())

    def count_likes(self, report_id: str) -> int:
        stmt = select(func.count()).select_from(LikeRow).where(LikeRow.report_id == report_id)
        with self.Session() as session:
            return session.execute(stmt).scalar_one()

    # --- 댓글 ---

    def insert_comment(
        self,
        report_id: str,
        user_id: str,
        user_name: str,
        user_avatar: Optional[str],
        text: str,
    ) -> Comment:
        row = CommentRow(
            comment_id=uuid.uuid4().hex,
            report_id=report_id,
            user_id=user_id,
            user_name=user_name,
            user_avatar=user_avatar,
            text=text,
            created_at=DateTimeUtils.to_naive_utc(DateTimeUtils.now()),
        )
        try:
            with self.Session() as session:
                session.add(row)
                session.commit()
                return self._to_comment(row)
        except SQLAlchemyError as e:
            raise WriteError(f"댓글 저장 실패 (report_id: {report_id})") from e

    def list_comments(self, report_id: str) -> List[Comment]:
        stmt = (
            select(CommentRow)
            .where(CommentRow.report_id == report_id)
            .order_by(CommentRow.created_at.asc(), CommentRow.seq.asc())
        )
        with self.Session() as session:
            return [self._to_comment(row) for row in session.execute(stmt).scalars()]

    def count_comments(self, report_id: str) -> int:
        stmt = select(func.count()).select_from(CommentRow).where(CommentRow.report_id == report_id)
        with self.Session() as session:
            return session.execute(stmt).scalar_one()
