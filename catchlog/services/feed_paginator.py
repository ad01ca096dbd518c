# catchlog/services/feed_paginator.py
"""
화면(이벤트 루프) 쪽에서 피드를 한 페이지씩 불러오는 비동기 페이지네이터.

상태 전이:
    EMPTY -> LOADING -> LOADED -> LOADING_MORE -> LOADED
    (어느 상태에서든) REFRESHING -> LOADED

모든 요청은 단조 증가하는 순번을 받습니다. 완료 시점에 더 최신의 첫 페이지/새로고침
요청이 있었다면 그 결과는 버립니다 (취소 대신 무시).
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

PageSource = Callable[[Optional[str], int], Awaitable[Tuple[List[Any], Optional[str]]]]


class FeedState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    LOADING_MORE = "loading_more"
    REFRESHING = "refreshing"


# 이 상태에서는 다음 페이지 요청을 받지 않습니다.
_BUSY_STATES = (FeedState.LOADING, FeedState.REFRESHING, FeedState.LOADING_MORE)


class FeedPaginator:
    def __init__(self, page_source: PageSource, page_size: int = 10):
        if page_size < 1:
            raise ValueError("page_size 는 1 이상이어야 합니다.")
        self._page_source = page_source
        self.page_size = page_size

        self.state = FeedState.EMPTY
        self.items: List[Any] = []
        self.next_cursor: Optional[str] = None
        self.exhausted = False

        self._seq = 0
        self._latest_replace_seq = 0
        # 첫 페이지/새로고침 결과가 실제로 반영된 횟수
        self._generation = 0

    @classmethod
    def from_service(cls, report_service, page_size: Optional[int] = None) -> "FeedPaginator":
        """동기 ReportService 를 워커 스레드에서 호출해 이벤트 루프를 막지 않도록 감쌉니다."""
        async def source(cursor: Optional[str], size: int):
            return await asyncio.to_thread(report_service.list_page, cursor, size)
        return cls(source, report_service.page_size if page_size is None else page_size)

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    def _issue(self) -> int:
        self._seq += 1
        return self._seq

    async def load_first_page(self) -> bool:
        return await self._load_from_start(FeedState.LOADING)

    async def refresh(self) -> bool:
        """당겨서 새로고침. 커서를 버리고 처음부터 다시 불러와 목록을 교체합니다."""
        return await self._load_from_start(FeedState.REFRESHING)

    async def _load_from_start(self, pending_state: FeedState) -> bool:
        seq = self._issue()
        self._latest_replace_seq = seq
        self.state = pending_state
        # 처음부터 다시 읽는 동안 이전 커서로 다음 페이지를 요청하지 않도록 비워 둡니다.
        previous_cursor = self.next_cursor
        self.next_cursor = None

        try:
            items, next_cursor = await self._page_source(None, self.page_size)
        except Exception:
            if seq == self._latest_replace_seq:
                self.state = FeedState.LOADED if self._generation else FeedState.EMPTY
                self.next_cursor = previous_cursor
            raise

        if seq != self._latest_replace_seq:
            logger.debug(f"오래된 피드 응답 무시 (seq: {seq}, latest: {self._latest_replace_seq})")
            return False

        self.items = list(items)
        self._apply_cursor(next_cursor)
        self._generation += 1
        self.state = FeedState.LOADED
        return True

    async def load_next_page(self) -> bool:
        """다음 페이지를 이어 붙입니다. 이미 불러오는 중이거나 피드 끝이면 아무것도 하지 않습니다."""
        if self.state in _BUSY_STATES or self.next_cursor is None:
            return False

        seq = self._issue()
        base_replace_seq = self._latest_replace_seq
        generation = self._generation
        cursor = self.next_cursor
        self.state = FeedState.LOADING_MORE

        def is_stale() -> bool:
            return base_replace_seq != self._latest_replace_seq or generation != self._generation

        try:
            items, next_cursor = await self._page_source(cursor, self.page_size)
        except Exception:
            if not is_stale():
                self.state = FeedState.LOADED
            raise

        if is_stale():
            logger.debug(f"새로고침 이후 도착한 다음 페이지 응답 무시 (seq: {seq})")
            return False

        self.items.extend(items)
        self._apply_cursor(next_cursor)
        self.state = FeedState.LOADED
        return True

    def _apply_cursor(self, next_cursor: Optional[str]) -> None:
        self.next_cursor = next_cursor
        self.exhausted = next_cursor is None
