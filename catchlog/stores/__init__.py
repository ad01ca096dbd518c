# catchlog/stores/__init__.py
"""
설정값(STORE_BACKEND)에 따라 ReportStore 구현을 생성합니다.
이 함수 밖의 코드는 어떤 백엔드가 쓰이는지 알지 못합니다.
"""
import logging
from typing import Any, Mapping

from catchlog.stores.base import ReportStore

SQL_BACKEND = 'sql'
FIRESTORE_BACKEND = 'firestore'


def create_store(config: Mapping[str, Any]) -> ReportStore:
    backend = (config.get('STORE_BACKEND') or SQL_BACKEND).lower()
    if backend == SQL_BACKEND:
        from catchlog.stores.sql_store import SqlReportStore
        store = SqlReportStore(config.get('DATABASE_URL'))
    elif backend == FIRESTORE_BACKEND:
        from catchlog.stores.firestore_store import FirestoreReportStore
        store = FirestoreReportStore()
    else:
        raise ValueError(f"지원하지 않는 STORE_BACKEND 입니다: {backend}")
    logging.info(f"Report store initialized ({backend})")
    return store


__all__ = ['ReportStore', 'create_store', 'SQL_BACKEND', 'FIRESTORE_BACKEND']
