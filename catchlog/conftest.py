# catchlog/conftest.py
"""
공용 pytest 픽스처.

사용법: python -m pytest catchlog -v
"""
from datetime import datetime, timezone

import pytest
from flask_jwt_extended import create_access_token

from catchlog import create_app
from catchlog.models.report import NewReport
from catchlog.services.counter_sync import CounterSynchronizer
from catchlog.services.engagement_ledger import EngagementLedger
from catchlog.stores.sql_store import SqlReportStore


def build_new_report(**overrides) -> NewReport:
    data = dict(
        user_id="angler-1",
        user_name="Sam",
        photo_url="https://images.example.com/pike.jpg",
        species="Pike",
        location_name="River Trent",
        caught_at=datetime(2024, 5, 1, 6, 30, tzinfo=timezone.utc),
        weight_lb=12,
        weight_oz=4,
    )
    data.update(overrides)
    return NewReport(**data)


@pytest.fixture
def store():
    return SqlReportStore("sqlite+pysqlite:///:memory:")


@pytest.fixture
def ledger(store):
    return EngagementLedger(store, CounterSynchronizer(store))


@pytest.fixture
def app(store):
    return create_app('testing', store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """인증 제공자가 발급한 것과 같은 형태의 토큰 헤더를 만듭니다."""
    def _make(user_id="angler-1", name="Sam", avatar=None):
        with app.app_context():
            token = create_access_token(identity=user_id, additional_claims={"name": name, "avatar": avatar})
        return {"Authorization": f"Bearer {token}"}
    return _make
