# catchlog/api/reports/test_services.py
import pytest

from catchlog.api.reports.services import ReportService
from catchlog.conftest import build_new_report
from catchlog.core.exceptions import ValidationError


@pytest.fixture
def service(store):
    return ReportService(store, page_size=2, max_page_size=3, map_limit=4)


@pytest.mark.parametrize("page_size", [0, -1])
def test_list_page_rejects_non_positive_size(service, page_size):
    with pytest.raises(ValidationError) as exc_info:
        service.list_page(None, page_size)
    assert "limit" in exc_info.value.messages


def test_list_page_uses_default_and_caps_size(service, store):
    for _ in range(5):
        store.create_report(build_new_report())

    default_page, _ = service.list_page()
    capped_page, _ = service.list_page(None, 50)

    assert len(default_page) == 2
    assert len(capped_page) == 3


@pytest.mark.parametrize("limit", [0, -5])
def test_list_recent_rejects_non_positive_limit(service, limit):
    with pytest.raises(ValidationError):
        service.list_recent(limit)


def test_list_recent_is_capped_at_map_limit(service, store):
    for _ in range(6):
        store.create_report(build_new_report())

    assert len(service.list_recent()) == 4
    assert len(service.list_recent(100)) == 4
    assert len(service.list_recent(1)) == 1


def test_create_rejects_invalid_payload(service):
    with pytest.raises(ValidationError) as exc_info:
        service.create("angler-1", "Sam", None, {"species": "Pike", "weight_oz": 16})
    assert "photo_url" in exc_info.value.messages
    assert "weight_oz" in exc_info.value.messages
