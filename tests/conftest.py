import pytest
from rest_framework.test import APIClient

from locates.services import ingestion

from .factories import aware, raw_order


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def now():
    # Wednesday morning
    return aware(2024, 3, 6, 9, 0)


@pytest.fixture
def make_dashboard(now):
    def _make(*rows, **kwargs):
        kwargs.setdefault('now', now)
        return ingestion.ingest(list(rows), **kwargs)
    return _make


@pytest.fixture
def dashboard(make_dashboard):
    return make_dashboard(raw_order('WO-100'), raw_order('WO-200'), raw_order('WO-300', priority='STANDARD'))
