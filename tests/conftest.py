import pytest
import requests

from core import data as dc
from core.metrics_summary import DIAGNOSIS_FIELD


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        return self._payload


@pytest.fixture(autouse=True)
def _clear_data_cache():
    dc._load_dashboard_data_cached.cache_clear()
    yield
    dc._load_dashboard_data_cached.cache_clear()


@pytest.fixture
def sheet_rows():
    labels = ["Flu", " Flu ", "Dengue", "", None, "Dengue", "dengue", "Migraine"]
    rows = [{DIAGNOSIS_FIELD: label, "ลำดับ": str(i + 1)} for i, label in enumerate(labels)]
    rows.append({"ลำดับ": "9"})
    return rows


@pytest.fixture
def fake_source(monkeypatch, sheet_rows):
    calls = []

    def _get(url, timeout=None):
        calls.append({"url": url, "timeout": timeout})
        return FakeResponse(sheet_rows)

    monkeypatch.setattr(dc.requests, "get", _get)
    return calls
