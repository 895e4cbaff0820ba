"""
Unit tests for fetching rows and building the dashboard context.
"""
import logging

import pytest
import requests

from core import data as dc
from core.filters import FilterState
from core.metrics_summary import SENTINEL_LABEL
from tests.conftest import FakeResponse


def _real_response(body: bytes, status_code: int = 200) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = body
    resp.encoding = "utf-8"
    resp.url = "http://example.test"
    return resp


class TestFetchRows:
    def test_returns_records(self, fake_source, sheet_rows):
        rows = dc.fetch_rows("http://example.test/sheet")
        assert rows == sheet_rows
        assert fake_source == [{"url": "http://example.test/sheet", "timeout": dc.FETCH_TIMEOUT}]

    def test_defaults_to_source_url(self, fake_source):
        dc.fetch_rows()
        assert fake_source[0]["url"] == dc.SOURCE_URL

    def test_non_records_become_empty_rows(self, monkeypatch):
        monkeypatch.setattr(dc.requests, "get", lambda url, timeout=None: FakeResponse([{"a": 1}, "x", 3]))
        assert dc.fetch_rows("http://example.test") == [{"a": 1}, {}, {}]

    def test_network_error(self, monkeypatch):
        def _boom(url, timeout=None):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(dc.requests, "get", _boom)
        with pytest.raises(dc.SourceError):
            dc.fetch_rows("http://example.test")

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(dc.requests, "get", lambda url, timeout=None: FakeResponse(status_code=404))
        with pytest.raises(dc.SourceError):
            dc.fetch_rows("http://example.test")

    def test_non_json(self, monkeypatch):
        resp = _real_response(b"<html>not json</html>")
        monkeypatch.setattr(dc.requests, "get", lambda url, timeout=None: resp)
        with pytest.raises(dc.SourceError, match="not JSON"):
            dc.fetch_rows("http://example.test")

    def test_real_response_array(self, monkeypatch):
        resp = _real_response('[{"การวินิจฉัย": "Flu"}, "x"]'.encode("utf-8"))
        monkeypatch.setattr(dc.requests, "get", lambda url, timeout=None: resp)
        assert dc.fetch_rows("http://example.test") == [{"การวินิจฉัย": "Flu"}, {}]

    def test_bad_url_is_fetch_failure(self):
        with pytest.raises(dc.SourceError, match="fetch failed"):
            dc.fetch_rows("not-a-url")

    def test_json_object_is_rejected(self, monkeypatch):
        monkeypatch.setattr(dc.requests, "get", lambda url, timeout=None: FakeResponse({"error": "sheet"}))
        with pytest.raises(dc.SourceError, match="JSON array"):
            dc.fetch_rows("http://example.test")


class TestLoadDashboardData:
    def test_loads_and_aggregates(self, fake_source, sheet_rows):
        data_ctx = dc.load_dashboard_data()
        assert data_ctx["loaded"] is True
        assert data_ctx["error"] is None
        assert data_ctx["rows"] == sheet_rows
        assert data_ctx["summary"] == {"Flu": 2, "Dengue": 2, "dengue": 1, "Migraine": 1, SENTINEL_LABEL: 3}

    def test_single_fetch_until_refresh(self, fake_source):
        dc.load_dashboard_data()
        dc.load_dashboard_data()
        assert len(fake_source) == 1
        dc.refresh_dashboard_data()
        assert len(fake_source) == 2

    def test_failure_degrades_to_empty(self, monkeypatch, caplog):
        def _boom(url, timeout=None):
            raise requests.Timeout("slow")

        monkeypatch.setattr(dc.requests, "get", _boom)
        with caplog.at_level(logging.ERROR, logger="core.data"):
            data_ctx = dc.load_dashboard_data()
        assert data_ctx["loaded"] is False
        assert data_ctx["rows"] == []
        assert data_ctx["summary"] == {}
        assert "slow" in data_ctx["error"]
        assert "loading rows failed" in caplog.text


class TestPrepareContext:
    def test_ranks_with_filters(self, fake_source):
        ctx = dc.prepare_context({"search_text": "DENG"}, dc.load_dashboard_data())
        assert ctx["filters"] == FilterState(search_text="DENG")
        assert ctx["ranked"] == [("Dengue", 2), ("dengue", 1)]

    def test_full_ranking_tie_break(self, fake_source):
        ctx = dc.prepare_context(FilterState(), dc.load_dashboard_data())
        assert ctx["ranked"] == [("Dengue", 2), ("Flu", 2), ("Migraine", 1), ("dengue", 1)]

    def test_empty_context(self):
        ctx = dc.prepare_context({}, {})
        assert ctx["ranked"] == []
        assert ctx["loaded"] is False


def test_data_layer_reads_the_aggregated_field():
    from core import metrics_summary

    assert dc.DIAGNOSIS_FIELD is metrics_summary.DIAGNOSIS_FIELD
