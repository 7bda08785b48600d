"""
Unit tests for the data client against a patched requests.get.
"""
import pytest
import requests

from app.data_client import (
    UNKNOWN_TOTAL,
    DataClient,
    DirectSource,
    HttpStatusError,
    MalformedResponseError,
    NetworkError,
    ProxySource,
    make_client,
    parse_rows_payload,
)
from app.models import DATASETS
from tests.conftest import FakeResponse

ALPACA = DATASETS["alpaca"]


class TestDirectSource:
    def test_fetch_page_builds_rows_request(self, fake_get):
        get = fake_get(FakeResponse(payload={"rows": [], "num_rows_total": 10}))
        DataClient(DirectSource(ALPACA, base_url="https://example.test/rows", timeout=3)).fetch_page(200, 100)

        call = get.calls[0]
        assert call["url"] == "https://example.test/rows"
        assert call["params"] == {
            "dataset": "vislupus/alpaca-bulgarian-dictionary",
            "config": "default",
            "split": "train",
            "offset": 200,
            "length": 100,
        }
        assert call["timeout"] == 3

    def test_rows_are_unwrapped(self, fake_get):
        payload = {
            "rows": [
                {"row_idx": 0, "row": {"input": "котка"}, "truncated_cells": []},
                {"input": "куче"},
            ],
            "num_rows_total": 2,
        }
        fake_get(FakeResponse(payload=payload))
        rows, total = DataClient(DirectSource(ALPACA)).fetch_page_with_total(0, 100)
        assert rows == [{"input": "котка"}, {"input": "куче"}]
        assert total == 2

    def test_http_error_status(self, fake_get):
        fake_get(FakeResponse(status_code=404, reason="Not Found"))
        with pytest.raises(HttpStatusError) as exc:
            DataClient(DirectSource(ALPACA)).fetch_page(0, 100)
        assert exc.value.status_code == 404
        assert exc.value.message == "HTTP 404 Not Found"

    def test_transport_failure(self, fake_get):
        fake_get(requests.ConnectionError("connection refused"))
        with pytest.raises(NetworkError, match="connection refused"):
            DataClient(DirectSource(ALPACA)).fetch_page(0, 100)

    def test_non_json_body(self, fake_get):
        fake_get(FakeResponse(text="<html>oops</html>"))
        with pytest.raises(MalformedResponseError):
            DataClient(DirectSource(ALPACA)).fetch_page(0, 100)

    def test_total_count(self, fake_get):
        get = fake_get(FakeResponse(payload={"rows": [{"row": {}}], "num_rows_total": 45123}))
        assert DataClient(DirectSource(ALPACA)).fetch_total_count() == 45123
        assert get.calls[0]["params"]["offset"] == 0
        assert get.calls[0]["params"]["length"] == 1

    def test_total_count_failure_is_unknown(self, fake_get):
        fake_get(requests.Timeout("read timed out"))
        client = DataClient(DirectSource(ALPACA))
        assert client.fetch_total_count() == UNKNOWN_TOTAL

        result = client.read_total_count()
        assert result.total == UNKNOWN_TOTAL
        assert "read timed out" in result.error

    def test_total_count_missing_is_unknown(self, fake_get):
        fake_get(FakeResponse(payload={"rows": []}))
        result = DataClient(DirectSource(ALPACA)).read_total_count()
        assert result.total == UNKNOWN_TOTAL
        assert result.error is None

    def test_zero_total_is_known(self, fake_get):
        fake_get(FakeResponse(payload={"rows": [], "num_rows_total": 0}))
        result = DataClient(DirectSource(ALPACA)).read_total_count()
        assert result.total == 0
        assert result.error is None


class TestProxySource:
    def test_page_goes_through_proxy(self, fake_get):
        get = fake_get(FakeResponse(payload={"rows": [{"row": {"word": "а"}}]}))
        rows = DataClient(ProxySource("bogko", api_base="http://proxy.test/api/")).fetch_page(100, 100)
        assert rows == [{"word": "а"}]
        assert get.calls[0]["url"] == "http://proxy.test/api/dictionary"
        assert get.calls[0]["params"] == {"dataset": "bogko", "offset": 100, "length": 100}

    def test_stats_through_proxy(self, fake_get):
        fake_get(FakeResponse(payload={"totalRows": 250}))
        assert DataClient(ProxySource("alpaca", api_base="http://proxy.test/api")).fetch_total_count() == 250

    def test_unknown_stats_through_proxy(self, fake_get):
        fake_get(FakeResponse(payload={"totalRows": "Unknown"}))
        assert DataClient(ProxySource("alpaca", api_base="http://proxy.test/api")).fetch_total_count() == UNKNOWN_TOTAL

    def test_proxy_error_maps_to_status_error(self, fake_get):
        fake_get(FakeResponse(status_code=500, reason="Internal Server Error", payload={"error": "x"}))
        with pytest.raises(HttpStatusError):
            DataClient(ProxySource("alpaca", api_base="http://proxy.test/api")).fetch_page(0, 100)


class TestParsing:
    @pytest.mark.parametrize("payload", [None, [], "text", {"rows": "nope"}, {}])
    def test_odd_payloads_become_empty(self, payload):
        result = parse_rows_payload(payload)
        assert result.rows == []
        assert result.num_rows_total is None

    def test_bad_total_is_dropped(self):
        assert parse_rows_payload({"rows": [], "num_rows_total": "many"}).num_rows_total is None
        assert parse_rows_payload({"rows": [], "num_rows_total": 0}).num_rows_total == 0


def test_make_client_modes():
    assert isinstance(make_client("alpaca", ALPACA, mode="direct").source, DirectSource)
    assert isinstance(make_client("alpaca", ALPACA, mode="proxy").source, ProxySource)
    with pytest.raises(ValueError):
        make_client("alpaca", ALPACA, mode="carrier-pigeon")
