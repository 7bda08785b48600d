"""
Pytest configuration and fixtures for the dictionary viewer tests.
"""
from typing import Any, List, Optional

import pytest
import requests

from app.controller import ViewController
from app.data_client import UNKNOWN_TOTAL, FetchError, TotalCount


class FakeClient:
    """Stands in for DataClient; records every call."""

    def __init__(self, pages=None, total=UNKNOWN_TOTAL, page_total=None, stats_error=None):
        self.pages = pages or {}
        self.total = total
        self.page_total = page_total
        self.stats_error = stats_error
        self.page_error: Optional[FetchError] = None
        self.page_calls: List[tuple] = []
        self.stats_calls = 0

    def fetch_page_with_total(self, offset, length):
        self.page_calls.append((offset, length))
        if self.page_error is not None:
            raise self.page_error
        return list(self.pages.get(offset, [])), self.page_total

    def read_total_count(self):
        self.stats_calls += 1
        if self.stats_error:
            return TotalCount(total=UNKNOWN_TOTAL, error=self.stats_error)
        return TotalCount(total=self.total)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK", text: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload
        self._text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self):
        if self._text is not None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class RecordingGet:
    """Replacement for requests.get returning queued responses (or raising)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[dict] = []

    def __call__(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def make_rows(start: int, count: int, key: str = "input") -> List[dict]:
    return [{key: f"дума {i}", "instruction": f"q{i}", "output": f"a{i}"} for i in range(start, start + count)]


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient(pages={0: make_rows(0, 100), 100: make_rows(100, 100), 200: make_rows(200, 50)}, total=250)


@pytest.fixture
def controller(fake_client) -> ViewController:
    return ViewController("alpaca", client_factory=lambda key, descriptor: fake_client)


@pytest.fixture
def fake_get(monkeypatch):
    """Patch requests.get; call it with the responses to serve."""

    def install(*responses) -> RecordingGet:
        recorder = RecordingGet(*responses)
        monkeypatch.setattr(requests, "get", recorder)
        return recorder

    return install
