import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import requests

from app.config import API_BASE, HF_ROWS_URL, REQUEST_TIMEOUT, VIEWER_SOURCE
from app.models import DatasetDescriptor, unwrap_row
from app.schemas import RowsResponse

logger = logging.getLogger(__name__)

UNKNOWN_TOTAL = "Unknown"

Row = Mapping[str, Any]
Total = Union[int, str]


@dataclass(frozen=True)
class TotalCount:
    total: Total
    error: Optional[str] = None


# ------------------------------
# Errors
# ------------------------------
class FetchError(Exception):
    """A read from the remote source (or the proxy) failed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(FetchError):
    pass


class HttpStatusError(FetchError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(FetchError):
    pass


# ------------------------------
# HTTP helpers
# ------------------------------
def get_json(url: str, params: Optional[Dict[str, Any]] = None, timeout: float = REQUEST_TIMEOUT) -> Any:
    logger.debug("GET %s params=%s", url, params)
    try:
        response = requests.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise NetworkError(f"Network error: {e}") from e

    if not response.ok:
        raise HttpStatusError(
            response.status_code,
            f"HTTP {response.status_code} {response.reason or ''}".strip(),
        )

    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e


def parse_rows_payload(payload: Any) -> RowsResponse:
    """Lenient parse of a /rows body: anything missing or odd becomes empty."""
    if not isinstance(payload, dict):
        logger.warning("Unexpected rows payload of type %s", type(payload).__name__)
        return RowsResponse()

    rows = payload.get("rows")
    if not isinstance(rows, list):
        rows = []
    total = payload.get("num_rows_total")
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        total = None
    return RowsResponse(rows=rows, num_rows_total=total)


def normalize_total(value: Any) -> Total:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return UNKNOWN_TOTAL
    return value


# ------------------------------
# Sources
# ------------------------------
class DirectSource:
    """Talks to the datasets-server /rows endpoint directly."""

    def __init__(self, descriptor: DatasetDescriptor, base_url: str = HF_ROWS_URL, timeout: float = REQUEST_TIMEOUT):
        self.descriptor = descriptor
        self.base_url = base_url
        self.timeout = timeout

    def fetch_json(self, offset: int, length: int) -> Any:
        params = {
            "dataset": self.descriptor.name,
            "config": self.descriptor.config,
            "split": self.descriptor.split,
            "offset": offset,
            "length": length,
        }
        return get_json(self.base_url, params=params, timeout=self.timeout)

    def rows(self, offset: int, length: int) -> RowsResponse:
        return parse_rows_payload(self.fetch_json(offset, length))

    def total(self) -> Total:
        return normalize_total(self.rows(0, 1).num_rows_total)


class ProxySource:
    """Talks to our own /api endpoints (see app.routes)."""

    def __init__(self, dataset_key: str, api_base: str = API_BASE, timeout: float = REQUEST_TIMEOUT):
        self.dataset_key = dataset_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def rows(self, offset: int, length: int) -> RowsResponse:
        payload = get_json(
            f"{self.api_base}/dictionary",
            params={"dataset": self.dataset_key, "offset": offset, "length": length},
            timeout=self.timeout,
        )
        return parse_rows_payload(payload)

    def total(self) -> Total:
        payload = get_json(f"{self.api_base}/stats", params={"dataset": self.dataset_key}, timeout=self.timeout)
        if not isinstance(payload, dict):
            raise MalformedResponseError("Stats response is not a JSON object")
        return normalize_total(payload.get("totalRows"))


Source = Union[DirectSource, ProxySource]


# ------------------------------
# Client
# ------------------------------
class DataClient:
    def __init__(self, source: Source):
        self.source = source

    def fetch_page_with_total(self, offset: int, length: int) -> Tuple[List[Row], Optional[int]]:
        """
        Fetch `length` rows starting at `offset`, unwrapped from their envelopes.
        Also returns the total the remote reported alongside the page, if any.
        Raises FetchError (or a subclass) on transport or status failure.
        """
        result = self.source.rows(offset, length)
        rows = [unwrap_row(entry) for entry in result.rows]
        logger.info("Fetched %d rows at offset %d", len(rows), offset)
        return rows, result.num_rows_total

    def fetch_page(self, offset: int, length: int) -> List[Row]:
        rows, _ = self.fetch_page_with_total(offset, length)
        return rows

    def read_total_count(self) -> TotalCount:
        """Total row count plus the failure message, if the read failed. Never raises."""
        try:
            return TotalCount(total=self.source.total())
        except FetchError as e:
            logger.warning("Could not load statistics: %s", e.message)
            return TotalCount(total=UNKNOWN_TOTAL, error=e.message)

    def fetch_total_count(self) -> Total:
        """Total row count, or UNKNOWN_TOTAL if it could not be read. Never raises."""
        return self.read_total_count().total


def make_client(dataset_key: str, descriptor: DatasetDescriptor, mode: str = VIEWER_SOURCE) -> DataClient:
    if mode == "proxy":
        return DataClient(ProxySource(dataset_key))
    if mode != "direct":
        raise ValueError(f"Unknown viewer source {mode!r} (expected 'direct' or 'proxy')")
    return DataClient(DirectSource(descriptor))
