import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from app.data_client import UNKNOWN_TOTAL, DataClient, FetchError, Row, Total, make_client
from app.models import DEFAULT_DATASET, ColumnSpec, DatasetDescriptor, cell_text, get_dataset

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

ClientFactory = Callable[[str, DatasetDescriptor], DataClient]


class PageStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class PageState:
    offset: int = 0
    page_size: int = PAGE_SIZE
    rows: List[Row] = field(default_factory=list)
    filtered_rows: List[Row] = field(default_factory=list)
    total: Total = UNKNOWN_TOTAL
    query: str = ""
    status: PageStatus = PageStatus.IDLE
    error: Optional[str] = None
    stats_error: bool = False
    request_seq: int = 0


def row_matches(row: Row, columns: Sequence[ColumnSpec], needle: str) -> bool:
    return any(needle in cell_text(row, col.key).lower() for col in columns)


def filter_rows(rows: Sequence[Row], columns: Sequence[ColumnSpec], query: str) -> List[Row]:
    """Case-insensitive substring filter over the configured columns. Blank query keeps everything."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(rows)
    return [row for row in rows if row_matches(row, columns, needle)]


class ViewController:
    """
    Drives one page lifecycle (idle -> loading -> loaded | failed) for a dataset.

    All state lives in `self.state`; only the methods below mutate it.
    """

    def __init__(self, dataset_key: str = DEFAULT_DATASET, client_factory: ClientFactory = make_client):
        self.client_factory = client_factory
        self.state = PageState()
        self._select(dataset_key)

    def _select(self, dataset_key: str):
        descriptor = get_dataset(dataset_key)
        self.dataset_key = dataset_key
        self.descriptor = descriptor
        self.client = self.client_factory(dataset_key, descriptor)

    @property
    def columns(self) -> Tuple[ColumnSpec, ...]:
        return self.descriptor.columns

    # ------------------------------
    # Page loading
    # ------------------------------
    def begin_load(self) -> int:
        self.state.request_seq += 1
        self.state.status = PageStatus.LOADING
        self.state.error = None
        return self.state.request_seq

    def finish_load(
        self,
        token: int,
        rows: Optional[List[Row]] = None,
        total: Optional[int] = None,
        error: Optional[str] = None,
    ) -> bool:
        """Apply a page result. Results from a superseded request are dropped."""
        if token != self.state.request_seq:
            logger.debug("Dropping stale page result (token %d, current %d)", token, self.state.request_seq)
            return False

        if error is not None:
            self.state.status = PageStatus.FAILED
            self.state.error = f"Failed to load dictionary: {error}"
            return True

        self.state.rows = list(rows or [])
        self.state.filtered_rows = list(self.state.rows)
        self.state.query = ""
        if total is not None:
            self.state.total = total
            self.state.stats_error = False
        self.state.status = PageStatus.LOADED
        return True

    def load(self) -> bool:
        token = self.begin_load()
        try:
            rows, total = self.client.fetch_page_with_total(self.state.offset, self.state.page_size)
        except FetchError as e:
            logger.error("Error loading %s at offset %d: %s", self.descriptor.name, self.state.offset, e.message)
            self.finish_load(token, error=e.message)
            return False
        self.finish_load(token, rows=rows, total=total)
        return True

    def load_stats(self):
        result = self.client.read_total_count()
        if result.error is not None:
            self.state.stats_error = True
            return
        self.state.stats_error = False
        self.state.total = result.total

    def _go_to(self, offset: int) -> bool:
        previous = self.state.offset
        self.state.offset = offset
        if not self.load():
            self.state.offset = previous
            return False
        return True

    # ------------------------------
    # User actions
    # ------------------------------
    def previous_page(self) -> bool:
        if not self.can_go_previous:
            return False
        return self._go_to(max(0, self.state.offset - self.state.page_size))

    def next_page(self) -> bool:
        if not self.can_go_next:
            return False
        return self._go_to(self.state.offset + self.state.page_size)

    def switch_dataset(self, dataset_key: str):
        self._select(dataset_key)
        # keep the sequence counter so in-flight results for the old dataset stay stale
        self.state = PageState(request_seq=self.state.request_seq)
        self.load()
        self.load_stats()

    def search(self, query: str):
        self.state.query = query
        self.state.filtered_rows = filter_rows(self.state.rows, self.columns, query)

    # ------------------------------
    # Derived values
    # ------------------------------
    @property
    def total_known(self) -> bool:
        return self.state.total != UNKNOWN_TOTAL

    @property
    def can_go_previous(self) -> bool:
        return self.state.offset > 0

    @property
    def can_go_next(self) -> bool:
        if not self.total_known:
            return True
        return self.state.offset + self.state.page_size < self.state.total

    @property
    def page_number(self) -> int:
        return self.state.offset // self.state.page_size + 1

    def display_range(self) -> Tuple[int, int]:
        start = self.state.offset + 1
        end = self.state.offset + self.state.page_size
        if self.total_known:
            end = min(end, self.state.total)
        if end < start:
            start = end
        return start, end

    def stats_text(self) -> str:
        if self.state.stats_error:
            return "Could not load statistics"
        start, end = self.display_range()
        if self.total_known:
            return f"Total entries: {self.state.total:,} | Showing {start}-{end}"
        return f"Showing entries {start}-{end}"
