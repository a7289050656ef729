"""
Result set view model.

ResultSetController owns the records from the last search (canonical
collection), the order they are currently shown in (displayed view), the
filters that produced them and the sort state. Renderers and exporters only
ever receive the TableView returned by view().

Overlapping searches: every search gets a sequence number, and a response is
applied only if no newer search was issued while it was in flight.
"""

from __future__ import annotations

import numbers
from typing import Any, Optional

from estagios.api import ApiClient
from estagios.errors import EstagiosError
from estagios.log import get_logger
from estagios.model import (
    DESC,
    DISPLAY_HEADERS,
    FilterCriteria,
    FilterOptions,
    SearchStats,
    SortState,
    StudentRecord,
    TableView,
    is_blank,
)

logger = get_logger(__name__)


def sort_key(value: Any) -> tuple[int, Any]:
    """
    Total order over mixed column values.

    Empty values (None, missing, blank) sort as the empty string, i.e. first.
    Numbers compare numerically and come before text. Text is upper-cased.
    """
    if is_blank(value):
        return (0, "")
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value).upper())


class ResultSetController:
    def __init__(self, client: ApiClient, headers: Optional[list[str]] = None) -> None:
        self._client = client
        self._headers = list(headers) if headers is not None else list(DISPLAY_HEADERS)

        self._canonical: list[StudentRecord] = []
        self._displayed: list[StudentRecord] = []
        self._stats: Optional[SearchStats] = None
        self._sort_state = SortState()
        self._last_criteria = FilterCriteria()
        self._filter_options: Optional[FilterOptions] = None

        self._seq = 0
        self.loading = False

    # -----------------------------------------------------------------------
    # Read-only state
    # -----------------------------------------------------------------------

    @property
    def canonical(self) -> list[StudentRecord]:
        return list(self._canonical)

    @property
    def displayed(self) -> list[StudentRecord]:
        return list(self._displayed)

    @property
    def sort_state(self) -> SortState:
        return self._sort_state

    @property
    def stats(self) -> Optional[SearchStats]:
        return self._stats

    @property
    def last_criteria(self) -> FilterCriteria:
        return self._last_criteria

    @property
    def filter_options(self) -> Optional[FilterOptions]:
        return self._filter_options

    def view(self) -> TableView:
        return TableView(
            headers=list(self._headers),
            rows=list(self._displayed),
            sort_state=self._sort_state,
            stats=self._stats,
        )

    def find(self, record_id: Any) -> Optional[StudentRecord]:
        wanted = str(record_id).strip()
        for record in self._canonical:
            if record.record_id == wanted:
                return record
        return None

    # -----------------------------------------------------------------------
    # Remote operations
    # -----------------------------------------------------------------------

    async def load_filter_options(self) -> FilterOptions:
        self._filter_options = await self._client.fetch_filter_options()
        return self._filter_options

    async def start(self, criteria: Optional[FilterCriteria] = None) -> Optional[list[StudentRecord]]:
        """
        Page start-up: filter options first, then the initial search.
        """
        await self.load_filter_options()
        return await self.search(criteria if criteria is not None else FilterCriteria())

    async def search(self, criteria: FilterCriteria) -> Optional[list[StudentRecord]]:
        """
        Fetch records matching `criteria` and make them the current result set.

        Returns the applied records, or None when a newer search was issued
        while this one was in flight (its response or error is dropped). Remote
        errors propagate and leave the previous result set as it was. The sort
        state is kept; rows are shown in source order until the next sort.
        """
        self._seq += 1
        seq = self._seq
        self._last_criteria = criteria
        self.loading = True

        try:
            result = await self._client.fetch_student_data(criteria)
        except EstagiosError as exc:
            if seq != self._seq:
                logger.info("Discarding stale search failure #%d: %s", seq, exc.message)
                return None
            logger.warning("Search #%d failed: %s", seq, exc.message)
            raise
        finally:
            # a superseded request must not end the newer one's loading state
            if seq == self._seq:
                self.loading = False

        if seq != self._seq:
            logger.info("Discarding stale search response #%d (latest is #%d)", seq, self._seq)
            return None

        self._canonical = list(result.records)
        self._displayed = list(result.records)
        self._stats = result.stats

        logger.info("Search #%d applied: %d records", seq, len(self._canonical))
        return self.displayed

    async def refresh(self) -> Optional[list[StudentRecord]]:
        return await self.search(self._last_criteria)

    # -----------------------------------------------------------------------
    # Local operations
    # -----------------------------------------------------------------------

    def sort_by(self, column: str) -> list[StudentRecord]:
        """
        Reorder the displayed view by `column`, toggling direction when the
        same column is chosen twice. Ties keep canonical order.
        """
        self._sort_state = self._sort_state.toggled(column)
        reverse = self._sort_state.direction == DESC

        # sorted() is stable, also with reverse=True
        self._displayed = sorted(self._canonical, key=lambda r: sort_key(r.get(column)), reverse=reverse)
        self._stats = SearchStats.from_records(self._canonical)
        return self.displayed
