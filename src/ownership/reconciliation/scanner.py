"""
Orphan discovery for ownership reconciliation.

The scanner lists records of one kind that have no owner, in pages of a
bounded size, and counts orphan and total records for status reports.

Pages are keyset-paginated on ``id``: every page asks for orphans whose id is
greater than the last id of the previous page. Records migrated between pages
drop out of the orphan set without shifting later pages, and records whose
save failed are never returned twice in the same scan.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING
from uuid import UUID

from ownership.observability import Tracer, create_tracer
from ownership.observability.attributes import (
    ATTR_ERROR_TYPE,
    ATTR_PAGE_SIZE,
    ATTR_RECORD_KIND,
    ATTR_RECORDS_TOTAL,
)
from ownership.reconciliation.config import DEFAULT_PAGE_SIZE
from ownership.reconciliation.exceptions import ScanQueryFailedError
from ownership.records.base import OWNER_FIELD, Record, RecordKind
from ownership.records.query import Filter, Query

if TYPE_CHECKING:
    from ownership.stores.interface import RemoteStore

logger = logging.getLogger(__name__)


def orphan_query(after_id: UUID | None = None, limit: int | None = None) -> Query:
    """
    Build the query that selects orphan records.

    Args:
        after_id: Only select records whose id sorts after this one
        limit: Maximum number of records to select

    Returns:
        Query ordered by id ascending
    """
    filters = [Filter.missing(OWNER_FIELD)]
    if after_id is not None:
        filters.append(Filter.gt("id", after_id))
    return Query(filters=filters, order_by="id", order_direction="asc", limit=limit)


class ReconciliationScanner:
    """
    Lists and counts orphan records of a kind.

    Example:
        >>> scanner = ReconciliationScanner(store, page_size=50)
        >>> async for page in scanner.iter_orphan_pages(RecordKind.QUESTION):
        ...     print(len(page))
        >>> await scanner.count_orphans(RecordKind.CATEGORY)
        3
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            store: Store to query
            page_size: Maximum records returned per page
            tracer: Optional tracer (if not provided, one will be created)
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._store = store
        self._page_size = page_size
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @property
    def page_size(self) -> int:
        return self._page_size

    async def find_orphans(self, kind: RecordKind) -> list[Record]:
        """
        Fetch every orphan record of a kind.

        The whole scan is materialized, one page query at a time. Use
        iter_orphan_pages() to process large kinds without holding every
        record in memory.

        Args:
            kind: Kind to scan

        Returns:
            All orphan records ordered by id

        Raises:
            ScanQueryFailedError: If any page query fails
        """
        with self._tracer.span(
            "ownership.scanner.find_orphans",
            {ATTR_RECORD_KIND: kind.value, ATTR_PAGE_SIZE: self._page_size},
        ) as span:
            orphans = [record async for record in self.iter_orphans(kind)]
            if span is not None:
                span.set_attribute(ATTR_RECORDS_TOTAL, len(orphans))
            return orphans

    async def iter_orphan_pages(self, kind: RecordKind) -> AsyncIterator[list[Record]]:
        """
        Yield every orphan record of a kind, one page at a time.

        Iteration stops after a short page. Records that the caller migrates
        while iterating do not affect later pages.

        Raises:
            ScanQueryFailedError: If any page query fails
        """
        after_id: UUID | None = None
        while True:
            page = await self._find_page(kind, after_id, self._page_size)
            if not page:
                return

            logger.debug(
                "Fetched %d orphan %s records after %s",
                len(page),
                kind.value,
                after_id,
            )
            yield page

            if len(page) < self._page_size:
                return
            after_id = page[-1].id

    async def iter_orphans(self, kind: RecordKind) -> AsyncIterator[Record]:
        """Yield every orphan record of a kind."""
        async for page in self.iter_orphan_pages(kind):
            for record in page:
                yield record

    async def count_orphans(self, kind: RecordKind) -> int:
        """
        Count records of a kind that have no owner.

        Raises:
            ScanQueryFailedError: If the store count fails
        """
        with self._tracer.span(
            "ownership.scanner.count_orphans",
            {ATTR_RECORD_KIND: kind.value},
        ) as span:
            try:
                count = await self._store.count(kind, orphan_query())
            except Exception as e:
                if span is not None:
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                raise ScanQueryFailedError(kind, "count_orphans", str(e)) from e
            if span is not None:
                span.set_attribute(ATTR_RECORDS_TOTAL, count)
            return count

    async def count_total(self, kind: RecordKind) -> int:
        """
        Count every record of a kind.

        Raises:
            ScanQueryFailedError: If the store count fails
        """
        with self._tracer.span(
            "ownership.scanner.count_total",
            {ATTR_RECORD_KIND: kind.value},
        ) as span:
            try:
                count = await self._store.count(kind)
            except Exception as e:
                if span is not None:
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                raise ScanQueryFailedError(kind, "count_total", str(e)) from e
            if span is not None:
                span.set_attribute(ATTR_RECORDS_TOTAL, count)
            return count

    async def _find_page(
        self,
        kind: RecordKind,
        after_id: UUID | None,
        limit: int,
    ) -> list[Record]:
        with self._tracer.span(
            "ownership.scanner.find_page",
            {ATTR_RECORD_KIND: kind.value, ATTR_PAGE_SIZE: limit},
        ) as span:
            try:
                return await self._store.find(kind, orphan_query(after_id, limit))
            except Exception as e:
                if span is not None:
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                raise ScanQueryFailedError(kind, "find_orphans", str(e)) from e


__all__ = ["orphan_query", "ReconciliationScanner"]
