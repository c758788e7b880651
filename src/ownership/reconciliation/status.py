"""
Migration status reporter.

Answers "is a migration needed?" with four independent count queries, so it
never materializes record sets and is safe to call while a run is active.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ownership.observability import Tracer, create_tracer
from ownership.observability.attributes import ATTR_MIGRATION_NEEDED
from ownership.reconciliation.exceptions import ScanQueryFailedError, StatusCheckFailedError
from ownership.reconciliation.models import KindCounts, MigrationStatusSnapshot
from ownership.reconciliation.scanner import ReconciliationScanner
from ownership.records.base import RecordKind

if TYPE_CHECKING:
    from ownership.stores.interface import RemoteStore

logger = logging.getLogger(__name__)


class MigrationStatusReporter:
    """
    Produces MigrationStatusSnapshot values for a store.

    Example:
        >>> reporter = MigrationStatusReporter(store)
        >>> snapshot = await reporter.snapshot()
        >>> snapshot.needed
        True
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        scanner: ReconciliationScanner | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._scanner = scanner or ReconciliationScanner(store, tracer=self._tracer)

    async def snapshot(self) -> MigrationStatusSnapshot:
        """
        Count orphan and total records of every kind.

        Returns:
            A fresh snapshot

        Raises:
            StatusCheckFailedError: If any of the counts fails; no partial
                snapshot is returned
        """
        with self._tracer.span("ownership.status.snapshot") as span:
            counts: dict[RecordKind, KindCounts] = {}
            for kind in (RecordKind.CATEGORY, RecordKind.QUESTION):
                try:
                    orphan = await self._scanner.count_orphans(kind)
                    total = await self._scanner.count_total(kind)
                except ScanQueryFailedError as e:
                    logger.error("Migration status check failed: %s", e)
                    raise StatusCheckFailedError(kind, e.operation, e.reason) from e
                counts[kind] = KindCounts(orphan=orphan, total=total)

            snapshot = MigrationStatusSnapshot(counts=counts)
            if span is not None:
                span.set_attribute(ATTR_MIGRATION_NEEDED, snapshot.needed)

        logger.debug("Migration status: %s", snapshot.to_dict())
        return snapshot


__all__ = ["MigrationStatusReporter"]
