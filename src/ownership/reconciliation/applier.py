"""
Applies ownership to batches of orphan records.

Each record is transformed and saved on its own. A failed save is logged,
counted and skipped; it never stops the rest of the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ownership.observability import Tracer, create_tracer
from ownership.observability.attributes import (
    ATTR_ACL_POLICY,
    ATTR_BATCH_SIZE,
    ATTR_ERROR_TYPE,
    ATTR_PRINCIPAL_ID,
    ATTR_RECORD_KIND,
    ATTR_RECORDS_MIGRATED,
)
from ownership.reconciliation.exceptions import RecordSaveFailedError
from ownership.reconciliation.metrics import ReconciliationMetrics
from ownership.reconciliation.models import ApplyResult
from ownership.reconciliation.transform import assign_ownership
from ownership.records.base import Record

if TYPE_CHECKING:
    from ownership.principals.models import Principal
    from ownership.records.acl import AclPolicy
    from ownership.stores.interface import RemoteStore

logger = logging.getLogger(__name__)


class ReconciliationApplier:
    """
    Assigns an owner and ACL to records and persists them one by one.

    With ``use_version_check`` enabled, records are saved through
    save_with_version_check so that a record changed by someone else since
    it was scanned is reported as failed rather than overwritten.

    Example:
        >>> applier = ReconciliationApplier(store)
        >>> result = await applier.apply_ownership(orphans, admin, AclPolicy.OWNER_ONLY)
        >>> result.migrated, result.total
        (10, 10)
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        use_version_check: bool = True,
        metrics: ReconciliationMetrics | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the applier.

        Args:
            store: Store that receives the saves
            use_version_check: Save with an optimistic version check (default True)
            metrics: Metrics container (defaults to one with metrics disabled)
            tracer: Optional tracer (if not provided, one will be created)
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        self._store = store
        self._use_version_check = use_version_check
        self._metrics = metrics or ReconciliationMetrics(enable_metrics=False)
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def apply_ownership(
        self,
        records: Iterable[Record],
        principal: Principal,
        policy: AclPolicy,
    ) -> ApplyResult:
        """
        Assign principal as owner of every record and save each one.

        Args:
            records: Orphan records to migrate
            principal: The new owner
            policy: ACL policy to apply

        Returns:
            ApplyResult with ``migrated`` equal to the number of successful
            saves and ``total`` equal to the number of input records
        """
        batch = list(records)
        result = ApplyResult(total=len(batch))
        if not batch:
            return result

        kind = batch[0].kind
        with self._tracer.span(
            "ownership.applier.apply_ownership",
            {
                ATTR_RECORD_KIND: kind.value,
                ATTR_BATCH_SIZE: len(batch),
                ATTR_PRINCIPAL_ID: principal.id,
                ATTR_ACL_POLICY: policy.value,
            },
        ) as span:
            for record in batch:
                try:
                    await self._save(assign_ownership(record, principal, policy))
                except Exception as e:
                    error = RecordSaveFailedError(record.kind, record.id, str(e))
                    logger.warning(
                        "%s",
                        error,
                        exc_info=True,
                        extra={
                            "record_kind": record.kind.value,
                            "record_id": str(record.id),
                        },
                    )
                    if span is not None and not result.failed_ids:
                        span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                    result.failed_ids.append(record.id)
                    continue
                result.migrated += 1
                logger.debug("Migrated %s %s", record.kind.value, record.id)

            self._metrics.record_migrated(kind, result.migrated)
            self._metrics.record_failed(kind, result.failed)
            if span is not None:
                span.set_attribute(ATTR_RECORDS_MIGRATED, result.migrated)

        return result

    async def _save(self, record: Record) -> Record:
        if self._use_version_check:
            return await self._store.save_with_version_check(record)
        return await self._store.save(record)


__all__ = ["ReconciliationApplier"]
