"""
Migration orchestrator.

Runs a reconciliation workflow end to end: checks the principal, then scans
and applies each kind of the workflow's plan in order, and aggregates the
per-kind tallies into a MigrationOutcome.

The orchestrator never raises past run(): a missing principal or an
unexpected error produces a failed outcome, and a failed scan of one kind is
recorded in that kind's tally while the remaining kinds still run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ownership.exceptions import NotAuthenticatedError
from ownership.observability import Tracer, create_tracer
from ownership.observability.attributes import (
    ATTR_ACL_POLICY,
    ATTR_PRINCIPAL_ID,
    ATTR_RECORD_KIND,
    ATTR_RECORDS_MIGRATED,
    ATTR_RECORDS_TOTAL,
    ATTR_WORKFLOW,
)
from ownership.reconciliation.applier import ReconciliationApplier
from ownership.reconciliation.config import ReconciliationConfig
from ownership.reconciliation.exceptions import ScanQueryFailedError
from ownership.reconciliation.metrics import ReconciliationMetrics
from ownership.reconciliation.models import (
    KindTally,
    MigrationOutcome,
    MigrationWorkflow,
    ReconciliationPhase,
    ReconciliationProgress,
)
from ownership.reconciliation.scanner import ReconciliationScanner
from ownership.records.base import RecordKind

if TYPE_CHECKING:
    from ownership.principals.models import Principal
    from ownership.records.acl import AclPolicy
    from ownership.stores.interface import RemoteStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ReconciliationProgress], None]


class MigrationOrchestrator:
    """
    Drives reconciliation workflows against a store.

    Kinds are processed one at a time and records one at a time; there is no
    concurrent fan-out. Callers are expected to serialize runs against the
    same store.

    Example:
        >>> orchestrator = MigrationOrchestrator(store)
        >>> outcome = await orchestrator.run_full_migration(admin)
        >>> outcome.to_dict()["categories"]
        {'migrated': 2, 'total': 2}
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        config: ReconciliationConfig | None = None,
        scanner: ReconciliationScanner | None = None,
        applier: ReconciliationApplier | None = None,
        metrics: ReconciliationMetrics | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            store: Store holding the records
            config: Reconciliation configuration (defaults to ReconciliationConfig())
            scanner: Scanner override (built from config if omitted)
            applier: Applier override (built from config if omitted)
            metrics: Metrics container (built from config if omitted)
            tracer: Optional tracer (if not provided, one will be created)
        """
        self._config = config or ReconciliationConfig()
        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)
        self._metrics = metrics or ReconciliationMetrics(
            enable_metrics=self._config.enable_metrics
        )
        self._scanner = scanner or ReconciliationScanner(
            store,
            page_size=self._config.page_size,
            tracer=self._tracer,
        )
        self._applier = applier or ReconciliationApplier(
            store,
            use_version_check=self._config.use_version_check,
            metrics=self._metrics,
            tracer=self._tracer,
        )
        self._phase = ReconciliationPhase.IDLE

    @property
    def phase(self) -> ReconciliationPhase:
        """Phase of the current or most recent run."""
        return self._phase

    @property
    def metrics(self) -> ReconciliationMetrics:
        return self._metrics

    async def run_full_migration(
        self,
        principal: Principal | None,
        progress_callback: ProgressCallback | None = None,
    ) -> MigrationOutcome:
        """Migrate orphan categories then questions with public read access."""
        return await self.run(MigrationWorkflow.FULL, principal, progress_callback)

    async def run_question_only_migration(
        self,
        principal: Principal | None,
        progress_callback: ProgressCallback | None = None,
    ) -> MigrationOutcome:
        """Migrate orphan questions with owner-only access."""
        return await self.run(MigrationWorkflow.QUESTION_ONLY, principal, progress_callback)

    async def run(
        self,
        workflow: MigrationWorkflow,
        principal: Principal | None,
        progress_callback: ProgressCallback | None = None,
    ) -> MigrationOutcome:
        """
        Run a workflow.

        Args:
            workflow: Workflow to run
            principal: Principal that will own migrated records; None means
                nobody is authenticated and the run fails without touching
                the store
            progress_callback: Optional callback invoked after each applied page

        Returns:
            MigrationOutcome; never raises for store or principal errors
        """
        start = time.perf_counter()
        self._phase = ReconciliationPhase.RESOLVING_PRINCIPAL

        with self._tracer.span(
            "ownership.orchestrator.run",
            {
                ATTR_WORKFLOW: workflow.value,
                ATTR_PRINCIPAL_ID: principal.id if principal is not None else "",
            },
        ):
            if principal is None:
                error = NotAuthenticatedError()
                logger.warning("Refusing %s migration: %s", workflow.value, error)
                return self._finish_failed(workflow, str(error), start)

            logger.info(
                "Starting %s migration as %s",
                workflow.value,
                principal.label,
                extra={"workflow": workflow.value, "principal_id": principal.id},
            )

            try:
                tallies: dict[RecordKind, KindTally] = {}
                for kind, policy in workflow.plan:
                    tallies[kind] = await self._migrate_kind(
                        workflow, kind, policy, principal, progress_callback
                    )
            except Exception as e:
                logger.exception("%s migration failed unexpectedly", workflow.value)
                return self._finish_failed(workflow, str(e), start)

            self._phase = ReconciliationPhase.AGGREGATING
            outcome = MigrationOutcome(
                workflow=workflow,
                success=True,
                admin=principal,
                tallies=tallies,
                message=self._summarize(workflow, tallies),
                duration_seconds=time.perf_counter() - start,
            )
            self._metrics.record_run(workflow, outcome.duration_seconds, success=True)
            self._phase = ReconciliationPhase.COMPLETED

            logger.info(
                "%s (%.2fs)",
                outcome.message,
                outcome.duration_seconds,
                extra={"workflow": workflow.value, "migrated": outcome.migrated},
            )
            return outcome

    async def _migrate_kind(
        self,
        workflow: MigrationWorkflow,
        kind: RecordKind,
        policy: AclPolicy,
        principal: Principal,
        progress_callback: ProgressCallback | None,
    ) -> KindTally:
        """Scan and apply every orphan page of one kind."""
        tally = KindTally(kind=kind, policy=policy)

        with self._tracer.span(
            "ownership.orchestrator.migrate_kind",
            {ATTR_RECORD_KIND: kind.value, ATTR_ACL_POLICY: policy.value},
        ) as span:
            self._phase = ReconciliationPhase.SCANNING
            try:
                async for page in self._scanner.iter_orphan_pages(kind):
                    self._phase = ReconciliationPhase.APPLYING
                    tally.add(await self._applier.apply_ownership(page, principal, policy))

                    if progress_callback is not None:
                        progress_callback(
                            ReconciliationProgress(
                                workflow=workflow,
                                kind=kind,
                                phase=self._phase,
                                migrated=tally.migrated,
                                visited=tally.total,
                                failed=tally.failed,
                            )
                        )
                    self._phase = ReconciliationPhase.SCANNING
            except ScanQueryFailedError as e:
                tally.error = str(e)
                logger.error(
                    "Aborted %s migration of %s after %d records: %s",
                    workflow.value,
                    kind.value,
                    tally.total,
                    e,
                    extra={"record_kind": kind.value},
                )

            if span is not None:
                span.set_attribute(ATTR_RECORDS_MIGRATED, tally.migrated)
                span.set_attribute(ATTR_RECORDS_TOTAL, tally.total)

        if tally.failed:
            logger.warning(
                "%d of %d %s records could not be migrated",
                tally.failed,
                tally.total,
                kind.value,
                extra={"record_kind": kind.value, "failed_ids": [str(i) for i in tally.failed_ids]},
            )
        logger.info(
            "Migrated %d/%d %s records",
            tally.migrated,
            tally.total,
            kind.value,
            extra={"record_kind": kind.value},
        )
        return tally

    def _finish_failed(
        self,
        workflow: MigrationWorkflow,
        error: str,
        start: float,
    ) -> MigrationOutcome:
        outcome = MigrationOutcome.failure(workflow, error)
        outcome.duration_seconds = time.perf_counter() - start
        self._metrics.record_run(workflow, outcome.duration_seconds, success=False)
        self._phase = ReconciliationPhase.FAILED
        return outcome

    @staticmethod
    def _summarize(workflow: MigrationWorkflow, tallies: dict[RecordKind, KindTally]) -> str:
        questions = tallies[RecordKind.QUESTION].migrated
        if workflow is MigrationWorkflow.FULL:
            categories = tallies[RecordKind.CATEGORY].migrated
            message = f"Migration complete: {categories} categories, {questions} questions"
        else:
            message = f"Question migration complete: {questions} questions"

        failed = [str(kind) for kind, tally in tallies.items() if not tally.completed]
        if failed:
            message += f" (scan failed for: {', '.join(failed)})"
        return message


__all__ = ["MigrationOrchestrator", "ProgressCallback"]
