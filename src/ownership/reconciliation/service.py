"""
Reporting facade consumed by the admin UI layer.

DataMigrationService wires a store and a principal resolver to the status
reporter and the orchestrator. It resolves the principal once per run and
passes it to the orchestrator explicitly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ownership.exceptions import NotAuthenticatedError
from ownership.observability import Tracer, create_tracer
from ownership.reconciliation.config import ReconciliationConfig
from ownership.reconciliation.models import (
    MigrationOutcome,
    MigrationStatusSnapshot,
    MigrationWorkflow,
    ReconciliationReport,
)
from ownership.reconciliation.orchestrator import MigrationOrchestrator, ProgressCallback
from ownership.reconciliation.status import MigrationStatusReporter

if TYPE_CHECKING:
    from ownership.principals.models import Principal
    from ownership.principals.resolver import PrincipalResolver
    from ownership.stores.interface import RemoteStore

logger = logging.getLogger(__name__)


class DataMigrationService:
    """
    Snapshot and run reconciliation on behalf of the logged-in operator.

    Confirming a destructive run with the operator is the caller's job; this
    service runs whatever it is asked to.

    Example:
        >>> service = DataMigrationService(store, AuthProviderResolver(auth))
        >>> (await service.snapshot()).to_dict()["migrationNeeded"]
        True
        >>> outcome = await service.run_full_migration()
        >>> outcome.message
        'Migration complete: 2 categories, 5 questions'
    """

    def __init__(
        self,
        store: RemoteStore,
        resolver: PrincipalResolver,
        *,
        config: ReconciliationConfig | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        self._config = config or ReconciliationConfig()
        self._resolver = resolver
        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)
        self._orchestrator = MigrationOrchestrator(store, config=self._config, tracer=self._tracer)
        self._reporter = MigrationStatusReporter(store, tracer=self._tracer)

    @property
    def orchestrator(self) -> MigrationOrchestrator:
        return self._orchestrator

    def setup_admin_user(self) -> Principal:
        """
        Return the principal that migrations will assign ownership to.

        Raises:
            NotAuthenticatedError: If nobody is logged in
        """
        principal = self._resolver.current_principal()
        if principal is None:
            raise NotAuthenticatedError()
        logger.info("Using %s as migration admin", principal.label)
        return principal

    async def snapshot(self) -> MigrationStatusSnapshot:
        """
        Current migration status.

        Raises:
            StatusCheckFailedError: If any count fails
        """
        return await self._reporter.snapshot()

    async def run_full_migration(
        self,
        progress_callback: ProgressCallback | None = None,
    ) -> MigrationOutcome:
        return await self._run(MigrationWorkflow.FULL, progress_callback)

    async def run_question_only_migration(
        self,
        progress_callback: ProgressCallback | None = None,
    ) -> MigrationOutcome:
        return await self._run(MigrationWorkflow.QUESTION_ONLY, progress_callback)

    async def reconcile(
        self,
        progress_callback: ProgressCallback | None = None,
    ) -> ReconciliationReport:
        """
        Check status, run the full migration if anything is orphaned, check again.

        Raises:
            StatusCheckFailedError: If either status check fails
        """
        before = await self.snapshot()
        outcome: MigrationOutcome | None = None
        if before.needed:
            outcome = await self.run_full_migration(progress_callback)
        else:
            logger.info("No orphan records found; skipping migration")
        after = await self.snapshot()
        return ReconciliationReport(before=before, outcome=outcome, after=after)

    async def _run(
        self,
        workflow: MigrationWorkflow,
        progress_callback: ProgressCallback | None,
    ) -> MigrationOutcome:
        try:
            principal = self._resolver.current_principal()
        except Exception as e:
            logger.exception("Could not resolve the principal for %s migration", workflow.value)
            return MigrationOutcome.failure(workflow, str(e))
        return await self._orchestrator.run(workflow, principal, progress_callback)


__all__ = ["DataMigrationService"]
