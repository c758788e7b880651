"""
Unit tests for MigrationOrchestrator.

Tests cover:
- Full and question-only workflows with their ACL policies
- The 3-category/5-question scenario and idempotent re-runs
- Missing principal fails without any store mutation
- Per-kind scan failure isolation
- Phase transitions, progress callbacks and metrics
"""

from __future__ import annotations

from uuid import UUID

import pytest

from ownership.exceptions import NotAuthenticatedError
from ownership.observability import MockTracer
from ownership.principals import Principal
from ownership.reconciliation import (
    MigrationOrchestrator,
    MigrationWorkflow,
    ReconciliationConfig,
    ReconciliationMetrics,
    ReconciliationPhase,
    ReconciliationProgress,
    ReconciliationScanner,
)
from ownership.records import Filter, Query, RecordKind
from ownership.stores import InMemoryRemoteStore
from tests.fixtures import FailingRemoteStore, make_question, seed_records

NO_TRACING = ReconciliationConfig(enable_tracing=False, enable_metrics=False)


def make_orchestrator(store, **config) -> MigrationOrchestrator:
    return MigrationOrchestrator(
        store,
        config=ReconciliationConfig(enable_tracing=False, enable_metrics=False, **config),
    )


async def count_orphans(store, kind: RecordKind) -> int:
    return await store.count(kind, Query(filters=[Filter.missing("owner")]))


class TestFullMigration:
    """Tests for the full workflow."""

    @pytest.mark.asyncio
    async def test_scenario(self, seeded_store: InMemoryRemoteStore, admin: Principal) -> None:
        orchestrator = make_orchestrator(seeded_store)

        outcome = await orchestrator.run_full_migration(admin)

        assert outcome.success is True
        assert outcome.complete is True
        assert outcome.admin == admin
        assert outcome.categories is not None and outcome.categories.to_dict() == {
            "migrated": 2,
            "total": 2,
        }
        assert outcome.questions is not None and outcome.questions.to_dict() == {
            "migrated": 5,
            "total": 5,
        }
        assert outcome.message == "Migration complete: 2 categories, 5 questions"
        assert await count_orphans(seeded_store, RecordKind.CATEGORY) == 0
        assert await count_orphans(seeded_store, RecordKind.QUESTION) == 0
        assert orchestrator.phase is ReconciliationPhase.COMPLETED

    @pytest.mark.asyncio
    async def test_grants_public_read(
        self, seeded_store: InMemoryRemoteStore, admin: Principal
    ) -> None:
        await make_orchestrator(seeded_store).run_full_migration(admin)

        for kind in RecordKind:
            for record in await seeded_store.find(kind, Query(filters=[Filter.eq("owner", admin.id)])):
                assert record.acl is not None
                assert record.acl.public_read
                assert record.acl.can_write(admin.id)

    @pytest.mark.asyncio
    async def test_leaves_owned_records_alone(
        self, seeded_store: InMemoryRemoteStore, admin: Principal
    ) -> None:
        await make_orchestrator(seeded_store).run_full_migration(admin)

        legacy = await seeded_store.find(
            RecordKind.CATEGORY, Query(filters=[Filter.eq("owner", "user-legacy")])
        )
        assert len(legacy) == 1
        assert legacy[0].version == 1

    @pytest.mark.asyncio
    async def test_second_run_is_noop(
        self, seeded_store: InMemoryRemoteStore, admin: Principal
    ) -> None:
        orchestrator = make_orchestrator(seeded_store)
        await orchestrator.run_full_migration(admin)

        outcome = await orchestrator.run_full_migration(admin)

        assert outcome.success is True
        assert outcome.to_dict()["categories"] == {"migrated": 0, "total": 0}
        assert outcome.to_dict()["questions"] == {"migrated": 0, "total": 0}

    @pytest.mark.asyncio
    async def test_empty_store(self, in_memory_store: InMemoryRemoteStore, admin: Principal) -> None:
        outcome = await make_orchestrator(in_memory_store).run_full_migration(admin)

        assert outcome.success is True
        assert outcome.migrated == 0
        assert outcome.message == "Migration complete: 0 categories, 0 questions"

    @pytest.mark.asyncio
    async def test_small_pages(self, in_memory_store: InMemoryRemoteStore, admin: Principal) -> None:
        await seed_records(in_memory_store, orphan_categories=7, orphan_questions=11)

        outcome = await make_orchestrator(in_memory_store, page_size=3).run_full_migration(admin)

        assert outcome.categories is not None and outcome.categories.migrated == 7
        assert outcome.questions is not None and outcome.questions.migrated == 11


class TestQuestionOnlyMigration:
    """Tests for the question-only workflow."""

    @pytest.mark.asyncio
    async def test_only_questions_without_public_access(
        self, seeded_store: InMemoryRemoteStore, admin: Principal
    ) -> None:
        outcome = await make_orchestrator(seeded_store).run_question_only_migration(admin)

        assert outcome.success is True
        assert outcome.categories is None
        assert outcome.questions is not None and outcome.questions.migrated == 5
        assert outcome.message == "Question migration complete: 5 questions"
        assert "categories" not in outcome.to_dict()
        assert await count_orphans(seeded_store, RecordKind.CATEGORY) == 2

        for record in await seeded_store.find(RecordKind.QUESTION):
            assert record.owner == admin.id
            assert record.acl is not None
            assert not record.acl.public_read
            assert not record.acl.can_read(None)

    @pytest.mark.asyncio
    async def test_policies_diverge_across_workflows(self, admin: Principal) -> None:
        full_store = InMemoryRemoteStore(enable_tracing=False)
        question_store = InMemoryRemoteStore(enable_tracing=False)
        record_id = UUID("00000000-0000-4000-8000-000000000001")
        for store in (full_store, question_store):
            await store.save(make_question("Same question", record_id=record_id))

        await make_orchestrator(full_store).run_full_migration(admin)
        await make_orchestrator(question_store).run_question_only_migration(admin)

        public = await full_store.get(RecordKind.QUESTION, record_id)
        private = await question_store.get(RecordKind.QUESTION, record_id)
        assert public is not None and private is not None
        assert public.acl != private.acl
        assert public.acl is not None and public.acl.public_read
        assert private.acl is not None and not private.acl.public_read


class TestAuthenticationPrecondition:
    """A missing principal fails the run before touching the store."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("workflow", list(MigrationWorkflow))
    async def test_no_principal(
        self, failing_store: FailingRemoteStore, workflow: MigrationWorkflow
    ) -> None:
        await seed_records(failing_store.inner, orphan_categories=2, orphan_questions=2)
        orchestrator = make_orchestrator(failing_store)

        outcome = await orchestrator.run(workflow, None)

        assert outcome.success is False
        assert outcome.error == str(NotAuthenticatedError())
        assert outcome.tallies == {}
        assert outcome.to_dict() == {"success": False, "error": outcome.error}
        assert failing_store.saved == []
        assert failing_store.find_calls == 0
        assert orchestrator.phase is ReconciliationPhase.FAILED


class TestKindIsolation:
    """A failed scan of one kind does not stop the other kinds."""

    @pytest.mark.asyncio
    async def test_category_scan_failure(
        self, failing_store: FailingRemoteStore, admin: Principal
    ) -> None:
        await seed_records(failing_store.inner, orphan_categories=2, orphan_questions=3)
        failing_store.fail_find_kinds.add(RecordKind.CATEGORY)

        outcome = await make_orchestrator(failing_store).run_full_migration(admin)

        assert outcome.success is True
        assert outcome.complete is False
        assert outcome.failed_kinds == [RecordKind.CATEGORY]
        assert outcome.categories is not None
        assert outcome.categories.error is not None
        assert outcome.categories.to_dict() == {"migrated": 0, "total": 0}
        assert outcome.questions is not None and outcome.questions.migrated == 3
        assert outcome.message == (
            "Migration complete: 0 categories, 3 questions (scan failed for: Category)"
        )

    @pytest.mark.asyncio
    async def test_scan_failure_mid_kind_keeps_partial_tally(
        self, failing_store: FailingRemoteStore, admin: Principal
    ) -> None:
        await seed_records(failing_store.inner, orphan_questions=5)
        failing_store.fail_find_after = 1

        outcome = await make_orchestrator(failing_store, page_size=2).run_question_only_migration(
            admin
        )

        assert outcome.questions is not None
        assert outcome.questions.migrated == 2
        assert not outcome.questions.completed

    @pytest.mark.asyncio
    async def test_record_failures_are_tallied(
        self, failing_store: FailingRemoteStore, admin: Principal
    ) -> None:
        records = await seed_records(failing_store.inner, orphan_questions=3)
        failing_store.fail_save_ids.add(records[1].id)  # type: ignore[arg-type]

        outcome = await make_orchestrator(failing_store).run_question_only_migration(admin)

        assert outcome.success is True
        assert outcome.complete is False
        assert outcome.questions is not None
        assert outcome.questions.to_dict() == {"migrated": 2, "total": 3}
        assert outcome.questions.failed_ids == [records[1].id]


class TestMonotonicity:
    """A run never increases the number of orphans of any kind."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("workflow", "expected_after"),
        [
            (MigrationWorkflow.FULL, {RecordKind.CATEGORY: 1, RecordKind.QUESTION: 1}),
            (MigrationWorkflow.QUESTION_ONLY, {RecordKind.CATEGORY: 4, RecordKind.QUESTION: 1}),
        ],
    )
    async def test_partial_run_never_adds_orphans(
        self,
        failing_store: FailingRemoteStore,
        admin: Principal,
        workflow: MigrationWorkflow,
        expected_after: dict[RecordKind, int],
    ) -> None:
        records = await seed_records(failing_store.inner, orphan_categories=4, orphan_questions=6)
        failing_store.fail_save_ids.update({records[1].id, records[6].id})  # type: ignore[arg-type]
        orchestrator = make_orchestrator(failing_store, page_size=3)

        before = {kind: await count_orphans(failing_store, kind) for kind in RecordKind}
        await orchestrator.run(workflow, admin)
        after = {kind: await count_orphans(failing_store, kind) for kind in RecordKind}
        await orchestrator.run(workflow, admin)
        again = {kind: await count_orphans(failing_store, kind) for kind in RecordKind}

        assert before == {RecordKind.CATEGORY: 4, RecordKind.QUESTION: 6}
        assert after == expected_after
        for kind in RecordKind:
            assert after[kind] <= before[kind]
            assert again[kind] <= after[kind]

    @pytest.mark.asyncio
    async def test_aborted_scan_never_adds_orphans(
        self, failing_store: FailingRemoteStore, admin: Principal
    ) -> None:
        await seed_records(failing_store.inner, orphan_categories=4, orphan_questions=6)
        failing_store.fail_find_after = 2
        orchestrator = make_orchestrator(failing_store, page_size=3)

        before = {kind: await count_orphans(failing_store, kind) for kind in RecordKind}
        await orchestrator.run_full_migration(admin)
        after = {kind: await count_orphans(failing_store, kind) for kind in RecordKind}

        for kind in RecordKind:
            assert after[kind] <= before[kind]


class TestUnexpectedErrors:
    """The orchestrator never raises past run()."""

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failed_outcome(
        self, in_memory_store: InMemoryRemoteStore, admin: Principal
    ) -> None:
        class BrokenScanner(ReconciliationScanner):
            async def iter_orphan_pages(self, kind):  # type: ignore[override]
                raise RuntimeError("scanner bug")
                yield []

        orchestrator = MigrationOrchestrator(
            in_memory_store,
            config=NO_TRACING,
            scanner=BrokenScanner(in_memory_store, enable_tracing=False),
        )

        outcome = await orchestrator.run_full_migration(admin)

        assert outcome.success is False
        assert outcome.error == "scanner bug"
        assert orchestrator.phase is ReconciliationPhase.FAILED


class TestProgressAndObservability:
    """Tests for progress callbacks, phases, spans and metrics."""

    @pytest.mark.asyncio
    async def test_progress_callback(
        self, in_memory_store: InMemoryRemoteStore, admin: Principal
    ) -> None:
        await seed_records(in_memory_store, orphan_categories=3, orphan_questions=4)
        updates: list[ReconciliationProgress] = []

        await make_orchestrator(in_memory_store, page_size=2).run_full_migration(
            admin, progress_callback=updates.append
        )

        assert [(u.kind, u.visited) for u in updates] == [
            (RecordKind.CATEGORY, 2),
            (RecordKind.CATEGORY, 3),
            (RecordKind.QUESTION, 2),
            (RecordKind.QUESTION, 4),
        ]
        assert all(u.phase is ReconciliationPhase.APPLYING for u in updates)
        assert all(u.workflow is MigrationWorkflow.FULL for u in updates)

    def test_initial_phase(self, in_memory_store: InMemoryRemoteStore) -> None:
        assert make_orchestrator(in_memory_store).phase is ReconciliationPhase.IDLE

    @pytest.mark.asyncio
    async def test_spans(self, seeded_store: InMemoryRemoteStore, admin: Principal) -> None:
        tracer = MockTracer()
        orchestrator = MigrationOrchestrator(seeded_store, config=NO_TRACING, tracer=tracer)

        await orchestrator.run_question_only_migration(admin)

        names = tracer.span_names
        assert names[0] == "ownership.orchestrator.run"
        assert "ownership.orchestrator.migrate_kind" in names
        assert "ownership.scanner.find_page" in names
        assert "ownership.applier.apply_ownership" in names

    @pytest.mark.asyncio
    async def test_metrics(self, seeded_store: InMemoryRemoteStore, admin: Principal) -> None:
        metrics = ReconciliationMetrics(enable_metrics=False)
        orchestrator = MigrationOrchestrator(seeded_store, config=NO_TRACING, metrics=metrics)

        await orchestrator.run_full_migration(admin)
        await orchestrator.run(MigrationWorkflow.FULL, None)

        snapshot = metrics.snapshot()
        assert snapshot.migrated == {"Category": 2, "Question": 5}
        assert snapshot.failed == {}
        assert len(snapshot.run_durations) == 2
