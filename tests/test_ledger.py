"""
Tests for the time ledger: validation, mutation and filtered queries.
"""

import datetime

import pytest

from timeledger.domain.errors import LedgerWriteError, NotFoundError, ValidationError

MONDAY = datetime.date(2026, 10, 19)


def at(day: datetime.date, hour: int, minute: int = 0) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time(hour, minute))


async def add(ledger, day=MONDAY, user_id="user-1", task_id="task-1", duration=3600, **fields):
    return await ledger.add_entry(
        task_id=task_id,
        user_id=user_id,
        date=day,
        start_time=at(day, 9),
        duration=duration,
        **fields
    )


class TestAddEntry:

    @pytest.mark.asyncio
    async def test_assigns_id_and_timestamps(self, ledger, clock):
        entry = await add(ledger)

        assert entry.id
        assert entry.created_at == clock.now
        assert entry.updated_at == clock.now
        assert len(ledger) == 1
        assert ledger.get(entry.id) == entry

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, ledger):
        first = await add(ledger)
        second = await add(ledger)
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_duration_computed_from_start_and_end(self, ledger):
        entry = await ledger.add_entry(
            task_id="task-1",
            user_id="user-1",
            start_time=at(MONDAY, 9),
            end_time=at(MONDAY, 10, 30)
        )
        assert entry.duration == 5400
        assert entry.date == MONDAY

    @pytest.mark.asyncio
    async def test_given_duration_is_authoritative(self, ledger):
        entry = await ledger.add_entry(
            task_id="task-1",
            user_id="user-1",
            date=MONDAY,
            start_time=at(MONDAY, 9),
            end_time=at(MONDAY, 17),
            duration=600
        )
        assert entry.duration == 600

    @pytest.mark.asyncio
    async def test_negative_duration_rejected(self, ledger):
        await add(ledger)

        with pytest.raises(ValidationError):
            await add(ledger, duration=-5)

        assert len(ledger) == 1

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.add_entry(
                task_id="task-1",
                user_id="user-1",
                start_time=at(MONDAY, 10),
                end_time=at(MONDAY, 9)
            )
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_missing_user_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await add(ledger, user_id=None)
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_missing_task_and_project_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await add(ledger, task_id=None)
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_project_resolved_from_task(self, ledger):
        entry = await add(ledger, task_id="task-3")
        assert entry.project_id == "project-2"

    @pytest.mark.asyncio
    async def test_explicit_project_kept(self, ledger):
        entry = await add(ledger, task_id="task-3", project_id="project-1")
        assert entry.project_id == "project-1"

    @pytest.mark.asyncio
    async def test_project_only_entry(self, ledger):
        entry = await add(ledger, task_id=None, project_id="project-2")
        assert entry.task_id is None
        assert entry.project_id == "project-2"

    @pytest.mark.asyncio
    async def test_unresolvable_task_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await add(ledger, task_id="task-unknown")
        assert len(ledger) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["id", "created_at", "updated_at"])
    async def test_generated_fields_cannot_be_given(self, ledger, field):
        with pytest.raises(ValidationError):
            await add(ledger, **{field: "x"})

    @pytest.mark.asyncio
    async def test_attribution_day_may_differ_from_start(self, ledger):
        friday = MONDAY - datetime.timedelta(days=3)
        entry = await ledger.add_entry(
            task_id="task-1",
            user_id="user-1",
            date=friday,
            start_time=at(MONDAY, 9),
            duration=1800,
            is_manual=True
        )
        assert entry.date == friday
        assert ledger.query_by_day(friday) == [entry]
        assert ledger.query_by_day(MONDAY) == []

    @pytest.mark.asyncio
    async def test_storage_failure_leaves_ledger_unchanged(self, failing_ledger):
        with pytest.raises(LedgerWriteError) as exc_info:
            await add(failing_ledger)

        assert len(failing_ledger) == 0
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_any_driver_error_becomes_write_error(self, failing_ledger, failing_repository):
        failing_repository.failing = False
        entry = await add(failing_ledger)
        failing_repository.failing = True
        failing_repository.error = OSError("disk full")

        with pytest.raises(LedgerWriteError) as exc_info:
            await failing_ledger.delete_entry(entry.id)

        assert isinstance(exc_info.value.__cause__, OSError)
        assert failing_ledger.entries() == [entry]


class TestUpdateEntry:

    @pytest.mark.asyncio
    async def test_merges_fields_and_refreshes_updated_at(self, ledger, clock):
        entry = await add(ledger)
        clock.advance(60)

        updated = await ledger.update_entry(entry.id, duration=7200, description="Review")

        assert updated.id == entry.id
        assert updated.duration == 7200
        assert updated.description == "Review"
        assert updated.task_id == entry.task_id
        assert updated.created_at == entry.created_at
        assert updated.updated_at == clock.now
        assert updated.updated_at > entry.updated_at
        assert ledger.get(entry.id) == updated

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self, ledger):
        entry = await add(ledger)

        with pytest.raises(NotFoundError) as exc_info:
            await ledger.update_entry("nonexistent", duration=10)

        assert exc_info.value.entry_id == "nonexistent"
        assert ledger.entries() == [entry]

    @pytest.mark.asyncio
    async def test_id_is_immutable(self, ledger):
        entry = await add(ledger)
        with pytest.raises(ValidationError):
            await ledger.update_entry(entry.id, id="other")
        assert ledger.get(entry.id) == entry

    @pytest.mark.asyncio
    async def test_created_at_is_immutable(self, ledger):
        entry = await add(ledger)
        with pytest.raises(ValidationError):
            await ledger.update_entry(entry.id, created_at=datetime.datetime(2020, 1, 1))

    @pytest.mark.asyncio
    async def test_negative_duration_rejected(self, ledger):
        entry = await add(ledger)
        with pytest.raises(ValidationError):
            await ledger.update_entry(entry.id, duration=-1)
        assert ledger.get(entry.id).duration == 3600

    @pytest.mark.asyncio
    async def test_changing_task_follows_its_project(self, ledger):
        entry = await add(ledger, task_id="task-1")
        updated = await ledger.update_entry(entry.id, task_id="task-3")
        assert updated.project_id == "project-2"

    @pytest.mark.asyncio
    async def test_clearing_task_keeps_its_project(self, ledger):
        entry = await add(ledger, task_id="task-3")

        updated = await ledger.update_entry(entry.id, task_id=None)

        assert updated.task_id is None
        assert updated.project_id == "project-2"

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, ledger):
        entry = await add(ledger)

        with pytest.raises(ValidationError):
            await ledger.update_entry(entry.id, duraton=5)

        assert ledger.get(entry.id) == entry

    @pytest.mark.asyncio
    async def test_unknown_field_rejected_on_add(self, ledger):
        with pytest.raises(ValidationError):
            await add(ledger, descripton="typo")
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_update_keeps_insertion_order(self, ledger):
        first = await add(ledger)
        second = await add(ledger)
        await ledger.update_entry(first.id, duration=1)
        assert [e.id for e in ledger.entries()] == [first.id, second.id]


class TestDeleteEntry:

    @pytest.mark.asyncio
    async def test_removes_entry(self, ledger):
        keep = await add(ledger)
        drop = await add(ledger)

        await ledger.delete_entry(drop.id)

        assert ledger.entries() == [keep]
        assert drop.id not in ledger

    @pytest.mark.asyncio
    async def test_missing_id_raises_not_found(self, ledger):
        entry = await add(ledger)
        await ledger.delete_entry(entry.id)

        with pytest.raises(NotFoundError):
            await ledger.delete_entry(entry.id)


class TestQueries:

    @pytest.mark.asyncio
    async def test_window_is_inclusive(self, ledger):
        before = await add(ledger, day=MONDAY - datetime.timedelta(days=1))
        first = await add(ledger, day=MONDAY)
        last = await add(ledger, day=MONDAY + datetime.timedelta(days=6))
        after = await add(ledger, day=MONDAY + datetime.timedelta(days=7))

        result = ledger.query_by_window(MONDAY, MONDAY + datetime.timedelta(days=6))

        assert result == [first, last]
        assert before not in result and after not in result

    @pytest.mark.asyncio
    async def test_window_filters_by_user(self, ledger):
        mine = await add(ledger, user_id="user-1")
        await add(ledger, user_id="user-2")

        assert ledger.query_by_window(MONDAY, MONDAY, "user-1") == [mine]
        assert len(ledger.query_by_window(MONDAY, MONDAY)) == 2

    @pytest.mark.asyncio
    async def test_results_are_in_insertion_order(self, ledger):
        wednesday = MONDAY + datetime.timedelta(days=2)
        late = await add(ledger, day=wednesday)
        early = await add(ledger, day=MONDAY)

        assert ledger.query_by_window(MONDAY, wednesday) == [late, early]

    @pytest.mark.asyncio
    async def test_day_query_ignores_time_of_day(self, ledger):
        entry = await add(ledger)
        await add(ledger, day=MONDAY + datetime.timedelta(days=1))

        assert ledger.query_by_day(at(MONDAY, 23, 59)) == [entry]
        assert ledger.query_by_day(MONDAY, "user-2") == []

    @pytest.mark.asyncio
    async def test_entries_returns_a_copy(self, ledger):
        await add(ledger)
        snapshot = ledger.entries()
        snapshot.clear()
        assert len(ledger) == 1

    def test_get_unknown_raises_not_found(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.get("missing")
