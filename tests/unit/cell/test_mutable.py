"""Unit tests for guarded mutation cells."""

import asyncio
import logging

import pytest

from purely import (
    MISSING,
    AsyncioScheduler,
    CellError,
    DuplicateWriteError,
    MutationCell,
    SynchronousWriteError,
    TurnScheduler,
    WriteMode,
    Writer,
    get_default_scheduler,
    make_cell,
)


@pytest.mark.unit
@pytest.mark.cell
class TestConstruction:
    def test_make_cell_returns_read_and_write(self, scheduler):
        read, write = make_cell(100, scheduler=scheduler)
        assert callable(read)
        assert isinstance(write, Writer)
        assert read(lambda value: value) == 100

    def test_cell_starts_at_version_zero(self, scheduler):
        cell = MutationCell("initial", scheduler=scheduler)
        assert cell.version == 0
        assert cell.created_turn == scheduler.turn
        assert cell.scheduler is scheduler

    def test_default_scheduler_is_used(self):
        cell = MutationCell(1)
        assert cell.scheduler is get_default_scheduler()

    def test_repr(self, scheduler):
        assert repr(MutationCell(1, scheduler=scheduler)) == (
            "MutationCell(version=0, created_turn=0)"
        )


@pytest.mark.unit
@pytest.mark.cell
class TestRead:
    def test_read_returns_handler_result(self, scheduler):
        cell = MutationCell([1, 2, 3], scheduler=scheduler)
        assert cell.read(lambda value: sum(value)) == 6

    def test_handler_arity_selects_arguments(self, scheduler):
        cell = MutationCell(1, scheduler=scheduler)
        seen = {}

        cell.read(lambda: seen.setdefault("none", True))
        cell.read(lambda value, previous: seen.setdefault("two", (value, previous)))
        cell.read(lambda value, previous, write: seen.setdefault("three", write))
        cell.read(lambda *args: seen.setdefault("varargs", len(args)))

        assert seen["none"] is True
        assert seen["two"] == (1, MISSING)
        assert isinstance(seen["three"], Writer)
        assert seen["varargs"] == 3

    def test_parameters_with_defaults_keep_them(self, scheduler):
        cell = MutationCell(1, scheduler=scheduler)
        assert cell.read(lambda value, label="count": (label, value)) == ("count", 1)
        assert cell.read(lambda label="none": label) == "none"

    def test_keyword_only_parameters_are_passed_by_name(self, scheduler):
        cell = MutationCell(1, scheduler=scheduler)

        def handler(value, *, write, previous):
            return value, previous, write

        value, previous, write = cell.read(handler)
        assert (value, previous) == (1, MISSING)
        assert write is cell.writer

    def test_unrelated_keyword_only_parameters_are_not_filled(self, scheduler):
        cell = MutationCell(1, scheduler=scheduler)

        def handler(value, *, scale=10):
            return value * scale

        assert cell.read(handler) == 10

    def test_previous_is_value_before_last_write(self, run_turn, scheduler):
        cell = MutationCell(1, scheduler=scheduler)
        run_turn(lambda: cell.write(lambda n: n + 1))
        run_turn(lambda: cell.write(lambda n: n * 10))

        assert cell.read(lambda value, previous: (value, previous)) == (20, 2)

    def test_readers_get_snapshots_not_the_slot(self, scheduler):
        cell = MutationCell({"items": [1]}, scheduler=scheduler)

        cell.read(lambda value: value["items"].append(2))

        assert cell.read(lambda value: value) == {"items": [1]}

    def test_initial_value_is_copied(self, scheduler):
        initial = {"items": [1]}
        cell = MutationCell(initial, scheduler=scheduler)
        initial["items"].append(2)
        assert cell.read(lambda value: value) == {"items": [1]}

    def test_snapshot_none_shares_immutable_values(self, scheduler):
        value = ("frozen", 1)
        cell = MutationCell(value, scheduler=scheduler, snapshot=None)
        assert cell.read(lambda v: v) is value


@pytest.mark.unit
@pytest.mark.cell
class TestWrite:
    def test_write_replaces_slot_and_bumps_version(self, run_turn, scheduler):
        cell = MutationCell(100, scheduler=scheduler)

        applied = run_turn(lambda: cell.write(lambda n: n + 1))

        assert applied is True
        assert cell.version == 1
        assert cell.read(lambda value: value) == 101

    def test_updater_receives_a_copy(self, run_turn, scheduler):
        cell = MutationCell({"count": 0}, scheduler=scheduler)
        originals = []

        def updater(current):
            originals.append(current)
            current["count"] += 1
            return current

        run_turn(lambda: cell.write(updater))
        originals[0]["count"] = 99

        assert cell.read(lambda value: value) == {"count": 1}

    def test_version_increments_once_per_successful_write(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)
        for _ in range(3):
            run_turn(lambda: cell.write(lambda n: n + 1))
        assert cell.version == 3
        assert cell.read(lambda value: value) == 3

    def test_updater_errors_propagate_and_leave_cell_untouched(self, run_turn, scheduler):
        cell = MutationCell(1, scheduler=scheduler)

        def broken(current):
            raise ZeroDivisionError

        with pytest.raises(ZeroDivisionError):
            run_turn(lambda: cell.write(broken))

        assert cell.version == 0
        run_turn(lambda: cell.write(lambda n: n + 1))
        assert cell.read(lambda value: value) == 2


@pytest.mark.unit
@pytest.mark.cell
class TestSynchronousWriteGuard:
    def test_write_in_construction_turn_fails(self, scheduler):
        read, write = make_cell(1, scheduler=scheduler)

        with pytest.raises(SynchronousWriteError) as excinfo:
            write(lambda n: n + 1)

        assert excinfo.value.turn == scheduler.turn
        assert read(lambda value: value) == 1

    def test_read_scoped_write_in_construction_turn_fails(self, scheduler):
        cell = MutationCell(1, scheduler=scheduler)
        with pytest.raises(SynchronousWriteError):
            cell.read(lambda value, previous, write: write(lambda n: n + 1))

    def test_tolerant_write_does_not_swallow_synchronous_writes(self, scheduler):
        cell = MutationCell(1, scheduler=scheduler)
        with pytest.raises(SynchronousWriteError):
            cell.writer.tolerant(lambda n: n + 1)

    def test_cell_built_inside_a_turn_cannot_write_in_that_turn(self, scheduler):
        cells = []

        def build_and_write():
            cell = MutationCell(1, scheduler=scheduler)
            cells.append(cell)
            cell.write(lambda n: n + 1)

        scheduler.schedule(build_and_write)
        with pytest.raises(SynchronousWriteError):
            scheduler.run_pending()

        scheduler.schedule(lambda: cells[0].write(lambda n: n + 1))
        scheduler.run_pending()
        assert cells[0].read(lambda value: value) == 2

    def test_guard_errors_are_cell_errors(self, scheduler):
        cell = MutationCell(1, scheduler=scheduler)
        with pytest.raises(CellError):
            cell.write(lambda n: n)
        with pytest.raises(RuntimeError):
            cell.write(lambda n: n)


@pytest.mark.unit
@pytest.mark.cell
class TestDuplicateWriteGuard:
    def test_second_strict_write_in_read_fails(self, run_turn, scheduler):
        cell = MutationCell(1, scheduler=scheduler)

        def handler(value, previous, write):
            write(lambda n: n + 1)
            write(lambda n: n + 100)

        with pytest.raises(DuplicateWriteError) as excinfo:
            run_turn(lambda: cell.read(handler))

        assert excinfo.value.version == 1
        assert cell.read(lambda value: value) == 2

    def test_second_tolerant_write_in_read_is_ignored(self, run_turn, scheduler):
        cell = MutationCell(1, scheduler=scheduler)

        def handler(value, previous, write):
            return write.tolerant(lambda n: n + 1), write.tolerant(lambda n: n + 100)

        assert run_turn(lambda: cell.read(handler)) == (True, False)
        assert cell.version == 1
        assert cell.read(lambda value: value) == 2

    def test_explicit_mode_argument(self, run_turn, scheduler):
        cell = MutationCell(1, scheduler=scheduler)

        def handler(value, previous, write):
            write.write(lambda n: n + 1, mode=WriteMode.STRICT)
            return write.write(lambda n: n + 1, mode=WriteMode.TOLERANT)

        assert run_turn(lambda: cell.read(handler)) is False
        assert cell.read(lambda value: value) == 2

    def test_top_level_writer_allows_one_write_per_turn(self, scheduler):
        read, write = make_cell(0, scheduler=scheduler)
        outcomes = []

        def turn():
            write(lambda n: n + 1)
            outcomes.append(write.tolerant(lambda n: n + 1))
            try:
                write.strict(lambda n: n + 1)
            except DuplicateWriteError:
                outcomes.append("duplicate")

        scheduler.schedule(turn)
        scheduler.schedule(turn)
        scheduler.run_pending()

        assert outcomes == [False, "duplicate", False, "duplicate"]
        assert read(lambda value: value) == 2

    def test_top_level_write_after_read_write_in_same_turn(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)

        def turn():
            cell.read(lambda value, previous, write: write(lambda n: n + 1))
            return cell.writer.tolerant(lambda n: n + 1)

        assert run_turn(turn) is False
        assert cell.read(lambda value: value) == 1

    def test_reads_in_one_turn_share_the_write_allowance(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)

        def turn():
            cell.read(lambda value, previous, write: write(lambda n: n + 1))
            with pytest.raises(DuplicateWriteError):
                cell.read(lambda value, previous, write: write(lambda n: n + 1))
            return cell.read(
                lambda value, previous, write: write.tolerant(lambda n: n + 1)
            )

        assert run_turn(turn) is False
        assert cell.version == 1
        assert cell.read(lambda value: value) == 1

    def test_read_write_after_top_level_write_in_same_turn(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)

        def turn():
            applied = [cell.write(lambda n: n + 1)]
            applied.append(
                cell.read(lambda v, p, write: write.tolerant(lambda n: n + 100))
            )
            applied.append(
                cell.read(lambda v, p, write: write.tolerant(lambda n: n + 1000))
            )
            return applied

        assert run_turn(turn) == [True, False, False]
        assert cell.version == 1
        assert cell.read(lambda value: value) == 1

    def test_each_turn_gets_a_new_write_allowance(self, scheduler):
        cell = MutationCell(0, scheduler=scheduler)
        for _ in range(2):
            cell.read_later(lambda value, previous, write: write(lambda n: n + 1))
        scheduler.run_pending()

        assert cell.version == 2
        assert cell.read(lambda value: value) == 2

    def test_write_from_inside_updater_is_rejected(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)

        def updater(current):
            cell.write(lambda n: n + 100)
            return current + 1

        with pytest.raises(DuplicateWriteError):
            run_turn(lambda: cell.write(updater))
        assert cell.version == 0

    def test_tolerant_write_from_inside_updater_is_ignored(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)

        def updater(current):
            cell.writer.tolerant(lambda n: n + 100)
            return current + 1

        run_turn(lambda: cell.write(updater))
        assert cell.read(lambda value: value) == 1


@pytest.mark.unit
@pytest.mark.cell
class TestReadIsolation:
    def test_write_inside_read_does_not_change_its_value(self, run_turn, scheduler):
        cell = MutationCell({"count": 0}, scheduler=scheduler)
        observed = []

        def handler(value, previous, write):
            observed.append(value["count"])
            write(lambda current: {"count": current["count"] + 1})
            observed.append(value["count"])

        run_turn(lambda: cell.read(handler))

        assert observed == [0, 0]
        assert cell.read(lambda value: value["count"]) == 1

    def test_nested_reads_see_the_outer_snapshot(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)
        observed = []

        def outer(value, previous, write):
            write(lambda n: n + 1)
            cell.read(lambda inner: observed.append(inner))
            cell.read(lambda inner: cell.read(lambda deepest: observed.append(deepest)))

        run_turn(lambda: cell.read(outer))

        assert observed == [0, 0]
        assert cell.read(lambda value: value) == 1

    def test_nested_read_shares_the_outer_write_scope(self, run_turn, scheduler):
        cell = MutationCell(0, scheduler=scheduler)

        def outer(value, previous, write):
            write(lambda n: n + 1)
            return cell.read(lambda v, p, inner_write: inner_write.tolerant(lambda n: n + 1))

        assert run_turn(lambda: cell.read(outer)) is False
        assert cell.read(lambda value: value) == 1

    def test_read_later_observes_new_value(self, scheduler):
        cell = MutationCell(100, scheduler=scheduler)
        observed = []

        cell.read_later(lambda value: observed.append(value))
        scheduler.schedule(lambda: cell.write(lambda n: n + 1))
        cell.read_later(lambda value: observed.append(value))
        scheduler.run_pending()

        assert observed == [100, 101]


@pytest.mark.unit
@pytest.mark.cell
@pytest.mark.edge_case
def test_cells_on_separate_schedulers_are_independent():
    first, second = TurnScheduler(), TurnScheduler()
    a = MutationCell(0, scheduler=first)
    b = MutationCell(0, scheduler=second)

    first.schedule(lambda: a.write(lambda n: n + 1))
    first.run_pending()

    assert a.read(lambda value: value) == 1
    with pytest.raises(SynchronousWriteError):
        b.write(lambda n: n + 1)


@pytest.mark.unit
@pytest.mark.cell
def test_ignored_write_is_logged(run_turn, scheduler, caplog):
    cell = MutationCell(0, scheduler=scheduler)

    def turn():
        cell.write(lambda n: n + 1)
        cell.writer.tolerant(lambda n: n + 1)

    with caplog.at_level(logging.DEBUG):
        run_turn(turn)

    messages = [record.getMessage() for record in caplog.records]
    assert any("Cell written: version 1" in message for message in messages)
    assert any("Ignored repeated write" in message for message in messages)


@pytest.mark.unit
@pytest.mark.cell
@pytest.mark.scheduler
class TestAsyncioTurns:
    """Cells on an event loop treat every loop iteration as a turn."""

    @pytest.mark.asyncio
    async def test_write_after_await_in_creating_coroutine(self):
        cell = MutationCell(0, scheduler=AsyncioScheduler())
        with pytest.raises(SynchronousWriteError):
            cell.write(lambda n: n + 1)

        await asyncio.sleep(0.01)

        assert cell.write(lambda n: n + 1) is True
        assert cell.read(lambda value: value) == 1

    @pytest.mark.asyncio
    async def test_one_write_per_loop_iteration(self):
        scheduler = AsyncioScheduler()
        cell = MutationCell(0, scheduler=scheduler)
        await scheduler.next_turn()

        assert cell.write(lambda n: n + 1) is True
        assert cell.writer.tolerant(lambda n: n + 100) is False

        await asyncio.sleep(0.01)

        assert cell.write(lambda n: n + 1) is True
        assert cell.version == 2
        assert cell.read(lambda value: value) == 2
