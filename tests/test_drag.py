"""
Tests for the press-and-hold drag rescheduling state machine.
"""

from datetime import date, timedelta

import pytest

from timegrid.drag import ColumnGeometry, DragPhase, DragRescheduler

WEEK_START = date(2024, 3, 3)


@pytest.fixture
def columns():
    # Seven 100px columns starting 50px right of the pointer origin
    days = [WEEK_START + timedelta(days=i) for i in range(7)]
    return ColumnGeometry(days=days, left=50, column_width=100)


@pytest.fixture
def recorder():
    class Recorder:
        def __init__(self):
            self.clicks = []
            self.drops = []
            self.previews = []

        def on_click(self, event):
            self.clicks.append(event)

        def on_drop(self, event, new_start, new_end):
            self.drops.append((event, new_start, new_end))

        def on_preview(self, state):
            self.previews.append(None if state is None else state.preview)

    return Recorder()


@pytest.fixture
def machine(scheduler, columns, tz, recorder):
    return DragRescheduler(
        scheduler, columns, tz,
        on_click=recorder.on_click,
        on_drop=recorder.on_drop,
        on_preview=recorder.on_preview,
    )


@pytest.fixture
def meeting(make_event):
    # 90 minutes on Sunday 2024-03-03
    return make_event((2024, 3, 3, 9, 0), (2024, 3, 3, 10, 30), event_id="meeting")


class TestColumnGeometry:

    def test_column_at(self, columns):
        assert columns.column_at(49) is None
        assert columns.column_at(50) == 0
        assert columns.column_at(149.5) == 0
        assert columns.column_at(150) == 1
        assert columns.column_at(749) == 6
        assert columns.column_at(750) is None

    def test_snap_floors_to_quarter_hour(self, columns):
        assert columns.snap_minutes_at(37) == 30
        assert columns.snap_minutes_at(44.9) == 30
        assert columns.snap_minutes_at(45) == 45

    def test_snap_is_clamped_to_day(self, columns):
        assert columns.snap_minutes_at(-20) == 0
        assert columns.snap_minutes_at(5000) == 23 * 60 + 45

    def test_locate(self, columns):
        preview = columns.locate(260, 757)
        assert preview.day == WEEK_START + timedelta(days=2)
        assert (preview.hour, preview.minute) == (12, 30)

    def test_no_columns(self):
        assert ColumnGeometry(days=[]).locate(10, 10) is None


class TestClick:

    def test_release_before_long_press_is_click(self, machine, scheduler, recorder, meeting):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(299)
        assert machine.phase is DragPhase.PENDING
        assert machine.pointer_up(100, 545) is None
        assert recorder.clicks == [meeting]
        assert recorder.drops == []
        assert machine.phase is DragPhase.IDLE
        assert scheduler.pending_count() == 0

    def test_move_while_pending_does_not_preview(self, machine, scheduler, recorder, meeting):
        machine.pointer_down(meeting, 100, 545)
        machine.pointer_move(300, 700)
        assert recorder.previews == []
        assert machine.phase is DragPhase.PENDING


class TestDrag:

    def test_long_press_starts_drag(self, machine, scheduler, recorder, meeting):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(300)
        assert machine.phase is DragPhase.DRAGGING
        assert machine.state.duration_minutes == 90
        assert recorder.previews[-1].hour == 9

    def test_drop_keeps_duration(self, machine, scheduler, recorder, meeting, tz):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(300)
        machine.pointer_move(260, 757)
        request = machine.pointer_up(260, 757)

        assert request is not None
        local_start = request.new_start.astimezone(tz)
        assert local_start.date() == WEEK_START + timedelta(days=2)
        assert (local_start.hour, local_start.minute) == (12, 30)
        assert request.new_end - request.new_start == timedelta(minutes=90)
        assert recorder.drops == [(meeting, request.new_start, request.new_end)]
        assert recorder.clicks == []

    def test_drop_keeps_seconds_of_duration(self, machine, scheduler, make_event):
        odd = make_event((2024, 3, 3, 9, 0, 0), (2024, 3, 3, 10, 30, 45), event_id="odd")
        machine.pointer_down(odd, 100, 545)
        scheduler.advance(300)
        request = machine.pointer_up(100, 700)
        assert request.new_end - request.new_start == timedelta(minutes=90, seconds=45)
        assert request.new_end - request.new_start == odd.end - odd.start

    def test_preview_only_reported_on_change(self, machine, scheduler, recorder, meeting):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(300)
        count = len(recorder.previews)
        machine.pointer_move(101, 546)
        machine.pointer_move(102, 547)
        assert len(recorder.previews) == count
        machine.pointer_move(102, 600)
        assert len(recorder.previews) == count + 1
        assert recorder.previews[-1].minutes == 600

    def test_drop_outside_grid_is_discarded(self, machine, scheduler, recorder, meeting):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(300)
        assert machine.pointer_up(10, 545) is None
        assert recorder.drops == []
        assert recorder.clicks == []
        assert machine.phase is DragPhase.IDLE

    def test_at_most_one_drop_per_gesture(self, machine, scheduler, recorder, meeting):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(300)
        machine.pointer_up(100, 600)
        assert machine.pointer_up(100, 600) is None
        assert len(recorder.drops) == 1

    def test_cancel_clears_preview(self, machine, scheduler, recorder, meeting):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(300)
        machine.cancel()
        assert recorder.previews[-1] is None
        assert machine.pointer_up(100, 545) is None
        assert recorder.drops == []

    def test_late_drop_runs_past_midnight(self, machine, scheduler, recorder, meeting, tz):
        machine.pointer_down(meeting, 100, 545)
        scheduler.advance(300)
        request = machine.pointer_up(100, 5000)
        local_end = request.new_end.astimezone(tz)
        assert local_end.date() == WEEK_START + timedelta(days=1)
        assert (local_end.hour, local_end.minute) == (1, 15)


def test_new_press_replaces_pending_gesture(machine, scheduler, recorder, meeting, make_event):
    other = make_event((2024, 3, 4, 9, 0), (2024, 3, 4, 10, 0))
    machine.pointer_down(meeting, 100, 545)
    machine.pointer_down(other, 200, 545)
    assert scheduler.pending_count() == 1
    machine.pointer_up(200, 545)
    assert recorder.clicks == [other]


def test_dispose_cancels_long_press_timer(machine, scheduler, recorder, meeting):
    machine.pointer_down(meeting, 100, 545)
    machine.dispose()
    assert scheduler.pending_count() == 0
    scheduler.advance(1000)
    assert machine.phase is DragPhase.IDLE
    assert recorder.previews == []
