import json

from polypin_playground.drag import DragState
from polypin_playground.session import (
    IMPORT_INVALID,
    REDRAW_FINISHED,
    REDRAW_STARTED,
    EditorSession,
    InputEvent,
    Severity,
    StatusMessage,
)


def click(session, x, y):
    session.handle_event(InputEvent.press(x, y))
    return session.handle_event(InputEvent.release(x, y))


def test_click_click_undo_undo(session):
    assert click(session, 100, 100)
    assert session.points() == [(100.0, 100.0)]
    assert session.geometry.first_pin_fixed
    assert click(session, 200, 100)
    assert session.points() == [(100.0, 100.0), (200.0, 100.0)]

    assert session.handle_event(InputEvent.keydown("Backspace"))
    assert session.points() == [(100.0, 100.0)]
    assert session.handle_event(InputEvent.keydown("Backspace"))
    assert session.points() == [(100.0, 100.0)]


def test_unrelated_key_is_not_consumed(session):
    click(session, 10, 10)
    assert not session.handle_event(InputEvent.keydown("a"))


def test_drag_moves_only_the_last_pin(session):
    click(session, 100, 100)
    click(session, 200, 100)
    session.handle_event(InputEvent.press(202, 101))
    assert session.drag_state is DragState.ARMED
    session.handle_event(InputEvent.move(230, 130))
    assert session.drag_state is DragState.DRAGGING
    session.handle_event(InputEvent.move(250, 150))
    assert session.handle_event(InputEvent.release(250, 150))
    assert session.points() == [(100.0, 100.0), (250.0, 150.0)]
    assert session.drag_state is DragState.IDLE


def test_press_and_drag_off_target_places_nothing(session):
    click(session, 100, 100)
    click(session, 200, 100)
    session.handle_event(InputEvent.press(400, 300))
    session.handle_event(InputEvent.move(450, 330))
    session.handle_event(InputEvent.release(450, 330))
    assert session.points() == [(100.0, 100.0), (200.0, 100.0)]


def test_export_import_round_trip_replays_points(session, scheduler, messages):
    for x, y in [(10, 10), (20, 30), (40, 15)]:
        click(session, x, y)
    text = session.export_text()
    assert json.loads(text) == [
        {"x": 10.0, "y": 10.0},
        {"x": 20.0, "y": 30.0},
        {"x": 40.0, "y": 15.0},
    ]

    assert session.import_text(text)
    assert session.redraw_running
    assert session.points() == [(10.0, 10.0)]
    assert messages[-1] == StatusMessage(REDRAW_STARTED, Severity.SUCCESS)

    scheduler.run_all()
    assert not session.redraw_running
    assert session.points() == [(10.0, 10.0), (20.0, 30.0), (40.0, 15.0)]
    assert messages[-1] == StatusMessage(REDRAW_FINISHED, Severity.INFO)


def test_invalid_imports_leave_geometry_untouched(session, messages):
    click(session, 5, 5)
    click(session, 6, 6)
    for text in ["[]", '[{"x": 1, "y": 1}]', "not json", '[{"x": 1}, {"x": 2, "y": 2}]']:
        assert not session.import_text(text)
        assert session.points() == [(5.0, 5.0), (6.0, 6.0)]
        assert messages[-1] == StatusMessage(IMPORT_INVALID, Severity.ERROR)
    assert not session.redraw_running


def test_manual_edits_are_ignored_while_redrawing(session, scheduler):
    session.import_text('[{"x": 1, "y": 1}, {"x": 2, "y": 2}, {"x": 3, "y": 3}]')
    assert not click(session, 300, 300)
    assert session.handle_event(InputEvent.keydown("Backspace"))
    session.handle_event(InputEvent.press(1, 1))
    assert session.drag_state is DragState.IDLE
    assert not session.undo()
    assert session.points() == [(1.0, 1.0)]

    scheduler.run_all()
    assert session.points() == [(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)]
    assert click(session, 300, 300)
    assert session.points()[-1] == (300.0, 300.0)


def test_new_import_cancels_running_redraw(session, scheduler):
    session.import_text('[{"x": 1, "y": 1}, {"x": 2, "y": 2}, {"x": 3, "y": 3}]')
    scheduler.advance(200)
    session.import_text('[{"x": 9, "y": 9}, {"x": 8, "y": 8}]')
    scheduler.run_all()
    assert session.points() == [(9.0, 9.0), (8.0, 8.0)]


def test_import_cancels_drag_in_progress(session):
    click(session, 100, 100)
    click(session, 200, 100)
    session.handle_event(InputEvent.press(200, 100))
    session.handle_event(InputEvent.move(240, 100))
    session.import_text('[{"x": 1, "y": 1}, {"x": 2, "y": 2}]')
    assert session.drag_state is DragState.IDLE
    session.handle_event(InputEvent.move(260, 100))
    assert session.points() == [(1.0, 1.0)]


def test_undo_cancels_drag_of_removed_pin(session):
    click(session, 100, 100)
    click(session, 200, 100)
    session.handle_event(InputEvent.press(200, 100))
    session.handle_event(InputEvent.keydown("Backspace"))
    assert session.drag_state is DragState.IDLE
    session.handle_event(InputEvent.move(260, 100))
    assert session.points() == [(100.0, 100.0)]


def test_close_stops_redraw_and_events(session, scheduler):
    session.import_text('[{"x": 1, "y": 1}, {"x": 2, "y": 2}]')
    session.close()
    session.close()
    scheduler.run_all()
    assert session.points() == [(1.0, 1.0)]
    assert session.closed
    assert not session.handle_event(InputEvent.press(50, 50))
    assert not session.import_text('[{"x": 1, "y": 1}, {"x": 2, "y": 2}]')


def test_frame_ticks_pulse_before_rendering(session, surface):
    click(session, 0, 0)
    click(session, 10, 0)
    session.frame(surface)
    assert surface.calls[-1] == ("disc", (10.0, 0.0), 10.5, "red")
    surface.calls.clear()
    session.render(surface)
    assert surface.calls[-1][2] == 10.5


def test_metrics_and_change_notifications(scheduler):
    changes = []
    session = EditorSession(scheduler, on_change=lambda: changes.append(session.metrics()))
    click(session, 0, 0)
    click(session, 3, 4)
    assert session.metrics() == {"count": 2.0, "length": 5.0}
    assert len(changes) == 2
    session.undo()
    assert changes[-1] == {"count": 1.0, "length": 0.0}


def test_handler_failures_are_reported_not_raised(session, messages, monkeypatch):
    def boom(*_args, **_kwargs):
        raise RuntimeError("kaput")

    monkeypatch.setattr(session.drag, "press", boom)
    assert session.handle_event(InputEvent.press(1, 1))
    assert messages[-1].severity is Severity.ERROR
    assert "kaput" in messages[-1].text


def test_small_drag_moves_last_pin_instead_of_placing(session):
    click(session, 100, 100)
    click(session, 200, 100)
    session.handle_event(InputEvent.press(200, 100))
    session.handle_event(InputEvent.move(202, 100))
    assert session.handle_event(InputEvent.release(202, 100))
    assert session.points() == [(100.0, 100.0), (202.0, 100.0)]


def test_oversized_or_non_finite_imports_are_rejected(session, messages):
    click(session, 5, 5)
    click(session, 6, 6)
    payloads = [
        '[{"x": ' + "9" * 400 + ', "y": 1}, {"x": 1, "y": 2}]',
        '[{"x": ' + "9" * 5000 + ', "y": 1}, {"x": 1, "y": 2}]',
        "[" * 100000 + "]" * 100000,
        '[{"x": NaN, "y": 1}, {"x": Infinity, "y": 2}]',
        '[{"x": 1e400, "y": 1}, {"x": 2, "y": 2}]',
    ]
    for text in payloads:
        assert not session.import_text(text)
        assert messages[-1] == StatusMessage(IMPORT_INVALID, Severity.ERROR)
        assert session.points() == [(5.0, 5.0), (6.0, 6.0)]
    assert not session.redraw_running


def test_clear_background(session, surface):
    assert not session.clear_background()
    session.set_background("bitmap")
    assert session.clear_background()
    assert session.background is None
    session.render(surface)
    assert "image" not in surface.kinds()
