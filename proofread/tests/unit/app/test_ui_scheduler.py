from __future__ import annotations

import threading

from proofread.tests.unit.app.helpers import make_ui


def test_schedule_once_fires_once_after_delay() -> None:
    ui, clock = make_ui()
    calls = []

    ui.schedule_once(800, lambda: calls.append(clock.now_ms))
    clock.advance(799)
    assert calls == []
    clock.advance(1)
    clock.advance(2000)

    assert calls == [800]


def test_cancel_is_idempotent_and_safe_after_fire() -> None:
    ui, clock = make_ui()
    fired = []

    pending = ui.schedule_once(100, lambda: fired.append("pending"))
    pending.cancel()
    pending.cancel()
    clock.advance(200)

    done = ui.schedule_once(100, lambda: fired.append("done"))
    clock.advance(200)
    done.cancel()

    assert fired == ["done"]
    assert len(clock.cancelled) == 1
    assert pending.cancelled and not pending.fired
    assert done.fired and not done.cancelled


def test_cancel_tolerates_host_errors() -> None:
    ui, clock = make_ui()

    def _broken(token):
        raise RuntimeError("window destroyed")

    ui._cancel = _broken
    task = ui.schedule_once(100, lambda: None)

    task.cancel()

    assert task.cancelled


def test_call_soon_from_worker_runs_on_drain() -> None:
    ui, clock = make_ui()
    ran = []

    worker = threading.Thread(target=lambda: ui.call_soon(lambda: ran.append("x")))
    worker.start()
    worker.join()

    assert ran == []
    assert ui.drain() == 1
    assert ran == ["x"]


def test_pump_drains_queue_periodically_until_stopped() -> None:
    ui, clock = make_ui()
    ran = []

    ui.start()
    ui.call_soon(lambda: ran.append(1))
    clock.advance(30)
    ui.call_soon(lambda: ran.append(2))
    clock.advance(30)
    ui.stop()
    ui.call_soon(lambda: ran.append(3))
    clock.advance(100)

    assert ran == [1, 2]
    assert clock.pending == 0


def test_failing_callback_does_not_stop_drain() -> None:
    ui, clock = make_ui()
    ran = []

    def _boom():
        raise ValueError("boom")

    ui.call_soon(_boom)
    ui.call_soon(lambda: ran.append("after"))

    assert ui.drain() == 2
    assert ran == ["after"]
