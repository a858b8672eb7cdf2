from __future__ import annotations

import asyncio
import inspect
import threading

from src.services.scaffold.config import ScaffoldSettings
from src.services.scaffold.engine import ProgressionEngine
from src.services.scaffold.scheduler import AsyncioScheduler, ThreadingScheduler


def test_threading_scheduler_runs_callback():
    fired = threading.Event()

    ThreadingScheduler().call_later(0.01, fired.set)

    assert fired.wait(timeout=5)


def test_threading_scheduler_cancel():
    fired = threading.Event()

    task = ThreadingScheduler().call_later(0.2, fired.set)
    task.cancel()
    task.cancel()

    assert task.cancelled is True
    assert not fired.wait(timeout=0.4)


def test_asyncio_scheduler_runs_and_cancels():
    async def scenario() -> list[str]:
        calls: list[str] = []
        scheduler = AsyncioScheduler()
        scheduler.call_later(0.01, lambda: calls.append("kept"))
        dropped = scheduler.call_later(0.01, lambda: calls.append("dropped"))
        dropped.cancel()
        await asyncio.sleep(0.05)
        assert dropped.cancelled is True
        return calls

    assert asyncio.run(scenario()) == ["kept"]


def test_engine_clears_message_on_event_loop():
    problem = {"id": "p", "steps": [{"stepId": 1, "validationRule": "^A$"}, {"stepId": 2}]}

    async def scenario() -> tuple[str | None, str | None]:
        engine = ProgressionEngine(
            problem,
            settings=ScaffoldSettings(advance_message_delay_seconds=0.01),
            scheduler=AsyncioScheduler(),
        )
        engine.update_code("A")
        engine.submit_step()
        before = engine.validation_message
        await asyncio.sleep(0.05)
        return before, engine.validation_message

    before, after = asyncio.run(scenario())

    assert before is not None
    assert after is None


def _two_step_problem() -> dict:
    return {"id": "p", "steps": [{"stepId": 1, "validationRule": "^A$"}, {"stepId": 2, "validationRule": "^B$"}]}


def test_engine_clears_message_on_timer_thread():
    cleared = threading.Event()
    engine = ProgressionEngine(
        _two_step_problem(),
        settings=ScaffoldSettings(advance_message_delay_seconds=0.01),
        scheduler=ThreadingScheduler(),
    )
    engine.add_listener(
        lambda e: cleared.set() if e.current_step_index == 1 and e.validation_message is None else None
    )
    engine.update_code("A")
    engine.submit_step()

    assert cleared.wait(timeout=5)
    assert engine.current_step_index == 1


def test_timer_clear_cannot_erase_newer_feedback():
    engine = ProgressionEngine(
        _two_step_problem(),
        settings=ScaffoldSettings(advance_message_delay_seconds=0.01),
        scheduler=ThreadingScheduler(),
    )
    clear_code = ProgressionEngine._clear_transient.__code__
    source, start = inspect.getsourcelines(ProgressionEngine._clear_transient)
    clear_line = start + next(
        i for i, line in enumerate(source) if "self._validation_message = None" in line
    )
    paused = threading.Event()
    resume = threading.Event()

    def line_tracer(frame, event, arg):
        if event == "line" and frame.f_lineno == clear_line:
            paused.set()
            resume.wait(timeout=5)
        return line_tracer

    def call_tracer(frame, event, arg):
        if frame.f_code is clear_code:
            return line_tracer
        return None

    # Pause the timer thread after its token check, right before it clears.
    threading.settrace(call_tracer)
    try:
        engine.update_code("A")
        engine.submit_step()
    finally:
        threading.settrace(None)
    assert paused.wait(timeout=5)

    def submit_wrong() -> None:
        engine.update_code("wrong")
        engine.submit_step()

    learner = threading.Thread(target=submit_wrong)
    learner.start()
    learner.join(timeout=0.2)
    assert learner.is_alive()

    resume.set()
    learner.join(timeout=5)

    assert not learner.is_alive()
    assert engine.validation_message == engine.settings.incorrect_message
    assert engine.is_validation_error is True
