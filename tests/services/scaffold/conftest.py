from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from src.services.scaffold.config import ScaffoldSettings
from src.services.scaffold.engine import ProgressionEngine
from src.services.scaffold.loader import load_problem
from src.services.scaffold.scheduler import ScheduledTask, Scheduler
from src.services.scaffold.schemas import Problem

FIXTURES_DIR = Path(__file__).resolve().parents[2] / "fixtures"


class ManualTask(ScheduledTask):
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.ran = False
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler whose tasks only run when the test fires them."""

    def __init__(self) -> None:
        self.tasks: list[ManualTask] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ManualTask(delay, callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> list[ManualTask]:
        return [t for t in self.tasks if not t.cancelled and not t.ran]

    def fire(self, task: ManualTask) -> None:
        # Fires even cancelled tasks, to model a timer that raced its cancel().
        task.ran = True
        task.callback()

    def run_pending(self) -> None:
        for task in self.pending:
            self.fire(task)


def make_problem(*steps: dict[str, Any]) -> Problem:
    return Problem.model_validate(
        {
            "id": "p1",
            "title": "Test Problem",
            "difficulty": "Easy",
            "description": "",
            "steps": list(steps),
        }
    )


def make_step(step_id: Any, rule: str = "^A$", *, hints: list[str] | None = None, **extra: Any) -> dict[str, Any]:
    data = {
        "stepId": step_id,
        "instruction": f"Step {step_id}",
        "placeholderCode": "",
        "validationType": "regex",
        "validationRule": rule,
        "hints": hints if hints is not None else [],
    }
    data.update(extra)
    return data


@pytest.fixture
def settings() -> ScaffoldSettings:
    return ScaffoldSettings()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def sample_problem() -> Problem:
    return load_problem(FIXTURES_DIR / "sample_problem.yaml")


@pytest.fixture
def two_step_engine(settings: ScaffoldSettings, scheduler: ManualScheduler) -> ProgressionEngine:
    problem = make_problem(
        make_step(1, "^A$", hints=["h1", "h2", "h3"]),
        make_step(2, "^B$", hints=["only hint"]),
    )
    return ProgressionEngine(problem, settings=settings, scheduler=scheduler)


@pytest.fixture
def sample_engine(sample_problem: Problem, settings: ScaffoldSettings, scheduler: ManualScheduler) -> ProgressionEngine:
    return ProgressionEngine(sample_problem, settings=settings, scheduler=scheduler)


@pytest.fixture
def build_engine(settings: ScaffoldSettings, scheduler: ManualScheduler) -> Callable[..., ProgressionEngine]:
    """Factory: ``build_engine(step_dict, ...)`` or ``build_engine(..., settings=...)``."""

    def _build(*steps: dict[str, Any], settings: ScaffoldSettings = settings) -> ProgressionEngine:
        return ProgressionEngine(make_problem(*steps), settings=settings, scheduler=scheduler)

    return _build


@pytest.fixture
def step() -> Callable[..., dict[str, Any]]:
    return make_step
