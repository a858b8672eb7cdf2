# -*- coding: utf-8 -*-
"""
Progression Engine
==================

State machine for one scaffolded problem-solving session.

The learner edits code for the active step, reveals hints, and submits; a
successful submission unlocks the next step. Any unlocked step can be viewed
again in read-only review mode without losing progress.

Usage:
    from src.services.scaffold import ProgressionEngine, load_problem

    engine = ProgressionEngine(load_problem("problems/linked_list_cycle.yaml"))
    engine.update_code("slow = head\\nfast = head")
    if engine.submit_step():
        render(engine.snapshot())
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping, Optional, Union

from src.logging import get_logger

from .config import ScaffoldSettings, get_scaffold_settings
from .loader import problem_from_dict
from .scheduler import ScheduledTask, Scheduler, ThreadingScheduler
from .schemas import Problem, Step, StepId
from .validators import validate_code

Listener = Callable[["ProgressionEngine"], None]


class InvalidProblemError(ValueError):
    """Raised when an engine is constructed for a problem without steps."""


class ProgressionEngine:
    """
    Step progression, validation and hint state for a single problem.

    Raw state is exposed through read-only properties; derived values are
    recomputed on every access.
    """

    def __init__(
        self,
        problem: Union[Problem, Mapping[str, Any]],
        *,
        settings: Optional[ScaffoldSettings] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        if not isinstance(problem, Problem):
            problem = problem_from_dict(problem)
        if not problem.steps:
            raise InvalidProblemError("problem must contain at least one step")

        self._problem = problem
        self._settings = settings or get_scaffold_settings()
        self._scheduler = scheduler or ThreadingScheduler()
        self._listeners: list[Listener] = []
        self._pending_clear: Optional[ScheduledTask] = None
        self._feedback_token = 0
        self._lock = threading.RLock()
        self.logger = get_logger("ProgressionEngine", log_dir=self._settings.log_dir)

        self._init_state()

    def _init_state(self) -> None:
        self._current_step_index = 0
        self._viewing_step_index = 0
        self._code_by_step: dict[StepId, str] = {
            step.step_id: step.placeholder_code or "" for step in self._problem.steps
        }
        self._hint_level = 0
        self._hints_used_by_step: dict[StepId, int] = {
            step.step_id: 0 for step in self._problem.steps
        }
        self._is_hint_visible = False
        self._validation_message: Optional[str] = None
        self._is_validation_error = False
        self._is_completed = False

    # ------------------------------------------------------------------
    # Raw state
    # ------------------------------------------------------------------

    @property
    def problem(self) -> Problem:
        return self._problem

    @property
    def settings(self) -> ScaffoldSettings:
        return self._settings

    @property
    def current_step_index(self) -> int:
        return self._current_step_index

    @property
    def viewing_step_index(self) -> int:
        return self._viewing_step_index

    @property
    def code_by_step(self) -> dict[StepId, str]:
        return dict(self._code_by_step)

    @property
    def hint_level(self) -> int:
        return self._hint_level

    @property
    def hints_used_by_step(self) -> dict[StepId, int]:
        return dict(self._hints_used_by_step)

    @property
    def is_hint_visible(self) -> bool:
        return self._is_hint_visible

    @property
    def validation_message(self) -> Optional[str]:
        return self._validation_message

    @property
    def is_validation_error(self) -> bool:
        return self._is_validation_error

    @property
    def is_completed(self) -> bool:
        return self._is_completed

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> Step:
        return self._problem.steps[self._current_step_index]

    @property
    def viewing_step(self) -> Step:
        return self._problem.steps[self._viewing_step_index]

    @property
    def is_review_mode(self) -> bool:
        return self._viewing_step_index < self._current_step_index

    @property
    def displayed_code(self) -> str:
        return self._code_by_step[self.viewing_step.step_id]

    @property
    def active_code(self) -> str:
        return self._code_by_step[self.current_step.step_id]

    @property
    def total_steps(self) -> int:
        return len(self._problem.steps)

    @property
    def is_last_step(self) -> bool:
        return self._current_step_index == self.total_steps - 1

    @property
    def progress(self) -> float:
        """Fraction of the problem solved, in [0, 1]."""
        return (self._current_step_index + (1 if self._is_completed else 0)) / self.total_steps

    @property
    def progress_percent(self) -> float:
        return self.progress * 100

    @property
    def max_hints(self) -> int:
        return len(self.viewing_step.hints)

    @property
    def has_more_hints(self) -> bool:
        return self._hint_level < self.max_hints

    @property
    def revealed_hints(self) -> list[str]:
        return list(self.viewing_step.hints[: self._hint_level])

    @property
    def total_hints_used(self) -> int:
        return sum(self._hints_used_by_step.values())

    def _hint_step(self) -> Step:
        # Step whose hint list bounds reveal_next_hint and receives usage.
        if self._settings.hint_scope == "viewed":
            return self.viewing_step
        return self.current_step

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def update_code(self, new_code: str) -> None:
        """Store code for the active step. Ignored in review mode."""
        with self._lock:
            if self.is_review_mode:
                return

            self._code_by_step[self.current_step.step_id] = new_code
            if self._validation_message is not None:
                self._clear_feedback()
            self._notify()

    def toggle_hint(self) -> None:
        with self._lock:
            self._is_hint_visible = not self._is_hint_visible
            self._notify()

    def reveal_next_hint(self) -> bool:
        """
        Reveal one more hint. Returns False once all hints are shown.

        With ``hint_scope="current"`` the bound and the usage record belong to
        the active step, even in review mode. Reviewing a step with fewer hints
        than the active one can then leave ``hint_level`` above ``max_hints``;
        ``revealed_hints`` still slices only the viewed step's own list.
        ``hint_scope="viewed"`` keeps ``hint_level <= max_hints`` everywhere.
        """
        with self._lock:
            step = self._hint_step()
            if self._hint_level >= len(step.hints):
                return False

            self._hint_level += 1
            self._is_hint_visible = True
            previous = self._hints_used_by_step.get(step.step_id, 0)
            self._hints_used_by_step[step.step_id] = max(previous, self._hint_level)
            self.logger.debug(f"Hint {self._hint_level}/{len(step.hints)} revealed for step {step.step_id}")
            self._notify()
            return True

    def validate(self) -> bool:
        """Check the displayed code against the active step's rule. No side effects."""
        with self._lock:
            return validate_code(self.current_step, self.displayed_code)

    def submit_step(self) -> bool:
        with self._lock:
            is_valid = self.validate()

            if not is_valid:
                self._set_feedback(self._settings.incorrect_message, is_error=True)
                self.logger.debug(f"Step {self.current_step.step_id} submission rejected")
                self._notify()
                return False

            if self.is_last_step:
                self._is_completed = True
                self._set_feedback(self._settings.completion_message, is_error=False)
                self.logger.success(f"Problem {self._problem.id} completed")
            else:
                self._current_step_index += 1
                self._viewing_step_index = self._current_step_index
                self._hint_level = 0
                self._is_hint_visible = False
                token = self._set_feedback(self._settings.advance_message, is_error=False)
                self._pending_clear = self._scheduler.call_later(
                    self._settings.advance_message_delay_seconds,
                    lambda: self._clear_transient(token),
                )
                self.logger.info(
                    f"Advanced to step {self._current_step_index + 1}/{self.total_steps}"
                )

            self._notify()
            return True

    def view_step(self, step_index: int) -> None:
        """Display an unlocked step. Indices outside [0, current] are ignored."""
        with self._lock:
            if step_index < 0 or step_index > self._current_step_index:
                return

            self._viewing_step_index = step_index
            self._hint_level = 0
            self._is_hint_visible = False
            self._clear_feedback()
            self._notify()

    def return_to_current_step(self) -> None:
        with self._lock:
            self.view_step(self._current_step_index)

    def reset(self) -> None:
        with self._lock:
            self._cancel_pending_clear()
            self._feedback_token += 1
            self._init_state()
            self.logger.debug(f"Session for problem {self._problem.id} reset")
            self._notify()

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        """Call ``listener(engine)`` after every state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> dict[str, Any]:
        """Raw and derived view state as plain Python values."""
        with self._lock:
            return {
                "problem_id": self._problem.id,
                "current_step_index": self._current_step_index,
                "viewing_step_index": self._viewing_step_index,
                "current_step_id": self.current_step.step_id,
                "viewing_step_id": self.viewing_step.step_id,
                "is_review_mode": self.is_review_mode,
                "displayed_code": self.displayed_code,
                "active_code": self.active_code,
                "code_by_step": self.code_by_step,
                "hint_level": self._hint_level,
                "max_hints": self.max_hints,
                "has_more_hints": self.has_more_hints,
                "revealed_hints": self.revealed_hints,
                "is_hint_visible": self._is_hint_visible,
                "hints_used_by_step": self.hints_used_by_step,
                "total_hints_used": self.total_hints_used,
                "validation_message": self._validation_message,
                "is_validation_error": self._is_validation_error,
                "is_completed": self._is_completed,
                "total_steps": self.total_steps,
                "is_last_step": self.is_last_step,
                "progress": self.progress,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_feedback(self, message: str, *, is_error: bool) -> int:
        with self._lock:
            self._cancel_pending_clear()
            self._feedback_token += 1
            self._validation_message = message
            self._is_validation_error = is_error
            return self._feedback_token

    def _clear_feedback(self) -> None:
        with self._lock:
            self._cancel_pending_clear()
            self._feedback_token += 1
            self._validation_message = None
            self._is_validation_error = False

    def _cancel_pending_clear(self) -> None:
        if self._pending_clear is not None:
            self._pending_clear.cancel()
            self._pending_clear = None

    def _clear_transient(self, token: int) -> None:
        # Runs on the scheduler's thread; the token check and the clear are one step under the lock.
        with self._lock:
            if token != self._feedback_token:
                return
            self._pending_clear = None
            self._validation_message = None
            self._is_validation_error = False
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                self.logger.warning(f"Engine listener {listener!r} failed: {e}")


__all__ = ["InvalidProblemError", "ProgressionEngine"]
