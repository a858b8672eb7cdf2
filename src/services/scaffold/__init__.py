"""
Scaffolded learning services.

Drives a step-by-step guided coding exercise: per-step code, progressive
hints, rule-based validation and review of completed steps.
"""

from .config import ScaffoldSettings, get_scaffold_settings
from .engine import InvalidProblemError, ProgressionEngine
from .loader import ProblemLoadError, load_problem, problem_from_dict
from .scheduler import AsyncioScheduler, ScheduledTask, Scheduler, ThreadingScheduler
from .schemas import Problem, Step
from .validators import register_validator, supported_validation_types, validate_code

__all__ = [
    "AsyncioScheduler",
    "InvalidProblemError",
    "Problem",
    "ProblemLoadError",
    "ProgressionEngine",
    "ScaffoldSettings",
    "ScheduledTask",
    "Scheduler",
    "Step",
    "ThreadingScheduler",
    "get_scaffold_settings",
    "load_problem",
    "problem_from_dict",
    "register_validator",
    "supported_validation_types",
    "validate_code",
]
