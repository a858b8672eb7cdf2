# -*- coding: utf-8 -*-
"""
Step Validators
===============

Validation strategies keyed by ``Step.validation_type``.

A strategy takes ``(rule, code)`` and returns whether the code satisfies the
rule. Strategies never raise: a rule that cannot be evaluated counts as a
failed attempt. Unknown validation types always fail.
"""

from __future__ import annotations

import re
from typing import Callable

from src.logging import get_logger

from .schemas import REGEX, Step

logger = get_logger("StepValidator")

ValidatorFunc = Callable[[str, str], bool]

_VALIDATORS: dict[str, ValidatorFunc] = {}


def validate_regex(rule: str, code: str) -> bool:
    """
    Case-insensitive, dot-matches-newline search of ``rule`` in ``code``.

    Rules use Python ``re`` syntax: ``$`` also matches before one trailing
    newline, so ``^A$`` accepts an editor buffer ending in ``"A\\n"``. Use
    ``\\Z`` to require the very end of the code.
    """
    try:
        pattern = re.compile(rule, re.IGNORECASE | re.DOTALL)
    except re.error as e:
        logger.warning(f"Invalid regex pattern {rule!r}: {e}")
        return False
    return pattern.search(code) is not None


def register_validator(validation_type: str, func: ValidatorFunc) -> None:
    """Register (or replace) the strategy for ``validation_type``."""
    _VALIDATORS[validation_type] = func


def supported_validation_types() -> list[str]:
    return sorted(_VALIDATORS)


def validate_code(step: Step, code: str) -> bool:
    """Evaluate ``code`` against the step's rule using its validation type."""
    validator = _VALIDATORS.get(step.validation_type)
    if validator is None:
        logger.debug(f"Unsupported validation type {step.validation_type!r} for step {step.step_id}")
        return False

    try:
        return bool(validator(step.validation_rule, code))
    except Exception as e:
        logger.warning(f"Validator {step.validation_type!r} failed for step {step.step_id}: {e}")
        return False


register_validator(REGEX, validate_regex)
