"""Load problem definitions from YAML/JSON files or plain mappings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError
import yaml

from .schemas import Problem

SUPPORTED_SUFFIXES = {".yaml", ".yml", ".json"}


class ProblemLoadError(ValueError):
    """Raised when a problem definition cannot be read or parsed."""


def problem_from_dict(data: Mapping[str, Any]) -> Problem:
    """Build a ``Problem`` from its authored (camelCase) mapping."""
    if not isinstance(data, Mapping):
        raise ProblemLoadError("problem definition must be a mapping")
    try:
        return Problem.model_validate(dict(data))
    except ValidationError as e:
        raise ProblemLoadError(f"invalid problem definition: {e}") from e


def load_problem(path: str | Path) -> Problem:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ProblemLoadError(f"unsupported problem file type: {path.suffix or path.name}")

    try:
        with open(path, encoding="utf-8") as f:
            if suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ProblemLoadError(f"problem file not found: {path}") from e
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ProblemLoadError(f"failed to read problem file {path}: {e}") from e

    return problem_from_dict(data or {})
