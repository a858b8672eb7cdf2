from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from src.services.config import load_config_with_main

PROJECT_ROOT = Path(__file__).resolve().parents[3]
load_dotenv(PROJECT_ROOT / ".env", override=False)

HINT_SCOPES = ("current", "viewed")

DEFAULT_ADVANCE_DELAY_SECONDS = 2.0
DEFAULT_COMPLETION_MESSAGE = "Congratulations! You have completed the problem!"
DEFAULT_ADVANCE_MESSAGE = "Correct! Moving to the next step..."
DEFAULT_INCORRECT_MESSAGE = (
    "Incorrect. Please check your code and try again. Use hints if you need help!"
)


def _as_float(value: Any, default: float) -> float:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    return float(value)


def _normalize_hint_scope(value: str) -> str:
    scope = (value or "").strip().lower()
    if scope in {"current", "active"}:
        return "current"
    if scope in {"viewed", "viewing", "displayed"}:
        return "viewed"
    raise ValueError(f"Unknown hint scope: {value!r}")


@dataclass(frozen=True)
class ScaffoldSettings:
    advance_message_delay_seconds: float = DEFAULT_ADVANCE_DELAY_SECONDS
    completion_message: str = DEFAULT_COMPLETION_MESSAGE
    advance_message: str = DEFAULT_ADVANCE_MESSAGE
    incorrect_message: str = DEFAULT_INCORRECT_MESSAGE
    hint_scope: str = "current"
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.advance_message_delay_seconds < 0:
            raise ValueError("advance_message_delay_seconds must not be negative")
        if self.hint_scope not in HINT_SCOPES:
            raise ValueError(f"hint_scope must be one of {HINT_SCOPES}")


def get_scaffold_settings(project_root: Path | None = None) -> ScaffoldSettings:
    """
    Get settings for the progression engine.

    Priority:
    1) Environment variables
    2) config/scaffold.yaml over config/main.yaml ("scaffold" section)
    3) Built-in defaults
    """
    if project_root is None:
        project_root = PROJECT_ROOT

    cfg = load_config_with_main("scaffold.yaml", project_root)
    scaffold_cfg = cfg.get("scaffold", {}) or {}
    if not isinstance(scaffold_cfg, dict):
        raise ValueError("'scaffold' config section must be a mapping")

    delay = _as_float(
        os.getenv("SCAFFOLD_ADVANCE_DELAY_SECONDS"),
        _as_float(scaffold_cfg.get("advance_message_delay_seconds"), DEFAULT_ADVANCE_DELAY_SECONDS),
    )
    hint_scope = _normalize_hint_scope(
        os.getenv("SCAFFOLD_HINT_SCOPE") or str(scaffold_cfg.get("hint_scope", "current"))
    )

    log_dir_str = os.getenv("SCAFFOLD_LOG_DIR") or scaffold_cfg.get("log_dir")
    log_dir = None
    if log_dir_str:
        log_dir = Path(log_dir_str)
        if not log_dir.is_absolute():
            log_dir = (Path(project_root) / log_dir).resolve()

    messages = scaffold_cfg.get("messages", {}) or {}

    return ScaffoldSettings(
        advance_message_delay_seconds=delay,
        completion_message=os.getenv("SCAFFOLD_COMPLETION_MESSAGE")
        or messages.get("completion", DEFAULT_COMPLETION_MESSAGE),
        advance_message=os.getenv("SCAFFOLD_ADVANCE_MESSAGE")
        or messages.get("advance", DEFAULT_ADVANCE_MESSAGE),
        incorrect_message=os.getenv("SCAFFOLD_INCORRECT_MESSAGE")
        or messages.get("incorrect", DEFAULT_INCORRECT_MESSAGE),
        hint_scope=hint_scope,
        log_dir=log_dir,
    )
