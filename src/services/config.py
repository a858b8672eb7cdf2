"""
YAML configuration loader.

Module configs live under ``config/``; ``config/main.yaml`` holds the shared
sections and is merged underneath the module-specific file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_DIR_NAME = "config"
MAIN_CONFIG_FILE = "main.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_with_main(config_file: str, project_root: Path | None = None) -> dict[str, Any]:
    """
    Load ``config/<config_file>`` merged over ``config/main.yaml``.

    Missing files are treated as empty. Keys from the module file win.
    """
    if project_root is None:
        project_root = PROJECT_ROOT

    config_dir = Path(project_root) / CONFIG_DIR_NAME
    main_cfg = _load_yaml(config_dir / MAIN_CONFIG_FILE)
    if config_file == MAIN_CONFIG_FILE:
        return main_cfg

    module_cfg = _load_yaml(config_dir / config_file)
    return _deep_merge(main_cfg, module_cfg)
