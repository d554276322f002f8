from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Dict

import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "api_base_url": "http://localhost:8000/api/v1",
    "session_file": "~/.akibaflow/session.json",
    "currency": "KES",
    "account_type": "checking",
    "page_size": 100,
    "dashboard_limit": 5,
    "budget_rule": {
        "needs": 50,
        "wants": 30,
        "savings": 20,
    },
    "budgets": {},
}

CONFIG_PATH = Path("config.yaml")

ENV_OVERRIDES = {
    "AKIBAFLOW_API_BASE_URL": "api_base_url",
    "AKIBAFLOW_SESSION_FILE": "session_file",
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def _read(path: Path) -> Dict[str, object]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fp:
        return yaml.safe_load(fp) or {}


def load_config(path: Path | None = None) -> Dict[str, object]:
    """Config file merged over the defaults, then environment overrides."""
    config = _merge_defaults(_read(Path(path or CONFIG_PATH)), DEFAULT_CONFIG)
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value
    return config


def save_config(config: Dict[str, object], path: Path | None = None) -> None:
    target = Path(path or CONFIG_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(config, fp, sort_keys=False)


def set_budget(name: str, limit: float, path: Path | None = None) -> Dict[str, object]:
    # edit the raw file so environment overrides are not written back
    config = _read(Path(path or CONFIG_PATH))
    budgets = config.get("budgets") or {}
    budgets[name] = limit
    config["budgets"] = budgets
    save_config(config, path)
    return config


def remove_budget(name: str, path: Path | None = None) -> Dict[str, object]:
    config = _read(Path(path or CONFIG_PATH))
    budgets = config.get("budgets") or {}
    budgets.pop(name, None)
    config["budgets"] = budgets
    save_config(config, path)
    return config
