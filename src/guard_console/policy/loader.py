"""Loader for transitions.yaml."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from guard_console.policy.models import TransitionConfig

logger = logging.getLogger(__name__)


def load_transitions(path: str | None) -> TransitionConfig:
    """Read per-kind transition overrides; a missing file means built-ins only."""
    if not path:
        return TransitionConfig()
    config_path = Path(path)
    if not config_path.exists():
        logger.debug("No transitions file at %s, using built-in tables", config_path)
        return TransitionConfig()
    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Transitions file must contain a mapping: {config_path}")
    return TransitionConfig.from_yaml(data)
