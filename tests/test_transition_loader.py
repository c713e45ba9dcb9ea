from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from guard_console.policy.engine import TransitionPolicy
from guard_console.policy.loader import load_transitions


def test_missing_path_returns_empty_config() -> None:
    assert load_transitions(None).kinds == {}
    assert load_transitions("").kinds == {}


def test_missing_file_returns_empty_config(tmp_path: Path) -> None:
    config = load_transitions(str(tmp_path / "nope.yaml"))
    assert config.kinds == {}


def test_loads_kind_tables(tmp_path: Path) -> None:
    path = tmp_path / "transitions.yaml"
    path.write_text(
        "version: 1\n"
        "kinds:\n"
        "  attendance:\n"
        "    transitions:\n"
        "      pending: [approved]\n"
        "      approved:\n",
        encoding="utf-8",
    )
    config = load_transitions(str(path))
    rules = config.kinds["attendance"]
    assert rules.strict is True
    assert rules.transitions == {"pending": ["approved"], "approved": []}

    policy = TransitionPolicy.from_config(config)
    assert policy.is_legal("attendance", "pending", "approved")
    assert not policy.is_legal("attendance", "approved", "pending")


def test_empty_file_returns_empty_config(tmp_path: Path) -> None:
    path = tmp_path / "transitions.yaml"
    path.write_text("", encoding="utf-8")
    assert load_transitions(str(path)).kinds == {}


def test_non_mapping_rejected(tmp_path: Path) -> None:
    path = tmp_path / "transitions.yaml"
    path.write_text("- assignment\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_transitions(str(path))


def test_invalid_shape_rejected(tmp_path: Path) -> None:
    path = tmp_path / "transitions.yaml"
    path.write_text("kinds:\n  assignment:\n    strict: maybe\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_transitions(str(path))


def test_shipped_transitions_file_matches_builtins() -> None:
    shipped = Path(__file__).resolve().parents[1] / "transitions.yaml"
    policy = TransitionPolicy.from_config(load_transitions(str(shipped)))
    builtin = TransitionPolicy()
    for status in ("assigned", "active", "completed", "cancelled"):
        assert policy.available_actions("assignment", status) == builtin.available_actions(
            "assignment", status
        )
