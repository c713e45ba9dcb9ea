"""Transition table configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _ensure_dict(v: Any) -> dict:
    """Convert None to empty dict, pass through dicts."""
    if v is None:
        return {}
    return v


class KindTransitions(BaseModel):
    """Lifecycle rules for one entity kind.

    ``transitions`` maps a status to the statuses reachable in one step. A
    status with no entry, or an empty list, is terminal. When ``strict`` is
    False the table is ignored and every status reaches every other.
    """

    strict: bool = Field(default=True)
    transitions: dict[str, list[str]] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("transitions", mode="before")
    @classmethod
    def _validate_transitions(cls, v: Any) -> dict:
        v = _ensure_dict(v)
        if isinstance(v, dict):
            return {k: (val if val is not None else []) for k, val in v.items()}
        return v

    @field_validator("labels", mode="before")
    @classmethod
    def _validate_labels(cls, v: Any) -> dict:
        return _ensure_dict(v)


class TransitionConfig(BaseModel):
    version: int = Field(default=1)
    kinds: dict[str, KindTransitions] = Field(default_factory=dict)

    @field_validator("kinds", mode="before")
    @classmethod
    def _validate_kinds(cls, v: Any) -> dict:
        return _ensure_dict(v)

    @classmethod
    def from_yaml(cls, data: dict[str, object]) -> "TransitionConfig":
        return cls.model_validate(data)
