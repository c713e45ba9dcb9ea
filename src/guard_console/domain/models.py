"""Records, queries and page envelopes exchanged with the console API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from guard_console.domain.kinds import EntityKind, get_kind_spec

FilterValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class Query:
    page: int = 1
    per_page: int = 10
    filters: Mapping[str, FilterValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.per_page < 1:
            raise ValueError(f"per_page must be > 0, got {self.per_page}")

    def to_params(self) -> dict[str, FilterValue]:
        """Flatten into request parameters, omitting unset filters."""
        params: dict[str, FilterValue] = {
            key: value for key, value in self.filters.items() if value is not None
        }
        params["page"] = self.page
        params["per_page"] = self.per_page
        return params


@dataclass
class Entity:
    id: int
    kind: EntityKind
    status: str | None = None
    flags: dict[str, bool] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, kind: EntityKind | str, payload: Mapping[str, Any]) -> "Entity":
        spec = get_kind_spec(kind)
        raw_id = payload.get("id")
        if raw_id is None:
            raise ValueError(f"{spec.noun} record has no id")
        status = payload.get(spec.status_field)
        flags = {
            name: bool(payload[name]) for name in spec.flags if payload.get(name) is not None
        }
        return cls(
            id=int(raw_id),
            kind=spec.kind,
            status=str(status) if status is not None else None,
            flags=flags,
            data=dict(payload),
        )

    def flag(self, name: str) -> bool:
        return self.flags.get(name, False)


@dataclass
class PageEnvelope:
    items: list[Entity]
    current_page: int = 1
    last_page: int = 1
    total: int = 0
    per_page: int = 10

    def __post_init__(self) -> None:
        if len(self.items) > self.per_page:
            raise ValueError(
                f"page holds {len(self.items)} items but per_page is {self.per_page}"
            )
        if self.last_page >= 1 and self.current_page > self.last_page:
            raise ValueError(
                f"current_page {self.current_page} exceeds last_page {self.last_page}"
            )

    @classmethod
    def empty(cls, per_page: int = 10) -> "PageEnvelope":
        return cls(items=[], current_page=1, last_page=1, total=0, per_page=per_page)

    @classmethod
    def from_body(
        cls,
        kind: EntityKind | str,
        body: Mapping[str, Any],
        query: Query,
    ) -> "PageEnvelope":
        """Parse ``{"items": [...], "data": {...pagination...}}``."""
        raw_items = body.get("items") or []
        if not isinstance(raw_items, list):
            raise ValueError("page body 'items' must be a list")
        meta = body.get("data")
        if not isinstance(meta, Mapping):
            meta = {}
        per_page = int(meta.get("per_page") or query.per_page)
        items = [Entity.from_payload(kind, item) for item in raw_items if isinstance(item, Mapping)]
        current_page = int(meta.get("current_page") or query.page)
        last_page = int(meta.get("last_page") or 0)
        # Paginators answer a page past the end with no items and the real
        # last_page; report it as the last page rather than rejecting it.
        if not items and last_page >= 1 and current_page > last_page:
            current_page = last_page
        return cls(
            items=items,
            current_page=current_page,
            last_page=last_page,
            total=int(meta.get("total") or len(items)),
            per_page=per_page,
        )

    @property
    def ids(self) -> tuple[int, ...]:
        return tuple(item.id for item in self.items)

    def find(self, entity_id: int) -> Entity | None:
        for item in self.items:
            if item.id == entity_id:
                return item
        return None
