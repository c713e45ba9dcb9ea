"""Entity kinds and the remote endpoints that serve them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from guard_console.errors import UnknownEntityKindError

HttpMethod = Literal["GET", "PATCH", "POST", "PUT"]


class EntityKind(str, Enum):
    CLIENT = "client"
    GUARD = "guard"
    ASSIGNMENT = "assignment"
    ATTENDANCE = "attendance"
    INCIDENT = "incident"
    COMPLAINT = "complaint"
    EXPENSE_REVIEW = "expense_review"


@dataclass(frozen=True)
class StatusEndpoint:
    """How a status (or decision) change is sent.

    ``path`` is formatted with ``id``. When ``in_query`` is true the value
    travels as a query parameter, otherwise as a JSON body.
    """

    path: str
    param: str = "status"
    method: HttpMethod = "GET"
    in_query: bool = True


@dataclass(frozen=True)
class FlagEndpoint:
    path: str
    method: HttpMethod = "GET"
    in_query: bool = True
    numeric: bool = True
    param: str | None = None


@dataclass(frozen=True)
class KindSpec:
    kind: EntityKind
    noun: str
    resource: str
    statuses: tuple[str, ...] = ()
    status_field: str = "status"
    status_labels: dict[str, str] = field(default_factory=dict)
    action_labels: dict[str, str] = field(default_factory=dict)
    status_endpoint: StatusEndpoint | None = None
    flags: dict[str, FlagEndpoint] = field(default_factory=dict)
    date_filter_keys: tuple[str, ...] = ("date",)

    @property
    def plural(self) -> str:
        return f"{self.noun}s"

    @property
    def title(self) -> str:
        return self.noun.title()

    @property
    def supports_status(self) -> bool:
        return self.status_endpoint is not None and bool(self.statuses)

    def list_path(self) -> str:
        return self.resource

    def show_path(self, entity_id: int) -> str:
        return f"{self.resource}/{entity_id}/show"

    def item_path(self, entity_id: int) -> str:
        return f"{self.resource}/{entity_id}"

    def status_label(self, status: str) -> str:
        return self.status_labels.get(status) or status.replace("_", " ").title()

    def action_label(self, status: str) -> str:
        return self.action_labels.get(status) or f"Mark {self.status_label(status)}"


KIND_SPECS: dict[EntityKind, KindSpec] = {
    EntityKind.CLIENT: KindSpec(
        kind=EntityKind.CLIENT,
        noun="client",
        resource="/admin/clients",
        flags={
            "is_active": FlagEndpoint("/admin/clients/{id}/change-status", method="PATCH"),
        },
    ),
    EntityKind.GUARD: KindSpec(
        kind=EntityKind.GUARD,
        noun="guard",
        resource="/admin/guards",
        flags={
            "is_active": FlagEndpoint("/admin/guards/{id}/change-status"),
        },
    ),
    EntityKind.ASSIGNMENT: KindSpec(
        kind=EntityKind.ASSIGNMENT,
        noun="assignment",
        resource="/admin/guard-assignments",
        statuses=("assigned", "active", "completed", "cancelled"),
        action_labels={
            "active": "Start Assignment",
            "completed": "Mark Completed",
            "cancelled": "Cancel Assignment",
        },
        status_endpoint=StatusEndpoint("/admin/guard-assignments/{id}/change-status"),
        date_filter_keys=("start_date", "end_date"),
    ),
    EntityKind.ATTENDANCE: KindSpec(
        kind=EntityKind.ATTENDANCE,
        noun="attendance",
        resource="/admin/duty-attendances",
        statuses=("checked_in", "checked_out", "absent", "late", "pending", "approved"),
        status_labels={"checked_in": "Checked In", "checked_out": "Checked Out"},
        status_endpoint=StatusEndpoint(
            "/admin/duty-attendances/{id}/change-status",
            method="PATCH",
            in_query=False,
        ),
        date_filter_keys=("date",),
    ),
    EntityKind.INCIDENT: KindSpec(
        kind=EntityKind.INCIDENT,
        noun="incident",
        resource="/admin/incidents",
        statuses=("pending", "acknowledged", "investigating", "resolved", "closed", "rejected"),
        status_endpoint=StatusEndpoint("/admin/incidents/{id}/change-status"),
        flags={
            "is_visible_to_client": FlagEndpoint(
                "/admin/incidents/{id}/client-visibility",
                method="PATCH",
                in_query=False,
                numeric=False,
            ),
        },
    ),
    EntityKind.COMPLAINT: KindSpec(
        kind=EntityKind.COMPLAINT,
        noun="complaint",
        resource="/admin/complaints",
        statuses=("open", "in_progress", "resolved", "closed"),
        flags={
            "is_visible_to_client": FlagEndpoint("/admin/complaints/{id}/change-visibility"),
            "is_visible_to_guard": FlagEndpoint("/admin/complaints/{id}/change-visibility"),
        },
    ),
    EntityKind.EXPENSE_REVIEW: KindSpec(
        kind=EntityKind.EXPENSE_REVIEW,
        noun="expense review",
        resource="/admin/expense-reviews",
        statuses=("pending", "approved", "rejected"),
        status_field="decision",
        action_labels={"approved": "Approve", "rejected": "Reject"},
        status_endpoint=StatusEndpoint(
            "/admin/expenses-reviews/{id}/change-decision",
            param="decision",
        ),
        date_filter_keys=("created_at",),
    ),
}

_ALIASES = {
    "clients": EntityKind.CLIENT,
    "guards": EntityKind.GUARD,
    "assignments": EntityKind.ASSIGNMENT,
    "guard-assignment": EntityKind.ASSIGNMENT,
    "guard_assignment": EntityKind.ASSIGNMENT,
    "duty-attendance": EntityKind.ATTENDANCE,
    "duty_attendance": EntityKind.ATTENDANCE,
    "incidents": EntityKind.INCIDENT,
    "complaints": EntityKind.COMPLAINT,
    "expense-review": EntityKind.EXPENSE_REVIEW,
    "expense-reviews": EntityKind.EXPENSE_REVIEW,
}


def resolve_kind(value: EntityKind | str) -> EntityKind:
    if isinstance(value, EntityKind):
        return value
    name = str(value).strip().lower()
    try:
        return EntityKind(name)
    except ValueError:
        alias = _ALIASES.get(name)
        if alias is None:
            raise UnknownEntityKindError(value) from None
        return alias


def get_kind_spec(kind: EntityKind | str) -> KindSpec:
    return KIND_SPECS[resolve_kind(kind)]
