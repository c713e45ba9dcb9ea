from __future__ import annotations

import pytest

from guard_console.domain.kinds import EntityKind, get_kind_spec, resolve_kind
from guard_console.domain.models import Entity, PageEnvelope, Query
from guard_console.errors import UnknownEntityKindError


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("assignment", EntityKind.ASSIGNMENT),
        ("guard-assignment", EntityKind.ASSIGNMENT),
        (" Complaints ", EntityKind.COMPLAINT),
        ("expense-reviews", EntityKind.EXPENSE_REVIEW),
        (EntityKind.GUARD, EntityKind.GUARD),
    ],
)
def test_resolve_kind_accepts_aliases(name, expected) -> None:
    assert resolve_kind(name) is expected


def test_unknown_kind_raises_value_error() -> None:
    with pytest.raises(UnknownEntityKindError):
        resolve_kind("vehicles")
    with pytest.raises(ValueError):
        get_kind_spec("vehicles")


def test_kind_paths() -> None:
    spec = get_kind_spec("incident")
    assert spec.list_path() == "/admin/incidents"
    assert spec.show_path(4) == "/admin/incidents/4/show"
    assert spec.item_path(4) == "/admin/incidents/4"
    assert spec.supports_status
    assert not get_kind_spec("complaint").supports_status


def test_labels() -> None:
    attendance = get_kind_spec("attendance")
    assert attendance.status_label("checked_in") == "Checked In"
    assert attendance.action_label("absent") == "Mark Absent"
    assert get_kind_spec("assignment").action_label("active") == "Start Assignment"


def test_entity_reads_decision_field_and_flags() -> None:
    entity = Entity.from_payload(
        "expense_review", {"id": "14", "decision": "pending", "amount": "12.50"}
    )
    assert entity.id == 14
    assert entity.status == "pending"
    assert entity.data["amount"] == "12.50"

    complaint = Entity.from_payload("complaint", {"id": 2, "is_visible_to_client": 0})
    assert complaint.flags == {"is_visible_to_client": False}
    assert complaint.flag("is_visible_to_guard") is False


def test_entity_requires_id() -> None:
    with pytest.raises(ValueError):
        Entity.from_payload("client", {"full_name": "Nobody"})


def test_query_validation() -> None:
    with pytest.raises(ValueError):
        Query(page=0)
    with pytest.raises(ValueError):
        Query(per_page=0)
    assert Query(filters={"status": None}).to_params() == {"page": 1, "per_page": 10}


def test_page_envelope_invariants() -> None:
    with pytest.raises(ValueError):
        PageEnvelope(items=[Entity(id=i, kind=EntityKind.CLIENT) for i in range(3)], per_page=2)
    with pytest.raises(ValueError):
        PageEnvelope(items=[], current_page=3, last_page=2)


def test_page_beyond_last_is_clamped() -> None:
    body = {"items": [], "data": {"current_page": 3, "last_page": 2, "total": 20, "per_page": 10}}
    page = PageEnvelope.from_body("client", body, Query(page=3))
    assert page.current_page == 2
    assert page.items == []


def test_page_defaults_from_query_when_meta_missing() -> None:
    body = {"items": [{"id": 1}, {"id": 2}]}
    page = PageEnvelope.from_body("client", body, Query(page=1, per_page=5))
    assert (page.current_page, page.per_page, page.total) == (1, 5, 2)
    assert page.find(2).id == 2
    assert page.find(9) is None
