"""Status transition policy per entity kind."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from guard_console.domain.kinds import KIND_SPECS, EntityKind, KindSpec, get_kind_spec, resolve_kind
from guard_console.policy.models import KindTransitions, TransitionConfig

ASSIGNMENT_TRANSITIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "assigned": ("active", "cancelled"),
        "active": ("completed", "cancelled"),
        "completed": (),
        "cancelled": (),
    }
)

BUILTIN_TABLES: Mapping[EntityKind, Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {EntityKind.ASSIGNMENT: ASSIGNMENT_TRANSITIONS}
)


@dataclass(frozen=True)
class StatusAction:
    to: str
    label: str


class TransitionTable:
    """Legal one-step moves for a single kind.

    ``transitions=None`` builds a permissive table in which every status
    reaches every other status.
    """

    def __init__(
        self,
        spec: KindSpec,
        transitions: Mapping[str, Iterable[str]] | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        self._spec = spec
        self._labels = dict(labels or {})
        known = set(spec.statuses)
        if transitions is None:
            self._moves: Mapping[str, frozenset[str]] | None = None
            return
        moves: dict[str, frozenset[str]] = {}
        for source, targets in transitions.items():
            target_set = frozenset(targets)
            unknown = ({source} | target_set) - known
            if unknown:
                raise ValueError(
                    f"Unknown {spec.noun} status in transition table: "
                    f"{', '.join(sorted(unknown))}"
                )
            moves[source] = target_set
        self._moves = MappingProxyType(moves)

    @property
    def kind(self) -> EntityKind:
        return self._spec.kind

    @property
    def strict(self) -> bool:
        return self._moves is not None

    def targets(self, from_status: str | None) -> frozenset[str]:
        if from_status is None:
            return frozenset()
        if self._moves is None:
            if from_status not in self._spec.statuses:
                return frozenset()
            return frozenset(s for s in self._spec.statuses if s != from_status)
        return self._moves.get(from_status, frozenset())

    def is_terminal(self, status: str) -> bool:
        return not self.targets(status)

    def label(self, status: str) -> str:
        return self._labels.get(status) or self._spec.action_label(status)


class TransitionPolicy:
    """Decides which status moves are offered and which are allowed.

    Tables are pluggable per kind: ``tables`` overrides the built-ins, and any
    lifecycle kind without a table falls back to the permissive behaviour.
    """

    def __init__(self, tables: Mapping[EntityKind, TransitionTable] | None = None) -> None:
        resolved: dict[EntityKind, TransitionTable] = {}
        for kind, moves in BUILTIN_TABLES.items():
            resolved[kind] = TransitionTable(KIND_SPECS[kind], moves)
        for kind, table in (tables or {}).items():
            resolved[resolve_kind(kind)] = table
        for kind, spec in KIND_SPECS.items():
            if spec.statuses and kind not in resolved:
                resolved[kind] = TransitionTable(spec)
        self._tables = MappingProxyType(resolved)

    @classmethod
    def from_config(cls, config: TransitionConfig) -> "TransitionPolicy":
        tables: dict[EntityKind, TransitionTable] = {}
        for name, rules in config.kinds.items():
            spec = get_kind_spec(name)
            tables[spec.kind] = _table_from_rules(spec, rules)
        return cls(tables)

    def table_for(self, kind: EntityKind | str) -> TransitionTable | None:
        return self._tables.get(resolve_kind(kind))

    def has_lifecycle(self, kind: EntityKind | str) -> bool:
        return self.table_for(kind) is not None

    def is_legal(self, kind: EntityKind | str, from_status: str | None, to_status: str) -> bool:
        if from_status == to_status:
            return False
        table = self.table_for(kind)
        if table is None:
            return False
        return to_status in table.targets(from_status)

    def available_actions(
        self, kind: EntityKind | str, from_status: str | None
    ) -> list[StatusAction]:
        spec = get_kind_spec(kind)
        table = self.table_for(spec.kind)
        if table is None:
            return []
        return [
            StatusAction(to=status, label=table.label(status))
            for status in spec.statuses
            if self.is_legal(spec.kind, from_status, status)
        ]


def _table_from_rules(spec: KindSpec, rules: KindTransitions) -> TransitionTable:
    if not spec.statuses:
        raise ValueError(f"{spec.noun} records have no status lifecycle")
    if not rules.strict:
        return TransitionTable(spec, None, rules.labels)
    return TransitionTable(spec, rules.transitions, rules.labels)
