"""Page-scoped multi-select state."""

from __future__ import annotations

from typing import Iterable, Iterator


class SelectionSet:
    """IDs chosen on the currently loaded page.

    Selection never outlives its page: :meth:`rebind` is called on every
    fetch and clears the set unless the caller asks to keep the IDs that are
    still visible. Insertion order is kept so bulk commands run in the order
    the user picked rows.
    """

    def __init__(self) -> None:
        self._ids: dict[int, None] = {}
        self._visible: frozenset[int] | None = None

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._ids))

    @property
    def ids(self) -> tuple[int, ...]:
        return tuple(self._ids)

    def select_one(self, entity_id: int, checked: bool) -> None:
        if not checked:
            self._ids.pop(entity_id, None)
            return
        if self._visible is not None and entity_id not in self._visible:
            return
        self._ids[entity_id] = None

    def select_all(self, checked: bool, visible_ids: Iterable[int]) -> None:
        if checked:
            self._ids = dict.fromkeys(visible_ids)
        else:
            self._ids.clear()

    def is_all_selected(self, visible_ids: Iterable[int]) -> bool:
        visible = set(visible_ids)
        if not visible:
            return False
        return len(self._ids) == len(visible) and all(i in self._ids for i in visible)

    def clear(self) -> None:
        self._ids.clear()

    def retain(self, visible_ids: Iterable[int]) -> None:
        visible = set(visible_ids)
        self._ids = {i: None for i in self._ids if i in visible}

    def rebind(self, visible_ids: Iterable[int], *, preserve: bool = False) -> None:
        """Attach to a freshly loaded page."""
        self._visible = frozenset(visible_ids)
        if preserve:
            self.retain(self._visible)
        else:
            self.clear()
