"""Filter composition for paginated list queries."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from guard_console.domain.models import FilterValue, Query
from guard_console.utils.time import format_day

DEFAULT_PER_PAGE = 10
SEARCH_KEY = "search"

_SCALAR_TYPES = (str, int, float, bool)


class FilterComposer:
    """Turns independently edited inputs into one normalized :class:`Query`.

    Any change other than page navigation sends the list back to page 1.
    ``None`` removes a filter so the server applies no constraint for it.
    """

    def __init__(self, per_page: int = DEFAULT_PER_PAGE) -> None:
        if per_page < 1:
            raise ValueError(f"per_page must be > 0, got {per_page}")
        self._default_per_page = per_page
        self._per_page = per_page
        self._page = 1
        self._filters: dict[str, FilterValue] = {}

    @property
    def page(self) -> int:
        return self._page

    @property
    def per_page(self) -> int:
        return self._per_page

    def get(self, name: str) -> FilterValue | None:
        return self._filters.get(name)

    def set_filter(self, name: str, value: FilterValue | None) -> None:
        if name == "page":
            self.set_page(int(value) if value is not None else 1)
            return
        if name == "per_page":
            self.set_per_page(int(value) if value is not None else self._default_per_page)
            return
        if value is not None and not isinstance(value, _SCALAR_TYPES):
            raise TypeError(f"filter '{name}' must be a scalar, got {type(value).__name__}")
        if value is None:
            self._filters.pop(name, None)
        else:
            self._filters[name] = value
        self._page = 1

    def toggle_filter(self, name: str, value: FilterValue) -> None:
        """Select ``value``, or clear it if it is already the active value."""
        self.set_filter(name, None if self._filters.get(name) == value else value)

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        self._page = page

    def set_per_page(self, per_page: int) -> None:
        if per_page < 1:
            raise ValueError(f"per_page must be > 0, got {per_page}")
        self._per_page = per_page
        self._page = 1

    def combine_search_fields(self, fields: Iterable[str | None]) -> str:
        """Join the non-empty fields into the single ``search`` term.

        The join is lossy: the server receives one opaque string and matches
        it however it likes. When every field is empty the key is dropped
        rather than sent as ``""``.
        """
        combined = " ".join(part.strip() for part in fields if part and part.strip())
        self.set_filter(SEARCH_KEY, combined or None)
        return combined

    def set_date_filter(
        self, value: date | datetime | str | None, keys: Iterable[str] = ("date",)
    ) -> None:
        rendered = format_day(value) if value is not None else None
        for key in keys:
            self.set_filter(key, rendered)

    def clear(self) -> None:
        self._filters.clear()
        self._per_page = self._default_per_page
        self._page = 1

    def to_query(self) -> Query:
        return Query(page=self._page, per_page=self._per_page, filters=dict(self._filters))
