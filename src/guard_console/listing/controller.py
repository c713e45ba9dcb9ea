"""Per-view list state: query, loaded page and selection."""

from __future__ import annotations

import logging
from datetime import date, datetime

from guard_console.api.client import ConsoleApiClient
from guard_console.domain.kinds import EntityKind, KindSpec, get_kind_spec
from guard_console.domain.models import Entity, FilterValue, PageEnvelope, Query
from guard_console.errors import ConsoleError
from guard_console.listing.filters import DEFAULT_PER_PAGE, FilterComposer
from guard_console.listing.selection import SelectionSet
from guard_console.listing.synchronizer import ListSynchronizer
from guard_console.policy.engine import StatusAction, TransitionPolicy

logger = logging.getLogger(__name__)


class ListController:
    """One list view of one entity kind.

    Owns the filter composer, the last loaded page and the selection set.
    Nothing here is shared between controllers; commands and the
    synchronizer receive the controller explicitly.
    """

    def __init__(
        self,
        kind: EntityKind | str,
        api: ConsoleApiClient,
        *,
        per_page: int = DEFAULT_PER_PAGE,
        policy: TransitionPolicy | None = None,
        step_back_on_empty: bool = False,
    ) -> None:
        self.spec: KindSpec = get_kind_spec(kind)
        self.api = api
        self.policy = policy or TransitionPolicy()
        self.filters = FilterComposer(per_page)
        self.selection = SelectionSet()
        self.synchronizer = ListSynchronizer(self, step_back_on_empty=step_back_on_empty)
        self.page = PageEnvelope.empty(per_page)
        self.last_query: Query | None = None
        self.last_error: ConsoleError | None = None
        self._sequence = 0

    @property
    def kind(self) -> EntityKind:
        return self.spec.kind

    @property
    def rows(self) -> list[Entity]:
        return list(self.page.items)

    @property
    def visible_ids(self) -> tuple[int, ...]:
        return self.page.ids

    def find(self, entity_id: int) -> Entity | None:
        return self.page.find(entity_id)

    async def load(self, *, preserve_selection: bool = False) -> bool:
        """Fetch the page for the current query.

        On failure the previous rows stay in place and ``last_error`` is set.
        A response that arrives after a newer load was started is discarded.
        """
        self._sequence += 1
        token = self._sequence
        query = self.filters.to_query()
        result = await self.api.fetch(self.kind, query)
        if token != self._sequence:
            logger.debug("Discarding stale %s page %s", self.spec.noun, query.page)
            return False
        if not result.fulfilled or result.value is None:
            self.last_error = result.error
            logger.warning("Failed to load %s: %s", self.spec.plural, result.error_message)
            return False

        self.page = result.value
        self.last_query = query
        self.last_error = None
        self.selection.rebind(self.page.ids, preserve=preserve_selection)
        return True

    async def set_filter(self, name: str, value: FilterValue | None) -> bool:
        self.filters.set_filter(name, value)
        return await self.load()

    async def toggle_filter(self, name: str, value: FilterValue) -> bool:
        self.filters.toggle_filter(name, value)
        return await self.load()

    async def search(self, *fields: str | None) -> bool:
        self.filters.combine_search_fields(fields)
        return await self.load()

    async def set_date(self, value: date | datetime | str | None) -> bool:
        self.filters.set_date_filter(value, self.spec.date_filter_keys)
        return await self.load()

    async def go_to_page(self, page: int) -> bool:
        self.filters.set_page(page)
        return await self.load()

    async def set_per_page(self, per_page: int) -> bool:
        self.filters.set_per_page(per_page)
        return await self.load()

    async def clear_filters(self) -> bool:
        self.filters.clear()
        return await self.load()

    def select_one(self, entity_id: int, checked: bool) -> None:
        self.selection.select_one(entity_id, checked)

    def select_all(self, checked: bool) -> None:
        self.selection.select_all(checked, self.visible_ids)

    @property
    def is_all_selected(self) -> bool:
        return self.selection.is_all_selected(self.visible_ids)

    def selected_rows(self) -> list[Entity]:
        return [row for row in self.page.items if row.id in self.selection]

    def available_actions(self, entity: Entity) -> list[StatusAction]:
        if not self.spec.supports_status:
            return []
        return self.policy.available_actions(self.kind, entity.status)

