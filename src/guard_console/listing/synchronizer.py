"""Re-fetch the visible page after a mutation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from guard_console.listing.controller import ListController

logger = logging.getLogger(__name__)


class ListSynchronizer:
    """Refreshes a controller's page with the query active *now*.

    The query is read from the controller's filter composer at refresh time,
    so filters changed while a confirmation was pending are honoured.
    """

    def __init__(self, controller: "ListController", *, step_back_on_empty: bool = False) -> None:
        self._controller = controller
        self.step_back_on_empty = step_back_on_empty
        self.refresh_count = 0

    async def refresh(self, *, preserve_selection: bool = False) -> bool:
        controller = self._controller
        self.refresh_count += 1
        logger.debug(
            "Refreshing %s list at page %s", controller.spec.noun, controller.filters.page
        )
        loaded = await controller.load(preserve_selection=preserve_selection)
        if not loaded or not self.step_back_on_empty:
            return loaded

        filters = controller.filters
        if controller.page.items or filters.page <= 1:
            return loaded
        logger.info(
            "Page %s of %s list is empty after refresh, stepping back",
            filters.page,
            controller.spec.noun,
        )
        filters.set_page(filters.page - 1)
        return await controller.load(preserve_selection=preserve_selection)
