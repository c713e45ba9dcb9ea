"""List view state: filters, selection, page refresh."""

from guard_console.listing.controller import ListController
from guard_console.listing.filters import DEFAULT_PER_PAGE, FilterComposer
from guard_console.listing.selection import SelectionSet
from guard_console.listing.synchronizer import ListSynchronizer

__all__ = [
    "DEFAULT_PER_PAGE",
    "FilterComposer",
    "ListController",
    "ListSynchronizer",
    "SelectionSet",
]
