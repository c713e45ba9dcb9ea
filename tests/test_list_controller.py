from __future__ import annotations

import asyncio
from datetime import date

import pytest

from guard_console.api.client import ApiResult
from guard_console.domain.models import PageEnvelope
from guard_console.errors import TransportFailure
from guard_console.listing.controller import ListController
from guard_console.policy.engine import StatusAction


@pytest.mark.asyncio
async def test_load_stores_page_and_clears_selection(make_api, client_rows) -> None:
    api = make_api("client", client_rows)
    controller = ListController("client", api)

    assert await controller.load()
    assert controller.visible_ids == tuple(range(1, 11))
    assert controller.page.total == 12
    assert controller.page.last_page == 2

    controller.select_all(True)
    assert controller.is_all_selected
    await controller.go_to_page(2)
    assert controller.visible_ids == (11, 12)
    assert len(controller.selection) == 0
    assert not controller.is_all_selected


@pytest.mark.asyncio
async def test_preserved_selection_keeps_visible_ids(make_api, client_rows) -> None:
    controller = ListController("client", make_api("client", client_rows))
    await controller.load()
    controller.select_one(2, True)
    controller.select_one(4, True)

    await controller.load(preserve_selection=True)

    assert controller.selection.ids == (2, 4)
    assert [row.id for row in controller.selected_rows()] == [2, 4]


@pytest.mark.asyncio
async def test_filter_methods_reload_from_first_page(make_api, client_rows) -> None:
    api = make_api("client", client_rows)
    controller = ListController("client", api)
    await controller.go_to_page(2)

    await controller.set_filter("is_active", True)
    await controller.search("Jane", "", "555")

    query = api.fetch_calls[-1]
    assert query.page == 1
    assert query.to_params() == {"is_active": True, "search": "Jane 555", "page": 1, "per_page": 10}
    assert controller.last_query == query


@pytest.mark.asyncio
async def test_set_date_uses_kind_keys(make_api, assignment_rows) -> None:
    api = make_api("assignment", assignment_rows)
    controller = ListController("assignment", api)

    await controller.set_date(date(2024, 5, 2))

    assert api.fetch_calls[-1].filters == {"start_date": "2024-05-02", "end_date": "2024-05-02"}


@pytest.mark.asyncio
async def test_toggle_and_clear_filters(make_api, assignment_rows) -> None:
    api = make_api("assignment", assignment_rows)
    controller = ListController("assignment", api, per_page=2)

    await controller.toggle_filter("status", "active")
    assert api.fetch_calls[-1].filters == {"status": "active"}
    await controller.toggle_filter("status", "active")
    assert api.fetch_calls[-1].filters == {}

    await controller.set_per_page(3)
    await controller.clear_filters()
    assert api.fetch_calls[-1].per_page == 2


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_rows(make_api, client_rows) -> None:
    api = make_api("client", client_rows)
    controller = ListController("client", api)
    await controller.load()
    controller.select_one(1, True)

    api.fetch_error = TransportFailure("Server error (503)", status_code=503)
    assert await controller.load() is False

    assert controller.visible_ids == tuple(range(1, 11))
    assert controller.last_error.code == "transport_failure"
    assert controller.selection.ids == (1,)


@pytest.mark.asyncio
async def test_stale_response_is_discarded(make_api, client_rows) -> None:
    api = make_api("client", client_rows)
    release = asyncio.Event()
    real_fetch = api.fetch

    async def slow_first_fetch(kind, query):
        if query.page == 1:
            await release.wait()
        return await real_fetch(kind, query)

    api.fetch = slow_first_fetch
    controller = ListController("client", api)

    first = asyncio.create_task(controller.load())
    await asyncio.sleep(0)
    controller.filters.set_page(2)
    assert await controller.load()
    release.set()

    assert await first is False
    assert controller.visible_ids == (11, 12)


@pytest.mark.asyncio
async def test_available_actions_follow_policy(make_api, assignment_rows) -> None:
    controller = ListController("assignment", make_api("assignment", assignment_rows))
    await controller.load()

    assert controller.available_actions(controller.find(2)) == [
        StatusAction(to="completed", label="Mark Completed"),
        StatusAction(to="cancelled", label="Cancel Assignment"),
    ]
    assert controller.available_actions(controller.find(4)) == []


@pytest.mark.asyncio
async def test_available_actions_empty_without_status_endpoint(make_api) -> None:
    controller = ListController("complaint", make_api("complaint", [{"id": 1, "status": "open"}]))
    await controller.load()
    assert controller.available_actions(controller.find(1)) == []


@pytest.mark.asyncio
async def test_refresh_without_step_back_leaves_empty_page(make_api) -> None:
    api = make_api("client", [{"id": i} for i in range(1, 12)])
    controller = ListController("client", api)
    await controller.go_to_page(2)
    api.rows = [row for row in api.rows if row["id"] != 11]

    assert await controller.synchronizer.refresh()

    assert controller.rows == []
    assert controller.filters.page == 2
    assert controller.synchronizer.refresh_count == 1


@pytest.mark.asyncio
async def test_refresh_steps_back_when_enabled(make_api) -> None:
    api = make_api("client", [{"id": i} for i in range(1, 12)])
    controller = ListController("client", api, step_back_on_empty=True)
    await controller.go_to_page(2)
    api.rows = [row for row in api.rows if row["id"] != 11]

    assert await controller.synchronizer.refresh()

    assert controller.filters.page == 1
    assert controller.visible_ids == tuple(range(1, 11))
    assert [q.page for q in api.fetch_calls[-2:]] == [2, 1]


@pytest.mark.asyncio
async def test_step_back_never_goes_below_first_page(make_api) -> None:
    api = make_api("client", [])
    controller = ListController("client", api, step_back_on_empty=True)

    await controller.synchronizer.refresh()

    assert len(api.fetch_calls) == 1
    assert controller.page == PageEnvelope.empty(10)


@pytest.mark.asyncio
async def test_fetch_result_without_value_counts_as_failure(make_api, client_rows) -> None:
    api = make_api("client", client_rows)

    async def hollow_fetch(kind, query):
        return ApiResult.failed(TransportFailure("Malformed response body"))

    api.fetch = hollow_fetch
    controller = ListController("client", api)
    assert await controller.load() is False
    assert str(controller.last_error) == "Malformed response body"
