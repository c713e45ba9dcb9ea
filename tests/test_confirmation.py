from __future__ import annotations

import asyncio

import pytest

from guard_console.commands.confirmation import (
    AutoConfirmPrompter,
    CommandAction,
    ConfirmationOutcome,
    DeclinePrompter,
    PendingChange,
    PendingConfirmation,
    present,
)
from guard_console.domain.kinds import EntityKind


def _change() -> PendingChange:
    return PendingChange(
        action=CommandAction.DELETE,
        kind=EntityKind.CLIENT,
        entity_ids=(5,),
        title="Delete Client",
        description="Are you sure?",
    )


@pytest.mark.asyncio
async def test_confirm_wins_race() -> None:
    pending = PendingConfirmation(_change(), timeout_seconds=1.0)
    pending.start()
    assert pending.started_at is not None
    assert pending.confirm() is True
    assert await pending.wait() is ConfirmationOutcome.CONFIRMED


@pytest.mark.asyncio
async def test_cancel_wins_race() -> None:
    pending = PendingConfirmation(_change(), timeout_seconds=1.0)
    pending.start()
    pending.cancel()
    assert await pending.wait() is ConfirmationOutcome.CANCELLED


@pytest.mark.asyncio
async def test_timeout_expires() -> None:
    pending = PendingConfirmation(_change(), timeout_seconds=0.01)
    outcome = await pending.wait()
    assert outcome is ConfirmationOutcome.EXPIRED
    assert pending.remaining_seconds() == 0.0


@pytest.mark.asyncio
async def test_only_first_resolution_counts() -> None:
    pending = PendingConfirmation(_change(), timeout_seconds=0.05)
    pending.start()
    assert pending.cancel() is True
    assert pending.confirm() is False
    await asyncio.sleep(0.1)
    assert pending.outcome is ConfirmationOutcome.CANCELLED


@pytest.mark.asyncio
async def test_confirm_after_expiry_is_ignored() -> None:
    pending = PendingConfirmation(_change(), timeout_seconds=0.01)
    assert await pending.wait() is ConfirmationOutcome.EXPIRED
    assert pending.confirm() is False
    assert pending.outcome is ConfirmationOutcome.EXPIRED


@pytest.mark.asyncio
async def test_late_confirm_from_another_task() -> None:
    pending = PendingConfirmation(_change(), timeout_seconds=1.0)
    pending.start()
    asyncio.get_running_loop().call_later(0.01, pending.confirm)
    assert await pending.wait() is ConfirmationOutcome.CONFIRMED
    assert pending.remaining_seconds() == 0.0


def test_resolve_before_start_does_nothing() -> None:
    pending = PendingConfirmation(_change(), timeout_seconds=1.0)
    assert pending.confirm() is False
    assert pending.outcome is None
    assert pending.remaining_seconds() == 1.0


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PendingConfirmation(_change(), timeout_seconds=0)


@pytest.mark.asyncio
async def test_prompters_resolve_immediately() -> None:
    confirmed = PendingConfirmation(_change(), timeout_seconds=1.0)
    confirmed.start()
    await present(AutoConfirmPrompter(), confirmed)
    assert confirmed.outcome is ConfirmationOutcome.CONFIRMED

    declined = PendingConfirmation(_change(), timeout_seconds=1.0)
    declined.start()
    await present(DeclinePrompter(), declined)
    assert declined.outcome is ConfirmationOutcome.CANCELLED


@pytest.mark.asyncio
async def test_async_prompter_is_awaited() -> None:
    class SlowPrompter:
        async def present(self, pending: PendingConfirmation) -> None:
            await asyncio.sleep(0)
            pending.confirm()

    pending = PendingConfirmation(_change(), timeout_seconds=1.0)
    pending.start()
    await present(SlowPrompter(), pending)
    assert await pending.wait() is ConfirmationOutcome.CONFIRMED
