"""Time-boxed confirmation gate for mutating commands."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Protocol

from guard_console.domain.kinds import EntityKind
from guard_console.utils.time import utc_now

logger = logging.getLogger(__name__)

DEFAULT_CONFIRM_TIMEOUT_SECONDS = 5.0


class ConfirmationOutcome(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class CommandAction(str, Enum):
    CHANGE_STATUS = "change_status"
    SET_FLAG = "set_flag"
    DELETE = "delete"
    BULK_DELETE = "bulk_delete"


@dataclass(frozen=True)
class PendingChange:
    """What a command will do once confirmed."""

    action: CommandAction
    kind: EntityKind
    entity_ids: tuple[int, ...]
    title: str
    description: str
    value: Any = None
    flag: str | None = None


class PendingConfirmation:
    """A three-way race between confirm, cancel and timeout.

    The race is a single future plus a ``loop.call_later`` timer. Whichever
    of :meth:`confirm`, :meth:`cancel` or the timer resolves the future first
    wins; later calls return False and change nothing.
    """

    def __init__(
        self,
        change: PendingChange,
        timeout_seconds: float = DEFAULT_CONFIRM_TIMEOUT_SECONDS,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {timeout_seconds}")
        self.change = change
        self.timeout_seconds = timeout_seconds
        self.started_at: datetime | None = None
        self._future: asyncio.Future[ConfirmationOutcome] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._deadline: float | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def start(self) -> None:
        if self._future is not None:
            return
        loop = asyncio.get_running_loop()
        self._loop = loop
        self._future = loop.create_future()
        self.started_at = utc_now()
        self._deadline = loop.time() + self.timeout_seconds
        self._timer = loop.call_later(
            self.timeout_seconds, self._resolve, ConfirmationOutcome.EXPIRED
        )

    def confirm(self) -> bool:
        return self._resolve(ConfirmationOutcome.CONFIRMED)

    def cancel(self) -> bool:
        return self._resolve(ConfirmationOutcome.CANCELLED)

    def _resolve(self, outcome: ConfirmationOutcome) -> bool:
        if self._future is None or self._future.done():
            return False
        if self._timer is not None:
            self._timer.cancel()
        self._future.set_result(outcome)
        logger.debug("%s on %s: %s", self.change.action.value, self.change.entity_ids, outcome.value)
        return True

    @property
    def resolved(self) -> bool:
        return self._future is not None and self._future.done()

    @property
    def outcome(self) -> ConfirmationOutcome | None:
        if not self.resolved or self._future.cancelled():
            return None
        return self._future.result()

    def remaining_seconds(self) -> float:
        if self._deadline is None:
            return self.timeout_seconds
        if self.resolved or self._loop is None:
            return 0.0
        return max(0.0, self._deadline - self._loop.time())

    async def wait(self) -> ConfirmationOutcome:
        self.start()
        assert self._future is not None
        return await self._future


class ConfirmationPrompter(Protocol):
    """Presents a pending confirmation to the user.

    Implementations may resolve it immediately, later from elsewhere, or
    never (in which case it expires).
    """

    def present(self, pending: PendingConfirmation) -> None | Awaitable[None]:
        ...


class AutoConfirmPrompter:
    def present(self, pending: PendingConfirmation) -> None:
        pending.confirm()


class DeclinePrompter:
    def present(self, pending: PendingConfirmation) -> None:
        pending.cancel()


class HoldingPrompter:
    """Leaves confirmations open for the caller to resolve.

    Only unresolved confirmations are kept in ``presented``.
    """

    def __init__(self) -> None:
        self.presented: list[PendingConfirmation] = []

    def present(self, pending: PendingConfirmation) -> None:
        self.presented = [item for item in self.presented if not item.resolved]
        self.presented.append(pending)


async def present(prompter: ConfirmationPrompter, pending: PendingConfirmation) -> None:
    result = prompter.present(pending)
    if inspect.isawaitable(result):
        await result
