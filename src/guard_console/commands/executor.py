"""Confirmation-gated execution of mutating list commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from guard_console.api.client import ApiResult
from guard_console.commands.confirmation import (
    DEFAULT_CONFIRM_TIMEOUT_SECONDS,
    CommandAction,
    ConfirmationOutcome,
    ConfirmationPrompter,
    HoldingPrompter,
    PendingChange,
    PendingConfirmation,
    present,
)
from guard_console.commands.notifications import (
    LoggingNotifier,
    Notification,
    NotificationKind,
    Notifier,
)
from guard_console.domain.models import Entity
from guard_console.errors import (
    ConfirmationExpired,
    IllegalTransitionError,
    PreconditionFailed,
    UnsupportedActionError,
)
from guard_console.listing.controller import ListController

logger = logging.getLogger(__name__)

RemoteCall = Callable[[int], Awaitable[ApiResult[Any]]]


class CommandState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ItemResult:
    entity_id: int
    ok: bool
    error: str | None = None
    code: str | None = None


@dataclass
class CommandResult:
    """Record of one command invocation.

    ``history`` lists every state entered after Idle, ending back at Idle.
    """

    change: PendingChange
    history: list[CommandState] = field(default_factory=list)
    confirmation: ConfirmationOutcome | None = None
    items: list[ItemResult] = field(default_factory=list)
    notification: Notification | None = None

    def move(self, state: CommandState) -> None:
        self.history.append(state)

    @property
    def state(self) -> CommandState:
        for state in reversed(self.history):
            if state in (CommandState.SUCCEEDED, CommandState.FAILED):
                return state
        return CommandState.IDLE

    @property
    def succeeded(self) -> bool:
        return self.state is CommandState.SUCCEEDED

    @property
    def succeeded_ids(self) -> list[int]:
        return [item.entity_id for item in self.items if item.ok]

    @property
    def failed_ids(self) -> list[int]:
        return [item.entity_id for item in self.items if not item.ok]


class CommandExecutor:
    """Runs status changes, flag toggles and deletes for one list controller.

    Each call walks Idle -> AwaitingConfirmation -> Executing ->
    Succeeded/Failed -> Idle, or returns to Idle from AwaitingConfirmation on
    cancel or timeout. Remote errors are turned into notifications and never
    raised. Requests that the view should never have offered (illegal
    transitions, unknown flags) raise before a confirmation is opened.
    """

    def __init__(
        self,
        controller: ListController,
        notifier: Notifier | None = None,
        prompter: ConfirmationPrompter | None = None,
        *,
        confirm_timeout_seconds: float = DEFAULT_CONFIRM_TIMEOUT_SECONDS,
    ) -> None:
        self.controller = controller
        self.notifier = notifier or LoggingNotifier()
        self.prompter = prompter or HoldingPrompter()
        self.confirm_timeout_seconds = confirm_timeout_seconds
        self._pending: list[PendingConfirmation] = []

    @property
    def pending_confirmations(self) -> tuple[PendingConfirmation, ...]:
        return tuple(self._pending)

    async def change_status(self, entity: Entity, to_status: str) -> CommandResult:
        controller = self.controller
        spec = controller.spec
        if not spec.supports_status:
            raise UnsupportedActionError(f"{spec.noun} records have no status actions")
        if not controller.policy.is_legal(spec.kind, entity.status, to_status):
            raise IllegalTransitionError(spec.noun, entity.status, to_status)

        table = controller.policy.table_for(spec.kind)
        label = table.label(to_status) if table is not None else spec.action_label(to_status)
        change = PendingChange(
            action=CommandAction.CHANGE_STATUS,
            kind=spec.kind,
            entity_ids=(entity.id,),
            title=label,
            description=(
                f"Change {spec.noun} #{entity.id} from "
                f"{spec.status_label(entity.status or 'unknown')} to "
                f"{spec.status_label(to_status)}?"
            ),
            value=to_status,
        )
        noun = "Decision" if spec.status_field == "decision" else "Status"

        async def call(entity_id: int) -> ApiResult[Any]:
            return await controller.api.change_status(spec.kind, entity_id, to_status)

        return await self._run_single(
            change,
            call,
            success_title=f"{noun} Updated",
            success_message=f"{spec.title} #{entity.id} is now {spec.status_label(to_status)}.",
            failure_title="Update Failed",
        )

    async def set_visibility(self, entity_id: int, flag: str, visible: bool) -> CommandResult:
        spec = self.controller.spec
        if flag not in spec.flags or not flag.startswith("is_visible_to_"):
            raise UnsupportedActionError(f"{spec.noun} records have no '{flag}' visibility flag")
        audience = flag[len("is_visible_to_"):]
        state = "visible" if visible else "hidden"
        change = PendingChange(
            action=CommandAction.SET_FLAG,
            kind=spec.kind,
            entity_ids=(entity_id,),
            title=f"{'Show' if visible else 'Hide'} {spec.title}",
            description=f"Make {spec.noun} #{entity_id} {state} to the {audience}?",
            value=visible,
            flag=flag,
        )

        async def call(target: int) -> ApiResult[Any]:
            return await self.controller.api.set_visibility(spec.kind, target, flag, visible)

        return await self._run_single(
            change,
            call,
            success_title="Visibility Updated",
            success_message=f"{spec.title} #{entity_id} is now {state} to the {audience}.",
            failure_title="Update Failed",
        )

    async def toggle_visibility(self, entity: Entity, flag: str) -> CommandResult:
        return await self.set_visibility(entity.id, flag, not entity.flag(flag))

    async def set_active(self, entity_id: int, active: bool) -> CommandResult:
        spec = self.controller.spec
        if "is_active" not in spec.flags:
            raise UnsupportedActionError(f"{spec.noun} records cannot be activated")
        verb = "activated" if active else "deactivated"
        change = PendingChange(
            action=CommandAction.SET_FLAG,
            kind=spec.kind,
            entity_ids=(entity_id,),
            title=f"{'Activate' if active else 'Deactivate'} {spec.title}",
            description=f"Mark {spec.noun} #{entity_id} as {'active' if active else 'inactive'}?",
            value=active,
            flag="is_active",
        )

        async def call(target: int) -> ApiResult[Any]:
            return await self.controller.api.set_active(spec.kind, target, active)

        return await self._run_single(
            change,
            call,
            success_title="Status Updated",
            success_message=f"{spec.title} #{entity_id} has been {verb}.",
            failure_title="Update Failed",
        )

    async def toggle_active(self, entity: Entity) -> CommandResult:
        return await self.set_active(entity.id, not entity.flag("is_active"))

    async def delete(self, entity_id: int) -> CommandResult:
        spec = self.controller.spec
        change = PendingChange(
            action=CommandAction.DELETE,
            kind=spec.kind,
            entity_ids=(entity_id,),
            title=f"Delete {spec.title}",
            description=(
                f"Are you sure you want to delete this {spec.noun}? "
                "This action cannot be undone."
            ),
        )

        async def call(target: int) -> ApiResult[Any]:
            return await self.controller.api.delete(spec.kind, target)

        return await self._run_single(
            change,
            call,
            success_title=f"{spec.title} Deleted",
            success_message=f"{spec.title} #{entity_id} has been deleted.",
            failure_title="Delete Failed",
        )

    async def bulk_delete(self) -> CommandResult:
        """Delete every selected row, one at a time.

        Item failures do not stop the loop. Once every item was attempted the
        selection is cleared and the list is refreshed exactly once, whatever
        the item outcomes were.
        """
        controller = self.controller
        spec = controller.spec
        ids = controller.selection.ids
        change = PendingChange(
            action=CommandAction.BULK_DELETE,
            kind=spec.kind,
            entity_ids=ids,
            title="Bulk Delete Confirmation",
            description=(
                f"Are you sure you want to delete {len(ids)} selected "
                f"{_count_noun(spec.noun, len(ids))}? This action cannot be undone."
            ),
        )
        result = CommandResult(change)
        if not ids:
            self._notify(
                result,
                NotificationKind.PRECONDITION_FAILED,
                f"No {spec.title}s Selected",
                f"Please select at least one {spec.noun} to delete.",
                code=PreconditionFailed.code,
            )
            return result

        if not await self._confirm(result):
            return result

        async def delete_one(target: int) -> ApiResult[Any]:
            return await controller.api.delete(spec.kind, target)

        result.move(CommandState.EXECUTING)
        for entity_id in ids:
            result.items.append(await self._attempt(entity_id, delete_one))
        controller.selection.clear()

        deleted = result.succeeded_ids
        failed = result.failed_ids
        if not failed:
            result.move(CommandState.SUCCEEDED)
            self._notify(
                result,
                NotificationKind.SUCCESS,
                f"{spec.title}s Deleted",
                f"Successfully deleted {len(deleted)} {_count_noun(spec.noun, len(deleted))}.",
                deleted_ids=deleted,
            )
        else:
            result.move(CommandState.FAILED)
            listed = ", ".join(f"#{entity_id}" for entity_id in failed)
            self._notify(
                result,
                NotificationKind.FAILURE,
                "Delete Failed",
                f"Deleted {len(deleted)} of {len(ids)} {_count_noun(spec.noun, len(ids))}. "
                f"Could not delete {listed}.",
                deleted_ids=deleted,
                failed_ids=failed,
                errors={item.entity_id: item.error for item in result.items if not item.ok},
            )
        await controller.synchronizer.refresh()
        result.move(CommandState.IDLE)
        return result

    async def _run_single(
        self,
        change: PendingChange,
        call: RemoteCall,
        *,
        success_title: str,
        success_message: str,
        failure_title: str,
    ) -> CommandResult:
        result = CommandResult(change)
        if not await self._confirm(result):
            return result

        result.move(CommandState.EXECUTING)
        item = await self._attempt(change.entity_ids[0], call)
        result.items.append(item)
        if item.ok:
            result.move(CommandState.SUCCEEDED)
            self._notify(result, NotificationKind.SUCCESS, success_title, success_message)
            await self.controller.synchronizer.refresh()
        else:
            result.move(CommandState.FAILED)
            self._notify(
                result,
                NotificationKind.FAILURE,
                failure_title,
                item.error or "The request could not be completed.",
                code=item.code,
            )
        result.move(CommandState.IDLE)
        return result

    async def _confirm(self, result: CommandResult) -> bool:
        pending = PendingConfirmation(result.change, self.confirm_timeout_seconds)
        pending.start()
        self._pending.append(pending)
        result.move(CommandState.AWAITING_CONFIRMATION)
        prompt_error: Exception | None = None
        try:
            try:
                await present(self.prompter, pending)
            except Exception as exc:
                logger.exception("Prompter failed to present %s", result.change.title)
                prompt_error = exc
                pending.cancel()
            outcome = await pending.wait()
        finally:
            pending.cancel()
            self._pending.remove(pending)

        result.confirmation = outcome
        if outcome is ConfirmationOutcome.CONFIRMED:
            return True

        result.move(CommandState.IDLE)
        if prompt_error is not None:
            self._notify(
                result,
                NotificationKind.FAILURE,
                "Confirmation Failed",
                f"Could not ask for confirmation of \"{result.change.title}\": "
                f"{str(prompt_error) or type(prompt_error).__name__}. Nothing was changed.",
            )
        elif outcome is ConfirmationOutcome.EXPIRED:
            self._notify(
                result,
                NotificationKind.CONFIRMATION_EXPIRED,
                "Confirmation Expired",
                f"The confirmation window for \"{result.change.title}\" expired "
                f"after {self.confirm_timeout_seconds:g}s. Nothing was changed.",
                code=ConfirmationExpired.code,
            )
        else:
            logger.info("%s cancelled for %s", result.change.title, list(result.change.entity_ids))
        return False

    async def _attempt(self, entity_id: int, call: RemoteCall) -> ItemResult:
        try:
            outcome = await call(entity_id)
        except Exception as exc:
            logger.exception("Remote call for %s #%s raised", self.controller.spec.noun, entity_id)
            return ItemResult(entity_id, False, error=str(exc) or type(exc).__name__)
        if outcome.fulfilled:
            return ItemResult(entity_id, True)
        code = outcome.error.code if outcome.error is not None else None
        return ItemResult(entity_id, False, error=outcome.error_message, code=code)

    def _notify(
        self,
        result: CommandResult,
        kind: NotificationKind,
        title: str,
        message: str,
        **details: Any,
    ) -> None:
        notification = Notification(kind=kind, title=title, message=message, details=details)
        result.notification = notification
        self.notifier.notify(notification)


def _count_noun(noun: str, count: int) -> str:
    return noun if count == 1 else f"{noun}s"
