"""Confirmation-gated commands and their notifications."""

from guard_console.commands.confirmation import (
    AutoConfirmPrompter,
    CommandAction,
    ConfirmationOutcome,
    ConfirmationPrompter,
    DeclinePrompter,
    HoldingPrompter,
    PendingChange,
    PendingConfirmation,
)
from guard_console.commands.executor import (
    CommandExecutor,
    CommandResult,
    CommandState,
    ItemResult,
)
from guard_console.commands.notifications import (
    LoggingNotifier,
    Notification,
    NotificationKind,
    Notifier,
    RecordingNotifier,
)

__all__ = [
    "AutoConfirmPrompter",
    "CommandAction",
    "CommandExecutor",
    "CommandResult",
    "CommandState",
    "ConfirmationOutcome",
    "ConfirmationPrompter",
    "DeclinePrompter",
    "HoldingPrompter",
    "ItemResult",
    "LoggingNotifier",
    "Notification",
    "NotificationKind",
    "Notifier",
    "PendingChange",
    "PendingConfirmation",
    "RecordingNotifier",
]
