"""Application context assembly."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from guard_console.api.client import ConsoleApiClient
from guard_console.commands.confirmation import ConfirmationPrompter
from guard_console.commands.executor import CommandExecutor
from guard_console.commands.notifications import LoggingNotifier, Notifier
from guard_console.config import Settings, load_settings
from guard_console.domain.kinds import EntityKind
from guard_console.listing.controller import ListController
from guard_console.policy.engine import TransitionPolicy
from guard_console.policy.loader import load_transitions


@dataclass
class AppContext:
    """Application-wide dependency container.

    Holds the settings, the API client and the transition policy. List
    controllers are built per view and never cached here.
    """

    settings: Settings
    api: ConsoleApiClient
    policy: TransitionPolicy

    def build_controller(self, kind: EntityKind | str) -> ListController:
        console = self.settings.console
        return ListController(
            kind,
            self.api,
            per_page=console.per_page,
            policy=self.policy,
            step_back_on_empty=console.step_back_on_empty,
        )

    def build_executor(
        self,
        controller: ListController,
        *,
        notifier: Notifier | None = None,
        prompter: ConfirmationPrompter | None = None,
    ) -> CommandExecutor:
        return CommandExecutor(
            controller,
            notifier or LoggingNotifier(),
            prompter,
            confirm_timeout_seconds=self.settings.console.confirm_timeout_seconds,
        )


@lru_cache(maxsize=1)
def get_app_context() -> AppContext:
    """Get or create the cached application context."""
    settings = load_settings()
    policy = TransitionPolicy.from_config(load_transitions(settings.policy.transitions_path))
    api = ConsoleApiClient(
        settings.api.base_url,
        token=settings.api.token,
        timeout_seconds=settings.api.timeout_seconds,
    )
    return AppContext(settings=settings, api=api, policy=policy)
