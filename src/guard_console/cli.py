"""Command-line front end for the operations console."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Sequence, TextIO

from guard_console.app import AppContext, get_app_context
from guard_console.commands.confirmation import AutoConfirmPrompter, PendingConfirmation
from guard_console.commands.executor import CommandExecutor, CommandResult
from guard_console.commands.notifications import Notification
from guard_console.domain.kinds import EntityKind, get_kind_spec
from guard_console.domain.models import Entity
from guard_console.errors import ConsoleError, UnknownEntityKindError
from guard_console.listing.controller import ListController
from guard_console.logging_utils import get_logger

logger = logging.getLogger(__name__)

KIND_CHOICES = [kind.value for kind in EntityKind]


class PrintingNotifier:
    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out or sys.stdout

    def notify(self, notification: Notification) -> None:
        kind = notification.kind.value
        print(f"[{kind}] {notification.title}: {notification.message}", file=self._out)


class PreviewPrompter:
    """Shows what would change and cancels; ``--yes`` swaps in auto-confirm."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out or sys.stdout

    def present(self, pending: PendingConfirmation) -> None:
        change = pending.change
        print(f"{change.title}: {change.description}", file=self._out)
        print("Not confirmed. Re-run with --yes to apply.", file=self._out)
        pending.cancel()


def _parse_filter(raw: str) -> tuple[str, Any]:
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"filter must look like name=value, got {raw!r}")
    text = value.strip()
    if text.lower() in ("true", "false"):
        return name.strip(), text.lower() == "true"
    if text.lstrip("-").isdigit():
        return name.strip(), int(text)
    return name.strip(), text


def _add_list_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--per-page", type=int, default=None)
    parser.add_argument(
        "--search",
        action="append",
        default=[],
        help="Search field; repeat to combine several fields into one term",
    )
    parser.add_argument(
        "--filter",
        action="append",
        type=_parse_filter,
        default=[],
        metavar="NAME=VALUE",
    )
    parser.add_argument("--date", default=None, help="Date filter as YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guard-console",
        description="List, inspect and update console records.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List one page of records")
    list_cmd.add_argument("kind", choices=KIND_CHOICES)
    _add_list_options(list_cmd)

    show_cmd = sub.add_parser("show", help="Show a single record")
    show_cmd.add_argument("kind", choices=KIND_CHOICES)
    show_cmd.add_argument("id", type=int)

    actions_cmd = sub.add_parser("actions", help="Status actions available for a record")
    actions_cmd.add_argument("kind", choices=KIND_CHOICES)
    actions_cmd.add_argument("id", type=int)

    status_cmd = sub.add_parser("set-status", help="Move a record to a new status")
    status_cmd.add_argument("kind", choices=KIND_CHOICES)
    status_cmd.add_argument("id", type=int)
    status_cmd.add_argument("status")

    toggle_cmd = sub.add_parser("toggle", help="Flip a visibility or active flag")
    toggle_cmd.add_argument("kind", choices=KIND_CHOICES)
    toggle_cmd.add_argument("id", type=int)
    toggle_cmd.add_argument("flag")

    delete_cmd = sub.add_parser("delete", help="Delete a record")
    delete_cmd.add_argument("kind", choices=KIND_CHOICES)
    delete_cmd.add_argument("id", type=int)

    bulk_cmd = sub.add_parser("bulk-delete", help="Delete several records from one page")
    bulk_cmd.add_argument("kind", choices=KIND_CHOICES)
    bulk_cmd.add_argument("ids", type=int, nargs="+")
    _add_list_options(bulk_cmd)

    for cmd in (status_cmd, toggle_cmd, delete_cmd, bulk_cmd):
        cmd.add_argument("--yes", action="store_true", help="Confirm without asking")
    return parser


def _entity_json(entity: Entity) -> str:
    return json.dumps(entity.data, default=str, sort_keys=True)


async def _apply_list_options(controller: ListController, args: argparse.Namespace) -> bool:
    filters = controller.filters
    if args.per_page:
        filters.set_per_page(args.per_page)
    for name, value in args.filter:
        filters.set_filter(name, value)
    if args.search:
        filters.combine_search_fields(args.search)
    if args.date:
        filters.set_date_filter(args.date, controller.spec.date_filter_keys)
    filters.set_page(args.page)
    return await controller.load()


async def _load_entity(controller: ListController, entity_id: int, out: TextIO) -> Entity | None:
    result = await controller.api.show(controller.kind, entity_id)
    if not result.fulfilled or result.value is None:
        noun = controller.spec.noun
        print(f"Could not load {noun} #{entity_id}: {result.error_message}", file=out)
        return None
    return result.value


def _exit_code(result: CommandResult) -> int:
    return 0 if result.succeeded else 1


async def _dispatch(args: argparse.Namespace, out: TextIO) -> int:
    context = get_app_context()
    controller = context.build_controller(args.kind)
    spec = get_kind_spec(args.kind)

    if args.command == "list":
        if not await _apply_list_options(controller, args):
            print(f"Failed to load {spec.plural}: {controller.last_error}", file=out)
            return 1
        page = controller.page
        for row in page.items:
            print(_entity_json(row), file=out)
        print(
            f"page {page.current_page}/{max(page.last_page, 1)} "
            f"({page.total} {spec.plural})",
            file=out,
        )
        return 0

    if args.command == "bulk-delete":
        if not await _apply_list_options(controller, args):
            print(f"Failed to load {spec.plural}: {controller.last_error}", file=out)
            return 1
        for entity_id in args.ids:
            controller.select_one(entity_id, True)
        skipped = [i for i in args.ids if i not in controller.selection]
        if skipped:
            logger.warning("Ignoring ids not on the loaded page: %s", skipped)
        executor = _executor(context, controller, args, out)
        return _exit_code(await executor.bulk_delete())

    entity = await _load_entity(controller, args.id, out)
    if entity is None:
        return 1

    if args.command == "show":
        print(_entity_json(entity), file=out)
        return 0

    if args.command == "actions":
        for action in controller.available_actions(entity):
            print(f"{action.to}\t{action.label}", file=out)
        return 0

    executor = _executor(context, controller, args, out)
    if args.command == "set-status":
        return _exit_code(await executor.change_status(entity, args.status))
    if args.command == "toggle":
        if args.flag == "is_active":
            return _exit_code(await executor.toggle_active(entity))
        return _exit_code(await executor.toggle_visibility(entity, args.flag))
    if args.command == "delete":
        return _exit_code(await executor.delete(entity.id))
    raise ValueError(f"Unknown command: {args.command}")


def _executor(
    context: AppContext,
    controller: ListController,
    args: argparse.Namespace,
    out: TextIO,
) -> CommandExecutor:
    prompter = AutoConfirmPrompter() if args.yes else PreviewPrompter(out)
    return context.build_executor(controller, notifier=PrintingNotifier(out), prompter=prompter)


def main(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    stream = out or sys.stdout
    get_logger(__name__).debug("Running %s for %s", args.command, args.kind)
    try:
        return asyncio.run(_dispatch(args, stream))
    except (ConsoleError, UnknownEntityKindError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
