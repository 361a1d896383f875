"""Interactive operator menu for community reports and member removal.

Each menu entry maps to a ``Command``; ``run_command`` dispatches it into
the read-only analytics in community_analytics.py and writes the resulting
CSV reports.  Removals always go through an explicit confirm step.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from community_analytics import (
    CommunitySession,
    InactivityReport,
    exclusive_rows,
    participant_rows,
    unknown_author_rows,
)
from report_writer import (
    EXCLUSIVE_REPORT,
    INACTIVE_REPORT,
    INTERSECTIONS_REPORT,
    UNDELIVERED_REPORT,
    UNKNOWN_AUTHORS_REPORT,
    UNREAD_REPORT,
    EmptyReportError,
    write_report,
)

logger = logging.getLogger(__name__)


class Command(Enum):
    REPORT_INTERSECTIONS = "1"
    REPORT_INACTIVE_IN_GROUP = "2"
    REPORT_INACTIVE_ALL = "3"
    REPORT_EXCLUSIVE = "4"
    REMOVE_USERS = "5"
    RELOAD = "6"
    EXIT = "7"


MENU_LABELS = {
    Command.REPORT_INTERSECTIONS: "Report group intersections",
    Command.REPORT_INACTIVE_IN_GROUP: "Report inactive users in one group",
    Command.REPORT_INACTIVE_ALL: "Report inactive users across all groups",
    Command.REPORT_EXCLUSIVE: "Report users only in one group",
    Command.REMOVE_USERS: "Remove user(s) from the community",
    Command.RELOAD: "Reload community members",
    Command.EXIT: "Exit",
}


def print_menu(community_name: str) -> None:
    print("\n" + "=" * 60)
    print(f"Community: {community_name}")
    print("=" * 60)
    for command in Command:
        print(f"  [{command.value}] {MENU_LABELS[command]}")


def prompt_command() -> Command:
    """Ask for a menu choice until a valid one is entered."""
    while True:
        choice = input("Choose an option: ").strip()
        try:
            return Command(choice)
        except ValueError:
            print(f"Please enter a number between 1 and {len(Command)}.")


def get_valid_number_input(
    prompt: str,
    default_value: int,
    min_value: int = 1,
    max_value: int | None = None,
) -> int:
    """Get a valid number input from the user.

    Repeatedly prompts until a valid integer within the specified range
    is entered, or the user accepts the default by pressing Enter.

    Args:
        prompt: The prompt string to display to the user.
        default_value: Returned if the user enters an empty string.
        min_value: The minimum allowed value (inclusive).
        max_value: The maximum allowed value (inclusive), or None for
            no upper bound.

    Returns:
        The validated integer, or the default value.
    """
    while True:
        user_input = input(prompt).strip()
        if not user_input:
            return default_value
        try:
            value = int(user_input)
        except ValueError:
            print("Please enter a valid number.")
            continue

        if value < min_value:
            print(f"Please enter a number greater than or equal to {min_value}.")
            continue
        if max_value is not None and value > max_value:
            print(f"Please enter a number less than or equal to {max_value}.")
            continue
        return value


def confirm(prompt: str) -> bool:
    while True:
        choice = input(f"{prompt} (y/n): ").strip().lower()
        if choice in ("y", "yes"):
            return True
        if choice in ("n", "no"):
            return False
        print("Please enter 'y' or 'n'.")


def select_group(group_names: Sequence[str]) -> str:
    """Print the numbered group list and return the chosen group name."""
    print("\nGroups:")
    for i, name in enumerate(group_names, 1):
        print(f"  [{i}] {name}")
    index = get_valid_number_input(
        f"Select a group (1-{len(group_names)}) [default: 1]: ",
        1, 1, len(group_names),
    )
    return group_names[index - 1]


def export_report(
    rows: Sequence[Mapping[str, Any]], report_kind: str, output_dir: str
) -> str | None:
    """Write one report, or tell the operator there is nothing to write."""
    try:
        path = write_report(rows, report_kind, output_dir)
    except EmptyReportError:
        print(f"No rows for {report_kind}, nothing written.")
        return None
    print(f"{report_kind} has been written to {path}")
    return path


def print_inactivity_summary(report: InactivityReport) -> None:
    print(f"\nInactive users: {len(report.inactive):,}")
    print(f"  never read an operator message: {len(report.unread):,}")
    print(f"  never received an operator message: {len(report.undelivered):,}")
    empty = [label for label in report.skipped_chats if label not in report.fetch_errors]
    if empty:
        print(f"Skipped groups with no countable messages: {', '.join(empty)}")
    for label, error in report.fetch_errors.items():
        print(f"Could not read history of {label}: {error}")
    if report.receipts_failed:
        print(f"Receipts unavailable for {report.receipts_failed:,} operator message(s)")
    if report.unknown_authors:
        print(f"Activity from {len(report.unknown_authors):,} unknown user(s), see the unknown-authors report")
    for group, ranked in report.top_active.items():
        if not ranked:
            continue
        print(f"\nMost active in {group}:")
        for user_id, count in ranked:
            print(f"  {user_id}: {count:,} messages")


def export_inactivity(report: InactivityReport, output_dir: str) -> list[str]:
    counts = report.activity_counts
    written = [
        export_report(participant_rows(report.inactive, counts), INACTIVE_REPORT, output_dir),
        export_report(participant_rows(report.unread, counts), UNREAD_REPORT, output_dir),
        export_report(participant_rows(report.undelivered, counts), UNDELIVERED_REPORT, output_dir),
        export_report(unknown_author_rows(report.unknown_authors), UNKNOWN_AUTHORS_REPORT, output_dir),
    ]
    return [path for path in written if path]


async def remove_users(session: CommunitySession) -> int:
    """Prompt for user ids, apply the removal policy, confirm, and remove.

    Returns:
        The number of participants removed.
    """
    raw = input("User id(s) to remove, comma separated: ").strip()
    if not raw:
        print("No user ids entered.")
        return 0

    plan = session.plan_removal(raw.split(","))
    for user_id, reason in plan.refused:
        print(f"Not removing {user_id}: {reason}")
    if not plan.allowed:
        print("Nobody to remove.")
        return 0

    if len(plan.allowed) == 1:
        participant = plan.allowed[0]
        question = f"Remove {participant.name} ({participant.id}) from the community?"
    else:
        for participant in plan.allowed:
            print(f"  {participant.name} ({participant.id})")
        question = f"Remove these {len(plan.allowed)} users from the community?"

    if not confirm(question):
        print("Removal cancelled.")
        return 0

    await session.remove(plan.allowed)
    print(f"Removed {len(plan.allowed)} user(s).")
    await reload_session(session)
    return len(plan.allowed)


async def reload_session(session: CommunitySession) -> None:
    await session.reload()
    print(f"Reloaded {len(session.registry):,} participants from {len(session.groups)} groups.")


async def run_command(session: CommunitySession, command: Command) -> bool:
    """Execute one menu command.

    Returns:
        False when the operator chose to exit, True otherwise.
    """
    output_dir = session.config.output_dir

    if command is Command.EXIT:
        return False

    if command is Command.REPORT_INTERSECTIONS:
        export_report(session.report_intersections(), INTERSECTIONS_REPORT, output_dir)
    elif command is Command.REPORT_INACTIVE_IN_GROUP:
        if not session.group_names:
            print("The community has no groups.")
            return True
        group = select_group(session.group_names)
        report = await session.find_inactive(group)
        print_inactivity_summary(report)
        export_inactivity(report, output_dir)
    elif command is Command.REPORT_INACTIVE_ALL:
        report = await session.find_inactive()
        print_inactivity_summary(report)
        export_inactivity(report, output_dir)
    elif command is Command.REPORT_EXCLUSIVE:
        export_report(exclusive_rows(session.report_exclusive()), EXCLUSIVE_REPORT, output_dir)
    elif command is Command.REMOVE_USERS:
        await remove_users(session)
    elif command is Command.RELOAD:
        await reload_session(session)
    return True


async def run_menu(session: CommunitySession) -> None:
    """Show the menu and run commands until the operator exits."""
    community_name = session.community.name if session.community else session.community_id
    while True:
        print_menu(community_name)
        command = prompt_command()
        logger.debug("Operator selected %s", command.name)
        if not await run_command(session, command):
            break
    print("Done")
