"""Core analytics for a chat community: membership, activity and overlap.

Consolidates the participant lists of every group in a community into one
registry, then answers read-only report queries over it:

- pairwise group intersection ratios,
- inactive members (no recent messages or joins), split by whether they
  have read or even received the operator's own messages,
- members that belong to exactly one non-announcement group.

Used by the interactive menu (community_menu.py) and the JSON dashboard
(app.py).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from community_client import (
    Chat,
    ChatMember,
    ChatNotFoundError,
    Message,
    MessagingClient,
    SnapshotClient,
    normalize_user_id,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
COMMUNITY_ID = "120363047641738769@g.us"
DEFAULT_MESSAGE_LIMIT = 100_000
DEFAULT_ACTIVITY_WINDOW_DAYS = 90
DEFAULT_JOIN_WINDOW_DAYS = 30
DEFAULT_TOP_ACTIVE_USERS = 10
DEFAULT_OUTPUT_DIR = "community_reports"
SECONDS_PER_DAY = 86_400
BODY_PREVIEW_CHARS = 100
GROUPS_SEPARATOR = ", "

GROUP_NOTIFICATION = "gp2"

COUNTABLE_MESSAGE_KINDS = frozenset({
    "chat",
    "audio",
    "ptt",  # voice note
    "image",
    "video",
    "document",
    "sticker",
    "location",
    "reaction",
    "list_response",  # poll
    "buttons_response",
})

JOIN_SUBTYPES = frozenset({
    "linked_group_join",  # joined through the community
    "invite",  # joined through a group invite link
    "add",  # added by an admin
})


@dataclass
class AnalysisConfig:
    """Knobs for one inactivity scan and its report output."""

    activity_window_days: float = DEFAULT_ACTIVITY_WINDOW_DAYS
    join_window_days: float = DEFAULT_JOIN_WINDOW_DAYS
    message_limit: int = DEFAULT_MESSAGE_LIMIT
    countable_kinds: frozenset[str] = COUNTABLE_MESSAGE_KINDS
    join_subtypes: frozenset[str] = JOIN_SUBTYPES
    top_active_users: int = DEFAULT_TOP_ACTIVE_USERS
    max_concurrent_chats: int = 1
    output_dir: str = DEFAULT_OUTPUT_DIR


# ---------------------------------------------------------------------------
# Participant registry
# ---------------------------------------------------------------------------

@dataclass
class Participant:
    """One person across the whole community, keyed by ``id``."""

    id: str
    name: str | None = None
    is_admin: bool = False
    is_super_admin: bool = False
    groups: list[str] = field(default_factory=list)

    def merge(self, member: ChatMember, group_name: str) -> None:
        """Fold another sighting of this person into the record.

        A newer non-empty name replaces the old one, admin flags accumulate
        (admin anywhere means admin), and the group is appended once.
        """
        if member.name:
            self.name = member.name
        self.is_admin = self.is_admin or member.is_admin
        self.is_super_admin = self.is_super_admin or member.is_super_admin
        if group_name not in self.groups:
            self.groups.append(group_name)


class ParticipantRegistry:
    """Consolidated participants of a community, one entry per user id.

    Admins are tracked in a separate map so that an admin of the community
    chat itself counts as an admin even without a group sighting.
    """

    def __init__(self) -> None:
        self._participants: dict[str, Participant] = {}
        self._admins: dict[str, ChatMember] = {}

    def merge(self, group_name: str, member: ChatMember) -> Participant:
        user_id = normalize_user_id(member.id)
        participant = self._participants.get(user_id)
        if participant is None:
            participant = Participant(id=user_id)
            self._participants[user_id] = participant
        participant.merge(member, group_name)
        if member.is_admin or member.is_super_admin:
            self._admins[user_id] = member
        return participant

    def add_admin(self, member: ChatMember) -> None:
        """Record *member* as a community admin without a group sighting."""
        self._admins[normalize_user_id(member.id)] = member

    def get(self, user_id: str) -> Participant | None:
        return self._participants.get(user_id)

    def is_admin(self, user_id: str) -> bool:
        return user_id in self._admins

    def get_all(self) -> list[Participant]:
        return list(self._participants.values())

    def get_admins(self) -> list[ChatMember]:
        return list(self._admins.values())

    def get_non_admins(self) -> list[Participant]:
        return [p for p in self._participants.values() if p.id not in self._admins]

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._participants

    def __len__(self) -> int:
        return len(self._participants)


def build_registry(
    groups: Sequence[tuple[str, Chat]],
    community: Chat | None = None,
) -> tuple[ParticipantRegistry, dict[str, list[str]]]:
    """Merge every group's participant list into one registry.

    Args:
        groups: (label, chat) pairs in processing order.  The label is the
            group name recorded in each participant's ``groups`` list.
        community: The parent community chat.  Its admins are registered
            as admins; its plain members are not registered.

    Returns:
        A (registry, members_by_group) tuple.  ``members_by_group`` maps
        each label to the ordered member ids of that group, admins included.
    """
    registry = ParticipantRegistry()
    members_by_group: dict[str, list[str]] = {}

    if community is not None:
        for member in community.participants:
            if member.is_admin or member.is_super_admin:
                registry.add_admin(member)

    for label, chat in groups:
        chat_admins = [m for m in chat.participants if m.is_admin or m.is_super_admin]
        chat_users = len(chat.participants) - len(chat_admins)
        logger.info(
            "Chat %s has %d normal users plus %d group admin(s)",
            label, chat_users, len(chat_admins),
        )
        if not chat_users:
            logger.warning(
                "Chat %s has no users, is the currently authenticated user a member of the group?",
                label,
            )
        for member in chat.participants:
            registry.merge(label, member)
        members_by_group[label] = chat.participant_ids

    return registry, members_by_group


# ---------------------------------------------------------------------------
# Activity window filter and join detection
# ---------------------------------------------------------------------------

def window_cutoff(days: float, now: float | None = None) -> float:
    """Return the epoch-seconds instant ``now - days``."""
    if now is None:
        now = time.time()
    return now - days * SECONDS_PER_DAY


def is_recent(event: Message, cutoff: float) -> bool:
    return event.timestamp >= cutoff


def is_countable(event: Message, allowed_kinds: Iterable[str]) -> bool:
    """Check the event's kind (its subtype for group notifications)."""
    kind = event.subtype if event.type == GROUP_NOTIFICATION else event.type
    return kind in allowed_kinds


def counts_as_activity(
    message: Message, allowed_kinds: Iterable[str], cutoff: float
) -> bool:
    """True for an authored, countable message inside the activity window.

    System messages have no author and never count.
    """
    if not message.author or message.type == GROUP_NOTIFICATION:
        return False
    return is_countable(message, allowed_kinds) and is_recent(message, cutoff)


def join_subjects(event: Message) -> list[str]:
    """Return the ids of the users who joined in a join notification.

    Admin adds name the added users in ``recipients``; self-joins may only
    carry the joining user as the author.
    """
    if event.recipients:
        return list(event.recipients)
    return [event.author] if event.author else []


def detect_joins(
    events: Iterable[Message],
    join_subtypes: Iterable[str],
    cutoff: float,
) -> list[tuple[str, Message]]:
    """Return (user_id, event) pairs for recent joins through allowed paths.

    Args:
        events: A chat's raw history, notifications included.
        join_subtypes: Notification subtypes that count as a join.
        cutoff: Epoch seconds; older joins are ignored.

    Returns:
        One pair per joining user, in history order.
    """
    joins: list[tuple[str, Message]] = []
    for event in events:
        if event.type != GROUP_NOTIFICATION:
            continue
        if not (is_countable(event, join_subtypes) and is_recent(event, cutoff)):
            continue
        for user_id in join_subjects(event):
            joins.append((user_id, event))
    return joins


# ---------------------------------------------------------------------------
# Receipt tracking and per-chat scan
# ---------------------------------------------------------------------------

@dataclass
class ReceiptTracker:
    """Who has read or received at least one operator-sent message."""

    read: set[str] = field(default_factory=set)
    delivered: set[str] = field(default_factory=set)
    checked: int = 0
    failed: int = 0

    async def track(self, client: MessagingClient, message: Message) -> None:
        # Receipts only exist for messages sent by this account.
        if not message.from_me:
            return
        try:
            info = await client.get_message_info(message)
        except Exception as e:
            self.failed += 1
            logger.warning("Could not fetch receipts for message %s: %s", message.id, e)
            return
        self.read.update(info.read)
        self.delivered.update(info.delivery)
        self.checked += 1

    def absorb(self, other: ReceiptTracker) -> None:
        self.read |= other.read
        self.delivered |= other.delivered
        self.checked += other.checked
        self.failed += other.failed


@dataclass
class ChatScan:
    """Everything one chat's history contributes to an inactivity report."""

    label: str
    activity: dict[str, list[Message]] = field(default_factory=dict)
    message_counts: dict[str, int] = field(default_factory=dict)
    receipts: ReceiptTracker = field(default_factory=ReceiptTracker)
    countable_messages: int = 0
    join_events: int = 0
    skipped: bool = False
    fetch_error: str | None = None


def top_active_users(message_counts: Mapping[str, int], limit: int) -> list[tuple[str, int]]:
    """Return the *limit* busiest users, ties kept in first-seen order."""
    ranked = sorted(message_counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:max(limit, 0)]


async def scan_chat(
    client: MessagingClient,
    label: str,
    chat: Chat,
    config: AnalysisConfig,
    now: float | None = None,
) -> ChatScan:
    """Fetch one chat's history and collect its activity and receipts.

    Receipt look-ups run one at a time in history order.

    Args:
        client: Messaging platform client.
        label: Group name used in reports.
        chat: The chat to scan.
        config: Windows, allow-lists and fetch limit.
        now: Epoch seconds treated as the current time.  Defaults to now.

    Returns:
        A ``ChatScan``; ``skipped`` is set when nothing in the chat counts
        or its history could not be fetched.
    """
    logger.info("Checking %d most recent messages from %s", config.message_limit, label)
    try:
        history = await client.fetch_messages(chat.id, config.message_limit)
    except Exception as e:
        logger.warning("Could not fetch messages from %s, skipping it: %s", label, e)
        return ChatScan(label=label, skipped=True, fetch_error=str(e))

    message_cutoff = window_cutoff(config.activity_window_days, now)
    join_cutoff = window_cutoff(config.join_window_days, now)
    countable = [
        m for m in history if counts_as_activity(m, config.countable_kinds, message_cutoff)
    ]
    joins = detect_joins(history, config.join_subtypes, join_cutoff)
    logger.debug(
        "Filtered out %d non-countable messages from %s",
        len(history) - len(countable), label,
    )

    scan = ChatScan(label=label, countable_messages=len(countable), join_events=len(joins))
    if not countable and not joins:
        logger.warning(
            "Found no messages in %s, is the current authenticated user a member of this group?",
            label,
        )
        scan.skipped = True
        return scan

    for message in countable:
        await scan.receipts.track(client, message)
        scan.activity.setdefault(message.author, []).append(message)
        scan.message_counts[message.author] = scan.message_counts.get(message.author, 0) + 1

    for user_id, event in joins:
        scan.activity.setdefault(user_id, []).append(event)

    for user_id, count in top_active_users(scan.message_counts, config.top_active_users):
        logger.debug("User %s has sent %d messages in %s", user_id, count, label)
    logger.info(
        "Additionally %d messages sent by authenticated user were checked for read status",
        scan.receipts.checked,
    )
    return scan


async def scan_chats(
    client: MessagingClient,
    groups: Sequence[tuple[str, Chat]],
    config: AnalysisConfig,
    now: float | None = None,
    on_chat_scanned: Callable[[ChatScan], None] | None = None,
) -> list[ChatScan]:
    """Scan several chats, sequentially or with bounded concurrency.

    Results come back in the order of *groups* regardless of which chat
    finishes first.
    """
    async def _scan(label: str, chat: Chat) -> ChatScan:
        scan = await scan_chat(client, label, chat, config, now)
        if on_chat_scanned is not None:
            on_chat_scanned(scan)
        return scan

    if config.max_concurrent_chats <= 1:
        scans = []
        for label, chat in groups:
            scans.append(await _scan(label, chat))
        return scans

    semaphore = asyncio.Semaphore(config.max_concurrent_chats)

    async def _bounded(label: str, chat: Chat) -> ChatScan:
        async with semaphore:
            return await _scan(label, chat)

    return list(await asyncio.gather(*(_bounded(label, chat) for label, chat in groups)))


# ---------------------------------------------------------------------------
# Inactivity classification
# ---------------------------------------------------------------------------

@dataclass
class UnknownAuthor:
    """Activity from an id that is not a registered participant."""

    id: str
    groups: list[str] = field(default_factory=list)
    events: list[Message] = field(default_factory=list)


@dataclass
class InactivityReport:
    inactive: list[Participant]
    unread: list[Participant]
    undelivered: list[Participant]
    activity_counts: dict[str, int]
    unknown_authors: dict[str, UnknownAuthor]
    top_active: dict[str, list[tuple[str, int]]]
    skipped_chats: list[str]
    receipts_checked: int
    fetch_errors: dict[str, str] = field(default_factory=dict)
    receipts_failed: int = 0


def classify_inactivity(
    registry: ParticipantRegistry,
    scans: Sequence[ChatScan],
    candidate_ids: set[str] | None = None,
    top_active_limit: int = DEFAULT_TOP_ACTIVE_USERS,
) -> InactivityReport:
    """Combine chat scans into inactive / unread / undelivered partitions.

    Args:
        registry: The consolidated community participants.  Not modified.
        scans: Per-chat results from ``scan_chat``.
        candidate_ids: Restrict the analysis to these user ids (e.g. the
            members of one selected group).  None means every participant.
        top_active_limit: How many busiest users to report per chat.

    Returns:
        An ``InactivityReport``.  ``undelivered`` is a subset of ``unread``,
        which is a subset of ``inactive``.
    """
    activity: dict[str, list[Message]] = {}
    unknown: dict[str, UnknownAuthor] = {}
    receipts = ReceiptTracker()
    top_active: dict[str, list[tuple[str, int]]] = {}
    skipped: list[str] = []
    fetch_errors: dict[str, str] = {}

    for scan in scans:
        if scan.skipped:
            skipped.append(scan.label)
            if scan.fetch_error is not None:
                fetch_errors[scan.label] = scan.fetch_error
            continue
        receipts.absorb(scan.receipts)
        top_active[scan.label] = top_active_users(scan.message_counts, top_active_limit)

        for user_id, events in scan.activity.items():
            if user_id in registry:
                activity.setdefault(user_id, []).extend(events)
                continue
            bucket = unknown.setdefault(user_id, UnknownAuthor(id=user_id))
            if scan.label not in bucket.groups:
                bucket.groups.append(scan.label)
            bucket.events.extend(events)
            for event in events:
                if event.type == GROUP_NOTIFICATION:
                    logger.warning(
                        "User %s joined %s but was not found in community, check this number",
                        user_id, scan.label,
                    )
                    continue
                logger.warning(
                    'Message from unknown user %s, user not found in community, check this number - "%s..."',
                    user_id, event.body[:BODY_PREVIEW_CHARS],
                )

    candidates = [
        p for p in registry.get_non_admins()
        if candidate_ids is None or p.id in candidate_ids
    ]
    logger.info(
        "Of %d considering %d as potentially inactive", len(registry), len(candidates)
    )

    activity_counts = {p.id: len(activity.get(p.id, [])) for p in candidates}
    inactive = [p for p in candidates if activity_counts[p.id] == 0]
    unread = [p for p in inactive if p.id not in receipts.read]
    undelivered = [p for p in unread if p.id not in receipts.delivered]

    logger.info("Found %d users without recent activity in any scanned group", len(inactive))
    logger.info(
        "Of those users %d have not read a message (sent by authenticated user) "
        "and %d have never received one",
        len(unread), len(undelivered),
    )

    return InactivityReport(
        inactive=inactive,
        unread=unread,
        undelivered=undelivered,
        activity_counts=activity_counts,
        unknown_authors=unknown,
        top_active=top_active,
        skipped_chats=skipped,
        fetch_errors=fetch_errors,
        receipts_checked=receipts.checked,
        receipts_failed=receipts.failed,
    )


# ---------------------------------------------------------------------------
# Group intersections and exclusivity
# ---------------------------------------------------------------------------

def compute_group_intersections(
    members_by_group: Mapping[str, Sequence[str]],
) -> list[dict[str, Any]]:
    """Compute the row-relative overlap ratio for every pair of groups.

    Cell ``[A][B]`` is ``|A ∩ B| / |A|``, so the table is asymmetric unless
    the two groups are the same size.  The diagonal is always 1.0; the rest
    of an empty group's row is 0.0.

    Args:
        members_by_group: Group name to member ids, admins included.

    Returns:
        One dict per group: ``{"Name": group, <group>: ratio, ...}`` with
        columns in the same order as the rows.
    """
    member_sets = {name: set(ids) for name, ids in members_by_group.items()}
    rows: list[dict[str, Any]] = []
    for name, members in member_sets.items():
        row: dict[str, Any] = {"Name": name}
        for other_name, other_members in member_sets.items():
            if other_name == name:
                row[other_name] = 1.0
            elif not members:
                row[other_name] = 0.0
            else:
                row[other_name] = len(members & other_members) / len(members)
        rows.append(row)
    return rows


def find_exclusive_users(
    participants: Iterable[Participant],
    announce_only: Mapping[str, bool],
) -> list[tuple[Participant, str]]:
    """Return participants found in exactly one non-announcement group.

    Args:
        participants: Registry participants.
        announce_only: Group name to its announce-only flag.  Groups not in
            the mapping count as ordinary groups.

    Returns:
        (participant, group name) pairs in registry order.
    """
    exclusive: list[tuple[Participant, str]] = []
    for participant in participants:
        substantive = [g for g in participant.groups if not announce_only.get(g, False)]
        if len(substantive) == 1:
            exclusive.append((participant, substantive[0]))
    return exclusive


# ---------------------------------------------------------------------------
# Removal policy
# ---------------------------------------------------------------------------

@dataclass
class RemovalPlan:
    allowed: list[Participant] = field(default_factory=list)
    refused: list[tuple[str, str]] = field(default_factory=list)


def plan_removal(
    registry: ParticipantRegistry,
    user_ids: Iterable[str],
    own_id: str,
) -> RemovalPlan:
    """Split requested removals into allowed participants and refusals.

    Admins, super admins and the operator's own account are refused.  Ids
    that are unknown or lack a display name are refused too, so the
    operator can confirm each removal by name.
    """
    plan = RemovalPlan()
    own_id = normalize_user_id(own_id)
    for raw_id in user_ids:
        user_id = normalize_user_id(raw_id.strip())
        if not user_id:
            continue
        participant = registry.get(user_id)
        if user_id == own_id:
            reason = "cannot remove the operator's own account"
        elif registry.is_admin(user_id) or (
            participant is not None and (participant.is_admin or participant.is_super_admin)
        ):
            reason = "user is an admin"
        elif participant is None:
            reason = "user not found in community"
        elif not participant.name:
            reason = "user has no display name"
        else:
            plan.allowed.append(participant)
            continue
        logger.warning("Refusing to remove %s: %s", user_id, reason)
        plan.refused.append((user_id, reason))
    return plan


# ---------------------------------------------------------------------------
# Report rows
# ---------------------------------------------------------------------------

def participant_rows(
    participants: Sequence[Participant], activity_counts: Mapping[str, int]
) -> list[dict[str, Any]]:
    return [
        {
            "User ID": p.id,
            "Messages": activity_counts.get(p.id, 0),
            "Groups": GROUPS_SEPARATOR.join(p.groups),
        }
        for p in participants
    ]


def unknown_author_rows(unknown: Mapping[str, UnknownAuthor]) -> list[dict[str, Any]]:
    return [
        {
            "User ID": author.id,
            "Messages": len(author.events),
            "Groups": GROUPS_SEPARATOR.join(author.groups),
        }
        for author in unknown.values()
    ]


def exclusive_rows(pairs: Sequence[tuple[Participant, str]]) -> list[dict[str, Any]]:
    return [{"User ID": p.id, "Group": group} for p, group in pairs]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

def label_groups(chats: Sequence[Chat]) -> list[tuple[str, Chat]]:
    """Pair each chat with a unique display label.

    Chats sharing a display name get their id appended so no group's data
    is overwritten in name-keyed reports.
    """
    counts: dict[str, int] = {}
    for chat in chats:
        counts[chat.name] = counts.get(chat.name, 0) + 1
    return [
        (chat.name if counts[chat.name] == 1 else f"{chat.name} ({chat.id})", chat)
        for chat in chats
    ]


class CommunitySession:
    """One operator session over a community: load once, then query.

    The registry is built by ``load`` and only read afterwards; ``reload``
    rebuilds it from scratch.
    """

    def __init__(
        self,
        client: MessagingClient,
        community_id: str = COMMUNITY_ID,
        config: AnalysisConfig | None = None,
        on_chat_scanned: Callable[[ChatScan], None] | None = None,
    ) -> None:
        self.client = client
        self.community_id = community_id
        self.config = config or AnalysisConfig()
        self.on_chat_scanned = on_chat_scanned
        self.community: Chat | None = None
        self.groups: list[tuple[str, Chat]] = []
        self.registry = ParticipantRegistry()
        self.members_by_group: dict[str, list[str]] = {}

    async def load(self) -> None:
        """Fetch the community and its groups and build the registry.

        Raises:
            ChatNotFoundError: If the community chat does not exist.
        """
        community = await self.client.get_chat_by_id(self.community_id)
        community_admins = [
            m for m in community.participants if m.is_admin or m.is_super_admin
        ]
        logger.info('Grabbing all participants for "%s"', community.name)
        logger.info("Loaded %d community admins", len(community_admins))

        chats = [
            chat for chat in await self.client.get_chats()
            if chat.is_group and chat.parent_id == self.community_id
        ]
        logger.info("Loaded %d chats that are part of the community", len(chats))
        chats.sort(key=lambda chat: len(chat.participants), reverse=True)

        self.community = community
        self.groups = label_groups(chats)
        self.registry, self.members_by_group = build_registry(self.groups, community)
        logger.info(
            "Loaded a total of %d users including %d admins (and %d community admins)",
            len(self.registry), len(self.registry.get_admins()), len(community_admins),
        )

    async def reload(self) -> None:
        await self.load()

    @property
    def group_names(self) -> list[str]:
        return [label for label, _ in self.groups]

    def get_group(self, name: str) -> Chat:
        for label, chat in self.groups:
            if label == name:
                return chat
        raise ChatNotFoundError(f"Group {name!r} not found in community")

    def report_intersections(self) -> list[dict[str, Any]]:
        return compute_group_intersections(self.members_by_group)

    def report_exclusive(self) -> list[tuple[Participant, str]]:
        announce_only = {label: chat.announce_only for label, chat in self.groups}
        return find_exclusive_users(self.registry.get_all(), announce_only)

    async def find_inactive(
        self, group_name: str | None = None, now: float | None = None
    ) -> InactivityReport:
        """Scan group histories and classify inactive members.

        Args:
            group_name: Limit the scan and the candidates to this group.
                None scans every group for every participant.
            now: Epoch seconds treated as the current time.

        Raises:
            ChatNotFoundError: If *group_name* is not a community group.
        """
        if group_name is None:
            targets = self.groups
            candidate_ids = None
        else:
            targets = [(group_name, self.get_group(group_name))]
            candidate_ids = set(self.members_by_group[group_name])

        scans = await scan_chats(
            self.client, targets, self.config, now, self.on_chat_scanned
        )
        return classify_inactivity(
            self.registry, scans, candidate_ids, self.config.top_active_users
        )

    def plan_removal(self, user_ids: Iterable[str]) -> RemovalPlan:
        return plan_removal(self.registry, user_ids, self.client.own_id)

    async def remove(self, participants: Sequence[Participant]) -> None:
        """Remove already-approved participants from the community chat."""
        if not participants:
            return
        await self.client.remove_participants(
            self.community_id, [p.id for p in participants]
        )


# ---------------------------------------------------------------------------
# Dashboard entry point
# ---------------------------------------------------------------------------

async def build_report_payload(
    snapshot_path: str,
    community_id: str = COMMUNITY_ID,
    config: AnalysisConfig | None = None,
    now: float | None = None,
) -> dict[str, Any]:
    """One-call entry point: load a snapshot and compute every report.

    Args:
        snapshot_path: Path to a ``SnapshotClient`` JSON export.
        community_id: Id of the community chat in the snapshot.
        config: Analysis settings.  Defaults to ``AnalysisConfig()``.
        now: Epoch seconds treated as the current time.

    Returns:
        Dict with keys generated_at, community, groups, intersections,
        inactive (inactive, unread, undelivered, unknown_authors,
        skipped_chats) and exclusive.  Report rows match the CSV reports.

    Raises:
        FileNotFoundError: If the snapshot file does not exist.
        SnapshotError: If the snapshot is malformed.
        ChatNotFoundError: If the community is not in the snapshot.
    """
    session = CommunitySession(SnapshotClient.from_file(snapshot_path), community_id, config)
    await session.load()
    report = await session.find_inactive(now=now)

    return {
        "generated_at": datetime.now().isoformat(),
        "community": session.community.name,
        "groups": session.group_names,
        "intersections": session.report_intersections(),
        "inactive": {
            "inactive": participant_rows(report.inactive, report.activity_counts),
            "unread": participant_rows(report.unread, report.activity_counts),
            "undelivered": participant_rows(report.undelivered, report.activity_counts),
            "unknown_authors": unknown_author_rows(report.unknown_authors),
            "skipped_chats": report.skipped_chats,
        },
        "exclusive": exclusive_rows(session.report_exclusive()),
    }
