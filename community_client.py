"""Messaging-platform boundary for the community analytics engine.

Defines the plain data records the engine consumes (chats, members,
messages, delivery info), the ``MessagingClient`` protocol the engine
talks to, and ``SnapshotClient``, a file-backed client that serves a
point-in-time JSON export of a community.

Identifiers are normalized once, when a record is constructed, so the
engine never sees a device-suffixed id such as ``3247...:12@c.us``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# Multi-device ids carry a ":<n>" segment right before the domain.
_DEVICE_SUFFIX_RE = re.compile(r":\d+(?=@)")


class ChatNotFoundError(LookupError):
    """Raised when a community or group id/name does not resolve to a chat."""


class SnapshotError(ValueError):
    """Raised when a snapshot file does not have the expected structure."""


def normalize_user_id(user_id: str | None) -> str | None:
    """Strip the transient device segment from a platform user id.

    Args:
        user_id: A serialized id such as ``"32470000000:3@c.us"``, or None
            for system messages without an author.

    Returns:
        The id without its device segment (``"32470000000@c.us"``), or the
        input unchanged when it is empty or has no such segment.
    """
    if not user_id:
        return user_id
    return _DEVICE_SUFFIX_RE.sub("", user_id)


@dataclass
class ChatMember:
    """One participant entry of a chat's member list."""

    id: str
    is_admin: bool = False
    is_super_admin: bool = False
    name: str | None = None

    def __post_init__(self) -> None:
        self.id = normalize_user_id(self.id)


@dataclass
class Chat:
    id: str
    name: str
    is_group: bool = True
    is_parent: bool = False
    announce_only: bool = False
    parent_id: str | None = None
    participants: list[ChatMember] = field(default_factory=list)

    @property
    def participant_ids(self) -> list[str]:
        return [member.id for member in self.participants]


@dataclass
class Message:
    """A chat history entry: an authored message or a group notification.

    Group notifications (``type == "gp2"``) describe membership changes;
    ``subtype`` says which one and ``recipients`` lists the users affected.
    """

    id: str
    timestamp: int
    type: str
    author: str | None = None
    subtype: str | None = None
    from_me: bool = False
    body: str = ""
    recipients: list[str] = field(default_factory=list)
    chat_id: str | None = None

    def __post_init__(self) -> None:
        self.author = normalize_user_id(self.author)
        self.recipients = [normalize_user_id(r) for r in self.recipients if r]


@dataclass
class MessageInfo:
    """Delivery metadata for an operator-authored message."""

    read: list[str] = field(default_factory=list)
    delivery: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.read = [normalize_user_id(r) for r in self.read if r]
        self.delivery = [normalize_user_id(d) for d in self.delivery if d]


class MessagingClient(Protocol):
    """The operations the engine needs from a messaging platform session."""

    own_id: str

    async def get_chats(self) -> list[Chat]: ...

    async def get_chat_by_id(self, chat_id: str) -> Chat: ...

    async def fetch_messages(self, chat_id: str, limit: int) -> list[Message]: ...

    async def get_message_info(self, message: Message) -> MessageInfo: ...

    async def remove_participants(self, chat_id: str, user_ids: list[str]) -> None: ...


# ---------------------------------------------------------------------------
# Snapshot parsing
# ---------------------------------------------------------------------------

def _require(record: dict, key: str, kind: type | tuple[type, ...], where: str) -> Any:
    """Return ``record[key]`` after checking it exists and has type *kind*."""
    if key not in record:
        raise SnapshotError(f"{where}: missing required key '{key}'")
    value = record[key]
    if not isinstance(value, kind):
        kinds = kind if isinstance(kind, tuple) else (kind,)
        expected = " or ".join(k.__name__ for k in kinds)
        raise SnapshotError(
            f"{where}: '{key}' must be {expected}, got {type(value).__name__}"
        )
    return value


def _parse_member(raw: Any, where: str) -> ChatMember:
    if not isinstance(raw, dict):
        raise SnapshotError(f"{where}: participant entries must be objects")
    return ChatMember(
        id=_require(raw, "id", str, where),
        is_admin=bool(raw.get("is_admin", False)),
        is_super_admin=bool(raw.get("is_super_admin", False)),
        name=raw.get("name"),
    )


def _parse_message(raw: Any, where: str, chat_id: str | None = None) -> tuple[Message, MessageInfo]:
    """Parse one snapshot message into a ``Message`` and its receipt info.

    Args:
        raw: Message object from the snapshot's ``messages`` list.
        where: Location prefix used in error messages.
        chat_id: Id of the chat the message belongs to.

    Returns:
        A (message, info) tuple.  ``info`` is empty for messages not sent by
        the operator, since the platform only reports receipts for those.

    Raises:
        SnapshotError: If required keys are missing or mistyped.
    """
    if not isinstance(raw, dict):
        raise SnapshotError(f"{where}: message entries must be objects")
    message_id = _require(raw, "id", str, where)
    timestamp = _require(raw, "timestamp", (int, float), where)
    message = Message(
        id=message_id,
        timestamp=int(timestamp),
        type=_require(raw, "type", str, where),
        author=raw.get("author"),
        subtype=raw.get("subtype"),
        from_me=bool(raw.get("from_me", False)),
        body=raw.get("body") or "",
        recipients=list(raw.get("recipients") or []),
        chat_id=chat_id,
    )
    if message.from_me:
        info = MessageInfo(
            read=list(raw.get("read_by") or []),
            delivery=list(raw.get("delivered_to") or []),
        )
    else:
        info = MessageInfo()
    return message, info


def _parse_chat(raw: Any, index: int) -> tuple[Chat, list[tuple[Message, MessageInfo]]]:
    where = f"chats[{index}]"
    if not isinstance(raw, dict):
        raise SnapshotError(f"{where}: chat entries must be objects")
    chat_id = _require(raw, "id", str, where)
    chat = Chat(
        id=chat_id,
        name=raw.get("name") or chat_id,
        is_group=bool(raw.get("is_group", True)),
        is_parent=bool(raw.get("is_parent", False)),
        announce_only=bool(raw.get("announce_only", False)),
        parent_id=raw.get("parent_id"),
        participants=[
            _parse_member(member, f"{where}.participants[{i}]")
            for i, member in enumerate(raw.get("participants") or [])
        ],
    )
    messages = [
        _parse_message(message, f"{where}.messages[{i}]", chat_id)
        for i, message in enumerate(raw.get("messages") or [])
    ]
    return chat, messages


class SnapshotClient:
    """``MessagingClient`` backed by a JSON export of one account's chats.

    Snapshot layout::

        {
          "me": "<operator id>",
          "chats": [
            {"id", "name", "is_group", "is_parent", "announce_only",
             "parent_id", "participants": [{"id", "is_admin",
             "is_super_admin", "name"}],
             "messages": [{"id", "author", "timestamp", "type", "subtype",
                           "from_me", "body", "recipients", "read_by",
                           "delivered_to"}]}
          ]
        }

    Messages are served oldest first, like a platform history fetch.
    Removals only mutate the in-memory copy.
    """

    def __init__(self, snapshot: dict) -> None:
        if not isinstance(snapshot, dict):
            raise SnapshotError("snapshot root must be an object")
        self.own_id = normalize_user_id(_require(snapshot, "me", str, "snapshot"))
        raw_chats = _require(snapshot, "chats", list, "snapshot")

        self._chats: dict[str, Chat] = {}
        self._messages: dict[str, list[Message]] = {}
        self._info: dict[tuple[str | None, str], MessageInfo] = {}

        for index, raw in enumerate(raw_chats):
            chat, messages = _parse_chat(raw, index)
            self._chats[chat.id] = chat
            ordered = sorted(messages, key=lambda pair: pair[0].timestamp)
            self._messages[chat.id] = [message for message, _ in ordered]
            for message, info in ordered:
                self._info[(chat.id, message.id)] = info

        logger.debug("Snapshot loaded with %d chats", len(self._chats))

    @classmethod
    def from_file(cls, path: str) -> SnapshotClient:
        """Load a snapshot JSON file.

        Raises:
            FileNotFoundError: If *path* does not exist.
            SnapshotError: If the file is not valid JSON or is malformed.
        """
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise SnapshotError(f"{path}: not a valid JSON file ({e})") from e
        try:
            return cls(data)
        except SnapshotError as e:
            raise SnapshotError(f"{path}: {e}") from e

    async def get_chats(self) -> list[Chat]:
        return list(self._chats.values())

    async def get_chat_by_id(self, chat_id: str) -> Chat:
        try:
            return self._chats[chat_id]
        except KeyError:
            raise ChatNotFoundError(f"Chat {chat_id} not found") from None

    async def fetch_messages(self, chat_id: str, limit: int) -> list[Message]:
        messages = self._messages.get(chat_id, [])
        if limit <= 0:
            return []
        return list(messages[-limit:])

    async def get_message_info(self, message: Message) -> MessageInfo:
        # Message ids are only unique within a chat.
        return self._info.get((message.chat_id, message.id), MessageInfo())

    async def remove_participants(self, chat_id: str, user_ids: list[str]) -> None:
        """Remove users from a chat.  Leaving a community also leaves its groups."""
        chat = await self.get_chat_by_id(chat_id)
        to_remove = {normalize_user_id(user_id) for user_id in user_ids}
        affected = [chat]
        if chat.is_parent:
            affected += [c for c in self._chats.values() if c.parent_id == chat.id]
        for target in affected:
            target.participants = [m for m in target.participants if m.id not in to_remove]
        logger.info("Removed %d participant(s) from %s", len(to_remove), chat.name)
