"""Shared test helpers for community analytics tests.

Regular functions (not fixtures) that can be imported by any test module.
Builders return plain snapshot dicts in the ``SnapshotClient`` layout.
"""

from __future__ import annotations

NOW = 1_700_000_000
DAY = 86_400
COMMUNITY_ID = "community@g.us"
OPERATOR_ID = "operator@c.us"


def make_member(
    user_id: str,
    is_admin: bool = False,
    name: str | None = "",
    is_super_admin: bool = False,
) -> dict:
    """Build a participant entry.  An empty *name* becomes ``"Name <id>"``."""
    if name == "":
        name = f"Name {user_id}"
    return {
        "id": user_id,
        "is_admin": is_admin,
        "is_super_admin": is_super_admin,
        "name": name,
    }


def make_message(
    msg_id: str,
    author: str | None,
    timestamp: float = NOW - DAY,
    type: str = "chat",
    from_me: bool = False,
    body: str = "hello",
    subtype: str | None = None,
    recipients: list[str] | None = None,
    read_by: list[str] | None = None,
    delivered_to: list[str] | None = None,
) -> dict:
    return {
        "id": msg_id,
        "author": author,
        "timestamp": timestamp,
        "type": type,
        "subtype": subtype,
        "from_me": from_me,
        "body": body,
        "recipients": recipients or [],
        "read_by": read_by or [],
        "delivered_to": delivered_to or [],
    }


def make_join(
    msg_id: str,
    user_id: str,
    timestamp: float = NOW - DAY,
    subtype: str = "invite",
) -> dict:
    """Build a group notification for *user_id* joining."""
    return make_message(
        msg_id, user_id, timestamp, type="gp2", body="", subtype=subtype,
        recipients=[user_id],
    )


def make_chat(
    chat_id: str,
    name: str,
    members: list[dict],
    messages: list[dict] | None = None,
    announce_only: bool = False,
    parent_id: str | None = COMMUNITY_ID,
    is_group: bool = True,
) -> dict:
    return {
        "id": chat_id,
        "name": name,
        "is_group": is_group,
        "is_parent": False,
        "announce_only": announce_only,
        "parent_id": parent_id,
        "participants": members,
        "messages": messages or [],
    }


def make_snapshot(
    chats: list[dict],
    community_members: list[dict] | None = None,
    community_name: str = "Test Community",
) -> dict:
    """Wrap *chats* in a snapshot that also contains the community chat.

    The operator is a community admin unless *community_members* says
    otherwise.
    """
    if community_members is None:
        community_members = [make_member(OPERATOR_ID, is_admin=True)]
    community = {
        "id": COMMUNITY_ID,
        "name": community_name,
        "is_group": True,
        "is_parent": True,
        "announce_only": False,
        "parent_id": None,
        "participants": community_members,
        "messages": [],
    }
    return {"me": OPERATOR_ID, "chats": [community, *chats]}


def scenario_snapshot(g1_messages: list[dict] | None = None) -> dict:
    """G1 = {u1, u2, u3}, G2 = {u2, u3, u4}, no group admins."""
    g1 = make_chat(
        "g1@g.us", "G1",
        [make_member("u1@c.us"), make_member("u2@c.us"), make_member("u3@c.us")],
        g1_messages,
    )
    g2 = make_chat(
        "g2@g.us", "G2",
        [make_member("u2@c.us"), make_member("u3@c.us"), make_member("u4@c.us")],
    )
    return make_snapshot([g1, g2])
