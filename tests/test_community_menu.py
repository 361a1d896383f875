"""Tests for community_menu.py prompts and command dispatch."""

from __future__ import annotations

import asyncio
import csv
import time
from datetime import date

import pytest

from community_client import ChatMember
from community_menu import (
    Command,
    confirm,
    get_valid_number_input,
    prompt_command,
    run_command,
    run_menu,
    select_group,
)
from helpers import OPERATOR_ID, make_member, make_message, scenario_snapshot


def _feed(monkeypatch, answers):
    """Make ``input()`` return *answers* in order."""
    answers = iter(answers)
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(answers))


def _report(session, kind):
    return session.config.output_dir + f"/{date.today().isoformat()}-{kind}.csv"


def _read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


@pytest.fixture()
def session(make_session):
    """Scenario session where u1 posted an hour ago (real clock)."""
    snapshot = scenario_snapshot([make_message("m1", "u1@c.us", time.time() - 3600)])
    snapshot["chats"][0]["participants"].append(make_member("u4@c.us"))
    return make_session(snapshot)


# -- prompts -----------------------------------------------------------------

class TestPromptCommand:
    def test_valid_choice(self, monkeypatch):
        _feed(monkeypatch, ["3"])
        assert prompt_command() is Command.REPORT_INACTIVE_ALL

    def test_retries_until_valid(self, monkeypatch, capsys):
        _feed(monkeypatch, ["9", "abc", "7"])
        assert prompt_command() is Command.EXIT
        assert capsys.readouterr().out.count("Please enter a number between 1 and 7") == 2


class TestGetValidNumberInput:
    def test_default_on_empty(self, monkeypatch):
        _feed(monkeypatch, [""])
        assert get_valid_number_input("n: ", 7, 1, 10) == 7

    def test_rejects_out_of_range_and_text(self, monkeypatch, capsys):
        _feed(monkeypatch, ["0", "11", "x", "4"])
        assert get_valid_number_input("n: ", 1, 1, 10) == 4
        out = capsys.readouterr().out
        assert "greater than or equal to 1" in out
        assert "less than or equal to 10" in out
        assert "valid number" in out


class TestConfirm:
    def test_yes(self, monkeypatch):
        _feed(monkeypatch, ["Y"])
        assert confirm("Sure?")

    def test_no_after_invalid(self, monkeypatch, capsys):
        _feed(monkeypatch, ["maybe", "no"])
        assert not confirm("Sure?")
        assert "Please enter 'y' or 'n'." in capsys.readouterr().out


class TestSelectGroup:
    def test_selects_by_number(self, monkeypatch):
        _feed(monkeypatch, ["2"])
        assert select_group(["G1", "G2"]) == "G2"


# -- commands ----------------------------------------------------------------

class TestRunCommand:
    def test_exit_stops(self, session):
        assert asyncio.run(run_command(session, Command.EXIT)) is False

    def test_intersections_report(self, session, capsys):
        assert asyncio.run(run_command(session, Command.REPORT_INTERSECTIONS))
        rows = _read_rows(_report(session, "group-intersections"))
        assert [row["Name"] for row in rows] == ["G1", "G2"]
        assert float(rows[0]["G2"]) == pytest.approx(2 / 3)
        assert "group-intersections has been written" in capsys.readouterr().out

    def test_inactive_all_reports(self, session, capsys):
        asyncio.run(run_command(session, Command.REPORT_INACTIVE_ALL))
        rows = _read_rows(_report(session, "inactive-users-unread"))
        assert [row["User ID"] for row in rows] == ["u2@c.us", "u3@c.us", "u4@c.us"]
        assert rows[0] == {"User ID": "u2@c.us", "Messages": "0", "Groups": "G1, G2"}
        assert len(_read_rows(_report(session, "inactive-users-undelivered"))) == 3
        assert len(_read_rows(_report(session, "inactive-users"))) == 3

        out = capsys.readouterr().out
        assert "Inactive users: 3" in out
        assert "No rows for unknown-authors" in out
        assert "Skipped groups with no countable messages: G2" in out

    def test_inactive_in_one_group(self, session, monkeypatch):
        _feed(monkeypatch, ["2"])
        asyncio.run(run_command(session, Command.REPORT_INACTIVE_IN_GROUP))
        rows = _read_rows(_report(session, "inactive-users"))
        assert [row["User ID"] for row in rows] == ["u2@c.us", "u3@c.us", "u4@c.us"]

    def test_failing_group_reported_and_menu_continues(self, session, monkeypatch, capsys):
        fetch = session.client.fetch_messages

        async def _fetch(chat_id, limit):
            if chat_id == "g2@g.us":
                raise ConnectionError("history fetch failed")
            return await fetch(chat_id, limit)

        monkeypatch.setattr(session.client, "fetch_messages", _fetch)
        assert asyncio.run(run_command(session, Command.REPORT_INACTIVE_ALL))
        rows = _read_rows(_report(session, "inactive-users"))
        assert [row["User ID"] for row in rows] == ["u2@c.us", "u3@c.us", "u4@c.us"]

        out = capsys.readouterr().out
        assert "Could not read history of G2: history fetch failed" in out
        assert "Skipped groups with no countable messages" not in out

    def test_reload_picks_up_new_members(self, session, capsys):
        session.client._chats["g1@g.us"].participants.append(ChatMember("u9@c.us", name="Nine"))
        assert "u9@c.us" not in session.registry
        assert asyncio.run(run_command(session, Command.RELOAD))
        assert "u9@c.us" in session.registry
        assert "Reloaded" in capsys.readouterr().out

    def test_exclusive_report(self, session):
        asyncio.run(run_command(session, Command.REPORT_EXCLUSIVE))
        rows = _read_rows(_report(session, "users-only-in-one-group"))
        assert rows == [
            {"User ID": "u1@c.us", "Group": "G1"},
            {"User ID": "u4@c.us", "Group": "G2"},
        ]


class TestRemoveUsers:
    def _community_ids(self, session):
        return session.client._chats[session.community_id].participant_ids

    def test_single_user_confirmed(self, session, monkeypatch, capsys):
        _feed(monkeypatch, ["u4@c.us", "y"])
        asyncio.run(run_command(session, Command.REMOVE_USERS))
        assert "u4@c.us" not in self._community_ids(session)
        assert "Removed 1 user(s)." in capsys.readouterr().out

    def test_removed_user_leaves_later_reports(self, session, monkeypatch):
        _feed(monkeypatch, ["u4@c.us", "y"])
        asyncio.run(run_command(session, Command.REMOVE_USERS))
        assert "u4@c.us" not in session.registry

        asyncio.run(run_command(session, Command.REPORT_INACTIVE_ALL))
        rows = _read_rows(_report(session, "inactive-users"))
        assert [row["User ID"] for row in rows] == ["u2@c.us", "u3@c.us"]

    def test_single_user_declined(self, session, monkeypatch, capsys):
        _feed(monkeypatch, ["u4@c.us", "n"])
        asyncio.run(run_command(session, Command.REMOVE_USERS))
        assert "u4@c.us" in self._community_ids(session)
        assert "Removal cancelled." in capsys.readouterr().out

    def test_operator_and_admins_refused_without_prompt(self, session, monkeypatch, capsys):
        _feed(monkeypatch, [OPERATOR_ID])
        asyncio.run(run_command(session, Command.REMOVE_USERS))
        out = capsys.readouterr().out
        assert "cannot remove the operator's own account" in out
        assert "Nobody to remove." in out
        assert OPERATOR_ID in self._community_ids(session)

    def test_empty_input(self, session, monkeypatch, capsys):
        _feed(monkeypatch, [""])
        asyncio.run(run_command(session, Command.REMOVE_USERS))
        assert "No user ids entered." in capsys.readouterr().out


class TestRunMenu:
    def test_runs_until_exit(self, session, monkeypatch, capsys):
        _feed(monkeypatch, ["1", "7"])
        asyncio.run(run_menu(session))
        out = capsys.readouterr().out
        assert "Community: Test Community" in out
        assert "[5] Remove user(s) from the community" in out
        assert out.rstrip().endswith("Done")
