"""Shared fixtures for community analytics tests."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from community_analytics import AnalysisConfig, CommunitySession
from community_client import SnapshotClient
from helpers import COMMUNITY_ID, NOW, make_message, scenario_snapshot


@pytest.fixture()
def scenario():
    """Two-group scenario snapshot: u1 sends one message in G1."""
    return scenario_snapshot([make_message("m1", "u1@c.us", NOW - 3600)])


@pytest.fixture()
def make_session(tmp_path):
    """Factory building a loaded ``CommunitySession`` from a snapshot dict."""

    def _make(snapshot: dict, **config_kwargs) -> CommunitySession:
        config_kwargs.setdefault("output_dir", str(tmp_path / "reports"))
        session = CommunitySession(
            SnapshotClient(snapshot), COMMUNITY_ID, AnalysisConfig(**config_kwargs)
        )
        asyncio.run(session.load())
        return session

    return _make


@pytest.fixture()
def snapshot_file(tmp_path, scenario):
    path = tmp_path / "community_snapshot.json"
    path.write_text(json.dumps(scenario), encoding="utf-8")
    return path


# ── Minimal report payload for app.py tests ──


def _minimal_report_payload() -> dict:
    """Return a payload matching build_report_payload() shape."""
    return {
        "generated_at": "2024-01-15T12:00:00",
        "community": "Test Community",
        "groups": ["G1", "G2"],
        "intersections": [
            {"Name": "G1", "G1": 1.0, "G2": 2 / 3},
            {"Name": "G2", "G1": 0.5, "G2": 1.0},
        ],
        "inactive": {
            "inactive": [{"User ID": "u2@c.us", "Messages": 0, "Groups": "G1, G2"}],
            "unread": [{"User ID": "u2@c.us", "Messages": 0, "Groups": "G1, G2"}],
            "undelivered": [],
            "unknown_authors": [],
            "skipped_chats": ["G2"],
        },
        "exclusive": [{"User ID": "u1@c.us", "Group": "G1"}],
    }


@pytest.fixture()
def mock_payload():
    return _minimal_report_payload()


@pytest.fixture()
def client(mock_payload, snapshot_file):
    """TestClient for app.py with mocked report data.

    Points the app at an existing snapshot file, patches
    build_report_payload, and resets the module-level cache.
    """
    import app as app_module

    with patch.object(app_module, "_cache", {"data": None, "built_at": 0.0}):
        with patch.object(app_module, "SNAPSHOT_PATH", snapshot_file):
            with patch(
                "app.build_report_payload",
                new_callable=AsyncMock,
                return_value=mock_payload,
            ):
                with TestClient(app_module.app) as tc:
                    yield tc
