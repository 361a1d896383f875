"""FastAPI service for the Community Analytics Dashboard.

Serves the group-intersection, inactivity and exclusivity reports for a
community snapshot as JSON, cached for an hour since a snapshot only
changes when a new one is exported.

Deployment: uvicorn app:app --host 127.0.0.1 --port 8204
"""

from __future__ import annotations

import asyncio
import os
import threading
import time
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException

from community_analytics import COMMUNITY_ID as DEFAULT_COMMUNITY_ID
from community_analytics import build_report_payload
from community_client import ChatNotFoundError, SnapshotError

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
SNAPSHOT_PATH = Path(
    os.environ.get("COMMUNITY_SNAPSHOT", Path(__file__).parent / "community_snapshot.json")
)
COMMUNITY_ID = os.environ.get("COMMUNITY_ID", DEFAULT_COMMUNITY_ID)
CACHE_TTL_SECONDS = 3600  # 1 hour

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Community Analytics Dashboard",
    root_path="/community_stats",
)

# ---------------------------------------------------------------------------
# Thread-safe cache
# ---------------------------------------------------------------------------
_cache_lock = threading.Lock()
_cache: dict[str, Any] = {
    "data": None,
    "built_at": 0.0,
}


def _get_cached_data(force_refresh: bool = False) -> dict[str, Any]:
    """Return cached report data, rebuilding if stale or forced."""
    now = time.monotonic()
    with _cache_lock:
        if (
            not force_refresh
            and _cache["data"] is not None
            and (now - _cache["built_at"]) < CACHE_TTL_SECONDS
        ):
            return _cache["data"]

    if not SNAPSHOT_PATH.exists():
        raise HTTPException(status_code=503, detail="Snapshot file not found")
    try:
        # Sync routes run in a worker thread, which has no event loop.
        data = asyncio.run(build_report_payload(str(SNAPSHOT_PATH), COMMUNITY_ID))
    except (SnapshotError, ChatNotFoundError) as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    with _cache_lock:
        _cache["data"] = data
        _cache["built_at"] = time.monotonic()

    return data


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health")
@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/api/data")
def api_data():
    """Return the full report payload."""
    return _get_cached_data()


@app.get("/api/intersections")
def api_intersections():
    return _get_cached_data()["intersections"]


@app.get("/api/inactive")
def api_inactive():
    return _get_cached_data()["inactive"]


@app.get("/api/exclusive")
def api_exclusive():
    return _get_cached_data()["exclusive"]


@app.get("/api/refresh")
def api_refresh():
    """Force a cache rebuild and return fresh data."""
    data = _get_cached_data(force_refresh=True)
    return {
        "status": "refreshed",
        "generated_at": data["generated_at"],
    }
