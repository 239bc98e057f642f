# league_store.py
# Save / load the whole league (sessions, seasons, players) as one JSON file.

from __future__ import annotations
import json
import logging
import os
from typing import List, Dict, Any

from league_session import LeagueSession, LeagueError
from league_season import Season, Player

logger = logging.getLogger(__name__)

# 1: {"version": 1, "sessions": [...]}
# 2: adds "seasons" and "players"
SNAPSHOT_VERSION = 2
READABLE_VERSIONS = (1, 2)


class SnapshotError(LeagueError):
    pass


class SnapshotVersionError(SnapshotError):
    pass


def empty_state() -> Dict[str, List[Any]]:
    return {"sessions": [], "seasons": [], "players": []}


def to_snapshot(state: Dict[str, List[Any]]) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "sessions": [s.to_dict() for s in state["sessions"]],
        "seasons": [s.to_dict() for s in state["seasons"]],
        "players": [p.to_dict() for p in state["players"]],
    }


def from_snapshot(data: Any) -> Dict[str, List[Any]]:
    version = data.get("version") if isinstance(data, dict) else None
    if version not in READABLE_VERSIONS:
        raise SnapshotVersionError(
            f"Unsupported snapshot version {version!r}, expected one of {READABLE_VERSIONS}"
        )
    try:
        return {
            "sessions": [LeagueSession.from_dict(s) for s in data.get("sessions", [])],
            "seasons": [Season.from_dict(s) for s in data.get("seasons", [])],
            "players": [Player.from_dict(p) for p in data.get("players", [])],
        }
    except (LeagueError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise SnapshotError(f"Malformed snapshot: {e!r}") from e


def save_state(path: str, state: Dict[str, List[Any]]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_snapshot(state), f, ensure_ascii=False, indent=2)
    logger.info("Saved %d sessions, %d seasons, %d players to %s", len(state["sessions"]),
                len(state["seasons"]), len(state["players"]), path)


def load_state(path: str) -> Dict[str, List[Any]]:
    if not os.path.exists(path):
        logger.info("No saved league at %s", path)
        return empty_state()
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise SnapshotError(f"{path} is not valid JSON: {e}") from e
    state = from_snapshot(data)
    logger.info("Loaded %d sessions from %s", len(state["sessions"]), path)
    return state
