# league_season.py
# Seasons group Saturday sessions; players are the people on each session's teams.

from __future__ import annotations
import logging
import uuid
from collections import Counter
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional, Sequence

from league_session import LeagueSession, LeagueError, parse_date

logger = logging.getLogger(__name__)


class SeasonNotFoundError(LeagueError):
    status_code = 404


class PlayerNotFoundError(LeagueError):
    status_code = 404


class DuplicateSeasonError(LeagueError):
    pass


class DuplicateJerseyError(LeagueError):
    pass


@dataclass
class Season:
    id: str
    name: str
    start_date: str
    end_date: str
    is_active: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Season":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            start_date=parse_date(data["start_date"], "start_date"),
            end_date=parse_date(data["end_date"], "end_date"),
            is_active=bool(data.get("is_active", False)),
        )


@dataclass
class Player:
    id: str
    name: str
    jersey_number: Optional[int] = None
    is_formal_member: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            jersey_number=data.get("jersey_number"),
            is_formal_member=bool(data.get("is_formal_member", False)),
        )


def find_season(seasons: Sequence[Season], season_id: str) -> Season:
    for s in seasons:
        if s.id == season_id:
            return s
    raise SeasonNotFoundError(f"Season {season_id} not found")


def find_player(players: Sequence[Player], player_id: str) -> Player:
    for p in players:
        if p.id == player_id:
            return p
    raise PlayerNotFoundError(f"Player {player_id} not found")


def new_season(seasons: List[Season], name: str, start_date: str, end_date: str,
               is_active: bool = False) -> Season:
    """Add a season to ``seasons``; an active one deactivates all the others."""
    if not name or not isinstance(name, str) or not start_date or not end_date:
        raise LeagueError("Name, start date, and end date are required")
    if any(s.name == name for s in seasons):
        raise DuplicateSeasonError(f"Season name {name!r} already exists")
    start, end = parse_date(start_date, "start_date"), parse_date(end_date, "end_date")
    if end < start:
        raise LeagueError("Season cannot end before it starts")
    if is_active:
        for s in seasons:
            s.is_active = False
    season = Season(id=uuid.uuid4().hex, name=name, start_date=start, end_date=end,
                    is_active=bool(is_active))
    seasons.append(season)
    logger.info("Created season %s (%s to %s)", name, start, end)
    return season


def new_player(players: List[Player], name: str, jersey_number: Optional[int] = None,
               is_formal_member: bool = False) -> Player:
    name = " ".join(name.split()) if isinstance(name, str) else ""
    if not name:
        raise LeagueError("Player name is required")
    if jersey_number is not None:
        if isinstance(jersey_number, bool) or not isinstance(jersey_number, int):
            raise LeagueError(f"Jersey number must be a whole number, got {jersey_number!r}")
        if any(p.jersey_number == jersey_number for p in players):
            raise DuplicateJerseyError(f"Jersey number {jersey_number} already taken")
    player = Player(id=uuid.uuid4().hex, name=name, jersey_number=jersey_number,
                    is_formal_member=bool(is_formal_member))
    players.append(player)
    logger.info("Added player %s (#%s)", name, jersey_number)
    return player


# ========== SCOREBOARD ==========
def _player_card(pid: str, by_id: Dict[str, Player]) -> Dict[str, Any]:
    p = by_id.get(pid)
    return {
        "id": pid,
        "name": p.name if p else pid,
        "jersey_number": p.jersey_number if p else None,
        "is_formal_member": p.is_formal_member if p else False,
    }


def weekend_winners(sessions: Sequence[LeagueSession],
                    players: Sequence[Player]) -> List[Dict[str, Any]]:
    by_id = {p.id: p for p in players}
    winners = []
    for s in sessions:
        leader = s.leader()
        if leader is None:
            continue
        scored = Counter(g.player_id for g in s.goals)
        winners.append({
            "session_id": s.id,
            "session_name": s.name,
            "session_date": s.date,
            "winner_team": leader.name,
            "winner_players": [
                {**_player_card(pid, by_id), "goals_scored": scored[pid]}
                for pid in s.roster(leader.id)
            ],
        })
    return winners


def season_sessions(season: Season, sessions: Sequence[LeagueSession]) -> List[LeagueSession]:
    return [s for s in sessions if s.season_id == season.id]


def season_overview(season: Season, sessions: Sequence[LeagueSession],
                    players: Sequence[Player]) -> Dict[str, Any]:
    mine = season_sessions(season, sessions)
    return {
        **season.to_dict(),
        "total_sessions": len(mine),
        "completed_sessions": sum(1 for s in mine if s.completed),
        "total_games": sum(len(s.fixtures) for s in mine),
        "winners": weekend_winners(mine, players),
    }


def season_scoreboard(season: Season, sessions: Sequence[LeagueSession],
                      players: Sequence[Player]) -> Dict[str, Any]:
    """Per-player weekend wins, goals and games across one season.

    Formal members are listed first, then by weekend wins, then by goals.
    A player's games are the games their team played that Saturday.
    """
    mine = season_sessions(season, sessions)
    by_id = {p.id: p for p in players}
    rows: Dict[str, Dict[str, Any]] = {}
    teams_played: Dict[str, set] = {}

    def row(pid):
        if pid not in rows:
            rows[pid] = {**_player_card(pid, by_id), "weekend_wins": 0,
                         "total_goals": 0, "games_played": 0}
            teams_played[pid] = set()
        return rows[pid]

    for s in mine:
        leader = s.leader()
        if leader is not None:
            for pid in s.roster(leader.id):
                row(pid)["weekend_wins"] += 1
        for team in s.teams:
            for pid in s.roster(team.id):
                row(pid)["games_played"] += team.games_played
                teams_played[pid].add(team.name)
        for g in s.goals:
            row(g.player_id)["total_goals"] += 1

    stats = [{**r, "teams_played": len(teams_played[pid])} for pid, r in rows.items()]
    stats.sort(key=lambda r: (not r["is_formal_member"], -r["weekend_wins"], -r["total_goals"]))
    return {
        "season": season.to_dict(),
        "player_stats": stats,
        "weekend_winners": weekend_winners(mine, players),
        "season_summary": {
            "total_sessions": len(mine),
            "completed_sessions": sum(1 for s in mine if s.completed),
            "total_games": sum(len(s.fixtures) for s in mine),
            "total_goals": sum(len(s.goals) for s in mine),
            "unique_players": len(stats),
            "formal_members": sum(1 for r in stats if r["is_formal_member"]),
        },
    }


def player_records(players: Sequence[Player], sessions: Sequence[LeagueSession],
                   formal_only: bool = False) -> List[Dict[str, Any]]:
    """Career totals per player: goals, weekend wins and goals per season."""
    goals: Counter = Counter()
    wins: Counter = Counter()
    by_season: Dict[str, Counter] = {}
    for s in sessions:
        leader = s.leader()
        if leader is not None:
            wins.update(s.roster(leader.id))
        for g in s.goals:
            goals[g.player_id] += 1
            if s.season_id is not None:
                by_season.setdefault(g.player_id, Counter())[s.season_id] += 1

    chosen = [p for p in players if p.is_formal_member or not formal_only]
    chosen = sorted(chosen, key=lambda p: (not p.is_formal_member, p.name.lower()))
    return [{
        **p.to_dict(),
        "total_goals": goals[p.id],
        "weekend_wins": wins[p.id],
        "goals_by_season": dict(by_season.get(p.id, {})),
    } for p in chosen]
