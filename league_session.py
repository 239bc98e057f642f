# league_session.py
# One Saturday = one session: its teams, their players, fixtures and goals.

from __future__ import annotations
import datetime
import logging
import uuid
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional, Sequence

from league_engine import (
    Team, Fixture, generate_schedule, initialize_teams,
    update_team_stats, sort_teams_by_ranking,
)

logger = logging.getLogger(__name__)


class LeagueError(Exception):
    status_code = 400


class SessionNotFoundError(LeagueError):
    status_code = 404


class FixtureNotFoundError(LeagueError):
    status_code = 404


class ResultAlreadyRecordedError(LeagueError):
    status_code = 409


class InvalidScoreError(LeagueError):
    pass


class InvalidDateError(LeagueError):
    pass


class InvalidGoalError(LeagueError):
    pass


def parse_date(value: Any, what: str = "date") -> str:
    """Normalise an ISO ``YYYY-MM-DD`` string; anything else is rejected."""
    if not isinstance(value, str):
        raise InvalidDateError(f"{what} must be an ISO date string, got {value!r}")
    try:
        return datetime.date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        raise InvalidDateError(f"{what} must be an ISO date (YYYY-MM-DD), got {value!r}")


@dataclass
class Goal:
    fixture_id: int
    player_id: str
    team_id: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LeagueSession:
    id: str
    date: str
    name: str
    teams: List[Team] = field(default_factory=list)
    fixtures: List[Fixture] = field(default_factory=list)
    completed: bool = False
    season_id: Optional[str] = None
    # player ids per team, rosters[i] belongs to teams[i]
    rosters: List[List[str]] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)

    def fixture(self, fixture_id: int) -> Fixture:
        for f in self.fixtures:
            if f.id == fixture_id:
                return f
        raise FixtureNotFoundError(f"Match #{fixture_id} not found in session {self.id}")

    def roster(self, team_id: int) -> List[str]:
        if 1 <= team_id <= len(self.rosters):
            return self.rosters[team_id - 1]
        return []

    def rounds(self) -> List[int]:
        return sorted({f.round for f in self.fixtures})

    def standings(self) -> List[Team]:
        return sort_teams_by_ranking(self.teams)

    def leader(self) -> Optional[Team]:
        """Session winner, only once every match has been played."""
        if not self.completed or not self.teams:
            return None
        return self.standings()[0]

    def summary(self) -> Dict[str, Any]:
        leader = self.leader()
        return {
            "id": self.id,
            "date": self.date,
            "name": self.name,
            "season_id": self.season_id,
            "teams": len(self.teams),
            "games": len(self.fixtures),
            "completed_games": sum(1 for f in self.fixtures if f.completed),
            "goals": len(self.goals),
            "completed": self.completed,
            "winner": leader.name if leader else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "name": self.name,
            "season_id": self.season_id,
            "teams": [t.to_dict() for t in self.teams],
            "rosters": [list(r) for r in self.rosters],
            "fixtures": [f.to_dict() for f in self.fixtures],
            "goals": [g.to_dict() for g in self.goals],
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeagueSession":
        date = parse_date(data["date"])
        return cls(
            id=str(data["id"]),
            date=date,
            name=data.get("name") or f"Saturday {date}",
            teams=[Team.from_dict(t) for t in data.get("teams", [])],
            fixtures=[Fixture.from_dict(f) for f in data.get("fixtures", [])],
            completed=bool(data.get("completed", False)),
            season_id=data.get("season_id"),
            rosters=[[str(p) for p in r] for r in data.get("rosters", [])],
            goals=[Goal(**g) for g in data.get("goals", [])],
        )


def new_session(team_names: Sequence[str], name: Optional[str] = None,
                date: Optional[str] = None, season_id: Optional[str] = None,
                rosters: Optional[Sequence[Sequence[str]]] = None) -> LeagueSession:
    date = parse_date(date) if date is not None else datetime.date.today().isoformat()
    names = [str(n) for n in team_names]
    fixtures = generate_schedule(names, date=date)
    rosters = [[str(p) for p in r] for r in (rosters or [])]
    if rosters and len(rosters) != len(names):
        raise LeagueError(f"Got {len(rosters)} rosters for {len(names)} teams")
    session = LeagueSession(
        id=uuid.uuid4().hex,
        date=date,
        name=name or f"Saturday {date}",
        teams=initialize_teams(names),
        fixtures=fixtures,
        season_id=season_id,
        rosters=rosters or [[] for _ in names],
    )
    logger.info("Created session %s: %d teams, %d matches over %d rounds",
                session.id, len(names), len(fixtures), len(session.rounds()))
    return session


def _score(value: Any) -> int:
    # form fields arrive as strings, JSON bodies as ints
    if value is None or value == "":
        raise InvalidScoreError("Both scores are required")
    if isinstance(value, str) and value.strip().isdecimal():
        try:
            return int(value)
        except ValueError:
            pass
    elif isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    raise InvalidScoreError(f"Score must be a whole number of goals, got {value!r}")


def record_result(session: LeagueSession, fixture_id: int, home_goals: Any,
                  away_goals: Any) -> Fixture:
    """Finish a match and fold it into the session table.

    A match can be recorded once; the table maths would otherwise count it
    twice. Both scores are checked before anything is written.
    """
    match = session.fixture(fixture_id)
    if match.completed:
        raise ResultAlreadyRecordedError(f"Match #{fixture_id} already has a result")
    hg, ag = _score(home_goals), _score(away_goals)
    match.home_goals, match.away_goals = hg, ag
    match.completed = True
    session.teams = update_team_stats(session.teams, match)
    session.completed = all(f.completed for f in session.fixtures)
    logger.info("Session %s match #%d: %s %d-%d %s", session.id, match.id,
                match.home, hg, ag, match.away)
    return match


def record_goal(session: LeagueSession, fixture_id: int, player_id: str) -> Goal:
    """Credit a goal in one match to a player on either side's roster."""
    match = session.fixture(fixture_id)
    player_id = str(player_id)
    for team_id in (match.home_id, match.away_id):
        if team_id is not None and player_id in session.roster(team_id):
            goal = Goal(fixture_id=match.id, player_id=player_id, team_id=team_id)
            session.goals.append(goal)
            logger.info("Session %s match #%d: goal by %s", session.id, match.id, player_id)
            return goal
    raise InvalidGoalError(f"Player {player_id} is not on either team in match #{fixture_id}")


def find_session(sessions: Sequence[LeagueSession], session_id: str) -> LeagueSession:
    for s in sessions:
        if s.id == session_id:
            return s
    raise SessionNotFoundError(f"Session {session_id} not found")


def latest_session(sessions: Sequence[LeagueSession]) -> Optional[LeagueSession]:
    if not sessions:
        return None
    return max(sessions, key=lambda s: s.date)


def summarize_history(sessions: Sequence[LeagueSession]) -> Dict[str, int]:
    played = [f for s in sessions for f in s.fixtures if f.completed]
    return {
        "total_sessions": len(sessions),
        "completed_sessions": sum(1 for s in sessions if s.completed),
        "total_games": sum(len(s.fixtures) for s in sessions),
        "completed_games": len(played),
        "total_goals": sum((f.home_goals or 0) + (f.away_goals or 0) for f in played),
    }
