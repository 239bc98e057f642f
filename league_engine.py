# league_engine.py
# Round-robin fixtures and league table maths for the Saturday league.
# Pure functions only: callers own persistence and any shared state.

from __future__ import annotations
from dataclasses import dataclass, asdict, replace
from typing import List, Dict, Any, Optional, Sequence

MIN_TEAMS = 3
WIN_POINTS = 3
DRAW_POINTS = 1


class InsufficientTeamsError(ValueError):
    """Raised when a round robin is requested for fewer than three teams."""


@dataclass
class Team:
    id: int
    name: str
    points: int = 0
    games_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        return cls(**{k: data[k] for k in cls.__dataclass_fields__ if k in data})


@dataclass
class Fixture:
    id: int
    round: int
    home: str
    away: str
    home_id: Optional[int] = None
    away_id: Optional[int] = None
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    completed: bool = False
    date: Optional[str] = None

    @property
    def has_result(self) -> bool:
        return self.completed and self.home_goals is not None and self.away_goals is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fixture":
        return cls(**{k: data[k] for k in cls.__dataclass_fields__ if k in data})


# ========== FIXTURE GENERATION (single round robin) ==========
def generate_schedule(team_names: Sequence[str], date: Optional[str] = None) -> List[Fixture]:
    """Build a single round robin with the circle method.

    Slot 0 stays fixed while slots ``1..n-1`` rotate one step per round. An
    odd roster gets an extra empty slot; whoever is drawn against it rests
    that round and no fixture is produced. Nothing limits how often the same
    team rests in consecutive rounds.
    """
    names = list(team_names)
    if len(names) < MIN_TEAMS:
        raise InsufficientTeamsError(
            f"Need at least {MIN_TEAMS} teams to generate schedule, got {len(names)}"
        )

    n = len(names) + (len(names) % 2)  # bye slot is index len(names) when odd
    ring = n - 1
    fixtures: List[Fixture] = []
    fid = 1
    for r in range(ring):
        pivot = n - 1 - r  # opponent of slot 0 this round
        pairings = [(0, pivot)]
        for g in range(1, n // 2):
            # walk outwards from the pivot around the ring of slots 1..n-1
            home = (pivot - 1 + g) % ring + 1
            away = (pivot - 1 - g) % ring + 1
            pairings.append((home, away))

        for h, a in pairings:
            if h >= len(names) or a >= len(names):
                continue
            fixtures.append(Fixture(
                id=fid,
                round=r + 1,
                home=names[h],
                away=names[a],
                home_id=h + 1,
                away_id=a + 1,
                date=date,
            ))
            fid += 1
    return fixtures


# ========== TABLE ==========
def initialize_teams(team_names: Sequence[str]) -> List[Team]:
    return [Team(id=i, name=name) for i, name in enumerate(team_names, start=1)]


def _is_side(team: Team, name: str, team_id: Optional[int]) -> bool:
    if team_id is not None:
        return team.id == team_id
    return team.name == name


def _apply(team: Team, scored: int, conceded: int) -> Team:
    won, drew = scored > conceded, scored == conceded
    goals_for = team.goals_for + scored
    goals_against = team.goals_against + conceded
    return replace(
        team,
        games_played=team.games_played + 1,
        points=team.points + (WIN_POINTS if won else DRAW_POINTS if drew else 0),
        wins=team.wins + int(won),
        draws=team.draws + int(drew),
        losses=team.losses + int(not won and not drew),
        goals_for=goals_for,
        goals_against=goals_against,
        goal_difference=goals_for - goals_against,
    )


def update_team_stats(teams: List[Team], fixture: Fixture) -> List[Team]:
    """Return a new table with one finished fixture applied.

    Unfinished fixtures leave the table as it is. Each side is matched on
    ``home_id``/``away_id`` when the fixture has one, otherwise on the team
    name; a side that matches nobody is skipped. Applying the same fixture
    twice counts it twice.
    """
    if not fixture.has_result:
        return teams

    hg, ag = fixture.home_goals, fixture.away_goals
    updated = []
    for t in teams:
        if _is_side(t, fixture.home, fixture.home_id):
            t = _apply(t, hg, ag)
        elif _is_side(t, fixture.away, fixture.away_id):
            t = _apply(t, ag, hg)
        updated.append(t)
    return updated


def sort_teams_by_ranking(teams: Sequence[Team]) -> List[Team]:
    # Pts desc, GD desc, GF desc; sorted() is stable so input order breaks ties
    return sorted(teams, key=lambda t: (-t.points, -t.goal_difference, -t.goals_for))
