# tests/test_league_season.py
from __future__ import annotations
import pytest

from league_session import LeagueError, InvalidDateError, new_session, record_goal, record_result
from league_season import (
    DuplicateJerseyError, DuplicateSeasonError, PlayerNotFoundError, SeasonNotFoundError,
    find_player, find_season, new_player, new_season, player_records,
    season_overview, season_scoreboard,
)


def test_new_season_and_active_flag():
    seasons = []
    old = new_season(seasons, "2023", "2023-01-01", "2023-12-31", is_active=True)
    new = new_season(seasons, "2024", "2024-01-01", "2024-12-31", is_active=True)
    assert not old.is_active and new.is_active
    assert find_season(seasons, new.id) is new
    with pytest.raises(SeasonNotFoundError):
        find_season(seasons, "nope")


@pytest.mark.parametrize("args, error", [
    (("", "2024-01-01", "2024-12-31"), LeagueError),
    (("2024", None, "2024-12-31"), LeagueError),
    (("2024", "2024-12-31", "2024-01-01"), LeagueError),
    (("2024", "soon", "2024-12-31"), InvalidDateError),
    (("Existing", "2024-01-01", "2024-12-31"), DuplicateSeasonError),
])
def test_new_season_validation(args, error):
    seasons = []
    new_season(seasons, "Existing", "2020-01-01", "2020-12-31")
    with pytest.raises(error):
        new_season(seasons, *args)
    assert len(seasons) == 1


def test_new_player_validation():
    players = []
    ann = new_player(players, "  Ann   Lee ", 7, is_formal_member=True)
    assert ann.name == "Ann Lee"
    assert find_player(players, ann.id) is ann
    with pytest.raises(DuplicateJerseyError):
        new_player(players, "Bob", 7)
    for name in ("", "   ", None, 12):
        with pytest.raises(LeagueError):
            new_player(players, name)
    with pytest.raises(LeagueError):
        new_player(players, "Bob", "7")
    with pytest.raises(PlayerNotFoundError):
        find_player(players, "nope")
    assert len(players) == 1


@pytest.fixture
def league():
    seasons, players = [], []
    season = new_season(seasons, "2024 Season", "2024-01-01", "2024-12-31", is_active=True)
    members = [new_player(players, name, n, is_formal_member=True)
               for n, name in enumerate(["Ann", "Bob", "Cat"], start=7)]
    visitors = [new_player(players, name) for name in ["Dan", "Eve", "Fay"]]
    ann, bob, cat = members
    dan, eve, fay = visitors

    # Saturday one: Reds (Ann, Dan) win every game
    one = new_session(["Reds", "Blues", "Greens"], date="2024-07-13", season_id=season.id,
                      rosters=[[ann.id, dan.id], [bob.id, eve.id], [cat.id, fay.id]])
    for f in one.fixtures:
        reds_home = f.home == "Reds"
        if "Reds" in (f.home, f.away):
            record_result(one, f.id, 2 if reds_home else 0, 0 if reds_home else 2)
            record_goal(one, f.id, dan.id)
        else:
            record_result(one, f.id, 1, 1)
    record_goal(one, one.fixtures[0].id, eve.id)

    # Saturday two is still in progress, so nobody has won it
    two = new_session(["Whites", "Blacks", "Golds"], date="2024-07-20", season_id=season.id,
                      rosters=[[eve.id], [bob.id], [ann.id]])
    record_result(two, 1, 3, 0)
    record_goal(two, 1, bob.id)

    outside = new_session(["X", "Y", "Z"], date="2023-06-01", rosters=[[ann.id], [], []])
    return season, players, [one, two, outside], members, visitors


def test_season_scoreboard(league):
    season, players, sessions, members, visitors = league
    ann, bob, cat = members
    dan, eve, fay = visitors
    board = season_scoreboard(season, sessions, players)

    order = [r["name"] for r in board["player_stats"]]
    # formal members first, then weekend wins, then goals
    assert order[:3] == ["Ann", "Bob", "Cat"]
    assert order[3] == "Dan"

    rows = {r["id"]: r for r in board["player_stats"]}
    assert rows[ann.id]["weekend_wins"] == 1
    assert rows[ann.id]["games_played"] == 3
    assert rows[ann.id]["teams_played"] == 2
    assert rows[dan.id]["total_goals"] == 2
    assert rows[bob.id]["total_goals"] == 1
    assert rows[bob.id]["games_played"] == 3

    [winner] = board["weekend_winners"]
    assert winner["winner_team"] == "Reds"
    assert {p["name"]: p["goals_scored"] for p in winner["winner_players"]} == {"Ann": 0, "Dan": 2}

    assert board["season_summary"] == {
        "total_sessions": 2,
        "completed_sessions": 1,
        "total_games": 6,
        "total_goals": 4,
        "unique_players": 6,
        "formal_members": 3,
    }


def test_season_overview(league):
    season, players, sessions, _, _ = league
    overview = season_overview(season, sessions, players)
    assert overview["name"] == "2024 Season"
    assert overview["total_sessions"] == 2
    assert [w["winner_team"] for w in overview["winners"]] == ["Reds"]


def test_player_records(league):
    season, players, sessions, members, visitors = league
    records = player_records(players, sessions)
    assert [r["name"] for r in records] == ["Ann", "Bob", "Cat", "Dan", "Eve", "Fay"]
    dan = next(r for r in records if r["name"] == "Dan")
    assert dan["total_goals"] == 2
    assert dan["weekend_wins"] == 1
    assert dan["goals_by_season"] == {season.id: 2}
    formal = player_records(players, sessions, formal_only=True)
    assert [r["name"] for r in formal] == ["Ann", "Bob", "Cat"]
