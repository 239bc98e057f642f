# tests/test_league_session.py
from __future__ import annotations
import pytest

from league_session import (
    FixtureNotFoundError, InvalidDateError, InvalidGoalError, InvalidScoreError, LeagueError,
    ResultAlreadyRecordedError, SessionNotFoundError,
    find_session, latest_session, new_session, record_goal, record_result,
    summarize_history,
)


def play_all(session, home=1, away=0):
    for f in session.fixtures:
        record_result(session, f.id, home, away)


def test_new_session_defaults():
    s = new_session(["A", "B", "C", "D"], date="2024-07-20")
    assert s.name == "Saturday 2024-07-20"
    assert len(s.teams) == 4 and len(s.fixtures) == 6
    assert s.rounds() == [1, 2, 3]
    assert not s.completed
    assert s.leader() is None


def test_record_result_updates_table():
    s = new_session(["A", "B", "C"], date="2024-07-20")
    first = s.fixtures[0]
    match = record_result(s, first.id, "3", 1)
    assert match.completed and (match.home_goals, match.away_goals) == (3, 1)
    top = s.standings()[0]
    assert top.name == first.home
    assert top.points == 3


def test_result_recorded_only_once():
    s = new_session(["A", "B", "C"], date="2024-07-20")
    record_result(s, 1, 1, 1)
    with pytest.raises(ResultAlreadyRecordedError):
        record_result(s, 1, 2, 0)
    assert sum(t.games_played for t in s.teams) == 2


def test_unknown_fixture():
    s = new_session(["A", "B", "C"], date="2024-07-20")
    with pytest.raises(FixtureNotFoundError):
        record_result(s, 99, 1, 0)


@pytest.mark.parametrize("score", [None, "", -1, "-1", "two", 1.5, True, "²"])
def test_invalid_scores(score):
    s = new_session(["A", "B", "C"], date="2024-07-20")
    with pytest.raises(InvalidScoreError):
        record_result(s, 1, score, 0)
    assert not s.fixtures[0].completed


def test_session_completes_and_has_leader():
    s = new_session(["A", "B", "C", "D"], date="2024-07-20")
    play_all(s)
    assert s.completed
    assert s.leader() == s.standings()[0]
    assert s.summary()["winner"] == s.leader().name


def test_find_and_latest_session():
    old = new_session(["A", "B", "C"], date="2024-07-13")
    new = new_session(["A", "B", "C"], date="2024-07-20")
    assert latest_session([new, old]) is new
    assert latest_session([]) is None
    assert find_session([old, new], old.id) is old
    with pytest.raises(SessionNotFoundError):
        find_session([old], "nope")


def test_summarize_history():
    a = new_session(["A", "B", "C"], date="2024-07-13")
    b = new_session(["A", "B", "C", "D"], date="2024-07-20")
    play_all(a, 2, 1)
    record_result(b, 1, 0, 0)
    assert summarize_history([a, b]) == {
        "total_sessions": 2,
        "completed_sessions": 1,
        "total_games": 9,
        "completed_games": 4,
        "total_goals": 9,
    }


@pytest.mark.parametrize("score", ["x", "²", None, -3])
def test_bad_away_score_leaves_match_untouched(score):
    s = new_session(["A", "B", "C"], date="2024-07-20")
    with pytest.raises(InvalidScoreError):
        record_result(s, 1, 2, score)
    match = s.fixtures[0]
    assert (match.home_goals, match.away_goals, match.completed) == (None, None, False)
    assert all(t.games_played == 0 for t in s.teams)


def test_string_scores_are_accepted():
    s = new_session(["A", "B", "C"], date="2024-07-20")
    match = record_result(s, 1, " 10 ", "0")
    assert (match.home_goals, match.away_goals) == (10, 0)


@pytest.mark.parametrize("date", [20240721, "20th July", "2024-13-01", ["2024-07-20"]])
def test_new_session_rejects_bad_dates(date):
    with pytest.raises(InvalidDateError):
        new_session(["A", "B", "C"], date=date)


def test_new_session_normalises_date():
    assert new_session(["A", "B", "C"], date=" 2024-07-20 ").date == "2024-07-20"


def test_rosters_must_line_up_with_teams():
    s = new_session(["A", "B", "C"], date="2024-07-20", rosters=[["p1"], ["p2", "p3"], []])
    assert s.roster(2) == ["p2", "p3"]
    assert s.roster(9) == []
    with pytest.raises(LeagueError):
        new_session(["A", "B", "C"], date="2024-07-20", rosters=[["p1"]])


def test_record_goal_credits_the_right_side():
    s = new_session(["A", "B", "C"], date="2024-07-20", rosters=[["a1"], ["b1"], ["c1"]])
    match = s.fixtures[0]
    goal = record_goal(s, match.id, "c1" if match.home == "C" or match.away == "C" else "b1")
    assert goal.fixture_id == match.id
    assert s.roster(goal.team_id) == [goal.player_id]
    assert len(s.goals) == 1


def test_record_goal_rejects_outsiders():
    s = new_session(["A", "B", "C"], date="2024-07-20", rosters=[["a1"], ["b1"], ["c1"]])
    match = s.fixtures[0]
    outsider = next(r[0] for t, r in zip(s.teams, s.rosters) if t.name not in (match.home, match.away))
    with pytest.raises(InvalidGoalError):
        record_goal(s, match.id, outsider)
    with pytest.raises(FixtureNotFoundError):
        record_goal(s, 99, "a1")
    assert s.goals == []
