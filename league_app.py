# league_app.py
# Run:  python league_app.py
# Then open: http://127.0.0.1:5000

from __future__ import annotations
from flask import Flask, request, render_template_string, jsonify
import logging, os
from typing import List, Dict, Any

from league_engine import InsufficientTeamsError
from league_session import (
    LeagueSession, LeagueError, new_session, record_result, record_goal,
    find_session, latest_session, summarize_history,
)
from league_season import (
    new_season, new_player, find_season, find_player, season_overview,
    season_scoreboard, player_records,
)
from league_store import empty_state, save_state, load_state

logger = logging.getLogger(__name__)

app = Flask(__name__)

# === CONFIG ===
SAVE_FILE = os.getenv("LEAGUE_SAVE_FILE", "league_state.json")
HOST = os.getenv("LEAGUE_HOST", "0.0.0.0")
PORT = int(os.getenv("LEAGUE_PORT", "5000"))
DEBUG = os.getenv("LEAGUE_DEBUG", "0") == "1"

# In-memory state (can be saved/loaded)
STATE: Dict[str, List[Any]] = empty_state()

if os.getenv("LEAGUE_AUTOLOAD", "0") == "1":
    STATE.update(load_state(SAVE_FILE))


def newest_first(sessions: List[LeagueSession]) -> List[LeagueSession]:
    return sorted(sessions, key=lambda s: s.date, reverse=True)


def get_session(session_id: str) -> LeagueSession:
    return find_session(STATE["sessions"], session_id)


def parse_teams(teams: List[Any]):
    """Teams are plain names or ``{"name": ..., "player_ids": [...]}``."""
    names, rosters = [], []
    for t in teams:
        if isinstance(t, dict):
            player_ids = t.get("player_ids") or []
            if not isinstance(t.get("name"), str) or not isinstance(player_ids, list):
                raise LeagueError("Each team needs a 'name' and an optional 'player_ids' list")
            names.append(t["name"])
            rosters.append([find_player(STATE["players"], str(pid)).id for pid in player_ids])
        else:
            names.append(str(t))
            rosters.append([])
    return names, rosters


# ========== ERRORS ==========
@app.errorhandler(LeagueError)
def league_error(e: LeagueError):
    return jsonify({"ok": False, "error": str(e)}), e.status_code


@app.errorhandler(InsufficientTeamsError)
def not_enough_teams(e: InsufficientTeamsError):
    return jsonify({"ok": False, "error": str(e)}), 400


# ========== ROUTES ==========
@app.route("/")
def index():
    session = latest_session(STATE["sessions"])
    return render_template_string(TEMPLATE, current=session,
                                  history=summarize_history(STATE["sessions"]))


@app.route("/api/sessions", methods=["GET"])
def api_sessions():
    sessions = STATE["sessions"]
    season_id = request.args.get("season_id")
    if season_id:
        sessions = [s for s in sessions if s.season_id == season_id]
    return jsonify([s.summary() for s in newest_first(sessions)])


@app.route("/api/sessions", methods=["POST"])
def api_create_session():
    data = request.get_json(silent=True) or {}
    teams = data.get("teams")
    if not isinstance(teams, list):
        raise LeagueError("'teams' must be a list of team names")
    season_id = data.get("season_id")
    if season_id is not None:
        season_id = find_season(STATE["seasons"], str(season_id)).id
    names, rosters = parse_teams(teams)
    session = new_session(names, name=data.get("name"), date=data.get("date"),
                          season_id=season_id, rosters=rosters)
    STATE["sessions"].append(session)
    return jsonify({"ok": True, "session": session.to_dict()}), 201


@app.route("/api/sessions/<session_id>", methods=["GET"])
def api_session(session_id):
    return jsonify(get_session(session_id).to_dict())


@app.route("/api/sessions/<session_id>", methods=["DELETE"])
def api_delete_session(session_id):
    session = get_session(session_id)
    STATE["sessions"].remove(session)
    logger.info("Deleted session %s", session_id)
    return jsonify({"ok": True})


@app.route("/api/sessions/<session_id>/matches")
def api_matches(session_id):
    # Optional round filter ?round=X
    rnd = request.args.get("round", type=int)
    matches = get_session(session_id).fixtures
    if rnd is not None:
        matches = [m for m in matches if m.round == rnd]
    return jsonify([m.to_dict() for m in matches])


@app.route("/api/sessions/<session_id>/update_score", methods=["POST"])
def api_update_score(session_id):
    data = request.get_json(silent=True) or {}
    try:
        mid = int(data["id"])
    except (KeyError, TypeError, ValueError):
        raise LeagueError("Match 'id' is required")
    session = get_session(session_id)
    match = record_result(session, mid, data.get("home_goals"), data.get("away_goals"))
    return jsonify({"ok": True, "match": match.to_dict(), "completed": session.completed})


@app.route("/api/sessions/<session_id>/goals", methods=["GET"])
def api_goals(session_id):
    goals = get_session(session_id).goals
    player_id = request.args.get("player_id")
    if player_id:
        goals = [g for g in goals if g.player_id == player_id]
    return jsonify([g.to_dict() for g in goals])


@app.route("/api/sessions/<session_id>/goals", methods=["POST"])
def api_add_goal(session_id):
    data = request.get_json(silent=True) or {}
    try:
        mid = int(data["match_id"])
        pid = str(data["player_id"])
    except (KeyError, TypeError, ValueError):
        raise LeagueError("'match_id' and 'player_id' are required")
    goal = record_goal(get_session(session_id), mid, pid)
    return jsonify({"ok": True, "goal": goal.to_dict()}), 201


@app.route("/api/sessions/<session_id>/table")
def api_table(session_id):
    return jsonify([t.to_dict() for t in get_session(session_id).standings()])


@app.route("/api/league")
def api_league():
    session = latest_session(STATE["sessions"])
    if session is None:
        return jsonify({"ok": True, "session": None, "table": []})
    return jsonify({"ok": True, "session": session.summary(),
                    "table": [t.to_dict() for t in session.standings()]})


@app.route("/api/history")
def api_history():
    return jsonify(summarize_history(STATE["sessions"]))


@app.route("/api/seasons", methods=["GET"])
def api_seasons():
    seasons = sorted(STATE["seasons"], key=lambda s: s.start_date, reverse=True)
    return jsonify([season_overview(s, STATE["sessions"], STATE["players"]) for s in seasons])


@app.route("/api/seasons", methods=["POST"])
def api_create_season():
    data = request.get_json(silent=True) or {}
    season = new_season(STATE["seasons"], data.get("name"), data.get("start_date"),
                        data.get("end_date"), is_active=bool(data.get("is_active")))
    return jsonify({"ok": True, "season": season.to_dict()}), 201


@app.route("/api/seasons/<season_id>/scoreboard")
def api_scoreboard(season_id):
    season = find_season(STATE["seasons"], season_id)
    return jsonify(season_scoreboard(season, STATE["sessions"], STATE["players"]))


@app.route("/api/players", methods=["GET"])
def api_players():
    formal_only = request.args.get("formal") == "true"
    return jsonify(player_records(STATE["players"], STATE["sessions"], formal_only=formal_only))


@app.route("/api/players", methods=["POST"])
def api_create_player():
    data = request.get_json(silent=True) or {}
    player = new_player(STATE["players"], data.get("name"), data.get("jersey_number"),
                        is_formal_member=bool(data.get("is_formal_member")))
    return jsonify({"ok": True, "player": player.to_dict()}), 201


@app.route("/api/save", methods=["POST"])
def api_save():
    save_state(SAVE_FILE, STATE)
    return jsonify({"ok": True, "file": SAVE_FILE})


@app.route("/api/load", methods=["POST"])
def api_load():
    STATE.update(load_state(SAVE_FILE))
    return jsonify({"ok": True, "sessions": len(STATE["sessions"]),
                    "seasons": len(STATE["seasons"]), "players": len(STATE["players"])})


# ========== FRONTEND (Tailwind + minimal JS) ==========
TEMPLATE = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Saturday League</title>
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <script src="https://cdn.tailwindcss.com"></script>
</head>
<body class="bg-slate-50 text-slate-900">
  <div class="max-w-5xl mx-auto px-4 py-6 flex flex-col gap-6">
    <header class="flex items-center justify-between">
      <h1 class="text-2xl font-bold">SATURDAY LEAGUE</h1>
      <div class="text-sm text-slate-500">
        {{ history.total_sessions }} sessions &bull; {{ history.completed_games }}/{{ history.total_games }} games played
      </div>
    </header>

    {% if not current %}
      <p class="text-slate-500">No sessions yet. POST a list of teams to /api/sessions to start one.</p>
    {% else %}
      <section class="bg-white rounded-2xl shadow p-4">
        <h2 class="text-xl font-semibold mb-3">{{ current.name }}
          {% if current.completed %}<span class="text-sm text-emerald-600">Final</span>{% endif %}
        </h2>
        <table class="min-w-full text-sm">
          <thead class="bg-slate-100">
            <tr>
              <th class="p-2 text-left">#</th><th class="p-2 text-left">Team</th>
              <th class="p-2">MP</th><th class="p-2">W</th><th class="p-2">D</th><th class="p-2">L</th>
              <th class="p-2">GF</th><th class="p-2">GA</th><th class="p-2">GD</th><th class="p-2">Pts</th>
            </tr>
          </thead>
          <tbody>
          {% for t in current.standings() %}
            <tr class="{{ 'bg-slate-50' if loop.index0 % 2 else '' }}">
              <td class="p-2">{{ loop.index }}</td>
              <td class="p-2 font-medium">{{ t.name }}</td>
              <td class="p-2 text-center">{{ t.games_played }}</td>
              <td class="p-2 text-center">{{ t.wins }}</td>
              <td class="p-2 text-center">{{ t.draws }}</td>
              <td class="p-2 text-center">{{ t.losses }}</td>
              <td class="p-2 text-center">{{ t.goals_for }}</td>
              <td class="p-2 text-center">{{ t.goals_against }}</td>
              <td class="p-2 text-center">{{ t.goal_difference }}</td>
              <td class="p-2 text-center font-bold">{{ t.points }}</td>
            </tr>
          {% endfor %}
          </tbody>
        </table>
      </section>

      <section class="bg-white rounded-2xl shadow p-4">
        <h2 class="text-xl font-semibold mb-3">Fixtures</h2>
        <div class="grid md:grid-cols-2 gap-3">
        {% for m in current.fixtures %}
          <div class="border rounded-xl p-3">
            <div class="text-sm text-slate-500 mb-2">Match #{{ m.id }} &bull; Round {{ m.round }}</div>
            <div class="grid grid-cols-5 items-center gap-2">
              <div class="col-span-2 text-right font-semibold">{{ m.home }}</div>
              <div class="col-span-1 text-center">
              {% if m.completed %}
                {{ m.home_goals }} : {{ m.away_goals }}
              {% else %}
                <input type="number" min="0" class="w-12 border rounded-md p-1 text-center" id="hg-{{ m.id }}">
                <input type="number" min="0" class="w-12 border rounded-md p-1 text-center" id="ag-{{ m.id }}">
              {% endif %}
              </div>
              <div class="col-span-2 font-semibold">{{ m.away }}</div>
            </div>
            {% if not m.completed %}
            <button class="mt-3 px-3 py-1 rounded-lg bg-slate-900 text-white" onclick="saveScore({{ m.id }})">Save</button>
            {% endif %}
          </div>
        {% endfor %}
        </div>
      </section>

<script>
async function saveScore(id){
  const res = await fetch('/api/sessions/{{ current.id }}/update_score', {
    method:'POST',
    headers:{'Content-Type':'application/json'},
    body: JSON.stringify({id, home_goals: document.getElementById('hg-'+id).value,
                          away_goals: document.getElementById('ag-'+id).value})
  });
  const body = await res.json();
  if (!body.ok) { alert(body.error); return; }
  location.reload();
}
</script>
    {% endif %}
  </div>
</body>
</html>
"""

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app.run(host=HOST, port=PORT, debug=DEBUG)
