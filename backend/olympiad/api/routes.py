import queue

from flask import Blueprint, Response, g, jsonify, request

from olympiad.auth.decorators import admin_required
from olympiad.bus import event_bus, sse_frame
from olympiad.schemas import (
    CreatePlayerSchema,
    CreateTeamSchema,
    CreateYearSchema,
    PlayerSchema,
    SetRatingSchema,
    TeamSchema,
    YearSchema,
)
from olympiad.services.player_service import create_player, list_players, set_rating
from olympiad.services.rating_service import team_rating_summary
from olympiad.services.standings import overall_standings
from olympiad.services.team_service import create_team, get_team, list_teams
from olympiad.services.year_service import create_year, list_years

api_bp = Blueprint("api", __name__)

# ── Schema instances ─────────────────────────────────────────────────────────
year_schema = YearSchema()
years_schema = YearSchema(many=True)
create_year_schema = CreateYearSchema()

team_schema = TeamSchema()
teams_schema = TeamSchema(many=True)
create_team_schema = CreateTeamSchema()

player_schema = PlayerSchema()
players_schema = PlayerSchema(many=True)
create_player_schema = CreatePlayerSchema()
set_rating_schema = SetRatingSchema()


# ─── Years ────────────────────────────────────────────────────────────────────

@api_bp.route("/years", methods=["GET"])
def get_years():
    return jsonify({"years": years_schema.dump(list_years())}), 200


@api_bp.route("/years", methods=["POST"])
@admin_required
def create_year_route():
    data = create_year_schema.load(request.get_json())
    year = create_year(g.admin, data["year"])
    return jsonify({"year": year_schema.dump(year)}), 201


# ─── Teams ────────────────────────────────────────────────────────────────────

@api_bp.route("/teams", methods=["GET"])
def get_teams():
    year_id = request.args.get("year_id", type=int)
    teams = list_teams(year_id)
    return jsonify({"teams": teams_schema.dump(teams)}), 200


@api_bp.route("/teams/<int:team_id>", methods=["GET"])
def get_team_route(team_id):
    event_id = request.args.get("event_id", type=int)
    team = get_team(team_id)
    return jsonify({
        "team": team_schema.dump(team),
        "rating": team_rating_summary(team, event_id),
    }), 200


@api_bp.route("/teams", methods=["POST"])
@admin_required
def create_team_route():
    data = create_team_schema.load(request.get_json())
    team = create_team(g.admin, data)
    return jsonify({"team": team_schema.dump(team)}), 201


# ─── Players ──────────────────────────────────────────────────────────────────

@api_bp.route("/players", methods=["GET"])
def get_players():
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    players = list_players(active_only=not include_inactive)
    return jsonify({"players": players_schema.dump(players)}), 200


@api_bp.route("/players", methods=["POST"])
@admin_required
def create_player_route():
    data = create_player_schema.load(request.get_json())
    player = create_player(g.admin, data)
    return jsonify({"player": player_schema.dump(player)}), 201


@api_bp.route("/players/<int:player_id>/rating", methods=["PUT"])
@admin_required
def set_rating_route(player_id):
    data = set_rating_schema.load(request.get_json())
    player = set_rating(g.admin, player_id, data["rating"], data["event_id"])
    return jsonify({"player": player_schema.dump(player)}), 200


# ─── Standings ────────────────────────────────────────────────────────────────

@api_bp.route("/standings", methods=["GET"])
def get_standings():
    year_id = request.args.get("year_id", type=int)
    return jsonify({"standings": overall_standings(year_id)}), 200


# ─── Live updates (SSE) ───────────────────────────────────────────────────────

@api_bp.route("/stream", methods=["GET"])
def event_stream():
    event_id = request.args.get("event_id", type=int)

    def generate():
        q = event_bus.subscribe(event_id)
        try:
            while True:
                try:
                    msg = q.get(timeout=30)
                    yield sse_frame(msg)
                except queue.Empty:
                    yield ": keepalive\n\n"
        finally:
            event_bus.unsubscribe(q)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
