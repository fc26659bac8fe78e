from flask import Blueprint, g, jsonify, request

from olympiad.auth.decorators import admin_required
from olympiad.errors import NotFoundError, ValidationError
from olympiad.extensions import db
from olympiad.models.event import Event, EventStatus, EventType
from olympiad.models.year import Year
from olympiad.schemas import (
    CombinedScoreSchema,
    CreateEventSchema,
    EventSchema,
    FinalStandingsSchema,
    GenerateBracketSchema,
    GenerateCombinedTeamsSchema,
    MatchSchema,
    UpdateMatchSchema,
)
from olympiad.services.bracket_generator import generate_bracket
from olympiad.services.bracket_projection import get_bracket
from olympiad.services.event_service import (
    complete_event,
    create_event,
    generate_combined_teams,
    get_combined_team,
    record_final_standings,
    reset_tournament,
    start_event,
    update_combined_score,
)
from olympiad.services.match_service import cancel_match, update_match

events_bp = Blueprint("events", __name__)

event_schema = EventSchema()
events_schema = EventSchema(many=True)
create_event_schema = CreateEventSchema()
final_standings_schema = FinalStandingsSchema()

match_schema = MatchSchema()
matches_schema = MatchSchema(many=True)
generate_bracket_schema = GenerateBracketSchema()
update_match_schema = UpdateMatchSchema()

generate_combined_schema = GenerateCombinedTeamsSchema()
combined_score_schema = CombinedScoreSchema()


def _get_event(event_id):
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


def _parse_enum(enum, value, name):
    try:
        return enum(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum)
        raise ValidationError(f"Unknown {name} '{value}'; expected one of: {choices}") from None


# ─── Events ───────────────────────────────────────────────────────────────────

@events_bp.route("/events", methods=["GET"])
def get_events():
    year_id = request.args.get("year_id", type=int)
    event_type = request.args.get("type")
    status = request.args.get("status")

    query = Event.query
    if year_id is None:
        year = Year.active()
        year_id = year.id if year else None
    if year_id is not None:
        query = query.filter_by(year_id=year_id)
    if event_type:
        query = query.filter_by(type=_parse_enum(EventType, event_type, "type"))
    if status:
        query = query.filter_by(status=_parse_enum(EventStatus, status, "status"))

    events = query.order_by(Event.start_time.is_(None), Event.start_time, Event.id).all()
    return jsonify({"events": events_schema.dump(events)}), 200


@events_bp.route("/events/<int:event_id>", methods=["GET"])
def get_event(event_id):
    return jsonify({"event": event_schema.dump(_get_event(event_id))}), 200


@events_bp.route("/events", methods=["POST"])
@admin_required
def create_event_route():
    data = create_event_schema.load(request.get_json())
    event = create_event(g.admin, data)
    return jsonify({"event": event_schema.dump(event)}), 201


@events_bp.route("/events/<int:event_id>/start", methods=["POST"])
@admin_required
def start_event_route(event_id):
    event = start_event(g.admin, event_id)
    return jsonify({"event": event_schema.dump(event)}), 200


@events_bp.route("/events/<int:event_id>/complete", methods=["POST"])
@admin_required
def complete_event_route(event_id):
    event = complete_event(g.admin, event_id)
    return jsonify({"event": event_schema.dump(event)}), 200


@events_bp.route("/events/<int:event_id>/final-standings", methods=["POST"])
@admin_required
def final_standings_route(event_id):
    data = final_standings_schema.load(request.get_json())
    event = record_final_standings(g.admin, event_id, data["team_ids"])
    return jsonify({"event": event_schema.dump(event)}), 200


# ─── Bracket ──────────────────────────────────────────────────────────────────

@events_bp.route("/events/<int:event_id>/bracket", methods=["POST"])
@admin_required
def generate_bracket_route(event_id):
    data = generate_bracket_schema.load(request.get_json())
    result = generate_bracket(g.admin, event_id, data["seeds"])
    return jsonify({
        "message": "Double-elimination bracket generated",
        "total_matches": len(result["matches"]),
        "rounds": result["rounds"],
        "bracket": get_bracket(event_id),
    }), 201


@events_bp.route("/events/<int:event_id>/bracket", methods=["GET"])
def get_bracket_route(event_id):
    return jsonify({"bracket": get_bracket(event_id)}), 200


@events_bp.route("/events/<int:event_id>/bracket", methods=["DELETE"])
@admin_required
def reset_bracket_route(event_id):
    if request.args.get("confirm", "").lower() != "true":
        raise ValidationError("Resetting a bracket deletes every result; pass confirm=true")
    event = reset_tournament(g.admin, event_id)
    return jsonify({
        "message": "Bracket reset",
        "event": event_schema.dump(event),
    }), 200


# ─── Matches ──────────────────────────────────────────────────────────────────

@events_bp.route("/matches/<int:match_id>", methods=["PUT"])
@admin_required
def update_match_route(match_id):
    data = update_match_schema.load(request.get_json())
    result = update_match(
        g.admin,
        match_id,
        data["score"],
        completed=data["completed"],
        winner_id=data["winner_id"],
        override=data["override"],
    )
    return jsonify({
        "match": match_schema.dump(result["match"]),
        "propagated": matches_schema.dump(result["propagated"]),
        "event_completed": result["event_completed"],
    }), 200


@events_bp.route("/matches/<int:match_id>/cancel", methods=["POST"])
@admin_required
def cancel_match_route(match_id):
    result = cancel_match(g.admin, match_id)
    return jsonify({
        "match": match_schema.dump(result["match"]),
        "cancelled": matches_schema.dump(result["cancelled"]),
        "event_completed": result["event_completed"],
    }), 200


# ─── Combined team ────────────────────────────────────────────────────────────

@events_bp.route("/events/<int:event_id>/combined-team", methods=["GET"])
def get_combined_team_route(event_id):
    return jsonify({"combined_team": get_combined_team(event_id)}), 200


@events_bp.route("/events/<int:event_id>/combined-team", methods=["POST"])
@admin_required
def generate_combined_team_route(event_id):
    data = generate_combined_schema.load(request.get_json(silent=True) or {})
    generate_combined_teams(g.admin, event_id, team_ids=data["team_ids"])
    return jsonify({"combined_team": get_combined_team(event_id)}), 201


@events_bp.route("/events/<int:event_id>/combined-team/score", methods=["PUT"])
@admin_required
def combined_score_route(event_id):
    data = combined_score_schema.load(request.get_json())
    update_combined_score(g.admin, event_id, data["score"], completed=data["completed"])
    return jsonify({"combined_team": get_combined_team(event_id)}), 200
