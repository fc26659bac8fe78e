"""Event lifecycle: UPCOMING -> IN_PROGRESS -> COMPLETED.

Covers the three event kinds. Tournaments complete when their bracket is
finished, combined-team events when their single match is, and scored events
when an admin records the final order.
"""
import logging
import random

from olympiad.auth.capability import require_admin
from olympiad.bus import event_bus
from olympiad.errors import ConflictError, NotFoundError, ValidationError
from olympiad.extensions import db
from olympiad.models.event import Event, EventStatus, EventType
from olympiad.models.match import Match, MatchStatus
from olympiad.models.participant import Participant
from olympiad.models.team import Team
from olympiad.models.year import Year
from olympiad.services.bracket_projection import are_all_matches_completed
from olympiad.services.rating_service import average_rating, win_probability
from olympiad.transaction import atomic

logger = logging.getLogger(__name__)

COMBINED_SCHEDULED = "SCHEDULED"
COMBINED_IN_PROGRESS = "IN_PROGRESS"
COMBINED_COMPLETED = "COMPLETED"


def _load_event(session, event_id, lock=False):
    event = session.get(Event, event_id, with_for_update=lock)
    if not event:
        raise NotFoundError("Event not found")
    return event


def _require_type(event, event_type, action):
    if event.type != event_type:
        raise ValidationError(f"{action} is only available for {event_type.value} events")


# ── CRUD ─────────────────────────────────────────────────────────────────────

def create_event(actor, data):
    require_admin(actor)

    with atomic() as session:
        year_id = data.get("year_id")
        if year_id is None:
            year = Year.active()
            if not year:
                raise ValidationError("No active year; pass year_id explicitly")
        else:
            year = session.get(Year, year_id)
            if not year:
                raise NotFoundError("Year not found")

        clash = Event.query.filter_by(
            year_id=year.id, abbreviation=data["abbreviation"]
        ).first()
        if clash:
            raise ConflictError(f"Event {data['abbreviation']} already exists for {year.year}")

        event = Event(
            name=data["name"],
            abbreviation=data["abbreviation"],
            symbol=data.get("symbol"),
            location=data.get("location"),
            type=EventType(data["type"]),
            year_id=year.id,
            start_time=data.get("start_time"),
            duration_minutes=data.get("duration_minutes"),
            points=list(data.get("points") or []),
        )
        session.add(event)

    logger.info("Event %s (%s) created by user %s", event.abbreviation, event.type.value, actor.user_id)
    return event


def start_event(actor, event_id):
    """Explicit start for an upcoming event; tournaments need a bracket first."""
    require_admin(actor)

    with atomic() as session:
        event = _load_event(session, event_id, lock=True)
        if event.status != EventStatus.UPCOMING:
            raise ConflictError(f"Event is already {event.status.value}")
        if event.type == EventType.TOURNAMENT and not event.has_bracket:
            raise ConflictError("Generate a bracket before starting the tournament")
        event.status = EventStatus.IN_PROGRESS

    logger.info("Event %s started by user %s", event.id, actor.user_id)
    event_bus.publish("event_started", {"event_id": event.id})
    return event


def reset_tournament(actor, event_id):
    """Delete the bracket and participants; the event returns to UPCOMING."""
    require_admin(actor)

    with atomic() as session:
        event = _load_event(session, event_id, lock=True)
        _require_type(event, EventType.TOURNAMENT, "Bracket reset")
        if not event.has_bracket:
            raise NotFoundError("No bracket to reset")

        removed = Match.query.filter_by(event_id=event.id).delete()
        Participant.query.filter_by(event_id=event.id).delete()
        event.status = EventStatus.UPCOMING
        event.final_standings = None

    logger.info("Bracket of event %s reset by user %s (%d matches removed)",
                event_id, actor.user_id, removed)
    event_bus.publish("bracket_reset", {"event_id": event_id})
    return event


# ── Tournament completion ────────────────────────────────────────────────────

def tournament_standings(event):
    """Team ids from champion to last place for a finished bracket.

    Champion and runner-up come from the deciding final; everyone else is
    ordered by how late they fell out of the losers bracket, then by seed.
    """
    matches = event.matches.all()
    seeds = {p.team_id: p.seed for p in event.participants.all()}

    deciding = next(
        (m for m in matches if m.is_if_necessary and m.status == MatchStatus.COMPLETED),
        None,
    ) or next((m for m in matches if m.is_grand_final), None)

    standings = []
    if deciding is not None and deciding.winner_id is not None:
        standings = [deciding.winner_id, deciding.loser_id]

    knocked_out = sorted(
        (
            (-m.round, seeds.get(m.loser_id, 0), m.loser_id)
            for m in matches
            if not m.is_winners_bracket and m.status == MatchStatus.COMPLETED
        ),
    )
    for _, _, team_id in knocked_out:
        if team_id not in standings:
            standings.append(team_id)

    for team_id in sorted(seeds, key=seeds.get):
        if team_id not in standings:
            standings.append(team_id)
    return standings


def _finalize_tournament(event):
    standings = tournament_standings(event)
    positions = {team_id: i + 1 for i, team_id in enumerate(standings)}
    for p in event.participants.all():
        p.final_position = positions.get(p.team_id)
    event.final_standings = standings
    event.status = EventStatus.COMPLETED
    return standings


def finish_tournament_if_done(session, event):
    """Complete an in-progress tournament once every match is finished.

    Runs inside the caller's transaction. Returns True when the event was
    completed by this call.
    """
    if event.status != EventStatus.IN_PROGRESS or event.type != EventType.TOURNAMENT:
        return False
    session.flush()
    if not are_all_matches_completed(event.id):
        return False
    _finalize_tournament(event)
    logger.info("Tournament %s finished; standings %s", event.id, event.final_standings)
    return True


def complete_event(actor, event_id):
    require_admin(actor)

    with atomic() as session:
        event = _load_event(session, event_id, lock=True)
        if event.status == EventStatus.COMPLETED:
            raise ConflictError("Event is already completed")

        if event.type == EventType.TOURNAMENT:
            if not event.has_bracket:
                raise ConflictError("Tournament has no bracket")
            session.flush()
            if not are_all_matches_completed(event.id):
                logger.warning("Completion of event %s rejected: unfinished matches", event.id)
                raise ConflictError("All matches must be completed before completing the event")
            _finalize_tournament(event)
        elif event.type == EventType.COMBINED_TEAM:
            data = event.combined_team_data or {}
            if data.get("status") != COMBINED_COMPLETED:
                raise ConflictError("The combined-team match has not been completed")
            event.status = EventStatus.COMPLETED
        else:
            raise ConflictError("Scored events are completed by recording final standings")

    logger.info("Event %s completed by user %s", event.id, actor.user_id)
    event_bus.publish("event_completed", {
        "event_id": event.id,
        "final_standings": event.final_standings,
    })
    return event


# ── Scored events ────────────────────────────────────────────────────────────

def record_final_standings(actor, event_id, team_ids):
    require_admin(actor)
    team_ids = list(team_ids)
    if not team_ids:
        raise ValidationError("Final standings need at least one team")
    if len(set(team_ids)) != len(team_ids):
        raise ValidationError("A team can only appear once in the standings")

    with atomic() as session:
        event = _load_event(session, event_id, lock=True)
        _require_type(event, EventType.SCORED, "Recording final standings")
        if event.status == EventStatus.COMPLETED:
            raise ConflictError("Event is already completed")

        found = {t.id for t in Team.query.filter(Team.id.in_(team_ids)).all()}
        missing = [tid for tid in team_ids if tid not in found]
        if missing:
            raise NotFoundError(f"Team(s) not found: {', '.join(map(str, missing))}")

        event.final_standings = team_ids
        event.status = EventStatus.COMPLETED

    logger.info("Final standings recorded for event %s by user %s", event.id, actor.user_id)
    event_bus.publish("event_completed", {
        "event_id": event.id,
        "final_standings": event.final_standings,
    })
    return event


# ── Combined-team events ─────────────────────────────────────────────────────

def generate_combined_teams(actor, event_id, team_ids=None, rng=None):
    """Randomly split four teams into two pairs that play one match."""
    require_admin(actor)
    rng = rng or random.Random()

    with atomic() as session:
        event = _load_event(session, event_id, lock=True)
        _require_type(event, EventType.COMBINED_TEAM, "Pairing teams")
        if event.status == EventStatus.COMPLETED:
            raise ConflictError("Event is already completed")
        data = event.combined_team_data
        if data and (data.get("status") != COMBINED_SCHEDULED or any(data.get("score", []))):
            raise ConflictError("Pairs cannot be redrawn once scoring has started")

        if team_ids is None:
            team_ids = [
                t.id for t in Team.query.filter_by(year_id=event.year_id).order_by(Team.id)
            ]
        team_ids = list(team_ids)
        if len(set(team_ids)) != len(team_ids):
            raise ValidationError("Teams must be distinct")
        if len(team_ids) != 4:
            raise ValidationError(f"Exactly 4 teams are needed, got {len(team_ids)}")
        found = {t.id for t in Team.query.filter(Team.id.in_(team_ids)).all()}
        missing = [tid for tid in team_ids if tid not in found]
        if missing:
            raise NotFoundError(f"Team(s) not found: {', '.join(map(str, missing))}")

        shuffled = list(team_ids)
        rng.shuffle(shuffled)
        event.combined_team_data = {
            "team1": shuffled[:2],
            "team2": shuffled[2:],
            "score": [0, 0],
            "status": COMBINED_SCHEDULED,
            "winner": None,
        }

    logger.info("Combined teams drawn for event %s by user %s: %s vs %s",
                event.id, actor.user_id, shuffled[:2], shuffled[2:])
    event_bus.publish("combined_team_updated", {"event_id": event.id})
    return event


def update_combined_score(actor, event_id, score, completed=False):
    require_admin(actor)
    score = list(score)
    if len(score) != 2 or any(s < 0 for s in score):
        raise ValidationError("Score must be two non-negative integers")

    with atomic() as session:
        event = _load_event(session, event_id, lock=True)
        _require_type(event, EventType.COMBINED_TEAM, "Combined scoring")
        data = event.combined_team_data
        if not data:
            raise ConflictError("Combined teams have not been generated")
        if data.get("status") == COMBINED_COMPLETED:
            raise ConflictError("Combined-team match is already completed")

        data = dict(data, score=score)
        if completed:
            if score[0] == score[1]:
                raise ValidationError("Scores are tied; a match cannot be completed without a winner")
            winner, loser = ("team1", "team2") if score[0] > score[1] else ("team2", "team1")
            data.update(status=COMBINED_COMPLETED, winner=winner)
            event.final_standings = list(data[winner]) + list(data[loser])
            event.status = EventStatus.COMPLETED
        else:
            data["status"] = COMBINED_IN_PROGRESS
            if event.status == EventStatus.UPCOMING:
                event.status = EventStatus.IN_PROGRESS
        event.combined_team_data = data

    logger.info("Combined score of event %s set to %s-%s by user %s",
                event.id, score[0], score[1], actor.user_id)
    event_bus.publish("combined_team_updated", {
        "event_id": event.id,
        "score": score,
        "status": data["status"],
    })
    if completed:
        event_bus.publish("event_completed", {
            "event_id": event.id,
            "final_standings": event.final_standings,
        })
    return event


def get_combined_team(event_id):
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    _require_type(event, EventType.COMBINED_TEAM, "Combined teams")
    data = event.combined_team_data
    if not data:
        raise NotFoundError("Combined teams have not been generated")

    ids = list(data["team1"]) + list(data["team2"])
    teams = {t.id: t for t in Team.query.filter(Team.id.in_(ids)).all()}

    def side(key):
        members = [teams[tid] for tid in data[key]]
        ratings = [average_rating(t, event.id) for t in members]
        return {
            "team_ids": list(data[key]),
            "name": "/".join(t.abbreviation for t in members),
            "teams": [
                {"id": t.id, "name": t.name, "abbreviation": t.abbreviation, "color": t.color}
                for t in members
            ],
            "rating": round(sum(ratings) / len(ratings)),
        }

    team1, team2 = side("team1"), side("team2")
    probability = None
    if data["status"] == COMBINED_SCHEDULED:
        p1, p2 = win_probability(team1["rating"], team2["rating"])
        probability = {"team1": p1, "team2": p2}

    return {
        "event_id": event.id,
        "team1": team1,
        "team2": team2,
        "score": data["score"],
        "status": data["status"],
        "winner": data.get("winner"),
        "win_probability": probability,
    }
