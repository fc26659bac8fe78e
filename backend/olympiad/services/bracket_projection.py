"""Read-side view of a tournament bracket."""
from olympiad.errors import NotFoundError
from olympiad.extensions import db
from olympiad.models.event import Event, EventStatus
from olympiad.models.match import FINISHED_STATUSES, Match, MatchStatus, PendingSlot
from olympiad.models.participant import Participant
from olympiad.models.team import Team
from olympiad.services.rating_service import average_rating, win_probability


def are_all_matches_completed(event_id):
    """True unless some match of the event is neither COMPLETED nor CANCELLED."""
    unfinished = Match.query.filter(
        Match.event_id == event_id,
        Match.status.notin_(FINISHED_STATUSES),
    ).count()
    return unfinished == 0


def placeholder_label(source, wants_winner, teams):
    """Text shown for a slot still waiting on ``source``."""
    prefix = "Winner" if wants_winner else "Loser"
    if source.has_both_teams:
        t1, t2 = teams[source.team1_id], teams[source.team2_id]
        return f"{prefix} of {t1.abbreviation}/{t2.abbreviation}"
    return f"{prefix} of G{source.match_number}"


def round_label(match, last_winners_round, last_losers_round):
    if match.is_if_necessary:
        return "Grand Final (if necessary)"
    if match.is_grand_final:
        return "Grand Final"
    if match.is_winners_bracket:
        if match.round == last_winners_round:
            return "Winners Final"
        return f"Winners Round {match.round}"
    if match.round == last_losers_round:
        return "Losers Final"
    return f"Losers Round {match.round}"


def _team_summary(team, rating):
    return {
        "id": team.id,
        "name": team.name,
        "abbreviation": team.abbreviation,
        "color": team.color,
        "rating": rating,
    }


def get_bracket(event_id):
    """Render-ready bracket for an event.

    Raises NotFoundError when the event is unknown or has no bracket.
    """
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")

    matches = event.matches.order_by(Match.match_number).all()
    if not matches:
        raise NotFoundError("No bracket found for this event")

    participants = event.participants.order_by(Participant.seed).all()
    teams = {
        t.id: t
        for t in Team.query.filter(Team.id.in_([p.team_id for p in participants])).all()
    }
    ratings = {tid: average_rating(team, event_id) for tid, team in teams.items()}
    by_id = {m.id: m for m in matches}

    last_winners = max(
        (m.round for m in matches
         if m.is_winners_bracket and not (m.is_grand_final or m.is_if_necessary)),
        default=0,
    )
    last_losers = max((m.round for m in matches if not m.is_winners_bracket), default=0)

    def project_slot(match, n):
        slot = match.slot(n)
        if isinstance(slot, PendingSlot):
            source = by_id[slot.source_match_id]
            return None, placeholder_label(source, slot.wants_winner, teams)
        return _team_summary(teams[slot.team_id], ratings[slot.team_id]), None

    def project(match):
        team1, placeholder1 = project_slot(match, 1)
        team2, placeholder2 = project_slot(match, 2)
        status = match.display_status

        probability = None
        if status == MatchStatus.SCHEDULED:
            p1, p2 = win_probability(ratings[match.team1_id], ratings[match.team2_id])
            probability = {"team1": p1, "team2": p2}

        return {
            "id": match.id,
            "match_number": match.match_number,
            "round": match.round,
            "label": round_label(match, last_winners, last_losers),
            "bracket": "winners" if match.is_winners_bracket else "losers",
            "is_grand_final": match.is_grand_final,
            "is_if_necessary": match.is_if_necessary,
            "status": status.value,
            "team1": team1,
            "team2": team2,
            "team1_placeholder": placeholder1,
            "team2_placeholder": placeholder2,
            "score": match.score,
            "winner_id": match.winner_id,
            "win_probability": probability,
        }

    winners, losers, finals = {}, {}, []
    for m in matches:
        row = project(m)
        if m.is_grand_final or m.is_if_necessary:
            finals.append(row)
        elif m.is_winners_bracket:
            winners.setdefault(m.round, []).append(row)
        else:
            losers.setdefault(m.round, []).append(row)

    def grouped(rounds):
        return [
            {"round": r, "label": rows[0]["label"], "matches": rows}
            for r, rows in sorted(rounds.items())
        ]

    tournament_complete = all(m.status in FINISHED_STATUSES for m in matches)

    return {
        "event_id": event.id,
        "event_status": event.status.value,
        "rounds": last_winners,
        "participants": [
            {
                "team": _team_summary(teams[p.team_id], ratings[p.team_id]),
                "seed": p.seed,
                "is_eliminated": p.is_eliminated,
                "elimination_round": p.elimination_round,
                "final_position": p.final_position,
            }
            for p in participants
        ],
        "winners_bracket": grouped(winners),
        "losers_bracket": grouped(losers),
        "finals": finals,
        "tournament_complete": tournament_complete,
        "event_complete": event.status == EventStatus.COMPLETED,
        "final_standings": event.final_standings,
    }
