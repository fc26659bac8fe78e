"""Match lifecycle and bracket progression.

A completed match pushes its winner and loser into every downstream slot
that was waiting on it. All of that happens in the same transaction as the
result itself.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import or_

from olympiad.auth.capability import require_admin
from olympiad.bus import event_bus
from olympiad.errors import ConflictError, NotFoundError, ValidationError
from olympiad.models.event import EventStatus
from olympiad.models.match import Match, MatchStatus, PendingSlot, ResolvedSlot
from olympiad.models.participant import Participant
from olympiad.services.event_service import finish_tournament_if_done
from olympiad.transaction import atomic

logger = logging.getLogger(__name__)


def _load_match(session, match_id):
    match = session.get(Match, match_id, with_for_update=True)
    if not match:
        raise NotFoundError("Match not found")
    return match


def decide_winner(match, score, winner_id=None):
    """Team id with the strictly higher score.

    An explicit ``winner_id`` is only accepted when it agrees with the score.
    """
    s1, s2 = score
    if s1 == s2:
        raise ValidationError("Scores are tied; a match cannot be completed without a winner")
    winner = match.team1_id if s1 > s2 else match.team2_id
    if winner_id is not None and winner_id != winner:
        raise ValidationError("winner_id does not match the score")
    return winner


def update_match(actor, match_id, score, completed=False, winner_id=None, override=False):
    """Record a live score, complete a match, or correct a completed one.

    Returns ``{"match": Match, "propagated": [Match, ...], "event_completed": bool}``.
    """
    require_admin(actor)
    score = list(score)
    if len(score) != 2 or any(s < 0 for s in score):
        raise ValidationError("Score must be two non-negative integers")

    with atomic() as session:
        match = _load_match(session, match_id)

        if match.status == MatchStatus.CANCELLED:
            raise ConflictError("Match has been cancelled")
        if not match.has_both_teams:
            raise ConflictError("Cannot score a match whose teams are not yet determined")

        propagated = []
        if match.status == MatchStatus.COMPLETED:
            if not override:
                raise ConflictError("Match is already completed")
            propagated = _correct_result(session, match, score, winner_id)
        elif completed:
            winner = decide_winner(match, score, winner_id)
            _record_result(match, score, winner)
            propagated = _advance(session, match)
        else:
            match.team1_score, match.team2_score = score
            match.status = MatchStatus.IN_PROGRESS

        event_completed = False
        if match.status == MatchStatus.COMPLETED:
            event_completed = finish_tournament_if_done(session, match.event)

    if match.status == MatchStatus.COMPLETED:
        logger.info(
            "Match G%s of event %s completed %s-%s by user %s; %d downstream slot(s) filled",
            match.match_number, match.event_id, match.team1_score, match.team2_score,
            actor.user_id, len(propagated),
        )
    else:
        logger.info(
            "Score of match G%s of event %s set to %s-%s by user %s",
            match.match_number, match.event_id, match.team1_score, match.team2_score,
            actor.user_id,
        )

    event_bus.publish("match_updated", {
        "event_id": match.event_id,
        "match_id": match.id,
        "status": match.status.value,
        "score": match.score,
        "winner_id": match.winner_id,
        "propagated": [m.id for m in propagated],
    })
    if event_completed:
        event_bus.publish("event_completed", {
            "event_id": match.event_id,
            "final_standings": match.event.final_standings,
        })

    return {"match": match, "propagated": propagated, "event_completed": event_completed}


def cancel_match(actor, match_id):
    """Administrative skip.

    No result is propagated. Every downstream match that was waiting on the
    skipped one can never be decided, so it is cancelled too, transitively.
    Returns ``{"match": Match, "cancelled": [Match, ...], "event_completed": bool}``.
    """
    require_admin(actor)

    with atomic() as session:
        match = _load_match(session, match_id)
        if match.status not in (MatchStatus.SCHEDULED, MatchStatus.IN_PROGRESS):
            raise ConflictError(f"Cannot cancel a {match.status.value} match")
        if not match.has_both_teams:
            raise ConflictError("Cannot cancel a match whose teams are not yet determined")
        match.status = MatchStatus.CANCELLED
        cancelled = _cancel_dependents(match)
        session.flush()
        event_completed = finish_tournament_if_done(session, match.event)

    logger.info("Match G%s of event %s cancelled by user %s; %d dependent match(es) cancelled",
                match.match_number, match.event_id, actor.user_id, len(cancelled))
    event_bus.publish("match_updated", {
        "event_id": match.event_id,
        "match_id": match.id,
        "status": match.status.value,
        "propagated": [],
        "cancelled": [m.id for m in cancelled],
    })
    if event_completed:
        event_bus.publish("event_completed", {
            "event_id": match.event_id,
            "final_standings": match.event.final_standings,
        })
    return {"match": match, "cancelled": cancelled, "event_completed": event_completed}


def complete_match(actor, match_id, score, winner_id=None):
    """Finish a match and propagate its result; shorthand for a completing update."""
    return update_match(actor, match_id, score, completed=True, winner_id=winner_id)


# ── Progression ──────────────────────────────────────────────────────────────

def _record_result(match, score, winner):
    match.team1_score, match.team2_score = score
    match.winner_id = winner
    match.status = MatchStatus.COMPLETED
    match.completed_at = datetime.now(timezone.utc)


def _feeds(match):
    """Downstream (match, slot, wants_winner) triples still waiting on ``match``."""
    downstream = (
        Match.query.filter(
            Match.event_id == match.event_id,
            or_(
                Match.team1_from_match_id == match.id,
                Match.team2_from_match_id == match.id,
            ),
        )
        .order_by(Match.match_number)
        .with_for_update()
        .all()
    )
    feeds = []
    for d in downstream:
        for n in (1, 2):
            slot = d.slot(n)
            if isinstance(slot, PendingSlot) and slot.source_match_id == match.id:
                feeds.append((d, n, slot.wants_winner))
    return feeds


def _cancel_dependents(match):
    """Cancel every match still waiting, directly or not, on ``match``."""
    cancelled = []
    sources = [match]
    while sources:
        source = sources.pop()
        for d, _, _ in _feeds(source):
            if d.status == MatchStatus.CANCELLED or d in cancelled:
                continue
            d.status = MatchStatus.CANCELLED
            cancelled.append(d)
            sources.append(d)
    return sorted(cancelled, key=lambda m: m.match_number)


def _advance(session, match):
    """Fill downstream slots from a freshly completed match.

    Also settles the grand final and the loser's elimination. Returns the
    downstream matches that changed.
    """
    feeds = [f for f in _feeds(match) if f[0].status != MatchStatus.CANCELLED]
    for d, n, wants_winner in feeds:
        team_id = match.winner_id if wants_winner else match.loser_id
        d.set_slot(n, ResolvedSlot(team_id))

    if match.is_grand_final:
        rematch = next((d for d, _, _ in feeds if d.is_if_necessary), None)
        if rematch is not None and match.winner_id == match.team1_id:
            rematch.status = MatchStatus.CANCELLED

    loser_plays_on = any(
        not wants_winner and d.status != MatchStatus.CANCELLED
        for d, _, wants_winner in feeds
    )
    if not loser_plays_on:
        participant = Participant.query.filter_by(
            event_id=match.event_id, team_id=match.loser_id
        ).first()
        if participant:
            participant.is_eliminated = True
            participant.elimination_round = match.round

    session.flush()

    changed = []
    for d, _, _ in feeds:
        if d not in changed:
            changed.append(d)
    return changed


def _correct_result(session, match, score, winner_id):
    """Apply an override to an already completed match."""
    new_winner = decide_winner(match, score, winner_id)
    if new_winner == match.winner_id:
        match.team1_score, match.team2_score = score
        logger.info("Score of completed match G%s corrected; winner unchanged", match.match_number)
        return []

    if match.event.status == EventStatus.COMPLETED:
        raise ConflictError("Event is already completed; reset the tournament to change the winner")

    old_winner, old_loser = match.winner_id, match.loser_id
    affected = (
        Match.query.filter(
            Match.event_id == match.event_id,
            Match.match_number > match.match_number,
            or_(
                Match.team1_id.in_([old_winner, old_loser]),
                Match.team2_id.in_([old_winner, old_loser]),
            ),
        )
        .with_for_update()
        .all()
    )
    played = [
        d for d in affected
        if d.score is not None or d.status in (MatchStatus.IN_PROGRESS, MatchStatus.COMPLETED)
    ]
    if played:
        numbers = ", ".join(f"G{d.match_number}" for d in played)
        logger.warning(
            "Override of match G%s rejected; downstream already played: %s",
            match.match_number, numbers,
        )
        raise ConflictError(f"Cannot change the winner: downstream match(es) {numbers} already played")

    for d in affected:
        for n in (1, 2):
            team_id = getattr(d, f"team{n}_id")
            if team_id in (old_winner, old_loser):
                d.set_slot(n, PendingSlot(match.id, team_id == old_winner))
        if d.is_if_necessary and d.status == MatchStatus.CANCELLED:
            d.status = MatchStatus.SCHEDULED

    Participant.query.filter(
        Participant.event_id == match.event_id,
        Participant.team_id.in_([old_winner, old_loser]),
    ).update(
        {"is_eliminated": False, "elimination_round": None},
        synchronize_session="fetch",
    )
    session.flush()

    _record_result(match, score, new_winner)
    logger.info(
        "Winner of match G%s changed from team %s to team %s",
        match.match_number, old_winner, new_winner,
    )
    return _advance(session, match)
