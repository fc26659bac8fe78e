"""Double-elimination bracket generation.

The whole power-of-two bracket is first planned in memory, with byes standing
in for missing seeds. Byes are then folded away: a match with a bye slot is
dropped and whatever would have come out of it is wired straight into the
matches that consumed it. Only the reduced plan is persisted.
"""
import logging
from dataclasses import dataclass, field

from olympiad.auth.capability import require_admin
from olympiad.bus import event_bus
from olympiad.errors import ConflictError, NotFoundError, ValidationError
from olympiad.models.event import Event, EventStatus, EventType
from olympiad.models.match import Match, MatchStatus, PendingSlot, ResolvedSlot
from olympiad.models.participant import Participant
from olympiad.models.team import Team
from olympiad.transaction import atomic

logger = logging.getLogger(__name__)


# ── Plan ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Seeded:
    team_id: int


@dataclass(frozen=True)
class FromMatch:
    key: str
    wants_winner: bool


class _Bye:
    def __repr__(self):
        return "BYE"


BYE = _Bye()


@dataclass
class PlannedMatch:
    key: str
    round: int
    position: int
    is_winners_bracket: bool
    sources: list
    is_grand_final: bool = False
    is_if_necessary: bool = False
    match_number: int = None
    depth: int = field(default=0, repr=False)


def bracket_rounds(team_count):
    """Winners-bracket rounds before the grand final: ceil(log2(n))."""
    return max(1, (team_count - 1).bit_length())


def seeding_order(size):
    """Seeds in bracket line order, e.g. 8 -> [1, 8, 4, 5, 2, 7, 3, 6].

    Adjacent entries meet in round one and seeds 1 and 2 sit in opposite
    halves, so the top seeds can only meet in the final.
    """
    order = [1]
    while len(order) < size:
        span = len(order) * 2 + 1
        order = [s for seed in order for s in (seed, span - seed)]
    return order


def plan_double_elimination(team_ids):
    """Plan a double-elimination bracket for ``team_ids`` given in seed order.

    Returns the list of ``PlannedMatch`` that survive bye reduction, numbered
    in playable order. Sources are ``Seeded`` or ``FromMatch``.
    """
    if len(team_ids) < 2:
        raise ValidationError("A bracket needs at least 2 teams")

    rounds = bracket_rounds(len(team_ids))
    size = 1 << rounds
    entrants = [Seeded(t) for t in team_ids] + [BYE] * (size - len(team_ids))
    order = seeding_order(size)

    planned = []

    def add(key, round_, position, winners, sources, **flags):
        m = PlannedMatch(key, round_, position, winners, list(sources), **flags)
        planned.append(m)
        return m

    def pairs(matches, wants_winner):
        for i in range(0, len(matches), 2):
            yield (
                FromMatch(matches[i].key, wants_winner),
                FromMatch(matches[i + 1].key, wants_winner),
            )

    # Winners bracket
    current = [
        add(f"W1-{i + 1}", 1, i + 1, True,
            (entrants[order[2 * i] - 1], entrants[order[2 * i + 1] - 1]))
        for i in range(size // 2)
    ]
    winners_rounds = [current]
    for r in range(2, rounds + 1):
        current = [
            add(f"W{r}-{i + 1}", r, i + 1, True, sources)
            for i, sources in enumerate(pairs(current, True))
        ]
        winners_rounds.append(current)
    winners_final = current[0]

    # Losers bracket
    if rounds >= 2:
        lr = 1
        current = [
            add(f"L1-{i + 1}", 1, i + 1, False, sources)
            for i, sources in enumerate(pairs(winners_rounds[0], False))
        ]
        for k in range(2, rounds + 1):
            drops = winners_rounds[k - 1]
            if k % 2 == 0:
                drops = list(reversed(drops))
            lr += 1
            current = [
                add(f"L{lr}-{i + 1}", lr, i + 1, False,
                    (FromMatch(prev.key, True), FromMatch(drop.key, False)))
                for i, (prev, drop) in enumerate(zip(current, drops))
            ]
            if k < rounds:
                lr += 1
                current = [
                    add(f"L{lr}-{i + 1}", lr, i + 1, False, sources)
                    for i, sources in enumerate(pairs(current, True))
                ]
        losers_champion = FromMatch(current[0].key, True)
    else:
        losers_champion = FromMatch(winners_final.key, False)

    grand_final = add(
        "GF", rounds + 1, 1, True,
        (FromMatch(winners_final.key, True), losers_champion),
        is_grand_final=True,
    )
    add(
        "GF2", rounds + 2, 1, True,
        (FromMatch(grand_final.key, True), FromMatch(grand_final.key, False)),
        is_if_necessary=True,
    )

    return _number(_fold_byes(planned))


def _fold_byes(planned):
    outcomes = {}
    kept = []

    def resolve(source):
        if isinstance(source, FromMatch):
            return outcomes.get((source.key, source.wants_winner), source)
        return source

    for m in planned:
        a, b = (resolve(s) for s in m.sources)
        if a is BYE or b is BYE:
            outcomes[(m.key, True)] = b if a is BYE else a
            outcomes[(m.key, False)] = BYE
            continue
        m.sources = [a, b]
        kept.append(m)
    return kept


def _number(kept):
    by_key = {m.key: m for m in kept}
    for m in kept:
        feeders = [by_key[s.key].depth for s in m.sources if isinstance(s, FromMatch)]
        m.depth = 1 + max(feeders, default=0)

    kept.sort(key=lambda m: (m.depth, not m.is_winners_bracket, m.round, m.position))
    for number, m in enumerate(kept, start=1):
        m.match_number = number
    return kept


# ── Persistence ──────────────────────────────────────────────────────────────

def _validated_seeds(seeds):
    if len(seeds) < 2:
        raise ValidationError("A bracket needs at least 2 seeded teams")

    team_ids = [s["team_id"] for s in seeds]
    if len(set(team_ids)) != len(team_ids):
        raise ValidationError("A team can only be seeded once")

    numbers = sorted(s["seed"] for s in seeds)
    if len(set(numbers)) != len(numbers):
        raise ValidationError("Seeds must be unique")
    if numbers != list(range(1, len(seeds) + 1)):
        raise ValidationError(f"Seeds must be contiguous from 1 to {len(seeds)}")

    return sorted(seeds, key=lambda s: s["seed"])


def generate_bracket(actor, event_id, seeds):
    """Create all participants and matches for a tournament event.

    ``seeds`` is a list of ``{"team_id": int, "seed": int}``. The event moves
    to IN_PROGRESS in the same transaction.
    """
    require_admin(actor)
    ordered = _validated_seeds(seeds)

    with atomic() as session:
        event = session.get(Event, event_id, with_for_update=True)
        if not event:
            raise NotFoundError("Event not found")
        if event.type != EventType.TOURNAMENT:
            raise ValidationError("Brackets can only be generated for tournament events")
        if event.has_bracket:
            raise ConflictError("A bracket already exists for this event; reset it first")
        if event.status != EventStatus.UPCOMING:
            raise ConflictError("Brackets can only be generated for upcoming events")

        team_ids = [s["team_id"] for s in ordered]
        teams = {t.id: t for t in Team.query.filter(Team.id.in_(team_ids)).all()}
        missing = [tid for tid in team_ids if tid not in teams]
        if missing:
            raise NotFoundError(f"Team(s) not found: {', '.join(map(str, missing))}")
        foreign = [t.abbreviation for t in teams.values() if t.year_id != event.year_id]
        if foreign:
            raise ValidationError(
                f"Team(s) not registered for this event's year: {', '.join(sorted(foreign))}"
            )

        participants = []
        for s in ordered:
            p = Participant(event_id=event.id, team_id=s["team_id"], seed=s["seed"])
            session.add(p)
            participants.append(p)

        plan = plan_double_elimination(team_ids)
        matches = _persist_plan(session, event, plan)

        event.status = EventStatus.IN_PROGRESS

    logger.info(
        "Bracket generated for event %s by user %s: %d teams, %d matches",
        event.id, actor.user_id, len(participants), len(matches),
    )
    event_bus.publish("bracket_generated", {
        "event_id": event.id,
        "teams": len(participants),
        "matches": len(matches),
    })

    return {
        "event": event,
        "participants": participants,
        "matches": matches,
        "rounds": bracket_rounds(len(participants)),
    }


def _persist_plan(session, event, plan):
    # Plan order guarantees every feeder has a lower number, so each feeder
    # row is flushed (and has an id) before anything references it.
    ids = {}
    matches = []
    for planned in plan:
        m = Match(
            event_id=event.id,
            round=planned.round,
            match_number=planned.match_number,
            is_winners_bracket=planned.is_winners_bracket,
            is_grand_final=planned.is_grand_final,
            is_if_necessary=planned.is_if_necessary,
            status=MatchStatus.SCHEDULED,
        )
        for n, source in enumerate(planned.sources, start=1):
            if isinstance(source, Seeded):
                m.set_slot(n, ResolvedSlot(source.team_id))
            else:
                m.set_slot(n, PendingSlot(ids[source.key], source.wants_winner))
        session.add(m)
        session.flush()
        ids[planned.key] = m.id
        matches.append(m)
    return matches
