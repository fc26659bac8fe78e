from dataclasses import dataclass
from datetime import datetime, timezone
import enum

from olympiad.extensions import db


class MatchStatus(enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    # Display-only: one or both slots are still placeholders. Never stored.
    UNDETERMINED = "undetermined"


FINISHED_STATUSES = (MatchStatus.COMPLETED, MatchStatus.CANCELLED)


@dataclass(frozen=True)
class ResolvedSlot:
    team_id: int


@dataclass(frozen=True)
class PendingSlot:
    """Filled by the winner (or loser) of ``source_match_id`` once it completes."""

    source_match_id: int
    wants_winner: bool


def _slot_check(n):
    return db.CheckConstraint(
        f"(team{n}_id IS NULL) <> (team{n}_from_match_id IS NULL)",
        name=f"team{n}_resolved_xor_pending",
    )


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    round = db.Column(db.Integer, nullable=False)
    match_number = db.Column(db.Integer, nullable=False)
    is_winners_bracket = db.Column(db.Boolean, nullable=False, default=True)
    is_grand_final = db.Column(db.Boolean, nullable=False, default=False)
    is_if_necessary = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(
        db.Enum(MatchStatus), nullable=False, default=MatchStatus.SCHEDULED
    )

    team1_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    team2_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    team1_from_match_id = db.Column(
        db.Integer, db.ForeignKey("matches.id", ondelete="CASCADE"), nullable=True
    )
    team1_is_winner = db.Column(db.Boolean, nullable=True)
    team2_from_match_id = db.Column(
        db.Integer, db.ForeignKey("matches.id", ondelete="CASCADE"), nullable=True
    )
    team2_is_winner = db.Column(db.Boolean, nullable=True)

    winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    team1_score = db.Column(db.Integer, nullable=True)
    team2_score = db.Column(db.Integer, nullable=True)

    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    completed_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    team1 = db.relationship("Team", foreign_keys=[team1_id])
    team2 = db.relationship("Team", foreign_keys=[team2_id])
    winner = db.relationship("Team", foreign_keys=[winner_id])

    __table_args__ = (
        db.UniqueConstraint("event_id", "match_number", name="uq_matches_event_match_number"),
        db.CheckConstraint(
            "(team1_score IS NULL OR team1_score >= 0) AND (team2_score IS NULL OR team2_score >= 0)",
            name="scores_non_negative",
        ),
        _slot_check(1),
        _slot_check(2),
    )

    # ── Slots ────────────────────────────────────────────────────────────

    def slot(self, n):
        """Return slot ``n`` (1 or 2) as a ResolvedSlot or PendingSlot."""
        team_id = getattr(self, f"team{n}_id")
        if team_id is not None:
            return ResolvedSlot(team_id)
        return PendingSlot(
            getattr(self, f"team{n}_from_match_id"),
            bool(getattr(self, f"team{n}_is_winner")),
        )

    def set_slot(self, n, slot):
        if isinstance(slot, ResolvedSlot):
            setattr(self, f"team{n}_id", slot.team_id)
            setattr(self, f"team{n}_from_match_id", None)
            setattr(self, f"team{n}_is_winner", None)
        elif isinstance(slot, PendingSlot):
            setattr(self, f"team{n}_id", None)
            setattr(self, f"team{n}_from_match_id", slot.source_match_id)
            setattr(self, f"team{n}_is_winner", slot.wants_winner)
        else:
            raise TypeError(f"Unknown slot type: {slot!r}")

    @property
    def slots(self):
        return self.slot(1), self.slot(2)

    @property
    def has_both_teams(self):
        return self.team1_id is not None and self.team2_id is not None

    # ── Result ───────────────────────────────────────────────────────────

    @property
    def score(self):
        if self.team1_score is None or self.team2_score is None:
            return None
        return [self.team1_score, self.team2_score]

    @property
    def loser_id(self):
        if self.winner_id is None:
            return None
        return self.team2_id if self.winner_id == self.team1_id else self.team1_id

    @property
    def is_finished(self):
        return self.status in FINISHED_STATUSES

    @property
    def display_status(self):
        """Status as shown to viewers; UNDETERMINED is never persisted."""
        if self.status == MatchStatus.CANCELLED:
            return MatchStatus.CANCELLED
        if self.winner_id is not None:
            return MatchStatus.COMPLETED
        if not self.has_both_teams:
            return MatchStatus.UNDETERMINED
        if self.score is not None:
            return MatchStatus.IN_PROGRESS
        return MatchStatus.SCHEDULED

    def __repr__(self):
        side = "W" if self.is_winners_bracket else "L"
        return f"<Match G{self.match_number} {side}{self.round} {self.team1_id} vs {self.team2_id}>"
