from olympiad.extensions import db
from datetime import datetime, timezone


class Participant(db.Model):
    """A seeded team in a tournament event."""

    __tablename__ = "participants"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    seed = db.Column(db.Integer, nullable=False)
    is_eliminated = db.Column(db.Boolean, nullable=False, default=False)
    elimination_round = db.Column(db.Integer, nullable=True)
    final_position = db.Column(db.Integer, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        db.UniqueConstraint("event_id", "seed", name="uq_participants_event_seed"),
        db.UniqueConstraint("event_id", "team_id", name="uq_participants_event_team"),
    )

    def __repr__(self):
        return f"<Participant event={self.event_id} team={self.team_id} seed={self.seed}>"
