from olympiad.extensions import db
from datetime import datetime, timezone
import enum


class EventType(enum.Enum):
    TOURNAMENT = "tournament"
    SCORED = "scored"
    COMBINED_TEAM = "combined_team"


class EventStatus(enum.Enum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    abbreviation = db.Column(db.String(10), nullable=False)
    symbol = db.Column(db.String(16), nullable=True)
    location = db.Column(db.String(200), nullable=True)
    type = db.Column(db.Enum(EventType), nullable=False)
    status = db.Column(
        db.Enum(EventStatus), nullable=False, default=EventStatus.UPCOMING
    )
    year_id = db.Column(db.Integer, db.ForeignKey("years.id"), nullable=False)
    start_time = db.Column(db.DateTime, nullable=True)
    duration_minutes = db.Column(db.Integer, nullable=True)
    # points[i] is awarded to the team finishing in position i + 1
    points = db.Column(db.JSON, nullable=False, default=list)
    final_standings = db.Column(db.JSON, nullable=True)
    combined_team_data = db.Column(db.JSON, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    matches = db.relationship("Match", backref="event", lazy="dynamic")
    participants = db.relationship("Participant", backref="event", lazy="dynamic")
    ratings = db.relationship("EventRating", backref="event", lazy="dynamic")

    __table_args__ = (
        db.UniqueConstraint("year_id", "abbreviation", name="uq_events_year_abbreviation"),
    )

    @property
    def has_bracket(self):
        return self.matches.first() is not None

    def points_for(self, position):
        """Points for a 0-based finishing position (0 when off the table)."""
        table = self.points or []
        return table[position] if position < len(table) else 0

    def __repr__(self):
        return f"<Event {self.abbreviation} ({self.type.value})>"
