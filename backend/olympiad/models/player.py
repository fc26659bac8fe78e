from olympiad.extensions import db
from datetime import datetime, timezone

DEFAULT_RATING = 5000


class Player(db.Model):
    __tablename__ = "players"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    elo_rating = db.Column(db.Integer, nullable=False, default=DEFAULT_RATING)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    event_ratings = db.relationship(
        "EventRating", backref="player", lazy="selectin", cascade="all, delete-orphan"
    )
    rating_history = db.relationship(
        "RatingHistory",
        backref="player",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="RatingHistory.created_at",
    )

    def __repr__(self):
        return f"<Player {self.name}>"


class EventRating(db.Model):
    """A player's rating for one specific event, overriding the global rating."""

    __tablename__ = "event_ratings"

    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey("players.id"), nullable=False)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    rating = db.Column(db.Integer, nullable=False, default=DEFAULT_RATING)

    __table_args__ = (
        db.UniqueConstraint("player_id", "event_id", name="uq_event_ratings_player_event"),
    )

    def __repr__(self):
        return f"<EventRating player={self.player_id} event={self.event_id} {self.rating}>"


class RatingHistory(db.Model):
    __tablename__ = "rating_history"

    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey("players.id"), nullable=False)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=True)
    old_rating = db.Column(db.Integer, nullable=False)
    new_rating = db.Column(db.Integer, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<RatingHistory {self.player_id}: {self.old_rating} -> {self.new_rating}>"
