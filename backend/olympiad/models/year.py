from olympiad.extensions import db
from datetime import datetime, timezone


class Year(db.Model):
    __tablename__ = "years"

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, nullable=False, unique=True)
    is_active = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    teams = db.relationship("Team", backref="year", lazy="dynamic")
    events = db.relationship("Event", backref="year", lazy="dynamic")

    @classmethod
    def active(cls):
        return cls.query.filter_by(is_active=True).first()

    def __repr__(self):
        return f"<Year {self.year}>"
