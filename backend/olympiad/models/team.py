from olympiad.extensions import db
from datetime import datetime, timezone


team_members = db.Table(
    "team_members",
    db.Column("team_id", db.Integer, db.ForeignKey("teams.id"), primary_key=True),
    db.Column("player_id", db.Integer, db.ForeignKey("players.id"), primary_key=True),
)


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    abbreviation = db.Column(db.String(10), nullable=False)
    color = db.Column(db.String(20), nullable=False, default="#6b7280")
    year_id = db.Column(db.Integer, db.ForeignKey("years.id"), nullable=False)
    logo_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    members = db.relationship(
        "Player", secondary=team_members, backref="teams", lazy="selectin"
    )
    participations = db.relationship("Participant", backref="team", lazy="dynamic")

    __table_args__ = (
        db.UniqueConstraint("year_id", "abbreviation", name="uq_teams_year_abbreviation"),
    )

    def __repr__(self):
        return f"<Team {self.abbreviation}>"
