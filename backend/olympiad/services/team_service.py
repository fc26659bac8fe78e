import logging

from olympiad.auth.capability import require_admin
from olympiad.errors import ConflictError, NotFoundError, ValidationError
from olympiad.extensions import db
from olympiad.models.player import Player
from olympiad.models.team import Team
from olympiad.models.year import Year
from olympiad.transaction import atomic

logger = logging.getLogger(__name__)


def create_team(actor, data):
    require_admin(actor)

    with atomic() as session:
        year = session.get(Year, data["year_id"]) if data.get("year_id") else Year.active()
        if not year:
            raise NotFoundError("Year not found")

        if Team.query.filter_by(year_id=year.id, abbreviation=data["abbreviation"]).first():
            raise ConflictError(f"Abbreviation {data['abbreviation']} is already taken for {year.year}")

        member_ids = data.get("member_ids") or []
        members = Player.query.filter(Player.id.in_(member_ids)).all() if member_ids else []
        if len(members) != len(set(member_ids)):
            raise ValidationError("Unknown player in member_ids")

        team = Team(
            name=data["name"],
            abbreviation=data["abbreviation"],
            year_id=year.id,
            logo_url=data.get("logo_url"),
            members=members,
        )
        if data.get("color"):
            team.color = data["color"]
        session.add(team)

    logger.info("Team %s created by user %s", team.abbreviation, actor.user_id)
    return team


def get_team(team_id):
    team = db.session.get(Team, team_id)
    if not team:
        raise NotFoundError("Team not found")
    return team


def list_teams(year_id=None):
    query = Team.query
    if year_id is None:
        year = Year.active()
        year_id = year.id if year else None
    if year_id is not None:
        query = query.filter_by(year_id=year_id)
    return query.order_by(Team.name).all()
