import logging

from olympiad.auth.capability import require_admin
from olympiad.errors import ConflictError
from olympiad.models.year import Year
from olympiad.transaction import atomic

logger = logging.getLogger(__name__)


def create_year(actor, year):
    """Add a year and make it the active one."""
    require_admin(actor)

    with atomic() as session:
        if Year.query.filter_by(year=year).first():
            raise ConflictError(f"Year {year} already exists")
        # Only one year is active at a time; the newest one wins
        Year.query.filter_by(is_active=True).update({"is_active": False})
        created = Year(year=year, is_active=True)
        session.add(created)

    logger.info("Year %s created and activated by user %s", year, actor.user_id)
    return created


def list_years():
    return Year.query.order_by(Year.year.desc()).all()
