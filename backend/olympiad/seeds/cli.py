import random

import click
from flask.cli import AppGroup
from olympiad.extensions import db
from olympiad.models.event import Event, EventType
from olympiad.models.player import Player
from olympiad.models.team import Team
from olympiad.models.user import User, UserRole
from olympiad.models.year import Year
from olympiad.seeds.data import (
    DEFAULT_ADMIN,
    DEMO_YEAR,
    EVENTS,
    FIRST_NAMES,
    LAST_NAMES,
    PLAYERS_PER_TEAM,
    TEAMS,
)

seed_cli = AppGroup("seed", help="Seed database commands.")


def _ensure_admin():
    user = User.query.filter_by(email=DEFAULT_ADMIN["email"]).first()
    if user:
        return user, False
    user = User(
        email=DEFAULT_ADMIN["email"],
        name=DEFAULT_ADMIN["name"],
        role=UserRole.ADMIN,
    )
    user.set_password(DEFAULT_ADMIN["password"])
    db.session.add(user)
    return user, True


@seed_cli.command("admin")
def seed_admin():
    """Seed the default admin user."""
    _, created = _ensure_admin()
    db.session.commit()
    if created:
        click.echo(f"Created admin user: {DEFAULT_ADMIN['email']}")
    else:
        click.echo("Admin user already exists.")


def _unique_names(rng, count):
    pool = [f"{first} {last}" for first in FIRST_NAMES for last in LAST_NAMES]
    existing = {name for (name,) in db.session.query(Player.name).all()}
    return rng.sample([n for n in pool if n not in existing], count)


@seed_cli.command("demo")
@click.option("--seed", "rng_seed", type=int, default=None, help="Random seed for ratings.")
def seed_demo(rng_seed):
    """Seed a demo year with rostered teams and one event of each type."""
    rng = random.Random(rng_seed)
    _ensure_admin()

    year = Year.query.filter_by(year=DEMO_YEAR).first()
    if year:
        click.echo(f"Year {DEMO_YEAR} already exists; nothing to do.")
        return

    Year.query.filter_by(is_active=True).update({"is_active": False})
    year = Year(year=DEMO_YEAR, is_active=True)
    db.session.add(year)
    db.session.flush()

    names = _unique_names(rng, len(TEAMS) * PLAYERS_PER_TEAM)
    for i, (name, abbreviation, color) in enumerate(TEAMS):
        members = []
        for player_name in names[i * PLAYERS_PER_TEAM:(i + 1) * PLAYERS_PER_TEAM]:
            player = Player(name=player_name, elo_rating=rng.randint(4600, 5400))
            db.session.add(player)
            members.append(player)
        db.session.add(Team(
            name=name,
            abbreviation=abbreviation,
            color=color,
            year_id=year.id,
            members=members,
        ))

    for data in EVENTS:
        db.session.add(Event(
            name=data["name"],
            abbreviation=data["abbreviation"],
            symbol=data["symbol"],
            type=EventType(data["type"]),
            location=data["location"],
            duration_minutes=data["duration_minutes"],
            points=data["points"],
            year_id=year.id,
        ))

    db.session.commit()
    click.echo(
        f"Seeded {DEMO_YEAR}: {len(TEAMS)} teams, "
        f"{len(TEAMS) * PLAYERS_PER_TEAM} players, {len(EVENTS)} events."
    )
