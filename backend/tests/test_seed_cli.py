from olympiad.models.event import Event
from olympiad.models.player import Player
from olympiad.models.team import Team
from olympiad.models.user import User, UserRole
from olympiad.models.year import Year
from olympiad.seeds.data import DEFAULT_ADMIN, EVENTS, PLAYERS_PER_TEAM, TEAMS


def test_seed_admin_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed", "admin"])
    assert result.exit_code == 0
    assert "Created admin user" in result.output

    result = runner.invoke(args=["seed", "admin"])
    assert "already exists" in result.output

    admin = User.query.filter_by(email=DEFAULT_ADMIN["email"]).one()
    assert admin.role == UserRole.ADMIN


def test_seed_demo(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed", "demo", "--seed", "7"])
    assert result.exit_code == 0, result.output

    year = Year.active()
    assert year is not None
    assert Team.query.filter_by(year_id=year.id).count() == len(TEAMS)
    assert Player.query.count() == len(TEAMS) * PLAYERS_PER_TEAM
    assert Event.query.filter_by(year_id=year.id).count() == len(EVENTS)
    assert all(len(t.members) == PLAYERS_PER_TEAM for t in Team.query)

    result = runner.invoke(args=["seed", "demo"])
    assert "nothing to do" in result.output
