import os
import pytest

os.environ["FLASK_ENV"] = "testing"

from olympiad import create_app
from olympiad.auth.capability import AdminGrant
from olympiad.extensions import db as _db
from olympiad.models.event import Event, EventType
from olympiad.models.player import Player
from olympiad.models.team import Team
from olympiad.models.user import User, UserRole
from olympiad.models.year import Year

ADMIN_EMAIL = "testadmin@olympiad.local"
ADMIN_PASSWORD = "Admin@2024"
VIEWER_EMAIL = "viewer@olympiad.local"
VIEWER_PASSWORD = "Viewer@2024"


@pytest.fixture(scope="session")
def app():
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def tables(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(email, password, role):
    user = User(email=email, name=email.split("@")[0].title(), role=role)
    user.set_password(password)
    _db.session.add(user)
    _db.session.commit()
    return user


def _login(client, email, password):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    token = resp.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(app):
    return _make_user(ADMIN_EMAIL, ADMIN_PASSWORD, UserRole.ADMIN)


@pytest.fixture
def admin_headers(client, admin_user):
    return _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def viewer_user(app):
    return _make_user(VIEWER_EMAIL, VIEWER_PASSWORD, UserRole.VIEWER)


@pytest.fixture
def viewer_headers(client, viewer_user):
    return _login(client, VIEWER_EMAIL, VIEWER_PASSWORD)


@pytest.fixture
def grant(admin_user):
    return AdminGrant(user_id=admin_user.id)


@pytest.fixture
def year(app):
    y = Year(year=2024, is_active=True)
    _db.session.add(y)
    _db.session.commit()
    return y


@pytest.fixture
def make_teams(year):
    """Factory: ``make_teams(4)`` -> teams T1..T4 with one player each."""

    def _make(count, ratings=None):
        teams = []
        offset = Team.query.count()
        for i in range(count):
            n = offset + i + 1
            rating = ratings[i] if ratings else 5000
            player = Player(name=f"Player {n}", elo_rating=rating)
            team = Team(
                name=f"Team {n}",
                abbreviation=f"T{n}",
                year_id=year.id,
                members=[player],
            )
            _db.session.add(team)
            teams.append(team)
        _db.session.commit()
        return teams

    return _make


@pytest.fixture
def make_event(year):
    def _make(event_type=EventType.TOURNAMENT, abbreviation="EVT", points=None):
        event = Event(
            name=f"Event {abbreviation}",
            abbreviation=abbreviation,
            type=event_type,
            year_id=year.id,
            points=points if points is not None else [100, 75, 50, 25],
        )
        _db.session.add(event)
        _db.session.commit()
        return event

    return _make


@pytest.fixture
def seeds_for():
    def _seeds(teams):
        return [{"team_id": t.id, "seed": i + 1} for i, t in enumerate(teams)]

    return _seeds
