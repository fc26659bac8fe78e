from olympiad.models.event import EventType
from olympiad.models.match import Match


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_list_years_and_teams(client, make_teams):
    make_teams(2)

    resp = client.get("/api/years")
    assert resp.status_code == 200
    assert resp.get_json()["years"][0]["year"] == 2024

    resp = client.get("/api/teams")
    assert resp.status_code == 200
    teams = resp.get_json()["teams"]
    assert [t["abbreviation"] for t in teams] == ["T1", "T2"]
    assert teams[0]["members"][0]["name"] == "Player 1"


def test_team_detail_includes_rating_summary(client, make_teams):
    (team,) = make_teams(1, ratings=[5250])
    resp = client.get(f"/api/teams/{team.id}")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["team"]["abbreviation"] == "T1"
    assert data["rating"]["average_rating"] == 5250


def test_missing_team_uses_service_error_shape(client, year):
    resp = client.get("/api/teams/999")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_create_team_requires_admin(client, viewer_headers, year):
    resp = client.post(
        "/api/teams",
        headers=viewer_headers,
        json={"name": "Red", "abbreviation": "RED"},
    )
    assert resp.status_code == 403


def test_create_team_and_event(client, admin_headers, year):
    resp = client.post(
        "/api/teams",
        headers=admin_headers,
        json={"name": "Red", "abbreviation": "RED", "color": "#ff0000"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["team"]["color"] == "#ff0000"

    resp = client.post(
        "/api/events",
        headers=admin_headers,
        json={"name": "Beer Pong", "abbreviation": "BP", "type": "tournament", "points": [10, 5]},
    )
    assert resp.status_code == 201
    event = resp.get_json()["event"]
    assert event["type"] == "tournament"
    assert event["status"] == "upcoming"

    resp = client.get("/api/events?type=tournament")
    assert [e["abbreviation"] for e in resp.get_json()["events"]] == ["BP"]


def test_create_event_rejects_bad_body(client, admin_headers, year):
    resp = client.post(
        "/api/events",
        headers=admin_headers,
        json={"name": "Nope", "abbreviation": "NO", "type": "relay"},
    )
    assert resp.status_code == 400
    assert "type" in resp.get_json()["messages"]


def test_unknown_event_filter_is_bad_request(client, year):
    resp = client.get("/api/events?type=relay")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"
    assert "relay" in resp.get_json()["message"]

    resp = client.get("/api/events?status=postponed")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


class TestBracketEndpoints:
    def _generate(self, client, headers, event, teams):
        return client.post(
            f"/api/events/{event.id}/bracket",
            headers=headers,
            json={"seeds": [{"team_id": t.id, "seed": i + 1} for i, t in enumerate(teams)]},
        )

    def test_generate_and_fetch(self, client, admin_headers, make_teams, make_event):
        event = make_event()
        teams = make_teams(4)

        resp = self._generate(client, admin_headers, event, teams)
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["total_matches"] == 7
        assert data["rounds"] == 2

        resp = client.get(f"/api/events/{event.id}/bracket")
        assert resp.status_code == 200
        bracket = resp.get_json()["bracket"]
        assert bracket["event_status"] == "in_progress"
        first = bracket["winners_bracket"][0]["matches"][0]
        assert first["team1"]["abbreviation"] == "T1"
        assert first["team2"]["abbreviation"] == "T4"

    def test_viewer_cannot_generate(self, client, viewer_headers, make_teams, make_event):
        event = make_event()
        resp = self._generate(client, viewer_headers, event, make_teams(4))
        assert resp.status_code == 403
        assert Match.query.count() == 0

    def test_anonymous_cannot_generate(self, client, make_teams, make_event):
        event = make_event()
        resp = self._generate(client, {}, event, make_teams(4))
        assert resp.status_code == 401

    def test_second_generation_conflicts(self, client, admin_headers, make_teams, make_event):
        event = make_event()
        teams = make_teams(4)
        self._generate(client, admin_headers, event, teams)
        resp = self._generate(client, admin_headers, event, teams)
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "conflict"

    def test_bad_seeds(self, client, admin_headers, make_teams, make_event):
        event = make_event()
        a, b = make_teams(2)
        resp = client.post(
            f"/api/events/{event.id}/bracket",
            headers=admin_headers,
            json={"seeds": [{"team_id": a.id, "seed": 1}, {"team_id": b.id, "seed": 3}]},
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "validation_error"

    def test_bracket_of_unknown_event(self, client):
        resp = client.get("/api/events/9999/bracket")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "not_found"

    def test_update_match(self, client, admin_headers, make_teams, make_event):
        event = make_event()
        teams = make_teams(4)
        self._generate(client, admin_headers, event, teams)
        g1 = Match.query.filter_by(event_id=event.id, match_number=1).one()

        resp = client.put(
            f"/api/matches/{g1.id}",
            headers=admin_headers,
            json={"score": [3, 1], "completed": True},
        )
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["match"]["status"] == "completed"
        assert data["match"]["winner_id"] == teams[0].id
        assert sorted(m["match_number"] for m in data["propagated"]) == [3, 4]
        assert data["event_completed"] is False

        resp = client.put(
            f"/api/matches/{g1.id}",
            headers=admin_headers,
            json={"score": [4, 1], "completed": True},
        )
        assert resp.status_code == 409

    def test_update_match_rejects_tie(self, client, admin_headers, make_teams, make_event):
        event = make_event()
        self._generate(client, admin_headers, event, make_teams(2))
        g1 = Match.query.filter_by(event_id=event.id, match_number=1).one()
        resp = client.put(
            f"/api/matches/{g1.id}",
            headers=admin_headers,
            json={"score": [1, 1], "completed": True},
        )
        assert resp.status_code == 400

    def test_reset_needs_confirmation(self, client, admin_headers, make_teams, make_event):
        event = make_event()
        self._generate(client, admin_headers, event, make_teams(4))

        resp = client.delete(f"/api/events/{event.id}/bracket", headers=admin_headers)
        assert resp.status_code == 400
        assert Match.query.filter_by(event_id=event.id).count() == 7

        resp = client.delete(f"/api/events/{event.id}/bracket?confirm=true", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["event"]["status"] == "upcoming"
        assert Match.query.filter_by(event_id=event.id).count() == 0

    def test_cancel_match_reports_dependents(self, client, admin_headers, make_teams, make_event):
        event = make_event()
        self._generate(client, admin_headers, event, make_teams(4))
        g1 = Match.query.filter_by(event_id=event.id, match_number=1).one()

        resp = client.post(f"/api/matches/{g1.id}/cancel", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["match"]["status"] == "cancelled"
        assert [m["match_number"] for m in data["cancelled"]] == [3, 4, 5, 6, 7]
        assert data["event_completed"] is False


class TestCombinedEndpoints:
    def test_draw_score_and_complete(self, client, admin_headers, make_teams, make_event):
        make_teams(4)
        event = make_event(EventType.COMBINED_TEAM, abbreviation="TOW")

        resp = client.post(f"/api/events/{event.id}/combined-team", headers=admin_headers)
        assert resp.status_code == 201
        combined = resp.get_json()["combined_team"]
        assert combined["status"] == "SCHEDULED"

        resp = client.put(
            f"/api/events/{event.id}/combined-team/score",
            headers=admin_headers,
            json={"score": [2, 1], "completed": True},
        )
        assert resp.status_code == 200
        combined = resp.get_json()["combined_team"]
        assert combined["status"] == "COMPLETED"
        assert combined["winner"] == "team1"

        resp = client.get(f"/api/events/{event.id}")
        assert resp.get_json()["event"]["status"] == "completed"

    def test_wrong_event_type(self, client, make_event):
        event = make_event()
        resp = client.get(f"/api/events/{event.id}/combined-team")
        assert resp.status_code == 400


def test_standings_endpoint(client, admin_headers, make_teams, make_event):
    a, b = make_teams(2)
    event = make_event(EventType.SCORED, abbreviation="TRV", points=[10, 5])

    resp = client.post(
        f"/api/events/{event.id}/final-standings",
        headers=admin_headers,
        json={"team_ids": [b.id, a.id]},
    )
    assert resp.status_code == 200

    resp = client.get("/api/standings")
    assert resp.status_code == 200
    rows = resp.get_json()["standings"]
    assert [(r["team_abbreviation"], r["earned_points"]) for r in rows] == [("T2", 10), ("T1", 5)]


def test_set_player_rating(client, admin_headers, make_teams):
    (team,) = make_teams(1)
    player_id = team.members[0].id
    resp = client.put(
        f"/api/players/{player_id}/rating",
        headers=admin_headers,
        json={"rating": 5100},
    )
    assert resp.status_code == 200
    assert resp.get_json()["player"]["elo_rating"] == 5100


def test_create_year_activates_it(client, admin_headers, year):
    resp = client.post("/api/years", headers=admin_headers, json={"year": 2025})
    assert resp.status_code == 201
    assert resp.get_json()["year"]["is_active"] is True

    years = client.get("/api/years").get_json()["years"]
    assert [(y["year"], y["is_active"]) for y in years] == [(2025, True), (2024, False)]

    resp = client.post("/api/years", headers=admin_headers, json={"year": 2025})
    assert resp.status_code == 409
