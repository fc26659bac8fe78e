import pytest

from olympiad.errors import NotFoundError
from olympiad.models.match import Match
from olympiad.services.bracket_generator import generate_bracket
from olympiad.services.bracket_projection import get_bracket
from olympiad.services.match_service import update_match


def _row(bracket, number):
    rows = [
        m
        for section in ("winners_bracket", "losers_bracket")
        for rnd in bracket[section]
        for m in rnd["matches"]
    ] + bracket["finals"]
    return next(r for r in rows if r["match_number"] == number)


@pytest.fixture
def bracket4(grant, make_teams, make_event, seeds_for):
    event = make_event()
    teams = make_teams(4, ratings=[5400, 5000, 5000, 5000])
    generate_bracket(grant, event.id, seeds_for(teams))
    return event, teams


def test_sections_and_labels(bracket4):
    event, _ = bracket4
    bracket = get_bracket(event.id)

    assert bracket["rounds"] == 2
    assert [r["label"] for r in bracket["winners_bracket"]] == ["Winners Round 1", "Winners Final"]
    assert [r["label"] for r in bracket["losers_bracket"]] == ["Losers Round 1", "Losers Final"]
    assert [r["label"] for r in bracket["finals"]] == ["Grand Final", "Grand Final (if necessary)"]
    assert bracket["tournament_complete"] is False
    assert bracket["event_complete"] is False
    assert [p["seed"] for p in bracket["participants"]] == [1, 2, 3, 4]


def test_placeholders_name_teams_or_game_numbers(bracket4):
    event, _ = bracket4
    bracket = get_bracket(event.id)

    g3 = _row(bracket, 3)
    assert g3["team1"] is None
    assert g3["team1_placeholder"] == "Winner of T1/T4"
    assert g3["team2_placeholder"] == "Winner of T2/T3"

    g5 = _row(bracket, 5)
    assert g5["team2_placeholder"] == "Loser of G3"


def test_display_status_and_win_probability(grant, bracket4):
    event, (t1, t2, t3, t4) = bracket4
    bracket = get_bracket(event.id)

    g1 = _row(bracket, 1)
    assert g1["status"] == "scheduled"
    assert g1["team1"]["abbreviation"] == "T1"
    assert g1["team1"]["rating"] == 5400
    assert g1["win_probability"] == {"team1": 91, "team2": 9}

    g2 = _row(bracket, 2)
    assert g2["win_probability"] == {"team1": 50, "team2": 50}

    g3 = _row(bracket, 3)
    assert g3["status"] == "undetermined"
    assert g3["win_probability"] is None

    g1_id = Match.query.filter_by(event_id=event.id, match_number=1).one().id
    update_match(grant, g1_id, [1, 0])
    g1 = _row(get_bracket(event.id), 1)
    assert g1["status"] == "in_progress"
    assert g1["score"] == [1, 0]
    assert g1["win_probability"] is None

    update_match(grant, g1_id, [3, 0], completed=True)
    bracket = get_bracket(event.id)
    g1 = _row(bracket, 1)
    assert g1["status"] == "completed"
    assert g1["winner_id"] == t1.id
    g3 = _row(bracket, 3)
    assert g3["team1"]["id"] == t1.id
    assert g3["team1_placeholder"] is None


def test_unknown_event_or_missing_bracket(make_event):
    with pytest.raises(NotFoundError):
        get_bracket(424242)

    event = make_event()
    with pytest.raises(NotFoundError):
        get_bracket(event.id)
