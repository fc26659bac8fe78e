"""Overall points table across all events of a year."""
from olympiad.errors import NotFoundError
from olympiad.extensions import db
from olympiad.models.event import Event, EventStatus, EventType
from olympiad.models.player import DEFAULT_RATING
from olympiad.models.team import Team
from olympiad.models.year import Year


def _event_average(team, event_id):
    """Roster average using only ratings for this event; unrated members count as the default."""
    ratings = []
    for player in team.members:
        rating = next(
            (r.rating for r in player.event_ratings if r.event_id == event_id),
            DEFAULT_RATING,
        )
        ratings.append(rating)
    return sum(ratings) / len(ratings) if ratings else None


def projected_order(event, teams):
    """Teams ranked by event rating, cut to the size of the points table."""
    ranked = []
    for team in teams:
        average = _event_average(team, event.id)
        if average is not None:
            ranked.append((average, team))
    ranked.sort(key=lambda pair: pair[0], reverse=True)
    return [team for _, team in ranked[: len(event.points or [])]]


def _result(event, position, points, projected):
    return {
        "event_id": event.id,
        "event_name": event.name,
        "event_symbol": event.symbol,
        "event_abbreviation": event.abbreviation,
        "points": points,
        "position": position + 1,
        "is_projected": projected,
    }


def overall_standings(year_id=None):
    """Earned and projected points per team.

    Completed events pay out ``points[position]`` by their final standings.
    Every other event is projected from event ratings. Rows are sorted by
    earned points, then by earned plus projected.
    """
    if year_id is None:
        year = Year.active()
    else:
        year = db.session.get(Year, year_id)
    if not year:
        raise NotFoundError("Year not found")

    teams = Team.query.filter_by(year_id=year.id).order_by(Team.id).all()
    events = (
        Event.query.filter_by(year_id=year.id)
        .order_by(Event.start_time.is_(None), Event.start_time, Event.id)
        .all()
    )

    rows = {
        t.id: {
            "team_id": t.id,
            "team_name": t.name,
            "team_abbreviation": t.abbreviation,
            "team_color": t.color,
            "team_logo": t.logo_url,
            "earned_points": 0,
            "projected_points": 0,
            "first_place_finishes": 0,
            "second_place_finishes": 0,
            "event_results": [],
        }
        for t in teams
    }

    for event in events:
        if event.status == EventStatus.COMPLETED and event.final_standings:
            for position, team_id in enumerate(event.final_standings):
                row = rows.get(team_id)
                if row is None:
                    continue
                points = event.points_for(position)
                row["earned_points"] += points

                if event.type == EventType.COMBINED_TEAM:
                    if position < 2:
                        row["first_place_finishes"] += 1
                    else:
                        row["second_place_finishes"] += 1
                elif position == 0:
                    row["first_place_finishes"] += 1
                elif position == 1:
                    row["second_place_finishes"] += 1

                row["event_results"].append(_result(event, position, points, False))
        else:
            for position, team in enumerate(projected_order(event, teams)):
                row = rows[team.id]
                points = event.points_for(position)
                row["projected_points"] += points
                row["event_results"].append(_result(event, position, points, True))

    return sorted(
        rows.values(),
        key=lambda r: (r["earned_points"], r["earned_points"] + r["projected_points"]),
        reverse=True,
    )
