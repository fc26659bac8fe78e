"""Player and team ratings used for win-probability display and projections.

Ratings never decide a match; they are only shown next to scheduled games
and used to project points for events that have not finished yet.
"""
import math
from datetime import datetime, timedelta, timezone

from flask import current_app, has_app_context

from olympiad.models.player import DEFAULT_RATING, RatingHistory


def _setting(name, default):
    if has_app_context():
        return current_app.config.get(name, default)
    return default


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def player_rating(player, event_id=None):
    """Event-specific rating when one exists for ``event_id``, else global."""
    if event_id is not None:
        for event_rating in player.event_ratings:
            if event_rating.event_id == event_id:
                return event_rating.rating
    return player.elo_rating


def average_rating(team, event_id=None, fallback=None):
    """Mean representative rating of the team's roster, rounded to an int."""
    if fallback is None:
        fallback = _setting("DEFAULT_TEAM_RATING", DEFAULT_RATING)
    ratings = [player_rating(p, event_id) for p in team.members]
    if not ratings:
        return fallback
    return _round_half_up(sum(ratings) / len(ratings))


def expected_score(rating_a, rating_b, scale=None):
    """Elo expected score of A against B, in (0, 1)."""
    if scale is None:
        scale = _setting("RATING_SCALE", 400)
    return 1 / (1 + 10 ** ((rating_b - rating_a) / scale))


def win_probability(rating_a, rating_b):
    """Percentage pair ``(a, b)`` that always sums to 100.

    Rounding is done on the favoured side, so swapping the ratings swaps the pair.
    """
    if rating_a < rating_b:
        b, a = win_probability(rating_b, rating_a)
        return a, b
    a = _round_half_up(expected_score(rating_a, rating_b) * 100)
    return a, 100 - a


def rating_trend(player, now=None, window_hours=None):
    """Net rating change over the trailing window (24 hours by default)."""
    if window_hours is None:
        window_hours = _setting("TREND_WINDOW_HOURS", 24)
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(hours=window_hours)

    entries = (
        player.rating_history.filter(RatingHistory.created_at >= since)
        .order_by(RatingHistory.created_at, RatingHistory.id)
        .all()
    )
    if not entries:
        return 0
    return entries[-1].new_rating - entries[0].old_rating


def team_rating_summary(team, event_id=None, now=None):
    members = []
    for player in sorted(team.members, key=lambda p: p.name):
        members.append({
            "player_id": player.id,
            "player_name": player.name,
            "rating": player_rating(player, event_id),
            "trend": rating_trend(player, now=now),
        })

    average_trend = 0
    if members:
        average_trend = _round_half_up(sum(m["trend"] for m in members) / len(members))

    return {
        "team_id": team.id,
        "team_name": team.name,
        "members": members,
        "average_rating": average_rating(team, event_id),
        "average_trend": average_trend,
    }
