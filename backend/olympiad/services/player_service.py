import logging

from olympiad.auth.capability import require_admin
from olympiad.errors import ConflictError, NotFoundError
from olympiad.models.event import Event
from olympiad.models.player import DEFAULT_RATING, EventRating, Player, RatingHistory
from olympiad.transaction import atomic

logger = logging.getLogger(__name__)


def create_player(actor, data):
    require_admin(actor)

    with atomic() as session:
        if Player.query.filter_by(name=data["name"]).first():
            raise ConflictError(f"Player {data['name']} already exists")
        player = Player(
            name=data["name"],
            elo_rating=data.get("elo_rating") or DEFAULT_RATING,
        )
        session.add(player)

    logger.info("Player %s created by user %s", player.name, actor.user_id)
    return player


def list_players(active_only=True):
    query = Player.query
    if active_only:
        query = query.filter_by(is_active=True)
    return query.order_by(Player.elo_rating.desc(), Player.name).all()


def set_rating(actor, player_id, rating, event_id=None):
    """Change a player's global rating, or their rating for one event.

    Every change is written to the rating history, which feeds the trend.
    """
    require_admin(actor)

    with atomic() as session:
        player = session.get(Player, player_id, with_for_update=True)
        if not player:
            raise NotFoundError("Player not found")

        if event_id is None:
            old = player.elo_rating
            player.elo_rating = rating
        else:
            if not session.get(Event, event_id):
                raise NotFoundError("Event not found")
            current = next((r for r in player.event_ratings if r.event_id == event_id), None)
            if current is None:
                current = EventRating(event_id=event_id, rating=player.elo_rating)
                player.event_ratings.append(current)
            old = current.rating
            current.rating = rating

        session.add(RatingHistory(
            player=player, event_id=event_id, old_rating=old, new_rating=rating
        ))

    logger.info("Rating of %s changed %s -> %s (event %s)", player.name, old, rating, event_id)
    return player
