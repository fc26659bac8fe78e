from olympiad.models.year import Year
from olympiad.models.team import Team, team_members
from olympiad.models.player import Player, EventRating, RatingHistory
from olympiad.models.event import Event, EventType, EventStatus
from olympiad.models.participant import Participant
from olympiad.models.match import Match, MatchStatus, ResolvedSlot, PendingSlot
from olympiad.models.user import User, UserRole

__all__ = [
    "Year",
    "Team",
    "team_members",
    "Player",
    "EventRating",
    "RatingHistory",
    "Event",
    "EventType",
    "EventStatus",
    "Participant",
    "Match",
    "MatchStatus",
    "ResolvedSlot",
    "PendingSlot",
    "User",
    "UserRole",
]
