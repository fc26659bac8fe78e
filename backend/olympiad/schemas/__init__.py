from olympiad.schemas.year import YearSchema, CreateYearSchema
from olympiad.schemas.team import TeamSchema, CreateTeamSchema
from olympiad.schemas.player import (
    PlayerSchema,
    EventRatingSchema,
    CreatePlayerSchema,
    SetRatingSchema,
)
from olympiad.schemas.user import UserSchema, RegisterSchema, LoginSchema
from olympiad.schemas.event import (
    EventSchema,
    CreateEventSchema,
    FinalStandingsSchema,
    GenerateCombinedTeamsSchema,
    CombinedScoreSchema,
)
from olympiad.schemas.match import (
    MatchSchema,
    SeedSchema,
    GenerateBracketSchema,
    UpdateMatchSchema,
)

__all__ = [
    "YearSchema",
    "CreateYearSchema",
    "TeamSchema",
    "CreateTeamSchema",
    "PlayerSchema",
    "EventRatingSchema",
    "CreatePlayerSchema",
    "SetRatingSchema",
    "UserSchema",
    "RegisterSchema",
    "LoginSchema",
    "EventSchema",
    "CreateEventSchema",
    "FinalStandingsSchema",
    "GenerateCombinedTeamsSchema",
    "CombinedScoreSchema",
    "MatchSchema",
    "SeedSchema",
    "GenerateBracketSchema",
    "UpdateMatchSchema",
]
