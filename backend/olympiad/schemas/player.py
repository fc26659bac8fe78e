from olympiad.extensions import ma
from olympiad.models.player import Player, EventRating
from marshmallow import Schema, fields, validate


class EventRatingSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = EventRating
        include_fk = True


class PlayerSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Player
        load_instance = True
        include_fk = True

    event_ratings = ma.Nested(EventRatingSchema, many=True, only=("event_id", "rating"), dump_only=True)


class CreatePlayerSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    elo_rating = fields.Integer(load_default=None, validate=validate.Range(min=0))


class SetRatingSchema(Schema):
    rating = fields.Integer(required=True, validate=validate.Range(min=0))
    event_id = fields.Integer(load_default=None)
