from olympiad.extensions import ma
from olympiad.models.event import Event
from marshmallow import Schema, fields, validate


class EventSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Event
        load_instance = True
        include_fk = True

    type = fields.Function(lambda obj: obj.type.value if obj.type else None)
    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    has_bracket = fields.Boolean(dump_only=True)


class CreateEventSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    abbreviation = fields.String(required=True, validate=validate.Length(min=1, max=10))
    type = fields.String(
        required=True,
        validate=validate.OneOf(["tournament", "scored", "combined_team"]),
    )
    symbol = fields.String(load_default=None, validate=validate.Length(max=16))
    location = fields.String(load_default=None, validate=validate.Length(max=200))
    year_id = fields.Integer(load_default=None)
    start_time = fields.DateTime(load_default=None)
    duration_minutes = fields.Integer(load_default=None, validate=validate.Range(min=1))
    points = fields.List(fields.Integer(validate=validate.Range(min=0)), load_default=list)


class FinalStandingsSchema(Schema):
    team_ids = fields.List(
        fields.Integer(), required=True, validate=validate.Length(min=1)
    )


class GenerateCombinedTeamsSchema(Schema):
    team_ids = fields.List(fields.Integer(), load_default=None)


class CombinedScoreSchema(Schema):
    score = fields.List(
        fields.Integer(validate=validate.Range(min=0)),
        required=True,
        validate=validate.Length(equal=2),
    )
    completed = fields.Boolean(load_default=False)
