from olympiad.extensions import ma
from olympiad.models.match import Match
from marshmallow import Schema, fields, validate


class MatchSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Match
        load_instance = True
        include_fk = True

    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    display_status = fields.Function(lambda obj: obj.display_status.value)
    team1 = ma.Nested("TeamSchema", only=("id", "name", "abbreviation", "color"), dump_only=True)
    team2 = ma.Nested("TeamSchema", only=("id", "name", "abbreviation", "color"), dump_only=True)


class SeedSchema(Schema):
    team_id = fields.Integer(required=True)
    seed = fields.Integer(required=True, validate=validate.Range(min=1))


class GenerateBracketSchema(Schema):
    seeds = fields.List(fields.Nested(SeedSchema), required=True)


class UpdateMatchSchema(Schema):
    score = fields.List(
        fields.Integer(validate=validate.Range(min=0)),
        required=True,
        validate=validate.Length(equal=2),
    )
    winner_id = fields.Integer(load_default=None, allow_none=True)
    completed = fields.Boolean(load_default=False)
    override = fields.Boolean(load_default=False)
