from olympiad.extensions import ma
from olympiad.models.team import Team
from marshmallow import Schema, fields, validate


class TeamSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Team
        load_instance = True
        include_fk = True

    members = ma.Nested("PlayerSchema", only=("id", "name", "elo_rating"), many=True, dump_only=True)


class CreateTeamSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    abbreviation = fields.String(required=True, validate=validate.Length(min=1, max=10))
    color = fields.String(load_default=None, validate=validate.Regexp(r"^#[0-9a-fA-F]{6}$"))
    year_id = fields.Integer(load_default=None)
    logo_url = fields.String(load_default=None, validate=validate.Length(max=500), allow_none=True)
    member_ids = fields.List(fields.Integer(), load_default=list)
