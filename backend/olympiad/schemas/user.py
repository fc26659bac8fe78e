from olympiad.extensions import ma
from olympiad.models.user import User
from marshmallow import fields, validate, Schema


class UserSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = User
        load_instance = True
        include_fk = True
        exclude = ("password_hash",)

    role = fields.Function(lambda obj: obj.role.value if obj.role else None)
    player = ma.Nested("PlayerSchema", only=("id", "name"), dump_only=True)


class RegisterSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=8))
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    role = fields.String(
        load_default="viewer",
        validate=validate.OneOf(["admin", "viewer"]),
    )
    player_id = fields.Integer(load_default=None)


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=1))
