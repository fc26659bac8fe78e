from olympiad.extensions import ma
from olympiad.models.year import Year
from marshmallow import Schema, fields, validate


class YearSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Year
        load_instance = True


class CreateYearSchema(Schema):
    year = fields.Integer(required=True, validate=validate.Range(min=2000, max=2100))
