# aquasense/api/users/schemas.py
from marshmallow import Schema, fields


class UserProfileResponseSchema(Schema):
    """GET /api/users/me, GET /api/users/<uid>"""
    uid = fields.Str(dump_only=True)
    email = fields.Str()
    first_name = fields.Str()
    last_name = fields.Str()
    display_name = fields.Str()
    role = fields.Str()
    is_active = fields.Bool()
    join_date = fields.DateTime(allow_none=True)
    provider = fields.Str(allow_none=True)


class SensorValueSchema(Schema):
    value = fields.Float(allow_none=True)
    updated_at = fields.Raw(allow_none=True)


class WaterQualitySchema(Schema):
    label = fields.Str()
    score = fields.Int(allow_none=True)


class SensorsResponseSchema(Schema):
    uid = fields.Str()
    temperature = fields.Nested(SensorValueSchema)
    ph = fields.Nested(SensorValueSchema)
    mortality_today = fields.Int()
    water_quality = fields.Nested(WaterQualitySchema)
