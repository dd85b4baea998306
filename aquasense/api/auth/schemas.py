# aquasense/api/auth/schemas.py
from marshmallow import Schema, fields


class SessionRequestSchema(Schema):
    """POST /api/auth/session"""
    id_token = fields.Str(
        required=True,
        metadata={"description": "Firebase Authentication ID token from the client SDK"}
    )


class LogoutRequestSchema(Schema):
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)


class SessionUserSchema(Schema):
    uid = fields.Str()
    email = fields.Str()
    first_name = fields.Str()
    last_name = fields.Str()
    role = fields.Str()
    is_active = fields.Bool()
