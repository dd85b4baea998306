# aquasense/api/admin/schemas.py
from marshmallow import Schema, fields


class StatusUpdateSchema(Schema):
    """PATCH /users/<uid>/status (admin and superadmin)"""
    is_active = fields.Bool(required=True)


class UserListQuerySchema(Schema):
    active = fields.Bool()
