# aquasense/api/superadmin/schemas.py
from marshmallow import Schema, fields, validate

from aquasense.core.access import Role

ROLE_VALUES = [r.value for r in Role]


class RoleUpdateSchema(Schema):
    """PATCH /api/superadmin/users/<uid>/role"""
    role = fields.Str(required=True, validate=validate.OneOf(ROLE_VALUES))


class AccountListQuerySchema(Schema):
    role = fields.Str(validate=validate.OneOf(ROLE_VALUES))
    active = fields.Bool()
