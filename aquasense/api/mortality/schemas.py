# aquasense/api/mortality/schemas.py
from marshmallow import Schema, fields, validate, validates, ValidationError

from aquasense.utils.datetime_utils import DateTimeUtils, DATE_KEY_PATTERN


class MortalityCreateSchema(Schema):
    """POST /api/users/<uid>/mortality"""
    date = fields.Str(required=True, validate=validate.Regexp(DATE_KEY_PATTERN, error="date must be YYYY-MM-DD"))
    count = fields.Int(required=True, strict=True, validate=validate.Range(min=0))
    cause = fields.Str(allow_none=True, validate=validate.Length(max=200))
    notes = fields.Str(allow_none=True, validate=validate.Length(max=500))

    @validates('date')
    def validate_calendar_date(self, value, **kwargs):
        try:
            DateTimeUtils.parse_date_string(value)
        except ValueError:
            raise ValidationError(f"{value} is not a calendar date.")


class MortalityQuerySchema(Schema):
    start_date = fields.Str(validate=validate.Regexp(DATE_KEY_PATTERN))
    end_date = fields.Str(validate=validate.Regexp(DATE_KEY_PATTERN))


class MortalityResponseSchema(Schema):
    log_id = fields.Str()
    date = fields.Str()
    count = fields.Int()
    cause = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    recorded_at = fields.DateTime(allow_none=True)
