# aquasense/api/feeding_logs/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from aquasense.utils.datetime_utils import DATE_KEY_PATTERN


class FeedingLogQuerySchema(Schema):
    """GET /api/users/<uid>/feeding-logs query parameters."""
    date = fields.Str(validate=validate.Regexp(DATE_KEY_PATTERN))
    start_date = fields.Str(validate=validate.Regexp(DATE_KEY_PATTERN))
    end_date = fields.Str(validate=validate.Regexp(DATE_KEY_PATTERN))
    limit = fields.Int(validate=validate.Range(min=1, max=500), load_default=100)

    @validates_schema
    def validate_range(self, data, **kwargs):
        if 'date' in data and ('start_date' in data or 'end_date' in data):
            raise ValidationError("Use either 'date' or 'start_date'/'end_date'.", 'date')
        if data.get('start_date') and data.get('end_date') and data['start_date'] > data['end_date']:
            raise ValidationError("start_date must not be after end_date.", 'start_date')


class FeedingLogResponseSchema(Schema):
    log_id = fields.Str()
    schedule_id = fields.Str()
    amount_kg = fields.Float()
    fed_at = fields.DateTime(allow_none=True)
    date = fields.Str()
    hour = fields.Str()
    result = fields.Str()
    error = fields.Str(allow_none=True)
    source = fields.Str()
