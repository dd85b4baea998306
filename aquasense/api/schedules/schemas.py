# aquasense/api/schedules/schemas.py
from datetime import timezone

from marshmallow import Schema, fields, validate, pre_load, ValidationError

from aquasense.models.schedule import ScheduleStatus


class ScheduleCreateSchema(Schema):
    """POST /api/users/<uid>/schedules"""
    scheduled_at = fields.AwareDateTime(required=True, default_timezone=timezone.utc)
    feed_amount_kg = fields.Float(required=True, validate=validate.Range(min=0, min_inclusive=False, max=1000))
    notes = fields.Str(required=False, allow_none=True, validate=validate.Length(max=500))


class ScheduleUpdateSchema(Schema):
    """PATCH /api/users/<uid>/schedules/<id>. Status is never client-writable."""
    scheduled_at = fields.AwareDateTime(default_timezone=timezone.utc)
    feed_amount_kg = fields.Float(validate=validate.Range(min=0, min_inclusive=False, max=1000))
    notes = fields.Str(allow_none=True, validate=validate.Length(max=500))

    @pre_load
    def reject_status(self, data, **kwargs):
        if isinstance(data, dict) and 'status' in data:
            raise ValidationError("Schedule status cannot be changed by clients.", 'status')
        return data


class ScheduleQuerySchema(Schema):
    status = fields.Str(validate=validate.OneOf([s.value for s in ScheduleStatus]))


class ScheduleResponseSchema(Schema):
    schedule_id = fields.Str(dump_only=True)
    uid = fields.Str(dump_only=True)
    scheduled_at = fields.DateTime()
    feed_amount_kg = fields.Float()
    notes = fields.Str(allow_none=True)
    status = fields.Str()
    created_at = fields.DateTime(allow_none=True)
    started_at = fields.DateTime(allow_none=True)
    completed_at = fields.DateTime(allow_none=True)
    last_error = fields.Str(allow_none=True)
    editable = fields.Bool()
