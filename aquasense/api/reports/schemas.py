# aquasense/api/reports/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from aquasense.utils.datetime_utils import (
    DateTimeUtils, DATE_KEY_PATTERN, WEEK_KEY_PATTERN, MONTH_KEY_PATTERN
)

EXPORT_FORMATS = ('csv', 'pdf')


def _check(parser, value, field_name):
    try:
        parser(value)
    except ValueError as e:
        raise ValidationError(str(e), field_name)


class HourlyQuerySchema(Schema):
    date = fields.Str(required=True, validate=validate.Regexp(DATE_KEY_PATTERN))

    @validates_schema
    def validate_date(self, data, **kwargs):
        _check(DateTimeUtils.parse_date_string, data['date'], 'date')


class DailyQuerySchema(Schema):
    """?date=YYYY-MM-DD or ?month=YYYY-MM"""
    date = fields.Str(validate=validate.Regexp(DATE_KEY_PATTERN))
    month = fields.Str(validate=validate.Regexp(MONTH_KEY_PATTERN))

    @validates_schema
    def validate_keys(self, data, **kwargs):
        if 'date' in data:
            _check(DateTimeUtils.parse_date_string, data['date'], 'date')
        if 'month' in data:
            _check(DateTimeUtils.parse_month_key, data['month'], 'month')


class WeeklyQuerySchema(Schema):
    """?week=YYYY-Www or ?month=YYYY-MM"""
    week = fields.Str(validate=validate.Regexp(WEEK_KEY_PATTERN))
    month = fields.Str(validate=validate.Regexp(MONTH_KEY_PATTERN))

    @validates_schema
    def validate_keys(self, data, **kwargs):
        if 'week' in data:
            _check(DateTimeUtils.iso_week_dates, data['week'], 'week')
        if 'month' in data:
            _check(DateTimeUtils.parse_month_key, data['month'], 'month')


class MonthlyQuerySchema(Schema):
    """?month=YYYY-MM or ?year=YYYY"""
    month = fields.Str(validate=validate.Regexp(MONTH_KEY_PATTERN))
    year = fields.Str(validate=validate.Regexp(r'^\d{4}$'))

    @validates_schema
    def validate_keys(self, data, **kwargs):
        if 'month' in data:
            _check(DateTimeUtils.parse_month_key, data['month'], 'month')


QUERY_SCHEMAS = {
    'daily': DailyQuerySchema,
    'weekly': WeeklyQuerySchema,
    'monthly': MonthlyQuerySchema,
}


def export_query_schema(period: str) -> Schema:
    """The period's filter schema plus the 'format' parameter."""
    base = QUERY_SCHEMAS[period]
    export_schema = type(
        f"{base.__name__}Export",
        (base,),
        {'format': fields.Str(load_default='csv', validate=validate.OneOf(EXPORT_FORMATS))}
    )
    return export_schema()
