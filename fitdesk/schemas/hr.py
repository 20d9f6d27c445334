from marshmallow import ValidationError, fields, validate, validates_schema

from fitdesk.models.staff_schedule import ABSENCE_TYPES, CONTRACT_TYPES
from .base import BaseSchema

MAX_PAYROLL_DAYS = 92


class WorkDaySchema(BaseSchema):
    day_of_week = fields.Integer(required=True, validate=validate.Range(min=0, max=6),
                                 error_messages={"required": "Day of week is required"})
    start_time = fields.Time(required=True, error_messages={"required": "Start time is required"})
    end_time = fields.Time(required=True, error_messages={"required": "End time is required"})

    @validates_schema
    def check_times(self, data, **kwargs):
        start, end = data.get("start_time"), data.get("end_time")
        if start and end and end <= start:
            raise ValidationError("End time must be after start time", "end_time")


class WorkScheduleSchema(BaseSchema):
    contract_type = fields.String(allow_none=True, validate=validate.OneOf(CONTRACT_TYPES))
    weekly_hours = fields.Integer(allow_none=True, validate=validate.Range(min=0, max=80))
    days = fields.List(fields.Nested(WorkDaySchema), load_default=list)


class AbsenceSchema(BaseSchema):
    staff_id = fields.Integer(required=True, error_messages={"required": "Staff member is required"})
    absence_type = fields.String(load_default="vacation", validate=validate.OneOf(ABSENCE_TYPES))
    start_date = fields.Date(required=True, error_messages={"required": "Start date is required"})
    end_date = fields.Date(required=True, error_messages={"required": "End date is required"})
    reason = fields.String(allow_none=True)

    @validates_schema
    def check_range(self, data, **kwargs):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and end < start:
            raise ValidationError("End date must be after start date", "end_date")


class LeaveEntitlementSchema(BaseSchema):
    year = fields.Integer(required=True, validate=validate.Range(min=2000, max=2100),
                          error_messages={"required": "Year is required"})
    vacation_days_entitled = fields.Integer(allow_none=True, validate=validate.Range(min=0, max=365))
    personal_days_entitled = fields.Integer(allow_none=True, validate=validate.Range(min=0, max=365))


class PayrollQuerySchema(BaseSchema):
    start_date = fields.Date(required=True, error_messages={"required": "Start date is required"})
    end_date = fields.Date(required=True, error_messages={"required": "End date is required"})
    staff_id = fields.Integer(allow_none=True)

    @validates_schema
    def check_range(self, data, **kwargs):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end:
            if end < start:
                raise ValidationError("End date must be after start date", "end_date")
            if (end - start).days > MAX_PAYROLL_DAYS:
                raise ValidationError("Payroll period is too long", "end_date")
