from marshmallow import ValidationError, fields, validate, validates_schema

from .base import BaseSchema, required_text

POSITIVE = validate.Range(min=1, error="Must be greater than zero")
MAX_GENERATION_DAYS = 366


class RoomSchema(BaseSchema):
    name = required_text("Room name")
    capacity = fields.Integer(load_default=20, validate=POSITIVE)
    description = fields.String(allow_none=True)
    is_active = fields.Boolean(load_default=True)


FIXED_SCHEDULE_FIELDS = ("has_fixed_schedule", "schedule_days", "default_start_time", "default_end_time")


def check_fixed_schedule(data):
    start, end = data.get("default_start_time"), data.get("default_end_time")
    if start and end and end <= start:
        raise ValidationError("End time must be after start time", "default_end_time")
    if data.get("has_fixed_schedule"):
        if not data.get("schedule_days"):
            raise ValidationError("Choose at least one day", "schedule_days")
        if not start or not end:
            raise ValidationError("Fixed schedules need a start and end time", "default_start_time")


class ClassTypeSchema(BaseSchema):
    name = required_text("Class name")
    description = fields.String(allow_none=True)
    capacity = fields.Integer(load_default=20, validate=POSITIVE)
    duration_minutes = fields.Integer(load_default=60, validate=POSITIVE)
    room_id = fields.Integer(allow_none=True)
    color = fields.String(allow_none=True)
    is_active = fields.Boolean(load_default=True)
    has_fixed_schedule = fields.Boolean(load_default=False)
    schedule_days = fields.List(fields.Integer(validate=validate.Range(min=0, max=6)), load_default=list)
    default_start_time = fields.Time(allow_none=True)
    default_end_time = fields.Time(allow_none=True)
    default_instructor_id = fields.Integer(allow_none=True)

    @validates_schema
    def validate_fixed_schedule(self, data, partial=False, **kwargs):
        if not partial:
            check_fixed_schedule(data)


class ScheduleSchema(BaseSchema):
    class_id = fields.Integer(required=True, error_messages={"required": "Class is required"})
    scheduled_date = fields.Date(required=True, error_messages={"required": "Date is required"})
    start_time = fields.Time(allow_none=True)
    end_time = fields.Time(allow_none=True)
    instructor_id = fields.Integer(allow_none=True)
    notes = fields.String(allow_none=True)

    @validates_schema
    def check_times(self, data, **kwargs):
        start, end = data.get("start_time"), data.get("end_time")
        if start and end and end <= start:
            raise ValidationError("End time must be after start time", "end_time")


class GenerateSchedulesSchema(BaseSchema):
    class_id = fields.Integer(required=True, error_messages={"required": "Class is required"})
    start_date = fields.Date(required=True, error_messages={"required": "Start date is required"})
    end_date = fields.Date(required=True, error_messages={"required": "End date is required"})

    @validates_schema
    def check_range(self, data, **kwargs):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end:
            if end < start:
                raise ValidationError("End date must be after start date", "end_date")
            if (end - start).days > MAX_GENERATION_DAYS:
                raise ValidationError("Date range is too long", "end_date")


class EnrollmentSchema(BaseSchema):
    student_id = fields.Integer(required=True, error_messages={"required": "Student is required"})


class AttendanceSchema(BaseSchema):
    attended = fields.Boolean(required=True, error_messages={"required": "Attendance is required"})
