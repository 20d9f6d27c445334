from marshmallow import ValidationError, fields, validate, validates_schema

from fitdesk.models.student import STUDENT_STATUSES
from .base import (BaseSchema, optional_email, required_text, validate_nif,
                   validate_niss, validate_phone)


class StudentSchema(BaseSchema):
    full_name = required_text("Full name")
    email = optional_email()
    phone = fields.String(allow_none=True, validate=validate_phone)
    birth_date = fields.Date(allow_none=True)
    gender = fields.String(allow_none=True)
    nationality = fields.String(allow_none=True)
    nif = fields.String(allow_none=True, validate=validate_nif)
    niss = fields.String(allow_none=True, validate=validate_niss)
    citizen_card = fields.String(allow_none=True)
    address = fields.String(allow_none=True)
    postal_code = fields.String(allow_none=True)
    city = fields.String(allow_none=True)
    country = fields.String(allow_none=True)
    emergency_contact = fields.String(allow_none=True)
    emergency_phone = fields.String(allow_none=True, validate=validate_phone)
    health_notes = fields.String(allow_none=True)
    enrollment_date = fields.Date(allow_none=True)
    personal_trainer_id = fields.Integer(allow_none=True)
    status = fields.String(validate=validate.OneOf(STUDENT_STATUSES))


class StudentStatusSchema(BaseSchema):
    status = fields.String(required=True, validate=validate.OneOf(STUDENT_STATUSES),
                           error_messages={"required": "Status is required"})
    reason = fields.String(allow_none=True)

    @validates_schema
    def check_block_reason(self, data, **kwargs):
        if data.get("status") == "blocked" and not data.get("reason"):
            raise ValidationError("A reason is required to block a student", "reason")


class AssignTrainerSchema(BaseSchema):
    personal_trainer_id = fields.Integer(allow_none=True, load_default=None)


class AnamnesisSchema(BaseSchema):
    height_cm = fields.Float(allow_none=True, validate=validate.Range(min=50, max=260))
    weight_kg = fields.Float(allow_none=True, validate=validate.Range(min=20, max=400))
    body_fat_percentage = fields.Float(allow_none=True, validate=validate.Range(min=0, max=100))
    has_heart_condition = fields.Boolean()
    has_diabetes = fields.Boolean()
    has_hypertension = fields.Boolean()
    has_respiratory_issues = fields.Boolean()
    has_joint_problems = fields.Boolean()
    has_back_problems = fields.Boolean()
    has_allergies = fields.Boolean()
    allergies_description = fields.String(allow_none=True)
    current_medications = fields.String(allow_none=True)
    previous_surgeries = fields.String(allow_none=True)
    injuries_history = fields.String(allow_none=True)
    is_smoker = fields.Boolean()
    alcohol_consumption = fields.String(allow_none=True)
    sleep_hours_avg = fields.Float(allow_none=True, validate=validate.Range(min=0, max=24))
    stress_level = fields.String(allow_none=True, validate=validate.OneOf(["low", "moderate", "high"]))
    previous_exercise_experience = fields.String(allow_none=True)
    current_activity_level = fields.String(allow_none=True)
    fitness_goals = fields.String(allow_none=True)
    available_days_per_week = fields.Integer(allow_none=True, validate=validate.Range(min=0, max=7))
    preferred_training_time = fields.String(allow_none=True)
    doctor_clearance = fields.Boolean()
    doctor_name = fields.String(allow_none=True)
    doctor_contact = fields.String(allow_none=True)
    additional_notes = fields.String(allow_none=True)


class NoteSchema(BaseSchema):
    title = fields.String(allow_none=True)
    content = required_text("Content")
    is_private = fields.Boolean(load_default=False)


class DocumentFormSchema(BaseSchema):
    description = fields.String(allow_none=True)
