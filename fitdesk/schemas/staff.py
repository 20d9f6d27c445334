from marshmallow import fields, validate

from fitdesk.models.documents import STAFF_DOCUMENT_TYPES
from fitdesk.models.staff_payment_config import PAYMENT_TYPES
from .base import (BaseSchema, required_text, validate_half_step, validate_iban,
                   validate_nif, validate_niss, validate_phone)

NON_NEGATIVE = validate.Range(min=0, error="Must be zero or more")


class StaffSchema(BaseSchema):
    full_name = required_text("Full name")
    email = fields.Email(required=True, error_messages={"required": "Email is required", "invalid": "Invalid email format"})
    phone = fields.String(allow_none=True, validate=validate_phone)
    position = fields.String(allow_none=True)
    contract_type = fields.String(allow_none=True)
    hire_date = fields.Date(allow_none=True)
    weekly_hours = fields.Integer(allow_none=True, validate=validate.Range(min=0, max=80))
    citizen_card = fields.String(allow_none=True)
    address = fields.String(allow_none=True)
    postal_code = fields.String(allow_none=True)
    city = fields.String(allow_none=True)
    country = fields.String(allow_none=True)
    emergency_contact = fields.String(allow_none=True)
    emergency_phone = fields.String(allow_none=True, validate=validate_phone)
    role_id = fields.Integer(allow_none=True)
    is_active = fields.Boolean()


class PaymentConfigSchema(BaseSchema):
    payment_type = fields.String(load_default="monthly", validate=validate.OneOf(PAYMENT_TYPES))
    base_salary = fields.Decimal(places=2, allow_none=True, validate=NON_NEGATIVE)
    hourly_rate = fields.Decimal(places=2, allow_none=True, validate=NON_NEGATIVE)
    daily_rate = fields.Decimal(places=2, allow_none=True, validate=NON_NEGATIVE)
    per_class_rate = fields.Decimal(places=2, allow_none=True, validate=NON_NEGATIVE)
    commission_percentage = fields.Decimal(places=2, allow_none=True, validate=validate.Range(min=0, max=100))
    bank_name = fields.String(allow_none=True)
    bank_iban = fields.String(allow_none=True, validate=validate_iban)
    nif = fields.String(allow_none=True, validate=validate_nif)
    niss = fields.String(allow_none=True, validate=validate_niss)


class EvaluationSchema(BaseSchema):
    evaluation_date = fields.Date(allow_none=True)
    evaluation_period = fields.String(allow_none=True)
    technical_score = fields.Float(allow_none=True, validate=validate_half_step)
    punctuality_score = fields.Float(allow_none=True, validate=validate_half_step)
    teamwork_score = fields.Float(allow_none=True, validate=validate_half_step)
    communication_score = fields.Float(allow_none=True, validate=validate_half_step)
    initiative_score = fields.Float(allow_none=True, validate=validate_half_step)
    strengths = fields.String(allow_none=True)
    areas_to_improve = fields.String(allow_none=True)
    goals = fields.String(allow_none=True)
    feedback = fields.String(allow_none=True)
    status = fields.String(validate=validate.OneOf(["draft", "completed"]))


class TrainingSchema(BaseSchema):
    training_name = required_text("Training name")
    institution = fields.String(allow_none=True)
    start_date = fields.Date(allow_none=True)
    completion_date = fields.Date(allow_none=True)
    expiry_date = fields.Date(allow_none=True)
    hours = fields.Float(allow_none=True, validate=NON_NEGATIVE)
    cost = fields.Decimal(places=2, allow_none=True, validate=NON_NEGATIVE)
    certification_number = fields.String(allow_none=True)
    status = fields.String(validate=validate.OneOf(["planned", "in_progress", "completed", "cancelled"]))
    notes = fields.String(allow_none=True)


class StaffDocumentFormSchema(BaseSchema):
    document_type = fields.String(load_default="other", validate=validate.OneOf(STAFF_DOCUMENT_TYPES))
    description = fields.String(allow_none=True)
    expiry_date = fields.Date(allow_none=True)
