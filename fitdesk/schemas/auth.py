from marshmallow import fields, validate

from .base import BaseSchema, required_text, validate_password_policy, validate_phone


class RegisterSchema(BaseSchema):
    full_name = required_text("Full name", validate=validate.Length(min=2, error="Name must be at least 2 characters"))
    email = fields.Email(required=True, error_messages={"required": "Email is required", "invalid": "Invalid email format"})
    password = fields.String(required=True, validate=validate_password_policy,
                             error_messages={"required": "Password is required"})
    company_name = required_text("Company name")
    company_address = fields.String(allow_none=True)


class StudentRegisterSchema(BaseSchema):
    full_name = required_text("Full name", validate=validate.Length(min=2, error="Name must be at least 2 characters"))
    email = fields.Email(required=True, error_messages={"required": "Email is required", "invalid": "Invalid email format"})
    password = fields.String(required=True, validate=validate_password_policy,
                             error_messages={"required": "Password is required"})
    registration_code = required_text("Registration code")
    phone = fields.String(allow_none=True, validate=validate_phone)
    birth_date = fields.Date(allow_none=True)


class LoginSchema(BaseSchema):
    email = fields.String(required=True, error_messages={"required": "Email and password are required"})
    password = fields.String(required=True, error_messages={"required": "Email and password are required"})


class ChangePasswordSchema(BaseSchema):
    current_password = fields.String(required=True, error_messages={"required": "Current password is required"})
    new_password = fields.String(required=True, validate=validate_password_policy,
                                 error_messages={"required": "New password is required"})


class CreateAccountSchema(BaseSchema):
    record_id = fields.Integer(required=True, error_messages={"required": "Record id is required"})
    record_type = fields.String(required=True, validate=validate.OneOf(["student", "staff"]),
                                error_messages={"required": "Record type is required"})


class ForgotPasswordSchema(BaseSchema):
    email = fields.Email(required=True, error_messages={"required": "Email is required", "invalid": "Invalid email format"})


class ResetReviewSchema(BaseSchema):
    notes = fields.String(allow_none=True)
