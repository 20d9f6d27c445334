from marshmallow import ValidationError, fields, validate, validates_schema

from fitdesk.models.role import ACTIONS, MODULES
from .base import BaseSchema, required_text, validate_phone


class CompanySettingsSchema(BaseSchema):
    name = required_text("Company name")
    address = fields.String(allow_none=True)
    terms_text = fields.String(allow_none=True)
    regulations_text = fields.String(allow_none=True)
    require_student_approval = fields.Boolean()
    mbway_phone = fields.String(allow_none=True, validate=validate_phone)


class BlockCompanySchema(BaseSchema):
    reason = required_text("Reason")


class TrialExtensionSchema(BaseSchema):
    trial_ends_at = fields.DateTime(allow_none=True)
    extra_days = fields.Integer(allow_none=True, validate=validate.Range(min=1))

    @validates_schema
    def check_one_given(self, data, **kwargs):
        if not data.get("trial_ends_at") and not data.get("extra_days"):
            raise ValidationError("Provide trial_ends_at or extra_days")


def validate_permission(value):
    module, _, action = value.partition(":")
    if module not in MODULES or action not in ACTIONS:
        raise ValidationError(f"Unknown permission {value}")


class RoleSchema(BaseSchema):
    name = required_text("Role name")
    description = fields.String(allow_none=True)
    color = fields.String(allow_none=True)
    is_admin = fields.Boolean(load_default=False)
    permissions = fields.List(fields.String(validate=validate_permission), load_default=list)
