from marshmallow import fields, validate

from fitdesk.models.subscription_plans import BILLING_FREQUENCIES
from .base import BaseSchema, required_text


class PlanSchema(BaseSchema):
    name = required_text("Plan name")
    description = fields.String(allow_none=True)
    price = fields.Decimal(places=2, required=True, validate=validate.Range(min=0, error="Price must be zero or more"),
                           error_messages={"required": "Price is required"})
    duration_days = fields.Integer(load_default=30, validate=validate.Range(min=1, error="Duration must be at least 1 day"))
    billing_frequency = fields.String(load_default="monthly", validate=validate.OneOf(BILLING_FREQUENCIES))
    default_commitment_months = fields.Integer(allow_none=True, validate=validate.Range(min=1))
    grace_period_days = fields.Integer(load_default=0, validate=validate.Range(min=0))
    block_after_days = fields.Integer(allow_none=True, validate=validate.Range(min=1))
    penalty_percentage = fields.Decimal(places=2, allow_none=True, validate=validate.Range(min=0, max=100))
    is_active = fields.Boolean(load_default=True)


class StudentSubscriptionSchema(BaseSchema):
    plan_id = fields.Integer(required=True, error_messages={"required": "Plan is required"})
    start_date = fields.Date(allow_none=True)
    commitment_months = fields.Integer(allow_none=True, validate=validate.Range(min=1, max=60))
    installment_amount = fields.Decimal(places=2, allow_none=True, validate=validate.Range(min=0))
    auto_renewal = fields.Boolean(load_default=False)


class MarkPaidSchema(BaseSchema):
    payment_method = fields.String(load_default="cash",
                                   validate=validate.OneOf(["cash", "card", "mbway", "transfer", "multibanco", "other"]))
    notes = fields.String(allow_none=True)


class PaymentProofSchema(BaseSchema):
    amount = fields.Decimal(places=2, required=True,
                            validate=validate.Range(min=0, min_inclusive=False, error="Amount must be greater than zero"),
                            error_messages={"required": "Amount is required"})
    subscription_id = fields.Integer(allow_none=True)
    notes = fields.String(allow_none=True)


class ProofReviewSchema(BaseSchema):
    status = fields.String(required=True, validate=validate.OneOf(["approved", "rejected"]),
                           error_messages={"required": "Status is required"})
    notes = fields.String(allow_none=True)
