from datetime import datetime
from fitdesk.extensions import db

BILLING_FREQUENCIES = ("monthly", "quarterly", "semiannual", "annual", "once")


class SubscriptionPlan(db.Model):
    __tablename__ = "subscription_plans"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    duration_days = db.Column(db.Integer, nullable=False, default=30)
    billing_frequency = db.Column(db.String(20), default="monthly")
    default_commitment_months = db.Column(db.Integer)
    grace_period_days = db.Column(db.Integer, default=0)
    block_after_days = db.Column(db.Integer)
    penalty_percentage = db.Column(db.Numeric(5, 2), default=0)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = db.relationship("Company", back_populates="subscription_plans")
    subscriptions = db.relationship("StudentSubscription", back_populates="plan", lazy="dynamic")

    def __repr__(self):
        return f'<SubscriptionPlan {self.name}>'

    @property
    def active_subscriptions_count(self):
        return self.subscriptions.filter_by(status='active').count()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': float(self.price),
            'duration_days': self.duration_days,
            'billing_frequency': self.billing_frequency,
            'default_commitment_months': self.default_commitment_months,
            'grace_period_days': self.grace_period_days or 0,
            'block_after_days': self.block_after_days,
            'penalty_percentage': float(self.penalty_percentage or 0),
            'is_active': bool(self.is_active),
            'active_subscriptions': self.active_subscriptions_count
        }
