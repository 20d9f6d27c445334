from datetime import datetime, date
from fitdesk.extensions import db
from fitdesk.utils.calculations import days_remaining

SUBSCRIPTION_LABELS = {
    "active": "Active",
    "expired": "Expired",
    "cancelled": "Cancelled",
    "suspended": "Suspended",
}
PAYMENT_LABELS = {
    "pending": "Pending",
    "paid": "Paid",
    "overdue": "Overdue",
}


class StudentSubscription(db.Model):
    __tablename__ = "student_subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, index=True)
    plan_id = db.Column(db.Integer, db.ForeignKey("subscription_plans.id"), nullable=False)

    start_date = db.Column(db.Date, nullable=False, default=date.today)
    end_date = db.Column(db.Date, nullable=False)
    commitment_months = db.Column(db.Integer)
    commitment_end_date = db.Column(db.Date)
    auto_renewal = db.Column(db.Boolean, default=False)

    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('active','expired','cancelled','suspended')"),
        default="active",
        index=True,
    )
    payment_status = db.Column(
        db.String(20),
        db.CheckConstraint("payment_status IN ('pending','paid','overdue')"),
        default="pending",
        index=True,
    )

    installment_amount = db.Column(db.Numeric(10, 2))
    total_installments = db.Column(db.Integer, default=1)
    paid_installments = db.Column(db.Integer, default=0)
    last_payment_date = db.Column(db.Date)
    next_payment_date = db.Column(db.Date)
    cancelled_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship("Student", back_populates="subscriptions")
    plan = db.relationship("SubscriptionPlan", back_populates="subscriptions")
    payments = db.relationship(
        "SubscriptionPayment",
        back_populates="subscription",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="SubscriptionPayment.installment_number",
    )

    __table_args__ = (
        db.Index("idx_student_subscription_end_date", "end_date"),
    )

    @property
    def days_remaining(self):
        return days_remaining(self.end_date)

    @property
    def total_paid(self):
        return sum(float(p.amount) for p in self.payments if p.status == 'paid')

    @property
    def amount_due(self):
        return sum(float(p.amount) for p in self.payments if p.status in ('pending', 'overdue'))

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "plan_id": self.plan_id,
            "plan_name": self.plan.name if self.plan else None,
            "plan_price": float(self.plan.price) if self.plan else None,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "days_remaining": self.days_remaining,
            "commitment_months": self.commitment_months,
            "commitment_end_date": self.commitment_end_date.isoformat() if self.commitment_end_date else None,
            "auto_renewal": bool(self.auto_renewal),
            "status": self.status,
            "status_label": SUBSCRIPTION_LABELS.get(self.status, self.status),
            "payment_status": self.payment_status,
            "payment_status_label": PAYMENT_LABELS.get(self.payment_status, self.payment_status),
            "installment_amount": float(self.installment_amount) if self.installment_amount is not None else None,
            "total_installments": self.total_installments,
            "paid_installments": self.paid_installments or 0,
            "last_payment_date": self.last_payment_date.isoformat() if self.last_payment_date else None,
            "next_payment_date": self.next_payment_date.isoformat() if self.next_payment_date else None,
            "total_paid": self.total_paid,
            "amount_due": self.amount_due,
        }
