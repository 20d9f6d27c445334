from datetime import datetime
from fitdesk.extensions import db


class SubscriptionPayment(db.Model):
    __tablename__ = "subscription_payments"

    id = db.Column(db.Integer, primary_key=True)
    subscription_id = db.Column(db.Integer, db.ForeignKey("student_subscriptions.id"), nullable=False, index=True)
    installment_number = db.Column(db.Integer, nullable=False, default=1)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    due_date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('pending','paid','overdue','cancelled')"),
        default="pending",
        index=True,
    )
    paid_at = db.Column(db.DateTime)
    payment_method = db.Column(db.String(30))
    proof_id = db.Column(db.Integer, db.ForeignKey("payment_proofs.id"), nullable=True)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subscription = db.relationship("StudentSubscription", back_populates="payments")
    proof = db.relationship("PaymentProof", foreign_keys=[proof_id])

    __table_args__ = (
        db.UniqueConstraint("subscription_id", "installment_number", name="uq_payment_installment"),
    )

    def __repr__(self):
        return f'<SubscriptionPayment {self.id}: {self.amount} - {self.status}>'

    def to_dict(self):
        return {
            "id": self.id,
            "subscription_id": self.subscription_id,
            "installment_number": self.installment_number,
            "amount": float(self.amount),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "status": self.status,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "payment_method": self.payment_method,
            "proof_id": self.proof_id,
            "notes": self.notes,
        }


class PaymentProof(db.Model):
    __tablename__ = "payment_proofs"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, index=True)
    subscription_id = db.Column(db.Integer, db.ForeignKey("student_subscriptions.id"), nullable=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    proof_file_name = db.Column(db.String(255), nullable=False)
    proof_file_path = db.Column(db.String(500), nullable=False)
    proof_file_type = db.Column(db.String(100), nullable=False)
    notes = db.Column(db.Text)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('pending','approved','rejected')"),
        default="pending",
        index=True,
    )
    reviewed_at = db.Column(db.DateTime)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship("Student", back_populates="payment_proofs")
    subscription = db.relationship("StudentSubscription")

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "student_name": self.student.full_name if self.student else None,
            "subscription_id": self.subscription_id,
            "amount": float(self.amount),
            "proof_file_name": self.proof_file_name,
            "proof_file_type": self.proof_file_type,
            "notes": self.notes,
            "status": self.status,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
