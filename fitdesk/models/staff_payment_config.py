from datetime import datetime
from fitdesk.extensions import db

PAYMENT_TYPES = ("monthly", "hourly", "daily", "per_class", "commission")


class StaffPaymentConfig(db.Model):
    __tablename__ = "staff_payment_config"

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, unique=True)
    payment_type = db.Column(db.String(20), nullable=False, default="monthly")
    base_salary = db.Column(db.Numeric(10, 2), default=0)
    hourly_rate = db.Column(db.Numeric(10, 2), default=0)
    daily_rate = db.Column(db.Numeric(10, 2), default=0)
    per_class_rate = db.Column(db.Numeric(10, 2), default=0)
    commission_percentage = db.Column(db.Numeric(5, 2), default=0)
    bank_name = db.Column(db.String(100))
    bank_iban = db.Column(db.String(34))
    nif = db.Column(db.String(9))
    niss = db.Column(db.String(11))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    staff = db.relationship("Staff", back_populates="payment_config")

    def to_dict(self):
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "payment_type": self.payment_type,
            "base_salary": float(self.base_salary or 0),
            "hourly_rate": float(self.hourly_rate or 0),
            "daily_rate": float(self.daily_rate or 0),
            "per_class_rate": float(self.per_class_rate or 0),
            "commission_percentage": float(self.commission_percentage or 0),
            "bank_name": self.bank_name,
            "bank_iban": self.bank_iban,
            "nif": self.nif,
            "niss": self.niss,
        }
