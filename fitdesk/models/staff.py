from datetime import datetime
from fitdesk.extensions import db


class Staff(db.Model):
    __tablename__ = "staff"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, unique=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=True)

    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20))
    position = db.Column(db.String(100))
    contract_type = db.Column(db.String(50))
    hire_date = db.Column(db.Date)
    weekly_hours = db.Column(db.Integer)
    citizen_card = db.Column(db.String(30))
    address = db.Column(db.String(255))
    postal_code = db.Column(db.String(20))
    city = db.Column(db.String(100))
    country = db.Column(db.String(100))
    emergency_contact = db.Column(db.String(150))
    emergency_phone = db.Column(db.String(20))

    is_active = db.Column(db.Boolean, default=True, index=True)
    password_changed = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = db.relationship("Company", back_populates="staff")
    user = db.relationship("User", back_populates="staff_record")
    role = db.relationship("Role", back_populates="staff")
    payment_config = db.relationship("StaffPaymentConfig", back_populates="staff", uselist=False, cascade="all, delete-orphan")
    evaluations = db.relationship("StaffEvaluation", back_populates="staff", lazy="dynamic", cascade="all, delete-orphan")
    trainings = db.relationship("StaffTraining", back_populates="staff", lazy="dynamic", cascade="all, delete-orphan")
    documents = db.relationship("StaffDocument", back_populates="staff", lazy="dynamic", cascade="all, delete-orphan")
    work_schedule = db.relationship("StaffWorkSchedule", back_populates="staff", order_by="StaffWorkSchedule.day_of_week", cascade="all, delete-orphan")
    absences = db.relationship("StaffAbsence", back_populates="staff", lazy="dynamic", cascade="all, delete-orphan")
    leave_balances = db.relationship("StaffLeaveBalance", back_populates="staff", lazy="dynamic", cascade="all, delete-orphan")
    students = db.relationship("Student", back_populates="personal_trainer")

    __table_args__ = (
        db.UniqueConstraint("company_id", "email", name="uq_staff_company_email"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "user_id": self.user_id,
            "has_account": self.user_id is not None,
            "role_id": self.role_id,
            "role_name": self.role.name if self.role else None,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "position": self.position,
            "contract_type": self.contract_type,
            "hire_date": self.hire_date.isoformat() if self.hire_date else None,
            "weekly_hours": self.weekly_hours,
            "citizen_card": self.citizen_card,
            "address": self.address,
            "postal_code": self.postal_code,
            "city": self.city,
            "country": self.country,
            "emergency_contact": self.emergency_contact,
            "emergency_phone": self.emergency_phone,
            "is_active": bool(self.is_active),
            "password_changed": bool(self.password_changed),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
