from datetime import datetime, date
from fitdesk.extensions import db
from fitdesk.utils.calculations import age_from_birth_date

STUDENT_STATUSES = ("active", "inactive", "suspended", "blocked", "pending", "pending_approval")

STATUS_LABELS = {
    "active": "Active",
    "inactive": "Inactive",
    "suspended": "Suspended",
    "blocked": "Blocked",
    "pending": "Pending",
    "pending_approval": "Awaiting approval",
}


class Student(db.Model):
    __tablename__ = "students"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, unique=True)
    personal_trainer_id = db.Column(db.Integer, db.ForeignKey("staff.id", ondelete="SET NULL"), nullable=True, index=True)

    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(255), index=True)
    phone = db.Column(db.String(20))
    birth_date = db.Column(db.Date)
    gender = db.Column(db.String(20))
    nationality = db.Column(db.String(100))
    nif = db.Column(db.String(9))
    niss = db.Column(db.String(11))
    citizen_card = db.Column(db.String(30))
    address = db.Column(db.String(255))
    postal_code = db.Column(db.String(20))
    city = db.Column(db.String(100))
    country = db.Column(db.String(100))
    emergency_contact = db.Column(db.String(150))
    emergency_phone = db.Column(db.String(20))
    health_notes = db.Column(db.Text)
    profile_photo_url = db.Column(db.String(500))
    enrollment_date = db.Column(db.Date, default=date.today)

    status = db.Column(
        db.String(20),
        db.CheckConstraint(
            "status IN ('active','inactive','suspended','blocked','pending','pending_approval')"
        ),
        default="active",
        index=True,
    )
    blocked_at = db.Column(db.DateTime)
    block_reason = db.Column(db.String(255))
    registration_method = db.Column(
        db.String(20),
        db.CheckConstraint("registration_method IN ('company_added','self_registered')"),
        default="company_added",
    )
    password_changed = db.Column(db.Boolean, default=True)
    terms_accepted_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = db.relationship("Company", back_populates="students")
    user = db.relationship("User", back_populates="student_record")
    personal_trainer = db.relationship("Staff", back_populates="students")
    anamnesis = db.relationship("StudentAnamnesis", back_populates="student", uselist=False, cascade="all, delete-orphan")
    notes = db.relationship("StudentNote", back_populates="student", lazy="dynamic", cascade="all, delete-orphan")
    documents = db.relationship("StudentDocument", back_populates="student", lazy="dynamic", cascade="all, delete-orphan")
    subscriptions = db.relationship("StudentSubscription", back_populates="student", lazy="dynamic", cascade="all, delete-orphan")
    payment_proofs = db.relationship("PaymentProof", back_populates="student", lazy="dynamic", cascade="all, delete-orphan")
    training_plans = db.relationship("TrainingPlan", back_populates="student", lazy="dynamic", cascade="all, delete-orphan")
    nutrition_plans = db.relationship("NutritionPlan", back_populates="student", lazy="dynamic", cascade="all, delete-orphan")
    enrollments = db.relationship("ClassEnrollment", back_populates="student", lazy="dynamic", cascade="all, delete-orphan")

    @property
    def age(self):
        return age_from_birth_date(self.birth_date)

    def block(self, reason):
        self.status = "blocked"
        self.block_reason = reason
        self.blocked_at = datetime.utcnow()

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "user_id": self.user_id,
            "has_account": self.user_id is not None,
            "personal_trainer_id": self.personal_trainer_id,
            "personal_trainer_name": self.personal_trainer.full_name if self.personal_trainer else None,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "birth_date": self.birth_date.isoformat() if self.birth_date else None,
            "age": self.age,
            "gender": self.gender,
            "nationality": self.nationality,
            "nif": self.nif,
            "niss": self.niss,
            "citizen_card": self.citizen_card,
            "address": self.address,
            "postal_code": self.postal_code,
            "city": self.city,
            "country": self.country,
            "emergency_contact": self.emergency_contact,
            "emergency_phone": self.emergency_phone,
            "health_notes": self.health_notes,
            "profile_photo_url": self.profile_photo_url,
            "enrollment_date": self.enrollment_date.isoformat() if self.enrollment_date else None,
            "status": self.status,
            "status_label": STATUS_LABELS.get(self.status, self.status),
            "block_reason": self.block_reason,
            "blocked_at": self.blocked_at.isoformat() if self.blocked_at else None,
            "registration_method": self.registration_method,
            "password_changed": bool(self.password_changed),
            "terms_accepted_at": self.terms_accepted_at.isoformat() if self.terms_accepted_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
