from datetime import datetime
from fitdesk.extensions import db


class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    address = db.Column(db.String(255))
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    registration_code = db.Column(db.String(16), unique=True, index=True)
    require_student_approval = db.Column(db.Boolean, default=False)
    terms_text = db.Column(db.Text)
    regulations_text = db.Column(db.Text)
    mbway_phone = db.Column(db.String(20))

    trial_started_at = db.Column(db.DateTime)
    trial_ends_at = db.Column(db.DateTime)
    has_active_subscription = db.Column(db.Boolean, default=False)

    is_blocked = db.Column(db.Boolean, default=False)
    blocked_at = db.Column(db.DateTime)
    blocked_reason = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship("User", back_populates="owned_company")
    roles = db.relationship("Role", back_populates="company", lazy="dynamic", cascade="all, delete-orphan")
    staff = db.relationship("Staff", back_populates="company", lazy="dynamic", cascade="all, delete-orphan")
    students = db.relationship("Student", back_populates="company", lazy="dynamic", cascade="all, delete-orphan")
    subscription_plans = db.relationship("SubscriptionPlan", back_populates="company", lazy="dynamic", cascade="all, delete-orphan")

    @property
    def trial_expired(self):
        if self.has_active_subscription or not self.trial_ends_at:
            return False
        return self.trial_ends_at < datetime.utcnow()

    @property
    def trial_days_left(self):
        if not self.trial_ends_at:
            return 0
        return max(0, (self.trial_ends_at - datetime.utcnow()).days)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "registration_code": self.registration_code,
            "require_student_approval": bool(self.require_student_approval),
            "terms_text": self.terms_text,
            "regulations_text": self.regulations_text,
            "mbway_phone": self.mbway_phone,
            "trial_ends_at": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            "trial_expired": self.trial_expired,
            "trial_days_left": self.trial_days_left,
            "has_active_subscription": bool(self.has_active_subscription),
            "is_blocked": bool(self.is_blocked),
            "blocked_reason": self.blocked_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
