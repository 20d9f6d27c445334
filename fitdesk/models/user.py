from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from fitdesk.extensions import db

USERS_TABLE = "users"


class User(db.Model):
    __tablename__ = USERS_TABLE

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(150), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.String(20),
        db.CheckConstraint("role IN ('admin','owner','staff','student')"),
        nullable=False,
        index=True,
    )
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('active','suspended')"),
        default="active",
        index=True,
    )
    last_active = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    owned_company = db.relationship("Company", back_populates="owner", uselist=False)
    staff_record = db.relationship("Staff", back_populates="user", uselist=False)
    student_record = db.relationship("Student", back_populates="user", uselist=False)

    sent_messages = db.relationship("Message", foreign_keys="[Message.sender_id]", back_populates="sender", lazy="dynamic", cascade="all, delete-orphan")
    received_messages = db.relationship("Message", foreign_keys="[Message.receiver_id]", back_populates="receiver", lazy="dynamic", cascade="all, delete-orphan")
    notifications = db.relationship("Notification", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == "admin"

    @property
    def is_active(self):
        return self.status == "active"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
