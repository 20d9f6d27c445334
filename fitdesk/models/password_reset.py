from datetime import datetime
from fitdesk.extensions import db

RESET_USER_TYPES = ("student", "staff", "company")
RESET_STATUSES = ("pending", "approved", "rejected")


class PasswordResetRequest(db.Model):
    """Forgotten-password request, reviewed by the gym or by the platform admin."""
    __tablename__ = "password_reset_requests"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    user_type = db.Column(
        db.String(20),
        db.CheckConstraint("user_type IN ('student','staff','company')"),
        nullable=False,
    )
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # null for company owners; those requests go to the platform admin
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('pending','approved','rejected')"),
        default="pending",
        index=True,
    )
    notes = db.Column(db.Text)
    reviewed_at = db.Column(db.DateTime)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", foreign_keys=[user_id])

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "user_type": self.user_type,
            "user_id": self.user_id,
            "full_name": self.user.full_name if self.user else None,
            "company_id": self.company_id,
            "status": self.status,
            "notes": self.notes,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
