# ================================
# Notification Model
# ================================

from datetime import datetime
from fitdesk.extensions import db

NOTIFICATION_TYPES = ("message", "payment", "payment_overdue", "class", "account", "general")


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text)
    type = db.Column(
        db.String(20),
        db.CheckConstraint(
            "type IN ('message','payment','payment_overdue','class','account','general')"
        ),
        default="general",
        nullable=False,
    )
    # Optional pointer to the record the notification is about
    reference_type = db.Column(db.String(50))
    reference_id = db.Column(db.Integer)

    sent_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    is_read = db.Column(db.Boolean, default=False, index=True)
    read_at = db.Column(db.DateTime)

    user = db.relationship("User", back_populates="notifications")

    __table_args__ = (
        db.Index("idx_notifications_reference", "reference_type", "reference_id"),
    )

    def mark_as_read(self):
        self.is_read = True
        self.read_at = datetime.utcnow()

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "type": self.type,
            "reference_type": self.reference_type,
            "reference_id": self.reference_id,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "is_read": bool(self.is_read),
            "read_at": self.read_at.isoformat() if self.read_at else None,
        }
