from datetime import datetime
from fitdesk.extensions import db
from fitdesk.utils.calculations import certificate_status


class StaffTraining(db.Model):
    __tablename__ = "staff_trainings"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    training_name = db.Column(db.String(200), nullable=False)
    institution = db.Column(db.String(200))
    start_date = db.Column(db.Date)
    completion_date = db.Column(db.Date)
    expiry_date = db.Column(db.Date)
    hours = db.Column(db.Float)
    cost = db.Column(db.Numeric(10, 2))
    certification_number = db.Column(db.String(100))
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('planned','in_progress','completed','cancelled')"),
        default="completed",
    )
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    staff = db.relationship("Staff", back_populates="trainings")

    def to_dict(self):
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "training_name": self.training_name,
            "institution": self.institution,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "completion_date": self.completion_date.isoformat() if self.completion_date else None,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "certificate_status": certificate_status(self.expiry_date),
            "hours": self.hours,
            "cost": float(self.cost) if self.cost is not None else None,
            "certification_number": self.certification_number,
            "status": self.status,
            "notes": self.notes,
        }
