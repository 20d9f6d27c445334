from datetime import datetime, date
from fitdesk.extensions import db
from fitdesk.utils.calculations import score_band

SCORE_FIELDS = (
    "technical_score",
    "punctuality_score",
    "teamwork_score",
    "communication_score",
    "initiative_score",
)


class StaffEvaluation(db.Model):
    __tablename__ = "staff_evaluations"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    evaluator_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    evaluation_date = db.Column(db.Date, nullable=False, default=date.today)
    evaluation_period = db.Column(db.String(50))

    overall_score = db.Column(db.Float)
    technical_score = db.Column(db.Float)
    punctuality_score = db.Column(db.Float)
    teamwork_score = db.Column(db.Float)
    communication_score = db.Column(db.Float)
    initiative_score = db.Column(db.Float)

    strengths = db.Column(db.Text)
    areas_to_improve = db.Column(db.Text)
    goals = db.Column(db.Text)
    feedback = db.Column(db.Text)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('draft','completed')"),
        default="completed",
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    staff = db.relationship("Staff", back_populates="evaluations")

    def to_dict(self):
        data = {
            "id": self.id,
            "staff_id": self.staff_id,
            "evaluator_id": self.evaluator_id,
            "evaluation_date": self.evaluation_date.isoformat() if self.evaluation_date else None,
            "evaluation_period": self.evaluation_period,
            "overall_score": self.overall_score or 0,
            "score_band": score_band(self.overall_score or 0),
            "strengths": self.strengths,
            "areas_to_improve": self.areas_to_improve,
            "goals": self.goals,
            "feedback": self.feedback,
            "status": self.status,
        }
        for field in SCORE_FIELDS:
            data[field] = getattr(self, field)
        return data
