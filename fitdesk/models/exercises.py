from datetime import datetime
from fitdesk.extensions import db


class LibraryExercise(db.Model):
    __tablename__ = "exercise_library"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(150), nullable=False)
    muscle_group = db.Column(db.String(30))
    equipment = db.Column(db.String(100))
    description = db.Column(db.Text)
    video_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("company_id", "name", name="uq_exercise_library_name"),
    )

    def __repr__(self):
        return f"<LibraryExercise {self.name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "muscle_group": self.muscle_group,
            "equipment": self.equipment,
            "description": self.description,
            "video_url": self.video_url,
        }
