from datetime import datetime
from fitdesk.extensions import db

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

MUSCLE_GROUPS = (
    "chest", "back", "shoulders", "biceps", "triceps", "forearms",
    "abs", "quadriceps", "hamstrings", "glutes", "calves", "full_body", "cardio",
)


class TrainingPlan(db.Model):
    __tablename__ = "training_plans"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    title = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship("Student", back_populates="training_plans")
    days = db.relationship(
        "TrainingPlanDay",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="TrainingPlanDay.day_of_week",
    )

    def to_dict(self, nested=True):
        data = {
            "id": self.id,
            "student_id": self.student_id,
            "title": self.title,
            "description": self.description,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": bool(self.is_active),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if nested:
            data["days"] = [day.to_dict() for day in self.days]
        return data


class TrainingPlanDay(db.Model):
    __tablename__ = "training_plan_days"

    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.Integer, db.ForeignKey("training_plans.id"), nullable=False, index=True)
    # 0 = Monday ... 6 = Sunday
    day_of_week = db.Column(db.Integer, nullable=False)
    title = db.Column(db.String(150))
    notes = db.Column(db.Text)
    is_rest_day = db.Column(db.Boolean, default=False)

    plan = db.relationship("TrainingPlan", back_populates="days")
    exercises = db.relationship(
        "TrainingPlanExercise",
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="TrainingPlanExercise.sort_order",
    )

    __table_args__ = (
        db.UniqueConstraint("plan_id", "day_of_week", name="uq_training_plan_day"),
        db.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="check_training_day_of_week"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "day_of_week": self.day_of_week,
            "day_name": DAY_NAMES[self.day_of_week],
            "title": self.title,
            "notes": self.notes,
            "is_rest_day": bool(self.is_rest_day),
            "exercises": [exercise.to_dict() for exercise in self.exercises],
        }


class TrainingPlanExercise(db.Model):
    __tablename__ = "training_plan_exercises"

    id = db.Column(db.Integer, primary_key=True)
    day_id = db.Column(db.Integer, db.ForeignKey("training_plan_days.id"), nullable=False, index=True)
    library_exercise_id = db.Column(db.Integer, db.ForeignKey("exercise_library.id"), nullable=True)
    exercise_name = db.Column(db.String(150), nullable=False)
    muscle_group = db.Column(db.String(30))
    sets = db.Column(db.Integer)
    reps = db.Column(db.String(30))
    weight = db.Column(db.String(30))
    rest_seconds = db.Column(db.Integer)
    notes = db.Column(db.Text)
    video_url = db.Column(db.String(500))
    sort_order = db.Column(db.Integer, default=0)

    day = db.relationship("TrainingPlanDay", back_populates="exercises")

    def to_dict(self):
        return {
            "id": self.id,
            "day_id": self.day_id,
            "library_exercise_id": self.library_exercise_id,
            "exercise_name": self.exercise_name,
            "muscle_group": self.muscle_group,
            "sets": self.sets,
            "reps": self.reps,
            "weight": self.weight,
            "rest_seconds": self.rest_seconds,
            "notes": self.notes,
            "video_url": self.video_url,
            "sort_order": self.sort_order,
        }
