from datetime import datetime
from fitdesk.extensions import db
from fitdesk.utils.calculations import bmi, bmi_category

ANAMNESIS_FIELDS = (
    "height_cm", "weight_kg", "body_fat_percentage",
    "has_heart_condition", "has_diabetes", "has_hypertension", "has_respiratory_issues",
    "has_joint_problems", "has_back_problems", "has_allergies", "allergies_description",
    "current_medications", "previous_surgeries", "injuries_history",
    "is_smoker", "alcohol_consumption", "sleep_hours_avg", "stress_level",
    "previous_exercise_experience", "current_activity_level", "fitness_goals",
    "available_days_per_week", "preferred_training_time",
    "doctor_clearance", "doctor_name", "doctor_contact", "additional_notes",
)


class StudentAnamnesis(db.Model):
    __tablename__ = "student_anamnesis"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, unique=True)

    # Body measurements
    height_cm = db.Column(db.Float)
    weight_kg = db.Column(db.Float)
    body_fat_percentage = db.Column(db.Float)

    # Health conditions
    has_heart_condition = db.Column(db.Boolean, default=False)
    has_diabetes = db.Column(db.Boolean, default=False)
    has_hypertension = db.Column(db.Boolean, default=False)
    has_respiratory_issues = db.Column(db.Boolean, default=False)
    has_joint_problems = db.Column(db.Boolean, default=False)
    has_back_problems = db.Column(db.Boolean, default=False)
    has_allergies = db.Column(db.Boolean, default=False)
    allergies_description = db.Column(db.Text)
    current_medications = db.Column(db.Text)
    previous_surgeries = db.Column(db.Text)
    injuries_history = db.Column(db.Text)

    # Lifestyle
    is_smoker = db.Column(db.Boolean, default=False)
    alcohol_consumption = db.Column(db.String(50))
    sleep_hours_avg = db.Column(db.Float)
    stress_level = db.Column(db.String(20))

    # Training background
    previous_exercise_experience = db.Column(db.Text)
    current_activity_level = db.Column(db.String(50))
    fitness_goals = db.Column(db.Text)
    available_days_per_week = db.Column(db.Integer)
    preferred_training_time = db.Column(db.String(50))

    doctor_clearance = db.Column(db.Boolean, default=False)
    doctor_name = db.Column(db.String(150))
    doctor_contact = db.Column(db.String(100))
    additional_notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship("Student", back_populates="anamnesis")

    @classmethod
    def blank(cls, student_id):
        """Unsaved record with the column defaults filled in."""
        flags = {c.name: False for c in cls.__table__.columns if c.name.startswith(("has_", "is_")) or c.name == "doctor_clearance"}
        return cls(student_id=student_id, **flags)

    def to_dict(self):
        data = {field: getattr(self, field) for field in ANAMNESIS_FIELDS}
        value = bmi(self.weight_kg, self.height_cm)
        data.update({
            "id": self.id,
            "student_id": self.student_id,
            "bmi": value,
            "bmi_category": bmi_category(value),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        })
        return data
