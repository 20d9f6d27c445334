from datetime import datetime
from fitdesk.extensions import db
from fitdesk.models.training_plan import DAY_NAMES
from fitdesk.utils.calculations import macro_totals, percentage_of

MEAL_TYPES = ("breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner", "evening_snack")

DEFAULT_TARGETS = {
    "target_calories": 2000,
    "target_protein": 150,
    "target_carbs": 200,
    "target_fat": 70,
}


class NutritionPlan(db.Model):
    __tablename__ = "nutrition_meal_plans"

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

    student = db.relationship("Student", back_populates="nutrition_plans")
    days = db.relationship(
        "NutritionPlanDay",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="NutritionPlanDay.day_of_week",
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


class NutritionPlanDay(db.Model):
    __tablename__ = "nutrition_plan_days"

    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.Integer, db.ForeignKey("nutrition_meal_plans.id"), nullable=False, index=True)
    day_of_week = db.Column(db.Integer, nullable=False)
    target_calories = db.Column(db.Integer, default=DEFAULT_TARGETS["target_calories"])
    target_protein = db.Column(db.Integer, default=DEFAULT_TARGETS["target_protein"])
    target_carbs = db.Column(db.Integer, default=DEFAULT_TARGETS["target_carbs"])
    target_fat = db.Column(db.Integer, default=DEFAULT_TARGETS["target_fat"])
    notes = db.Column(db.Text)

    plan = db.relationship("NutritionPlan", back_populates="days")
    meals = db.relationship(
        "NutritionPlanMeal",
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="NutritionPlanMeal.sort_order",
    )

    __table_args__ = (
        db.UniqueConstraint("plan_id", "day_of_week", name="uq_nutrition_plan_day"),
        db.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="check_nutrition_day_of_week"),
    )

    @property
    def totals(self):
        return macro_totals(self.meals)

    @property
    def target_progress(self):
        totals = self.totals
        return {
            "calories": percentage_of(totals["calories"], self.target_calories),
            "protein": percentage_of(totals["protein"], self.target_protein),
            "carbs": percentage_of(totals["carbs"], self.target_carbs),
            "fat": percentage_of(totals["fat"], self.target_fat),
        }

    def to_dict(self):
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "day_of_week": self.day_of_week,
            "day_name": DAY_NAMES[self.day_of_week],
            "target_calories": self.target_calories,
            "target_protein": self.target_protein,
            "target_carbs": self.target_carbs,
            "target_fat": self.target_fat,
            "notes": self.notes,
            "meals": [meal.to_dict() for meal in self.meals],
            "totals": self.totals,
            "target_progress": self.target_progress,
        }


class NutritionPlanMeal(db.Model):
    __tablename__ = "nutrition_plan_meals"

    id = db.Column(db.Integer, primary_key=True)
    day_id = db.Column(db.Integer, db.ForeignKey("nutrition_plan_days.id"), nullable=False, index=True)
    meal_type = db.Column(
        db.String(20),
        db.CheckConstraint(
            "meal_type IN ('breakfast','morning_snack','lunch','afternoon_snack','dinner','evening_snack')"
        ),
        nullable=False,
    )
    meal_time = db.Column(db.Time)
    description = db.Column(db.Text)
    foods = db.Column(db.JSON, default=list)
    calories = db.Column(db.Float, default=0)
    protein = db.Column(db.Float, default=0)
    carbs = db.Column(db.Float, default=0)
    fat = db.Column(db.Float, default=0)
    notes = db.Column(db.Text)
    sort_order = db.Column(db.Integer, default=0)

    day = db.relationship("NutritionPlanDay", back_populates="meals")

    def to_dict(self):
        return {
            "id": self.id,
            "day_id": self.day_id,
            "meal_type": self.meal_type,
            "meal_time": self.meal_time.strftime("%H:%M") if self.meal_time else None,
            "description": self.description,
            "foods": self.foods or [],
            "calories": self.calories or 0,
            "protein": self.protein or 0,
            "carbs": self.carbs or 0,
            "fat": self.fat or 0,
            "notes": self.notes,
            "sort_order": self.sort_order,
        }
