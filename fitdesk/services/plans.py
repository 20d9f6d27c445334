"""Weekly training and nutrition plan builders."""
import logging

from fitdesk.extensions import db
from fitdesk.models import (NutritionPlan, NutritionPlanDay, NutritionPlanMeal, TrainingPlan,
                            TrainingPlanDay, TrainingPlanExercise)
from fitdesk.models.nutrition_plans import DEFAULT_TARGETS

logger = logging.getLogger(__name__)

SUNDAY = 6


def _deactivate_others(model, plan):
    (model.query
     .filter(model.student_id == plan.student_id, model.id != plan.id, model.is_active.is_(True))
     .update({"is_active": False}, synchronize_session="fetch"))


def create_training_plan(student, data, created_by=None):
    plan = TrainingPlan(
        company_id=student.company_id,
        student=student,
        created_by=created_by,
        title=data["title"],
        description=data.get("description"),
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        is_active=data.get("is_active", True),
    )
    plan.days = [
        TrainingPlanDay(day_of_week=day, is_rest_day=day == SUNDAY, title="Rest" if day == SUNDAY else None)
        for day in range(7)
    ]
    db.session.add(plan)
    db.session.flush()
    if plan.is_active:
        _deactivate_others(TrainingPlan, plan)
    logger.info("Training plan %s created for student %s", plan.id, student.id)
    return plan


def set_training_plan_active(plan, is_active):
    plan.is_active = is_active
    if is_active:
        _deactivate_others(TrainingPlan, plan)
    return plan


def add_exercise(day, data):
    exercise = TrainingPlanExercise(sort_order=len(day.exercises), **data)
    day.exercises.append(exercise)
    db.session.flush()
    return exercise


def create_nutrition_plan(student, data, created_by=None):
    plan = NutritionPlan(
        company_id=student.company_id,
        student=student,
        created_by=created_by,
        title=data["title"],
        description=data.get("description"),
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        is_active=data.get("is_active", True),
    )
    plan.days = [NutritionPlanDay(day_of_week=day, **DEFAULT_TARGETS) for day in range(7)]
    db.session.add(plan)
    db.session.flush()
    if plan.is_active:
        _deactivate_others(NutritionPlan, plan)
    logger.info("Nutrition plan %s created for student %s", plan.id, student.id)
    return plan


def set_nutrition_plan_active(plan, is_active):
    plan.is_active = is_active
    if is_active:
        _deactivate_others(NutritionPlan, plan)
    return plan


def add_meal(day, data):
    meal = NutritionPlanMeal(sort_order=len(day.meals), **data)
    day.meals.append(meal)
    db.session.flush()
    return meal


def active_first(plans):
    return sorted(plans, key=lambda plan: (not plan.is_active, -(plan.id or 0)))
