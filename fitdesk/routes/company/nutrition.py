from flask import g, jsonify, request

from fitdesk.errors import NotFound
from fitdesk.extensions import db
from fitdesk.models import NutritionPlan, NutritionPlanDay, NutritionPlanMeal
from fitdesk.models.nutrition_plans import MEAL_TYPES
from fitdesk.schemas.plans import MealSchema, NutritionDaySchema, NutritionPlanSchema
from fitdesk.services.plans import active_first, add_meal, create_nutrition_plan, set_nutrition_plan_active
from fitdesk.utils.decorators import get_company_record, permission_required, require_confirmation

from . import company_bp
from .lookups import get_student


def _get_day(day_id):
    day = (NutritionPlanDay.query.join(NutritionPlan)
           .filter(NutritionPlanDay.id == day_id, NutritionPlan.company_id == g.company.id)
           .first())
    if day is None:
        raise NotFound("Nutrition day not found")
    return day


def _get_meal(meal_id):
    meal = (NutritionPlanMeal.query
            .join(NutritionPlanDay)
            .join(NutritionPlan)
            .filter(NutritionPlanMeal.id == meal_id, NutritionPlan.company_id == g.company.id)
            .first())
    if meal is None:
        raise NotFound("Meal not found")
    return meal


# ================================
# Nutrition plans
# ================================

@company_bp.route("/students/<int:student_id>/nutrition-plans", methods=["GET"])
@permission_required("students", "view")
def list_nutrition_plans(student_id):
    student = get_student(student_id)
    return jsonify([plan.to_dict() for plan in active_first(student.nutrition_plans.all())]), 200


@company_bp.route("/students/<int:student_id>/nutrition-plans", methods=["POST"])
@permission_required("students", "edit")
def create_student_nutrition_plan(student_id):
    student = get_student(student_id)
    data = NutritionPlanSchema().load(request.get_json() or {})
    plan = create_nutrition_plan(student, data, created_by=g.current_user.id)
    db.session.commit()
    return jsonify({"msg": "Nutrition plan created", "plan": plan.to_dict()}), 201


@company_bp.route("/nutrition-plans/<int:plan_id>", methods=["GET"])
@permission_required("students", "view")
def get_nutrition_plan(plan_id):
    plan = get_company_record(NutritionPlan, plan_id, "Nutrition plan not found")
    return jsonify(plan.to_dict()), 200


@company_bp.route("/nutrition-plans/<int:plan_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_nutrition_plan(plan_id):
    plan = get_company_record(NutritionPlan, plan_id, "Nutrition plan not found")
    data = NutritionPlanSchema().load(request.get_json() or {}, partial=True)
    is_active = data.pop("is_active", None)
    for key, value in data.items():
        setattr(plan, key, value)
    if is_active is not None:
        set_nutrition_plan_active(plan, is_active)
    db.session.commit()
    return jsonify({"msg": "Nutrition plan updated", "plan": plan.to_dict()}), 200


@company_bp.route("/nutrition-plans/<int:plan_id>/toggle-active", methods=["POST"])
@permission_required("students", "edit")
def toggle_nutrition_plan(plan_id):
    plan = get_company_record(NutritionPlan, plan_id, "Nutrition plan not found")
    set_nutrition_plan_active(plan, not plan.is_active)
    db.session.commit()
    return jsonify({"msg": "Plan activated" if plan.is_active else "Plan deactivated", "is_active": plan.is_active}), 200


@company_bp.route("/nutrition-plans/<int:plan_id>", methods=["DELETE"])
@permission_required("students", "delete")
def delete_nutrition_plan(plan_id):
    plan = get_company_record(NutritionPlan, plan_id, "Nutrition plan not found")
    require_confirmation()
    db.session.delete(plan)
    db.session.commit()
    return jsonify({"msg": "Nutrition plan deleted"}), 200


# ---------------- API: Days and meals ----------------
@company_bp.route("/nutrition-days/<int:day_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_nutrition_day(day_id):
    day = _get_day(day_id)
    data = NutritionDaySchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(day, key, value)
    db.session.commit()
    return jsonify({"msg": "Targets updated", "day": day.to_dict()}), 200


@company_bp.route("/nutrition-days/<int:day_id>/totals", methods=["GET"])
@permission_required("students", "view")
def nutrition_day_totals(day_id):
    day = _get_day(day_id)
    return jsonify({"totals": day.totals, "target_progress": day.target_progress}), 200


@company_bp.route("/nutrition-days/<int:day_id>/meals", methods=["POST"])
@permission_required("students", "edit")
def create_meal(day_id):
    day = _get_day(day_id)
    data = MealSchema().load(request.get_json() or {})
    meal = add_meal(day, data)
    db.session.commit()
    return jsonify({"msg": "Meal added", "meal": meal.to_dict(), "totals": day.totals}), 201


@company_bp.route("/nutrition-meals/<int:meal_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_meal(meal_id):
    meal = _get_meal(meal_id)
    data = MealSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(meal, key, value)
    db.session.commit()
    return jsonify({"msg": "Meal updated", "meal": meal.to_dict(), "totals": meal.day.totals}), 200


@company_bp.route("/nutrition-meals/<int:meal_id>", methods=["DELETE"])
@permission_required("students", "edit")
def delete_meal(meal_id):
    meal = _get_meal(meal_id)
    require_confirmation()
    db.session.delete(meal)
    db.session.commit()
    return jsonify({"msg": "Meal removed"}), 200


@company_bp.route("/meal-types", methods=["GET"])
@permission_required("students", "view")
def meal_types():
    return jsonify(list(MEAL_TYPES)), 200
