from flask import current_app, g, jsonify, request

from fitdesk.errors import ApiError, NotFound
from fitdesk.extensions import db
from fitdesk.models import LibraryExercise, TrainingPlan, TrainingPlanDay, TrainingPlanExercise
from fitdesk.models.training_plan import MUSCLE_GROUPS
from fitdesk.schemas.plans import ExerciseSchema, LibraryExerciseSchema, TrainingDaySchema, TrainingPlanSchema
from fitdesk.services.plans import active_first, add_exercise, create_training_plan, set_training_plan_active
from fitdesk.utils.decorators import get_company_record, permission_required, require_confirmation

from . import company_bp
from .lookups import get_student


def _get_day(day_id):
    day = (TrainingPlanDay.query.join(TrainingPlan)
           .filter(TrainingPlanDay.id == day_id, TrainingPlan.company_id == g.company.id)
           .first())
    if day is None:
        raise NotFound("Training day not found")
    return day


def _get_exercise(exercise_id):
    exercise = (TrainingPlanExercise.query
                .join(TrainingPlanDay)
                .join(TrainingPlan)
                .filter(TrainingPlanExercise.id == exercise_id, TrainingPlan.company_id == g.company.id)
                .first())
    if exercise is None:
        raise NotFound("Exercise not found")
    return exercise


# ================================
# Training plans
# ================================

@company_bp.route("/students/<int:student_id>/training-plans", methods=["GET"])
@permission_required("students", "view")
def list_training_plans(student_id):
    student = get_student(student_id)
    return jsonify([plan.to_dict() for plan in active_first(student.training_plans.all())]), 200


@company_bp.route("/students/<int:student_id>/training-plans", methods=["POST"])
@permission_required("students", "edit")
def create_student_training_plan(student_id):
    student = get_student(student_id)
    data = TrainingPlanSchema().load(request.get_json() or {})
    plan = create_training_plan(student, data, created_by=g.current_user.id)
    db.session.commit()
    return jsonify({"msg": "Training plan created", "plan": plan.to_dict()}), 201


@company_bp.route("/training-plans/<int:plan_id>", methods=["GET"])
@permission_required("students", "view")
def get_training_plan(plan_id):
    plan = get_company_record(TrainingPlan, plan_id, "Training plan not found")
    return jsonify(plan.to_dict()), 200


@company_bp.route("/training-plans/<int:plan_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_training_plan(plan_id):
    plan = get_company_record(TrainingPlan, plan_id, "Training plan not found")
    data = TrainingPlanSchema().load(request.get_json() or {}, partial=True)
    is_active = data.pop("is_active", None)
    for key, value in data.items():
        setattr(plan, key, value)
    if is_active is not None:
        set_training_plan_active(plan, is_active)
    db.session.commit()
    return jsonify({"msg": "Training plan updated", "plan": plan.to_dict()}), 200


@company_bp.route("/training-plans/<int:plan_id>/toggle-active", methods=["POST"])
@permission_required("students", "edit")
def toggle_training_plan(plan_id):
    plan = get_company_record(TrainingPlan, plan_id, "Training plan not found")
    set_training_plan_active(plan, not plan.is_active)
    db.session.commit()
    return jsonify({"msg": "Plan activated" if plan.is_active else "Plan deactivated", "is_active": plan.is_active}), 200


@company_bp.route("/training-plans/<int:plan_id>", methods=["DELETE"])
@permission_required("students", "delete")
def delete_training_plan(plan_id):
    plan = get_company_record(TrainingPlan, plan_id, "Training plan not found")
    require_confirmation()
    db.session.delete(plan)
    db.session.commit()
    current_app.logger.info("Training plan %s deleted", plan_id)
    return jsonify({"msg": "Training plan deleted"}), 200


# ---------------- API: Days and exercises ----------------
@company_bp.route("/training-days/<int:day_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_training_day(day_id):
    day = _get_day(day_id)
    data = TrainingDaySchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(day, key, value)
    db.session.commit()
    return jsonify({"msg": "Day updated", "day": day.to_dict()}), 200


@company_bp.route("/training-days/<int:day_id>/toggle-rest", methods=["POST"])
@permission_required("students", "edit")
def toggle_rest_day(day_id):
    day = _get_day(day_id)
    day.is_rest_day = not day.is_rest_day
    db.session.commit()
    return jsonify({"msg": "Day updated", "day": day.to_dict()}), 200


@company_bp.route("/training-days/<int:day_id>/exercises", methods=["POST"])
@permission_required("students", "edit")
def create_exercise(day_id):
    day = _get_day(day_id)
    data = ExerciseSchema().load(request.get_json() or {})
    if data.get("library_exercise_id") is not None:
        get_company_record(LibraryExercise, data["library_exercise_id"], "Exercise not found in library")
    data.pop("sort_order", None)
    exercise = add_exercise(day, data)
    db.session.commit()
    return jsonify({"msg": "Exercise added", "exercise": exercise.to_dict()}), 201


@company_bp.route("/training-exercises/<int:exercise_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_exercise(exercise_id):
    exercise = _get_exercise(exercise_id)
    data = ExerciseSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(exercise, key, value)
    db.session.commit()
    return jsonify({"msg": "Exercise updated", "exercise": exercise.to_dict()}), 200


@company_bp.route("/training-exercises/<int:exercise_id>", methods=["DELETE"])
@permission_required("students", "edit")
def delete_exercise(exercise_id):
    exercise = _get_exercise(exercise_id)
    require_confirmation()
    db.session.delete(exercise)
    db.session.commit()
    return jsonify({"msg": "Exercise removed"}), 200


@company_bp.route("/muscle-groups", methods=["GET"])
@permission_required("students", "view")
def muscle_groups():
    return jsonify(list(MUSCLE_GROUPS)), 200


# ---------------- API: Exercise library ----------------
@company_bp.route("/exercise-library", methods=["GET"])
@permission_required("students", "view")
def list_library_exercises():
    query = LibraryExercise.query.filter_by(company_id=g.company.id)
    muscle_group = request.args.get("muscle_group")
    if muscle_group:
        query = query.filter_by(muscle_group=muscle_group)
    return jsonify([e.to_dict() for e in query.order_by(LibraryExercise.name).all()]), 200


@company_bp.route("/exercise-library", methods=["POST"])
@permission_required("students", "edit")
def create_library_exercise():
    data = LibraryExerciseSchema().load(request.get_json() or {})
    if LibraryExercise.query.filter_by(company_id=g.company.id, name=data["name"]).first():
        raise ApiError("An exercise with this name already exists", 409)
    exercise = LibraryExercise(company_id=g.company.id, **data)
    db.session.add(exercise)
    db.session.commit()
    return jsonify({"msg": "Exercise created", "exercise": exercise.to_dict()}), 201


@company_bp.route("/exercise-library/<int:exercise_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_library_exercise(exercise_id):
    exercise = get_company_record(LibraryExercise, exercise_id, "Exercise not found")
    data = LibraryExerciseSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(exercise, key, value)
    db.session.commit()
    return jsonify({"msg": "Exercise updated", "exercise": exercise.to_dict()}), 200


@company_bp.route("/exercise-library/<int:exercise_id>", methods=["DELETE"])
@permission_required("students", "delete")
def delete_library_exercise(exercise_id):
    exercise = get_company_record(LibraryExercise, exercise_id, "Exercise not found")
    require_confirmation()
    TrainingPlanExercise.query.filter_by(library_exercise_id=exercise.id).update({"library_exercise_id": None})
    db.session.delete(exercise)
    db.session.commit()
    return jsonify({"msg": "Exercise deleted"}), 200
