from flask import g, jsonify

from fitdesk.services.plans import active_first
from fitdesk.utils.decorators import student_required

from . import portal_bp


@portal_bp.route("/training", methods=["GET"])
@student_required
def my_training_plans():
    return jsonify([plan.to_dict() for plan in active_first(g.student.training_plans.all())]), 200


@portal_bp.route("/nutrition", methods=["GET"])
@student_required
def my_nutrition_plans():
    return jsonify([plan.to_dict() for plan in active_first(g.student.nutrition_plans.all())]), 200
