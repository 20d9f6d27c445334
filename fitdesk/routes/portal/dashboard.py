from datetime import date, datetime

from flask import g, jsonify, request

from fitdesk.errors import ApiError
from fitdesk.extensions import db
from fitdesk.models import ClassEnrollment, ClassSchedule, NutritionPlan, StudentAnamnesis, TrainingPlan
from fitdesk.schemas.student import AnamnesisSchema, StudentSchema
from fitdesk.services.messaging import unread_count
from fitdesk.utils.decorators import student_required

from . import portal_bp

PROFILE_FIELDS = ("phone", "birth_date", "gender", "nationality", "nif", "address", "postal_code",
                  "city", "country", "emergency_contact", "emergency_phone", "health_notes")


@portal_bp.route("/dashboard", methods=["GET"])
@student_required(allow_blocked=True)
def dashboard():
    student = g.student
    training = student.training_plans.filter_by(is_active=True).order_by(TrainingPlan.id.desc()).first()
    nutrition = student.nutrition_plans.filter_by(is_active=True).order_by(NutritionPlan.id.desc()).first()

    subscriptions = student.subscriptions.filter_by(status="active").all()
    overdue = [s for s in subscriptions if s.payment_status == "overdue"]

    upcoming = (student.enrollments
                .join(ClassSchedule)
                .filter(ClassEnrollment.status == "enrolled",
                        ClassSchedule.status == "scheduled",
                        ClassSchedule.scheduled_date >= date.today())
                .order_by(ClassSchedule.scheduled_date, ClassSchedule.start_time)
                .limit(5)
                .all())

    return jsonify({
        "student": student.to_dict(),
        "company": {
            "name": student.company.name,
            "terms_text": student.company.terms_text,
            "regulations_text": student.company.regulations_text,
            "mbway_phone": student.company.mbway_phone,
        },
        "active_training_plan": training.to_dict() if training else None,
        "active_nutrition_plan": nutrition.to_dict() if nutrition else None,
        "subscriptions": [s.to_dict() for s in subscriptions],
        "overdue_subscriptions": [s.to_dict() for s in overdue],
        "total_due": round(sum(s.amount_due for s in overdue), 2),
        "upcoming_classes": [dict(e.schedule.to_dict(), enrollment_id=e.id) for e in upcoming],
        "unread_messages": unread_count(g.current_user),
    }), 200


@portal_bp.route("/onboarding", methods=["POST"])
@student_required
def onboarding():
    """Self-registered students complete their profile and health questionnaire."""
    student = g.student
    if student.status != "pending" or student.registration_method != "self_registered":
        raise ApiError("Onboarding is already complete", 400)

    payload = request.get_json() or {}
    profile = StudentSchema(only=PROFILE_FIELDS).load(payload.get("profile") or {}, partial=True)
    health = AnamnesisSchema().load(payload.get("anamnesis") or {}, partial=True)

    for key, value in profile.items():
        setattr(student, key, value)
    anamnesis = student.anamnesis
    if anamnesis is None:
        anamnesis = StudentAnamnesis(student=student)
        db.session.add(anamnesis)
    for key, value in health.items():
        setattr(anamnesis, key, value)

    student.status = "active"
    if payload.get("accept_terms"):
        student.terms_accepted_at = datetime.utcnow()
    db.session.commit()
    return jsonify({"msg": "Welcome aboard", "student": student.to_dict()}), 200
