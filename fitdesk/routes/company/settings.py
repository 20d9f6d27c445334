from datetime import date, datetime, time

from flask import current_app, g, jsonify, request
from sqlalchemy import func

from fitdesk.errors import Forbidden
from fitdesk.extensions import db
from fitdesk.models import (ClassSchedule, GymClass, Staff, Student, StudentSubscription,
                            SubscriptionPayment)
from fitdesk.schemas.company import CompanySettingsSchema
from fitdesk.services.accounts import delete_company_account, unique_registration_code
from fitdesk.services.billing import pending_proofs_count
from fitdesk.utils.decorators import company_user_required, permission_required, require_confirmation
from fitdesk.utils.storage import delete_file

from . import company_bp


# ---------------- API: Company settings ----------------
@company_bp.route("/company", methods=["GET"])
@company_user_required
def get_company():
    return jsonify(g.company.to_dict()), 200


@company_bp.route("/company", methods=["PUT"])
@permission_required("settings", "edit")
def update_company():
    data = CompanySettingsSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(g.company, key, value)
    db.session.commit()
    current_app.logger.info("Company %s settings updated", g.company.id)
    return jsonify({"msg": "Settings saved", "company": g.company.to_dict()}), 200


@company_bp.route("/company/registration-code", methods=["POST"])
@permission_required("settings", "edit")
def regenerate_registration_code():
    g.company.registration_code = unique_registration_code()
    db.session.commit()
    return jsonify({"msg": "Registration code updated", "registration_code": g.company.registration_code}), 200


@company_bp.route("/company", methods=["DELETE"])
@company_user_required
def delete_company():
    if g.actor.kind != "owner":
        raise Forbidden("Only the company owner can delete the account")
    require_confirmation()
    company_id = g.company.id
    paths = delete_company_account(g.company)
    db.session.commit()
    for path in paths:
        delete_file(path)
    current_app.logger.warning("Company %s deleted by its owner", company_id)
    return jsonify({"msg": "Account and all associated data deleted"}), 200


# ---------------- API: Dashboard ----------------
def _financial_kpis(company_id, month_start_dt):
    payments = (SubscriptionPayment.query
                .join(StudentSubscription)
                .join(Student)
                .filter(Student.company_id == company_id))
    revenue = (payments
               .filter(SubscriptionPayment.status == "paid", SubscriptionPayment.paid_at >= month_start_dt)
               .with_entities(func.coalesce(func.sum(SubscriptionPayment.amount), 0))
               .scalar())
    return {
        "revenue_this_month": float(revenue or 0),
        "pending_payments": payments.filter(SubscriptionPayment.status == "pending").count(),
        "overdue_payments": payments.filter(SubscriptionPayment.status == "overdue").count(),
        "pending_payment_proofs": pending_proofs_count(company_id),
    }


@company_bp.route("/company/dashboard", methods=["GET"])
@company_user_required
def dashboard():
    company_id = g.company.id
    today = date.today()
    month_start = today.replace(day=1)
    month_start_dt = datetime.combine(month_start, time.min)

    active_students = Student.query.filter_by(company_id=company_id, status="active").count()
    new_students = (Student.query
                    .filter(Student.company_id == company_id, Student.created_at >= month_start_dt)
                    .count())
    active_staff = Staff.query.filter_by(company_id=company_id, is_active=True).count()

    classes_today = (ClassSchedule.query.join(GymClass)
                     .filter(GymClass.company_id == company_id,
                             ClassSchedule.scheduled_date == today,
                             ClassSchedule.status == "scheduled")
                     .count())

    data = {
        "active_students": active_students,
        "new_students_this_month": new_students,
        "active_staff": active_staff,
        "pending_approvals": Student.query.filter_by(company_id=company_id, status="pending_approval").count(),
        "classes_today": classes_today,
        "trial_days_left": g.company.trial_days_left,
    }
    if g.actor.can("financial", "view"):
        data.update(_financial_kpis(company_id, month_start_dt))
    return jsonify(data), 200
