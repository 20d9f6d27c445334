import csv
import io
from datetime import datetime

from flask import current_app, g, jsonify, request, send_file

from fitdesk.errors import ApiError, NotFound
from fitdesk.extensions import db
from fitdesk.models import Student, StudentSubscription, SubscriptionPayment, SubscriptionPlan
from fitdesk.schemas.subscriptions import MarkPaidSchema, PlanSchema, StudentSubscriptionSchema
from fitdesk.services.billing import cancel_subscription, create_subscription, mark_payment_paid
from fitdesk.utils.decorators import get_company_record, permission_required, require_confirmation
from fitdesk.utils.formatters import format_currency, format_date_pt

from . import company_bp
from .lookups import get_child_record, get_student


# ================================
# Subscription plans
# ================================

@company_bp.route("/subscription-plans", methods=["GET"])
@permission_required("financial", "view")
def list_plans():
    query = g.company.subscription_plans
    if request.args.get("active") == "true":
        query = query.filter_by(is_active=True)
    return jsonify([plan.to_dict() for plan in query.order_by(SubscriptionPlan.price).all()]), 200


@company_bp.route("/subscription-plans", methods=["POST"])
@permission_required("financial", "create")
def create_plan():
    data = PlanSchema().load(request.get_json() or {})
    plan = SubscriptionPlan(company_id=g.company.id, **data)
    db.session.add(plan)
    db.session.commit()
    current_app.logger.info("Plan %s created in company %s", plan.id, g.company.id)
    return jsonify({"msg": "Plan created", "plan": plan.to_dict()}), 201


@company_bp.route("/subscription-plans/<int:plan_id>", methods=["PUT"])
@permission_required("financial", "edit")
def update_plan(plan_id):
    plan = get_company_record(SubscriptionPlan, plan_id, "Plan not found")
    data = PlanSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(plan, key, value)
    db.session.commit()
    return jsonify({"msg": "Plan updated", "plan": plan.to_dict()}), 200


@company_bp.route("/subscription-plans/<int:plan_id>", methods=["DELETE"])
@permission_required("financial", "delete")
def delete_plan(plan_id):
    plan = get_company_record(SubscriptionPlan, plan_id, "Plan not found")
    if plan.subscriptions.count():
        raise ApiError("This plan has subscriptions. Deactivate it instead.", 409)
    require_confirmation()
    db.session.delete(plan)
    db.session.commit()
    return jsonify({"msg": "Plan deleted"}), 200


# ================================
# Student subscriptions
# ================================

@company_bp.route("/subscriptions", methods=["GET"])
@permission_required("financial", "view")
def list_company_subscriptions():
    query = StudentSubscription.query.join(Student).filter(Student.company_id == g.company.id)
    for field in ("status", "payment_status"):
        value = request.args.get(field)
        if value:
            query = query.filter(getattr(StudentSubscription, field) == value)
    subscriptions = query.order_by(StudentSubscription.start_date.desc()).all()
    return jsonify([dict(s.to_dict(), student_name=s.student.full_name) for s in subscriptions]), 200


@company_bp.route("/students/<int:student_id>/subscriptions", methods=["GET"])
@permission_required("financial", "view")
def list_student_subscriptions(student_id):
    student = get_student(student_id)
    subscriptions = student.subscriptions.order_by(StudentSubscription.start_date.desc()).all()
    return jsonify([s.to_dict() for s in subscriptions]), 200


@company_bp.route("/students/<int:student_id>/subscriptions", methods=["POST"])
@permission_required("financial", "create")
def add_student_subscription(student_id):
    student = get_student(student_id)
    data = StudentSubscriptionSchema().load(request.get_json() or {})
    plan = get_company_record(SubscriptionPlan, data["plan_id"], "Plan not found")
    if not plan.is_active:
        raise ApiError("This plan is not active", 400)

    subscription = create_subscription(
        student, plan,
        start_date=data.get("start_date"),
        commitment_months=data.get("commitment_months"),
        installment_amount=data.get("installment_amount"),
        auto_renewal=data["auto_renewal"],
    )
    db.session.commit()
    return jsonify({"msg": "Subscription added", "subscription": subscription.to_dict()}), 201


@company_bp.route("/subscriptions/<int:subscription_id>/cancel", methods=["POST"])
@permission_required("financial", "edit")
def cancel_student_subscription(subscription_id):
    subscription = get_child_record(StudentSubscription, Student, subscription_id, "Subscription not found")
    cancel_subscription(subscription)
    db.session.commit()
    current_app.logger.info("Subscription %s cancelled", subscription.id)
    return jsonify({"msg": "Subscription cancelled", "subscription": subscription.to_dict()}), 200


@company_bp.route("/subscriptions/<int:subscription_id>", methods=["DELETE"])
@permission_required("financial", "delete")
def delete_student_subscription(subscription_id):
    subscription = get_child_record(StudentSubscription, Student, subscription_id, "Subscription not found")
    require_confirmation()
    db.session.delete(subscription)
    db.session.commit()
    return jsonify({"msg": "Subscription deleted"}), 200


# ---------------- API: Installments ----------------
@company_bp.route("/subscriptions/<int:subscription_id>/payments", methods=["GET"])
@permission_required("financial", "view")
def list_subscription_payments(subscription_id):
    subscription = get_child_record(StudentSubscription, Student, subscription_id, "Subscription not found")
    return jsonify([p.to_dict() for p in subscription.payments]), 200


@company_bp.route("/payments/<int:payment_id>/pay", methods=["POST"])
@permission_required("financial", "edit")
def pay_installment(payment_id):
    payment = (SubscriptionPayment.query
               .join(StudentSubscription)
               .join(Student)
               .filter(SubscriptionPayment.id == payment_id, Student.company_id == g.company.id)
               .first())
    if payment is None:
        raise NotFound("Payment not found")

    data = MarkPaidSchema().load(request.get_json() or {})
    mark_payment_paid(payment, data["payment_method"], data.get("notes"))
    db.session.commit()
    current_app.logger.info("Installment %s marked paid", payment.id)
    return jsonify({
        "msg": "Payment registered",
        "payment": payment.to_dict(),
        "subscription": payment.subscription.to_dict(),
    }), 200


@company_bp.route("/payments/export", methods=["GET"])
@permission_required("financial", "export")
def export_payments():
    payments = (SubscriptionPayment.query
                .join(StudentSubscription)
                .join(Student)
                .filter(Student.company_id == g.company.id)
                .order_by(SubscriptionPayment.due_date)
                .all())

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["Student", "Plan", "Installment", "Amount (EUR)", "Due date", "Status", "Paid on", "Method"])
    for payment in payments:
        subscription = payment.subscription
        writer.writerow([
            subscription.student.full_name,
            subscription.plan.name,
            f"{payment.installment_number}/{subscription.total_installments}",
            format_currency(payment.amount),
            format_date_pt(payment.due_date),
            payment.status,
            format_date_pt(payment.paid_at),
            payment.payment_method or "",
        ])
    output.seek(0)

    return send_file(
        io.BytesIO(output.getvalue().encode("utf-8")),
        mimetype="text/csv",
        as_attachment=True,
        download_name=f'payments_{datetime.now().strftime("%Y%m%d")}.csv'
    )
