"""Subscription installments, payment status and the overdue check."""
import logging
from datetime import date, datetime, timedelta

from fitdesk.errors import ApiError
from fitdesk.extensions import db
from fitdesk.models import PaymentProof, Student, StudentSubscription, SubscriptionPayment
from fitdesk.services.notifications import create_notification
from fitdesk.utils.calculations import add_months
from fitdesk.utils.formatters import format_currency, format_date_pt

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("pending", "overdue")


def create_subscription(student, plan, start_date=None, commitment_months=None,
                        installment_amount=None, auto_renewal=False):
    start_date = start_date or date.today()
    commitment_months = commitment_months or plan.default_commitment_months
    total_installments = commitment_months or 1
    amount = installment_amount if installment_amount is not None else plan.price

    subscription = StudentSubscription(
        student=student,
        plan=plan,
        start_date=start_date,
        end_date=start_date + timedelta(days=plan.duration_days),
        commitment_months=commitment_months,
        commitment_end_date=add_months(start_date, commitment_months) if commitment_months else None,
        auto_renewal=auto_renewal,
        status="active",
        payment_status="pending",
        installment_amount=installment_amount,
        total_installments=total_installments,
        paid_installments=0,
        next_payment_date=start_date,
    )
    db.session.add(subscription)

    for number in range(1, total_installments + 1):
        db.session.add(SubscriptionPayment(
            subscription=subscription,
            installment_number=number,
            amount=amount,
            due_date=add_months(start_date, number - 1),
            status="pending",
        ))
    db.session.flush()
    logger.info("Subscription %s created for student %s (%s installments)",
                subscription.id, student.id, total_installments)
    return subscription


def refresh_payment_status(subscription):
    """Recompute paid counters, payment_status and next_payment_date from the installments."""
    payments = subscription.payments.all()
    paid = [p for p in payments if p.status == "paid"]
    open_payments = sorted((p for p in payments if p.status in OPEN_STATUSES), key=lambda p: p.due_date)

    subscription.paid_installments = len(paid)
    if paid:
        paid_dates = [p.paid_at.date() for p in paid if p.paid_at]
        subscription.last_payment_date = max(paid_dates) if paid_dates else subscription.last_payment_date
    subscription.next_payment_date = open_payments[0].due_date if open_payments else None

    if any(p.status == "overdue" for p in open_payments):
        subscription.payment_status = "overdue"
    elif not open_payments and paid:
        subscription.payment_status = "paid"
    else:
        subscription.payment_status = "pending"
    return subscription


def mark_payment_paid(payment, payment_method="cash", notes=None, proof=None):
    if payment.status == "paid":
        raise ApiError("Installment is already paid", 409)
    if payment.status == "cancelled":
        raise ApiError("Installment is cancelled", 400)

    payment.status = "paid"
    payment.paid_at = datetime.utcnow()
    payment.payment_method = payment_method
    if notes:
        payment.notes = notes
    if proof is not None:
        payment.proof_id = proof.id
    db.session.flush()
    refresh_payment_status(payment.subscription)
    return payment


def oldest_open_payment(subscription):
    return (subscription.payments
            .filter(SubscriptionPayment.status.in_(OPEN_STATUSES))
            .order_by(SubscriptionPayment.due_date, SubscriptionPayment.installment_number)
            .first())


def cancel_subscription(subscription):
    if subscription.status == "cancelled":
        raise ApiError("Subscription is already cancelled", 409)
    subscription.status = "cancelled"
    subscription.cancelled_at = datetime.utcnow()
    for payment in subscription.payments:
        if payment.status in OPEN_STATUSES:
            payment.status = "cancelled"
    refresh_payment_status(subscription)
    return subscription


def review_proof(proof, status, reviewer, notes=None):
    """Approve or reject a payment proof; approval settles the oldest open installment."""
    if proof.status != "pending":
        raise ApiError("This proof was already reviewed", 409)

    proof.status = status
    proof.reviewed_at = datetime.utcnow()
    proof.reviewed_by = reviewer.id
    if notes:
        proof.notes = notes

    settled = None
    if status == "approved" and proof.subscription is not None:
        payment = oldest_open_payment(proof.subscription)
        if payment is not None:
            settled = mark_payment_paid(payment, "transfer", notes=f"Proof #{proof.id}", proof=proof)

    student = proof.student
    if student.user_id:
        title = "Payment proof approved" if status == "approved" else "Payment proof rejected"
        create_notification(
            student.user_id, title,
            content=f"{format_currency(proof.amount)} EUR",
            type="payment",
            company_id=student.company_id,
            reference_type="payment_proof",
            reference_id=proof.id,
        )
    logger.info("Payment proof %s %s by user %s", proof.id, status, reviewer.id)
    return settled


def check_overdue_payments(today=None):
    """Flag overdue installments, block long-overdue students and expire finished subscriptions."""
    today = today or date.today()
    summary = {"overdue": 0, "blocked": 0, "expired": 0}
    touched = {}

    candidates = (SubscriptionPayment.query
                  .join(StudentSubscription)
                  .filter(SubscriptionPayment.status == "pending",
                          SubscriptionPayment.due_date < today,
                          StudentSubscription.status == "active")
                  .all())
    for payment in candidates:
        subscription = payment.subscription
        grace = subscription.plan.grace_period_days or 0
        if today <= payment.due_date + timedelta(days=grace):
            continue
        payment.status = "overdue"
        touched[subscription.id] = subscription
        summary["overdue"] += 1

        student = subscription.student
        if student.user_id:
            create_notification(
                student.user_id,
                "Payment overdue",
                content=(f"Installment {payment.installment_number} of {format_currency(payment.amount)} EUR "
                         f"was due on {format_date_pt(payment.due_date)}"),
                type="payment_overdue",
                company_id=student.company_id,
                reference_type="subscription_payment",
                reference_id=payment.id,
            )

    overdue_subscriptions = (StudentSubscription.query
                             .join(SubscriptionPayment)
                             .filter(SubscriptionPayment.status == "overdue",
                                     StudentSubscription.status == "active")
                             .distinct()
                             .all())
    for subscription in overdue_subscriptions:
        touched[subscription.id] = subscription

    for subscription in touched.values():
        refresh_payment_status(subscription)
        block_after = subscription.plan.block_after_days
        student = subscription.student
        if not block_after or student.status == "blocked":
            continue
        oldest = oldest_open_payment(subscription)
        if oldest is not None and oldest.status == "overdue" and (today - oldest.due_date).days > block_after:
            student.block(f"Payment overdue since {format_date_pt(oldest.due_date)}")
            summary["blocked"] += 1
            logger.info("Student %s blocked for overdue payment", student.id)

    expired = (StudentSubscription.query
               .filter(StudentSubscription.status == "active",
                       StudentSubscription.end_date < today)
               .all())
    for subscription in expired:
        subscription.status = "expired"
        summary["expired"] += 1

    db.session.flush()
    return summary


def run_overdue_check(app):
    """Scheduler entry point."""
    with app.app_context():
        try:
            summary = check_overdue_payments()
            db.session.commit()
            logger.info("Overdue check finished: %s", summary)
        except Exception:
            db.session.rollback()
            logger.exception("Overdue check failed")


def pending_proofs_count(company_id):
    return (PaymentProof.query.join(Student)
            .filter(Student.company_id == company_id, PaymentProof.status == "pending")
            .count())
