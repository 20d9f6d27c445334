import io
from datetime import date, timedelta

from fitdesk.extensions import db
from fitdesk.models import PaymentProof, SubscriptionPayment
from fitdesk.services.billing import check_overdue_payments, create_subscription
from fitdesk.utils.calculations import add_months


def test_plan_crud_and_delete_protection(client, owner_headers, plan, student):
    response = client.post("/api/subscription-plans", headers=owner_headers,
                           json={"name": "Quarterly", "price": "90.00", "duration_days": 90})
    assert response.status_code == 201
    assert response.get_json()["plan"]["price"] == 90.0

    create_subscription(student, plan)
    db.session.commit()
    response = client.delete(f"/api/subscription-plans/{plan.id}?confirm=true", headers=owner_headers)
    assert response.status_code == 409


def test_subscription_creates_monthly_installments(client, owner_headers, plan, student):
    start = date(2026, 1, 31)

    response = client.post(f"/api/students/{student.id}/subscriptions", headers=owner_headers, json={
        "plan_id": plan.id,
        "start_date": start.isoformat(),
        "commitment_months": 3,
    })

    assert response.status_code == 201
    subscription = response.get_json()["subscription"]
    assert subscription["total_installments"] == 3
    assert subscription["commitment_end_date"] == "2026-04-30"
    assert subscription["amount_due"] == 105.0

    payments = client.get(f"/api/subscriptions/{subscription['id']}/payments", headers=owner_headers).get_json()
    assert [p["due_date"] for p in payments] == ["2026-01-31", "2026-02-28", "2026-03-31"]


def test_mark_installment_paid(client, owner_headers, plan, student):
    subscription = create_subscription(student, plan, commitment_months=2)
    db.session.commit()
    first = subscription.payments.first()

    response = client.post(f"/api/payments/{first.id}/pay", headers=owner_headers, json={"payment_method": "mbway"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["payment"]["status"] == "paid"
    assert body["subscription"]["paid_installments"] == 1
    assert body["subscription"]["payment_status"] == "pending"
    assert body["subscription"]["next_payment_date"] == add_months(subscription.start_date, 1).isoformat()

    again = client.post(f"/api/payments/{first.id}/pay", headers=owner_headers, json={})
    assert again.status_code == 409


def test_cancel_subscription_cancels_open_installments(client, owner_headers, plan, student):
    subscription = create_subscription(student, plan, commitment_months=3)
    db.session.commit()

    response = client.post(f"/api/subscriptions/{subscription.id}/cancel", headers=owner_headers)

    assert response.status_code == 200
    assert {p.status for p in subscription.payments} == {"cancelled"}
    assert client.post(f"/api/subscriptions/{subscription.id}/cancel", headers=owner_headers).status_code == 409


def test_overdue_check_flags_blocks_and_expires(plan, student):
    today = date.today()
    subscription = create_subscription(student, plan, start_date=today - timedelta(days=40), commitment_months=2)
    db.session.commit()

    summary = check_overdue_payments(today=today)
    db.session.commit()

    assert summary == {"overdue": 2, "blocked": 1, "expired": 1}
    assert subscription.payment_status == "overdue"
    assert subscription.status == "expired"
    assert student.status == "blocked"
    assert student.block_reason.startswith("Payment overdue since")
    assert student.user.notifications.filter_by(type="payment_overdue").count() == 2


def test_overdue_check_respects_grace_period(plan, student):
    plan.grace_period_days = 15
    today = date.today()
    subscription = create_subscription(student, plan, start_date=today - timedelta(days=10))
    db.session.commit()

    summary = check_overdue_payments(today=today)

    assert summary["overdue"] == 0
    assert subscription.payments.first().status == "pending"
    assert student.status == "active"


def test_overdue_check_is_idempotent(plan, student):
    today = date.today()
    create_subscription(student, plan, start_date=today - timedelta(days=5))
    db.session.commit()

    first = check_overdue_payments(today=today)
    second = check_overdue_payments(today=today)

    assert first["overdue"] == 1
    assert second["overdue"] == 0
    assert first["blocked"] == 0


def test_student_uploads_proof_and_company_approves(client, owner_headers, student_headers, plan, student):
    subscription = create_subscription(student, plan)
    db.session.commit()

    response = client.post(
        "/api/portal/payment-proofs",
        headers=student_headers,
        data={
            "amount": "35.00",
            "subscription_id": str(subscription.id),
            "file": (io.BytesIO(b"\x89PNG proof"), "receipt.png", "image/png"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 201
    proof_id = response.get_json()["proof"]["id"]

    pending = client.get("/api/payment-proofs?status=pending", headers=owner_headers).get_json()
    assert [p["id"] for p in pending] == [proof_id]

    review = client.post(f"/api/payment-proofs/{proof_id}/review", headers=owner_headers,
                         json={"status": "approved"})
    assert review.status_code == 200
    settled = review.get_json()["settled_payment"]
    assert settled["status"] == "paid"
    assert settled["payment_method"] == "transfer"
    assert db.session.get(SubscriptionPayment, settled["id"]).proof_id == proof_id
    assert subscription.payment_status == "paid"

    again = client.post(f"/api/payment-proofs/{proof_id}/review", headers=owner_headers,
                        json={"status": "rejected"})
    assert again.status_code == 409


def test_proof_amount_must_be_positive(client, student_headers):
    response = client.post(
        "/api/portal/payment-proofs",
        headers=student_headers,
        data={"amount": "0", "file": (io.BytesIO(b"%PDF"), "receipt.pdf", "application/pdf")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert PaymentProof.query.count() == 0


def test_blocked_student_still_reaches_payments(client, student_headers, student):
    student.block("Unpaid fees")
    db.session.commit()

    assert client.get("/api/portal/payments", headers=student_headers).status_code == 200
    blocked = client.get("/api/portal/training", headers=student_headers)
    assert blocked.status_code == 403
    assert blocked.get_json()["code"] == "student_blocked"


def test_export_payments_uses_portuguese_format(client, owner_headers, plan, student):
    plan.price = 1234.5
    create_subscription(student, plan)
    db.session.commit()

    response = client.get("/api/payments/export", headers=owner_headers)

    assert response.status_code == 200
    assert "1.234,50" in response.get_data(as_text=True)
