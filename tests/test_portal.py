from datetime import date, timedelta

from fitdesk.extensions import db
from fitdesk.services.billing import check_overdue_payments, create_subscription

from .conftest import PASSWORD


def test_dashboard_shows_overdue_and_amount_due(client, student, student_headers, plan):
    today = date.today()
    create_subscription(student, plan, start_date=today - timedelta(days=5))
    db.session.commit()
    check_overdue_payments(today=today)
    db.session.commit()

    response = client.get("/api/portal/dashboard", headers=student_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["company"]["name"] == "Gym One"
    assert body["subscriptions"][0]["days_remaining"] == 25
    assert [s["payment_status"] for s in body["overdue_subscriptions"]] == ["overdue"]
    assert body["total_due"] == 35.0
    assert body["active_training_plan"] is None
    assert body["upcoming_classes"] == []


def test_onboarding_completes_self_registration(client, company):
    registered = client.post("/api/auth/register-student", json={
        "full_name": "Pedro Santos",
        "email": "pedro@mail.pt",
        "password": PASSWORD,
        "registration_code": company.registration_code,
    })
    headers = {"Authorization": f"Bearer {registered.get_json()['access_token']}"}

    response = client.post("/api/portal/onboarding", headers=headers, json={
        "profile": {"city": "Porto", "phone": "912345678"},
        "anamnesis": {"height_cm": 180, "weight_kg": 81, "fitness_goals": "Lose weight"},
        "accept_terms": True,
    })

    assert response.status_code == 200
    student = response.get_json()["student"]
    assert student["status"] == "active"
    assert student["city"] == "Porto"
    assert student["terms_accepted_at"] is not None

    again = client.post("/api/portal/onboarding", headers=headers, json={})
    assert again.status_code == 400


def test_blocked_student_is_refused_plans_and_booking(client, student, student_headers):
    student.status = "blocked"
    db.session.commit()

    for method, url in (("get", "/api/portal/training"), ("get", "/api/portal/nutrition"),
                        ("post", "/api/portal/classes/1/book")):
        response = getattr(client, method)(url, headers=student_headers)
        assert response.status_code == 403
        assert response.get_json()["code"] == "student_blocked"

    assert client.get("/api/portal/dashboard", headers=student_headers).status_code == 200
