from datetime import date

from fitdesk.extensions import db
from fitdesk.models import Company, GymClass, Message, Staff, Student, TrainingPlan, User
from fitdesk.services.billing import create_subscription


def test_dashboard_kpis(client, owner_headers, trainer, student, plan, make_student):
    make_student(full_name="Pedro Santos", status="pending_approval")
    subscription = create_subscription(student, plan, start_date=date.today(), commitment_months=2)
    db.session.commit()
    client.post(f"/api/payments/{subscription.payments.first().id}/pay", headers=owner_headers,
                json={"payment_method": "cash"})

    response = client.get("/api/company/dashboard", headers=owner_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["active_students"] == 1
    assert body["new_students_this_month"] == 2
    assert body["active_staff"] == 1
    assert body["pending_approvals"] == 1
    assert body["revenue_this_month"] == 35.0
    assert body["pending_payments"] == 1
    assert body["overdue_payments"] == 0
    assert body["trial_days_left"] > 0


def test_dashboard_hides_financials_without_permission(client, trainer_headers, student):
    response = client.get("/api/company/dashboard", headers=trainer_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["active_students"] == 1
    assert "revenue_this_month" not in body
    assert "pending_payment_proofs" not in body


def test_regenerate_registration_code(client, owner_headers, trainer_headers, company):
    old_code = company.registration_code

    response = client.post("/api/company/registration-code", headers=owner_headers)

    assert response.status_code == 200
    new_code = response.get_json()["registration_code"]
    assert new_code != old_code
    assert company.registration_code == new_code
    assert client.post("/api/company/registration-code", headers=trainer_headers).status_code == 403


def test_owner_deletes_company_account(client, owner, owner_headers, trainer, trainer_headers, student, plan,
                                       other_company):
    create_subscription(student, plan)
    client.post(f"/api/students/{student.id}/training-plans", headers=trainer_headers, json={"title": "Base"})
    client.post("/api/messages", headers=trainer_headers, json={"receiver_id": owner.id, "content": "Hi"})
    db.session.add(GymClass(company_id=trainer.company_id, name="Pilates", default_instructor_id=trainer.id))
    db.session.commit()
    company_id = owner.owned_company.id

    assert client.delete("/api/company", headers=owner_headers).status_code == 409
    response = client.delete("/api/company?confirm=true", headers=owner_headers)

    assert response.status_code == 200
    db.session.expire_all()
    assert db.session.get(Company, company_id) is None
    assert Student.query.count() == 0
    assert Staff.query.count() == 0
    assert TrainingPlan.query.count() == 0
    assert Message.query.count() == 0
    assert GymClass.query.count() == 0
    assert {u.email for u in User.query.all()} == {"other@gym.pt"}
    assert db.session.get(Company, other_company.id) is not None


def test_only_owner_deletes_company(client, trainer_headers, company):
    response = client.delete("/api/company?confirm=true", headers=trainer_headers)

    assert response.status_code == 403
    assert db.session.get(Company, company.id) is not None


def test_admin_deletes_company(client, admin, headers_for, company, student):
    company_id = company.id

    response = client.delete(f"/api/admin/companies/{company_id}?confirm=true", headers=headers_for(admin))

    assert response.status_code == 200
    db.session.expire_all()
    assert db.session.get(Company, company_id) is None
    assert User.query.filter_by(email="marta@mail.pt").first() is None
