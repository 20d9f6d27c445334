from datetime import date, timedelta

from sqlalchemy import text

from fitdesk.extensions import db
from fitdesk.models import GymClass, Role, Staff, TrainingPlan, User

from .conftest import PASSWORD


def test_create_staff_and_reject_duplicate_email(client, owner_headers):
    payload = {"full_name": "Sofia Reis", "email": "Sofia@Gym.pt", "position": "Receptionist"}

    response = client.post("/api/staff", headers=owner_headers, json=payload)
    assert response.status_code == 201
    assert response.get_json()["staff"]["email"] == "sofia@gym.pt"

    duplicate = client.post("/api/staff", headers=owner_headers, json=payload)
    assert duplicate.status_code == 409


def test_assign_role_from_other_company_fails(client, owner_headers, trainer, other_company):
    foreign_role = Role.query.filter_by(company_id=other_company.id).first()

    response = client.put(f"/api/staff/{trainer.id}/role", headers=owner_headers,
                          json={"role_id": foreign_role.id})

    assert response.status_code == 404


def test_inactive_staff_cannot_log_in(client, owner_headers, trainer):
    client.post(f"/api/staff/{trainer.id}/deactivate", headers=owner_headers)

    response = client.post("/api/auth/login", json={"email": "trainer@gym.pt", "password": PASSWORD})

    assert response.status_code == 403


def test_trainer_has_no_hr_access(client, trainer_headers):
    assert client.get("/api/staff", headers=trainer_headers).status_code == 403


def test_delete_staff_unassigns_students(client, owner_headers, trainer, make_student):
    student = make_student(personal_trainer_id=trainer.id)

    response = client.delete(f"/api/staff/{trainer.id}", headers=owner_headers, json={"confirm": True})

    assert response.status_code == 200
    assert db.session.get(Staff, trainer.id) is None
    assert student.personal_trainer_id is None


def test_delete_trainer_with_authored_plans_under_foreign_keys(client, owner_headers, trainer, trainer_headers, student):
    db.session.execute(text("PRAGMA foreign_keys=ON"))
    try:
        created = client.post(f"/api/students/{student.id}/training-plans", headers=trainer_headers,
                              json={"title": "Strength"})
        assert created.status_code == 201
        plan_id = created.get_json()["plan"]["id"]
        gym_class = GymClass(company_id=trainer.company_id, name="Spinning", default_instructor_id=trainer.id)
        db.session.add(gym_class)
        db.session.commit()
        user_id = trainer.user_id

        response = client.delete(f"/api/staff/{trainer.id}?confirm=true", headers=owner_headers)

        assert response.status_code == 200
        db.session.expire_all()
        assert db.session.get(User, user_id) is None
        assert db.session.get(TrainingPlan, plan_id).created_by is None
        assert db.session.get(GymClass, gym_class.id).default_instructor_id is None
    finally:
        db.session.commit()
        db.session.execute(text("PRAGMA foreign_keys=OFF"))


def test_payment_config_upsert(client, owner_headers, trainer):
    default = client.get(f"/api/staff/{trainer.id}/payment-config", headers=owner_headers).get_json()
    assert default["payment_type"] == "monthly"
    assert default["base_salary"] == 0

    response = client.put(f"/api/staff/{trainer.id}/payment-config", headers=owner_headers, json={
        "payment_type": "hourly",
        "hourly_rate": "12.50",
        "bank_iban": "pt50 0002 0123 1234 5678 9015 4",
        "nif": "123456789",
    })

    assert response.status_code == 200
    config = response.get_json()["payment_config"]
    assert config["hourly_rate"] == 12.5
    assert config["bank_iban"] == "PT50000201231234567890154"


def test_payment_config_rejects_unknown_type(client, owner_headers, trainer):
    response = client.put(f"/api/staff/{trainer.id}/payment-config", headers=owner_headers,
                          json={"payment_type": "weekly"})

    assert response.status_code == 400


def test_evaluation_overall_score_ignores_unrated(client, owner_headers, trainer):
    response = client.post(f"/api/staff/{trainer.id}/evaluations", headers=owner_headers, json={
        "technical_score": 9,
        "punctuality_score": 8.5,
        "teamwork_score": 7.5,
        "communication_score": 0,
    })

    assert response.status_code == 201
    evaluation = response.get_json()["evaluation"]
    assert evaluation["overall_score"] == 8.3
    assert evaluation["score_band"] == "excellent"


def test_evaluation_scores_use_half_steps(client, owner_headers, trainer):
    response = client.post(f"/api/staff/{trainer.id}/evaluations", headers=owner_headers,
                           json={"technical_score": 7.3})

    assert response.status_code == 400
    assert response.get_json()["msg"] == "Score must be a multiple of 0.5"


def test_training_certificate_status(client, owner_headers, trainer):
    soon = (date.today() + timedelta(days=10)).isoformat()

    response = client.post(f"/api/staff/{trainer.id}/trainings", headers=owner_headers, json={
        "training_name": "First aid",
        "expiry_date": soon,
        "hours": 8,
    })

    assert response.status_code == 201
    assert response.get_json()["training"]["certificate_status"] == "expiring"


def test_roles_crud(client, owner_headers):
    response = client.post("/api/roles", headers=owner_headers, json={
        "name": "Reception",
        "permissions": ["students:view", "students:create", "financial:view"],
    })
    assert response.status_code == 201
    role = response.get_json()["role"]
    assert role["permissions"] == ["financial:view", "students:create", "students:view"]

    invalid = client.post("/api/roles", headers=owner_headers,
                          json={"name": "Broken", "permissions": ["garage:view"]})
    assert invalid.status_code == 400

    assert client.delete(f"/api/roles/{role['id']}", headers=owner_headers).status_code == 409
    assert client.delete(f"/api/roles/{role['id']}?confirm=true", headers=owner_headers).status_code == 200
