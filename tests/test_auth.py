import io

from fitdesk.extensions import db
from fitdesk.models import Company, Notification, PasswordResetRequest, Role, Student, User

from .conftest import PASSWORD


def test_register_creates_company_in_trial_with_default_roles(client):
    response = client.post("/api/auth/register", json={
        "full_name": "Joana Costa",
        "email": "Joana@Gym.pt",
        "password": PASSWORD,
        "company_name": "Costa Fitness",
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body["access_token"]
    assert body["account_type"] == "owner"
    assert body["user"]["email"] == "joana@gym.pt"

    company = Company.query.filter_by(name="Costa Fitness").one()
    assert company.trial_days_left >= 13
    assert len(company.registration_code) == 8
    assert {r.name for r in Role.query.filter_by(company_id=company.id)} == {"Administrador", "Personal Trainer"}


def test_register_rejects_duplicate_email(client, owner):
    response = client.post("/api/auth/register", json={
        "full_name": "Someone Else",
        "email": "owner@gym.pt",
        "password": PASSWORD,
        "company_name": "Another Gym",
    })

    assert response.status_code == 409
    assert response.get_json()["code"] == "USER_EXISTS"


def test_register_rejects_weak_password(client):
    response = client.post("/api/auth/register", json={
        "full_name": "Joana Costa",
        "email": "joana@gym.pt",
        "password": "password",
        "company_name": "Costa Fitness",
    })

    assert response.status_code == 400
    assert "uppercase" in response.get_json()["msg"]


def test_login_and_me(client, owner):
    response = client.post("/api/auth/login", json={"email": "OWNER@gym.pt", "password": PASSWORD})
    assert response.status_code == 200
    token = response.get_json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    body = me.get_json()
    assert body["account_type"] == "owner"
    assert body["is_company_admin"] is True
    assert "financial:delete" in body["permissions"]


def test_login_with_wrong_password(client, owner):
    response = client.post("/api/auth/login", json={"email": "owner@gym.pt", "password": "Wrong1234"})

    assert response.status_code == 401
    assert response.get_json()["msg"] == "Invalid credentials"


def test_protected_route_without_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401


def test_student_self_registration_waits_for_approval(client, company):
    company.require_student_approval = True
    db.session.commit()

    response = client.post("/api/auth/register-student", json={
        "full_name": "Pedro Santos",
        "email": "pedro@mail.pt",
        "password": PASSWORD,
        "registration_code": company.registration_code.lower(),
    })

    assert response.status_code == 201
    student = Student.query.filter_by(email="pedro@mail.pt").one()
    assert student.status == "pending_approval"
    assert student.registration_method == "self_registered"

    token = response.get_json()["access_token"]
    portal = client.get("/api/portal/dashboard", headers={"Authorization": f"Bearer {token}"})
    assert portal.status_code == 403
    assert portal.get_json()["code"] == "pending_approval"


def test_student_registration_with_unknown_code(client, company):
    response = client.post("/api/auth/register-student", json={
        "full_name": "Pedro Santos",
        "email": "pedro@mail.pt",
        "password": PASSWORD,
        "registration_code": "NOPE1234",
    })

    assert response.status_code == 400


def test_create_account_for_existing_student(client, owner_headers, make_student):
    student = make_student(full_name="Rita Lopes", email="rita@mail.pt")

    response = client.post("/api/auth/create-account", headers=owner_headers,
                           json={"record_type": "student", "record_id": student.id})

    assert response.status_code == 201
    temporary_password = response.get_json()["temporary_password"]
    assert len(temporary_password) == 16
    assert student.user.check_password(temporary_password)
    assert student.password_changed is False

    again = client.post("/api/auth/create-account", headers=owner_headers,
                        json={"record_type": "student", "record_id": student.id})
    assert again.status_code == 409
    assert again.get_json()["code"] == "ACCOUNT_EXISTS"


def test_create_account_requires_company_admin(client, trainer_headers, make_student):
    student = make_student(full_name="Rita Lopes", email="rita@mail.pt")

    response = client.post("/api/auth/create-account", headers=trainer_headers,
                           json={"record_type": "student", "record_id": student.id})

    assert response.status_code == 403


def test_change_password(client, student, student_headers):
    response = client.post("/api/auth/change-password", headers=student_headers, json={
        "current_password": PASSWORD,
        "new_password": "NewPassw0rd",
    })

    assert response.status_code == 200
    assert db.session.get(User, student.user_id).check_password("NewPassw0rd")
    assert student.password_changed is True


def test_change_password_rejects_wrong_current(client, student_headers):
    response = client.post("/api/auth/change-password", headers=student_headers, json={
        "current_password": "Nope12345",
        "new_password": "NewPassw0rd",
    })

    assert response.status_code == 400


def test_access_check_for_company_added_student(client, student, student_headers):
    student.registration_method = "company_added"
    student.password_changed = False

    response = client.get("/api/auth/access-check", headers=student_headers)

    body = response.get_json()
    assert body["account_type"] == "student"
    assert body["must_change_password"] is True
    assert body["must_accept_terms"] is True

    client.post("/api/auth/accept-terms", headers=student_headers)
    assert client.get("/api/auth/access-check", headers=student_headers).get_json()["must_accept_terms"] is False


def test_imported_student_must_change_temporary_password(client, owner_headers):
    client.post(
        "/api/students/import",
        headers=owner_headers,
        data={"file": (io.BytesIO(b"full_name,email\nIvo Costa,ivo@mail.pt\n"), "students.csv")},
        content_type="multipart/form-data",
    )
    student = Student.query.filter_by(email="ivo@mail.pt").one()
    created = client.post("/api/auth/create-account", headers=owner_headers,
                          json={"record_type": "student", "record_id": student.id})
    temporary_password = created.get_json()["temporary_password"]

    login = client.post("/api/auth/login", json={"email": "ivo@mail.pt", "password": temporary_password})
    assert login.status_code == 200
    token = login.get_json()["access_token"]

    check = client.get("/api/auth/access-check", headers={"Authorization": f"Bearer {token}"})
    assert check.get_json()["must_change_password"] is True


def test_forgot_password_answers_the_same_for_unknown_email(client, student):
    known = client.post("/api/auth/forgot-password", json={"email": "marta@mail.pt"})
    unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@mail.pt"})

    assert known.status_code == unknown.status_code == 200
    assert known.get_json() == unknown.get_json()
    assert PasswordResetRequest.query.count() == 1


def test_repeated_forgot_password_keeps_one_pending_request(client, student):
    client.post("/api/auth/forgot-password", json={"email": "marta@mail.pt"})
    client.post("/api/auth/forgot-password", json={"email": "MARTA@mail.pt"})

    reset = PasswordResetRequest.query.one()
    assert reset.user_type == "student"
    assert reset.company_id == student.company_id


def test_gym_approves_student_password_reset(client, owner_headers, student, student_headers):
    client.post("/api/auth/forgot-password", json={"email": "marta@mail.pt"})
    pending = client.get("/api/password-reset-requests", headers=owner_headers).get_json()
    assert [r["email"] for r in pending] == ["marta@mail.pt"]

    response = client.post(f"/api/password-reset-requests/{pending[0]['id']}/approve", headers=owner_headers)

    assert response.status_code == 200
    temporary_password = response.get_json()["temporary_password"]
    login = client.post("/api/auth/login", json={"email": "marta@mail.pt", "password": temporary_password})
    assert login.status_code == 200
    assert student.password_changed is False
    assert Notification.query.filter_by(user_id=student.user_id, type="account").count() == 1

    latest = client.get("/api/auth/password-reset-request", headers=student_headers).get_json()["request"]
    assert latest["status"] == "approved"

    again = client.post(f"/api/password-reset-requests/{pending[0]['id']}/approve", headers=owner_headers)
    assert again.status_code == 409


def test_owner_password_reset_goes_to_platform_admin(client, owner, owner_headers, admin, headers_for):
    client.post("/api/auth/forgot-password", json={"email": "owner@gym.pt"})

    assert client.get("/api/password-reset-requests", headers=owner_headers).get_json() == []
    pending = client.get("/api/admin/password-reset-requests", headers=headers_for(admin)).get_json()
    assert [r["user_type"] for r in pending] == ["company"]

    rejected = client.post(f"/api/admin/password-reset-requests/{pending[0]['id']}/reject",
                           headers=headers_for(admin), json={"notes": "Call us to confirm your identity"})
    assert rejected.status_code == 200
    assert rejected.get_json()["request"]["status"] == "rejected"
    assert owner.check_password(PASSWORD)


def test_gym_cannot_review_other_gym_resets(client, student, other_company, headers_for):
    client.post("/api/auth/forgot-password", json={"email": "marta@mail.pt"})
    reset = PasswordResetRequest.query.one()

    response = client.post(f"/api/password-reset-requests/{reset.id}/approve",
                           headers=headers_for(other_company.owner))

    assert response.status_code == 404
