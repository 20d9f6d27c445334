from datetime import date

import pytest
from flask_jwt_extended import create_access_token

from fitdesk import create_app
from fitdesk.extensions import db
from fitdesk.models import Role, Staff, Student, SubscriptionPlan, User
from fitdesk.services.accounts import create_company_with_owner

PASSWORD = "Passw0rd1"


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "storage")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(identity=str(user.id))}"}


@pytest.fixture
def owner(app):
    user, company = create_company_with_owner("Ana Owner", "owner@gym.pt", PASSWORD, "Gym One")
    db.session.commit()
    return user


@pytest.fixture
def company(owner):
    return owner.owned_company


@pytest.fixture
def owner_headers(owner):
    return auth_headers(owner)


@pytest.fixture
def other_company(app):
    user, company = create_company_with_owner("Rui Other", "other@gym.pt", PASSWORD, "Gym Two")
    db.session.commit()
    return company


@pytest.fixture
def admin(app):
    user = User(email="admin@fitdesk.pt", full_name="Platform Admin", role="admin")
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def trainer(company):
    """Staff member with the seeded Personal Trainer role and a login."""
    role = Role.query.filter_by(company_id=company.id, name="Personal Trainer").first()
    user = User(email="trainer@gym.pt", full_name="Tiago Trainer", role="staff")
    user.set_password(PASSWORD)
    member = Staff(company=company, user=user, role=role, full_name="Tiago Trainer", email="trainer@gym.pt")
    db.session.add_all([user, member])
    db.session.commit()
    return member


@pytest.fixture
def trainer_headers(trainer):
    return auth_headers(trainer.user)


@pytest.fixture
def make_student(company):
    def _make(full_name="Marta Silva", email=None, status="active", with_login=False, **kwargs):
        student = Student(company=company, full_name=full_name, email=email, status=status, **kwargs)
        if with_login:
            user = User(email=email, full_name=full_name, role="student")
            user.set_password(PASSWORD)
            student.user = user
            db.session.add(user)
        db.session.add(student)
        db.session.commit()
        return student
    return _make


@pytest.fixture
def student(make_student):
    return make_student(email="marta@mail.pt", with_login=True, birth_date=date(1995, 5, 20))


@pytest.fixture
def student_headers(student):
    return auth_headers(student.user)


@pytest.fixture
def plan(company):
    plan = SubscriptionPlan(company=company, name="Monthly", price=35, duration_days=30,
                            grace_period_days=0, block_after_days=15)
    db.session.add(plan)
    db.session.commit()
    return plan


@pytest.fixture
def headers_for(app):
    return auth_headers
