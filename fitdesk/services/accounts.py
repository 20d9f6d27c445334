import logging
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import or_

from fitdesk.errors import ApiError, NotFound
from fitdesk.extensions import db
from fitdesk.models import (Company, GymClass, LibraryExercise, Message, Notification, NutritionPlan,
                            PasswordResetRequest, PaymentProof, Role, RolePermission, Room, Staff,
                            StaffAbsence, StaffDocument, StaffEvaluation, Student, StudentDocument,
                            StudentNote, TrainingPlan, User)
from fitdesk.services.notifications import create_notification
from fitdesk.utils.access import resolve_actor
from fitdesk.utils.security import generate_registration_code, generate_temporary_password

logger = logging.getLogger(__name__)

DEFAULT_ROLES = (
    {
        "name": "Administrador",
        "description": "Full access to every module",
        "color": "#ef4444",
        "is_admin": True,
        "permissions": (),
    },
    {
        "name": "Personal Trainer",
        "description": "Follows students, their plans and classes",
        "color": "#3b82f6",
        "is_admin": False,
        "permissions": (
            ("students", "view"), ("students", "edit"),
            ("classes", "view"), ("classes", "create"), ("classes", "edit"),
            ("communication", "view"), ("communication", "create"),
        ),
    },
)


def unique_registration_code():
    while True:
        code = generate_registration_code()
        if not Company.query.filter_by(registration_code=code).first():
            return code


def email_taken(email):
    return User.query.filter_by(email=email.lower()).first() is not None


def seed_default_roles(company):
    for role_def in DEFAULT_ROLES:
        role = Role(
            company=company,
            name=role_def["name"],
            description=role_def["description"],
            color=role_def["color"],
            is_admin=role_def["is_admin"],
            is_default=True,
        )
        role.permissions = [RolePermission(module_key=m, action=a) for m, a in role_def["permissions"]]
        db.session.add(role)


def create_company_with_owner(full_name, email, password, company_name, address=None):
    """Create the owner user, their company in trial, and the default roles."""
    email = email.lower()
    if email_taken(email):
        raise ApiError("User already registered", 409, code="USER_EXISTS")

    owner = User(email=email, full_name=full_name, role="owner", status="active")
    owner.set_password(password)

    now = datetime.utcnow()
    company = Company(
        name=company_name,
        address=address,
        owner=owner,
        registration_code=unique_registration_code(),
        trial_started_at=now,
        trial_ends_at=now + timedelta(days=current_app.config["TRIAL_DAYS"]),
    )
    db.session.add_all([owner, company])
    seed_default_roles(company)
    db.session.flush()
    logger.info("Company %s registered by %s", company.id, email)
    return owner, company


def register_student(data):
    """Self-registration with a company registration code."""
    company = Company.query.filter_by(registration_code=data["registration_code"].upper()).first()
    if not company or company.is_blocked:
        raise ApiError("Invalid registration code", 400)

    email = data["email"].lower()
    if email_taken(email):
        raise ApiError("User already registered", 409, code="USER_EXISTS")

    user = User(email=email, full_name=data["full_name"], role="student", status="active")
    user.set_password(data["password"])
    student = Student(
        company=company,
        user=user,
        full_name=data["full_name"],
        email=email,
        phone=data.get("phone"),
        birth_date=data.get("birth_date"),
        registration_method="self_registered",
        status="pending_approval" if company.require_student_approval else "pending",
    )
    db.session.add_all([user, student])
    db.session.flush()
    logger.info("Student %s self-registered in company %s", student.id, company.id)
    return user, student


def create_login_account(company, record_type, record_id):
    """Create a login for an existing student or staff record; returns (user, temporary password)."""
    model = Student if record_type == "student" else Staff
    record = model.query.filter_by(id=record_id, company_id=company.id).first()
    if record is None:
        raise NotFound(f"{record_type.capitalize()} not found")
    if record.user_id is not None:
        raise ApiError("This record already has an account", 409, code="ACCOUNT_EXISTS")
    if not record.email:
        raise ApiError("The record needs an email address", 400)
    if email_taken(record.email):
        raise ApiError("User already registered", 409, code="USER_EXISTS")

    temporary_password = generate_temporary_password()
    user = User(email=record.email.lower(), full_name=record.full_name, role=record_type, status="active")
    user.set_password(temporary_password)
    record.user = user
    record.password_changed = False
    db.session.add(user)
    db.session.flush()
    logger.info("Account created for %s %s", record_type, record.id)
    return user, temporary_password


# Rows that keep existing when their author's login is deleted
AUTHORED_COLUMNS = (
    (StudentNote, "created_by"),
    (StudentDocument, "uploaded_by"),
    (StaffDocument, "uploaded_by"),
    (StaffEvaluation, "evaluator_id"),
    (TrainingPlan, "created_by"),
    (NutritionPlan, "created_by"),
    (PaymentProof, "reviewed_by"),
    (StaffAbsence, "reviewed_by"),
    (PasswordResetRequest, "reviewed_by"),
)


def delete_user(user):
    """Delete a login; rows it authored stay with the author cleared."""
    for model, column in AUTHORED_COLUMNS:
        model.query.filter(getattr(model, column) == user.id).update({column: None})
    PasswordResetRequest.query.filter_by(user_id=user.id).delete()
    db.session.delete(user)
    logger.info("User %s deleted", user.id)


def delete_company_account(company):
    """Delete a company with all of its people and data; returns the stored file paths to remove."""
    students = company.students.all()
    staff = company.staff.all()
    users = [s.user for s in students if s.user] + [m.user for m in staff if m.user] + [company.owner]
    user_ids = [user.id for user in users]

    paths = []
    for student in students:
        paths.extend(doc.file_path for doc in student.documents)
        paths.extend(proof.proof_file_path for proof in student.payment_proofs)
    for member in staff:
        paths.extend(doc.file_path for doc in member.documents)

    Message.query.filter_by(company_id=company.id).delete()
    Notification.query.filter(
        or_(Notification.company_id == company.id, Notification.user_id.in_(user_ids))
    ).delete(synchronize_session=False)
    PasswordResetRequest.query.filter(
        or_(PasswordResetRequest.company_id == company.id, PasswordResetRequest.user_id.in_(user_ids))
    ).delete(synchronize_session=False)

    for gym_class in GymClass.query.filter_by(company_id=company.id).all():
        db.session.delete(gym_class)
    db.session.flush()
    Room.query.filter_by(company_id=company.id).delete()
    LibraryExercise.query.filter_by(company_id=company.id).delete()

    company_id = company.id
    db.session.delete(company)
    db.session.flush()
    db.session.expire_all()
    for user in users:
        delete_user(user)
    logger.warning("Company %s deleted with %s students and %s staff", company_id, len(students), len(staff))
    return paths


# ---------------- Password reset requests ----------------
def request_password_reset(email):
    """Open a reset request for the account behind ``email``; unknown addresses are ignored."""
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None or user.is_admin:
        logger.info("Password reset requested for unknown email %s", email)
        return None

    actor = resolve_actor(user)
    if actor.kind == "owner":
        user_type, company_id = "company", None
    elif actor.kind in ("staff", "student"):
        user_type, company_id = actor.kind, actor.company.id
    else:
        return None

    pending = PasswordResetRequest.query.filter_by(user_id=user.id, status="pending").first()
    if pending is not None:
        return pending

    reset = PasswordResetRequest(email=user.email, user_type=user_type, user_id=user.id, company_id=company_id)
    db.session.add(reset)
    db.session.flush()
    logger.info("Password reset request %s opened for user %s", reset.id, user.id)
    return reset


def _close_reset(reset, status, reviewer, notes):
    if reset.status != "pending":
        raise ApiError("This request was already reviewed", 409)
    reset.status = status
    reset.notes = notes
    reset.reviewed_at = datetime.utcnow()
    reset.reviewed_by = reviewer.id


def approve_password_reset(reset, reviewer, notes=None):
    """Give the user a temporary password they must change; returns it."""
    _close_reset(reset, "approved", reviewer, notes)
    temporary_password = generate_temporary_password()
    user = reset.user
    user.set_password(temporary_password)
    record = user.staff_record or user.student_record
    if record is not None:
        record.password_changed = False
    create_notification(
        user.id,
        "Password reset approved",
        "Sign in with the temporary password you received and choose a new one.",
        type="account",
        company_id=reset.company_id,
    )
    logger.info("Password reset request %s approved by user %s", reset.id, reviewer.id)
    return temporary_password


def reject_password_reset(reset, reviewer, notes=None):
    _close_reset(reset, "rejected", reviewer, notes)
    create_notification(
        reset.user_id,
        "Password reset rejected",
        notes,
        type="account",
        company_id=reset.company_id,
    )
