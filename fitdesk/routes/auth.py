from datetime import datetime

from flask import Blueprint, current_app, g, jsonify, request
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies

from fitdesk.errors import ApiError, ValidationFailed
from fitdesk.extensions import db, limiter
from fitdesk.models.password_reset import PasswordResetRequest
from fitdesk.models.user import User
from fitdesk.schemas.auth import (ChangePasswordSchema, CreateAccountSchema, ForgotPasswordSchema, LoginSchema,
                                  RegisterSchema, StudentRegisterSchema)
from fitdesk.services.accounts import (create_company_with_owner, create_login_account, register_student,
                                      request_password_reset)
from fitdesk.utils.access import resolve_actor
from fitdesk.utils.decorators import company_admin_required, login_required

auth_bp = Blueprint("auth", __name__)


def _login_response(user, msg, status=200):
    access_token = create_access_token(identity=str(user.id))
    actor = resolve_actor(user)
    response = jsonify({
        "msg": msg,
        "access_token": access_token,
        "user": user.to_dict(),
        "account_type": actor.kind,
    })
    set_access_cookies(response, access_token)
    return response, status


@auth_bp.route("/register", methods=["POST"])
def register():
    data = RegisterSchema().load(request.get_json() or {})
    owner, company = create_company_with_owner(
        data["full_name"], data["email"], data["password"], data["company_name"], data.get("company_address")
    )
    db.session.commit()
    current_app.logger.info("New company %s registered", company.id)
    return _login_response(owner, "Registered successfully", 201)


@auth_bp.route("/register-student", methods=["POST"])
def register_student_account():
    data = StudentRegisterSchema().load(request.get_json() or {})
    user, student = register_student(data)
    db.session.commit()
    if student.status == "pending_approval":
        msg = "Registered successfully. Please wait for the gym to approve your account."
    else:
        msg = "Registered successfully"
    return _login_response(user, msg, 201)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(lambda: current_app.config["LOGIN_RATE_LIMIT"])
def login_post():
    if not request.is_json:
        return jsonify({"msg": "Missing JSON"}), 400

    data = LoginSchema().load(request.get_json())
    email = data["email"].strip().lower()
    user = User.query.filter_by(email=email).first()

    if not user or not user.check_password(data["password"]):
        current_app.logger.info("Login failed for %s", email)
        return jsonify({"msg": "Invalid credentials"}), 401

    if not user.is_active:
        return jsonify({"msg": "Account is suspended"}), 403

    actor = resolve_actor(user)
    if actor.staff is not None and not actor.staff.is_active:
        return jsonify({"msg": "Account is inactive"}), 403

    user.last_active = datetime.utcnow()
    db.session.commit()
    current_app.logger.info("Login successful for user %s", user.id)
    return _login_response(user, "Login successful")


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"msg": "Logged out"})
    unset_jwt_cookies(response)
    return response, 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    actor = g.actor
    data = {
        "user": actor.user.to_dict(),
        "account_type": actor.kind,
        "company": actor.company.to_dict() if actor.company else None,
        "permissions": actor.permission_list(),
        "is_company_admin": actor.is_company_admin,
    }
    if actor.staff is not None:
        data["staff"] = actor.staff.to_dict()
    if actor.student is not None:
        data["student"] = actor.student.to_dict()
    return jsonify(data), 200


@auth_bp.route("/change-password", methods=["POST"])
@login_required
def change_password():
    data = ChangePasswordSchema().load(request.get_json() or {})
    user = g.current_user
    if not user.check_password(data["current_password"]):
        raise ValidationFailed("Current password is incorrect")
    if data["current_password"] == data["new_password"]:
        raise ValidationFailed("New password must be different from the current one")

    user.set_password(data["new_password"])
    record = g.actor.staff or g.actor.student
    if record is not None:
        record.password_changed = True
    db.session.commit()
    current_app.logger.info("Password changed for user %s", user.id)
    return jsonify({"msg": "Password updated"}), 200


@auth_bp.route("/forgot-password", methods=["POST"])
@limiter.limit(lambda: current_app.config["LOGIN_RATE_LIMIT"])
def forgot_password():
    data = ForgotPasswordSchema().load(request.get_json() or {})
    request_password_reset(data["email"])
    db.session.commit()
    # same answer whether or not the email exists
    return jsonify({"msg": "If the email is registered, your request was sent for review"}), 200


@auth_bp.route("/password-reset-request", methods=["GET"])
@login_required
def latest_password_reset():
    reset = (PasswordResetRequest.query
             .filter_by(user_id=g.current_user.id)
             .order_by(PasswordResetRequest.created_at.desc(), PasswordResetRequest.id.desc())
             .first())
    return jsonify({"request": reset.to_dict() if reset else None}), 200


@auth_bp.route("/create-account", methods=["POST"])
@company_admin_required
def create_account():
    data = CreateAccountSchema().load(request.get_json() or {})
    user, temporary_password = create_login_account(g.company, data["record_type"], data["record_id"])
    db.session.commit()
    return jsonify({
        "msg": "Account created",
        "user_id": user.id,
        "email": user.email,
        "temporary_password": temporary_password,
    }), 201


@auth_bp.route("/access-check", methods=["GET"])
@login_required
def access_check():
    actor = g.actor
    if actor.kind == "student":
        student = actor.student
        return jsonify({
            "account_type": "student",
            "pending_approval": student.status == "pending_approval",
            "needs_onboarding": student.registration_method == "self_registered" and student.status == "pending",
            "must_change_password": student.registration_method != "self_registered" and not student.password_changed,
            "must_accept_terms": student.terms_accepted_at is None,
            "blocked": student.status == "blocked",
            "block_reason": student.block_reason,
            "company_blocked": bool(student.company.is_blocked),
        }), 200

    if actor.is_company_user:
        company = actor.company
        return jsonify({
            "account_type": actor.kind,
            "company_blocked": bool(company.is_blocked),
            "blocked_reason": company.blocked_reason,
            "trial_expired": company.trial_expired,
            "trial_days_left": company.trial_days_left,
            "must_change_password": actor.staff is not None and not actor.staff.password_changed,
        }), 200

    return jsonify({"account_type": actor.kind}), 200


@auth_bp.route("/accept-terms", methods=["POST"])
@login_required
def accept_terms():
    if g.actor.kind != "student":
        raise ApiError("Only students accept the gym terms", 400)
    g.actor.student.terms_accepted_at = datetime.utcnow()
    db.session.commit()
    return jsonify({"msg": "Terms accepted"}), 200
