# fitdesk/utils/decorators.py
from functools import wraps

from flask import g, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from fitdesk.errors import ConfirmationRequired, Forbidden, NotFound, Unauthorized
from fitdesk.extensions import db
from fitdesk.models.user import User
from fitdesk.utils.access import resolve_actor


def _load_actor():
    user = db.session.get(User, int(get_jwt_identity()))
    if not user:
        raise Unauthorized("User not found")
    if not user.is_active:
        raise Forbidden("Account is suspended")
    actor = resolve_actor(user)
    g.current_user = user
    g.actor = actor
    g.company = actor.company
    return actor


def login_required(view_func):
    """Any authenticated, active user; stores ``g.actor``."""
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        _load_actor()
        return view_func(*args, **kwargs)
    return wrapper


def company_user_required(view_func):
    """Company owner or staff member of a company that is not blocked."""
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        actor = _load_actor()
        if not actor.is_company_user:
            raise Forbidden()
        if actor.staff is not None and not actor.staff.is_active:
            raise Forbidden("Staff member is inactive")
        if actor.company.is_blocked:
            raise Forbidden("Company is blocked", code="company_blocked")
        return view_func(*args, **kwargs)
    return wrapper


def permission_required(module, action):
    def decorator(view_func):
        @wraps(view_func)
        @company_user_required
        def wrapper(*args, **kwargs):
            if not g.actor.can(module, action):
                raise Forbidden(f"Missing permission {module}:{action}")
            return view_func(*args, **kwargs)
        return wrapper
    return decorator


def company_admin_required(view_func):
    @wraps(view_func)
    @company_user_required
    def wrapper(*args, **kwargs):
        if not g.actor.is_company_admin:
            raise Forbidden()
        return view_func(*args, **kwargs)
    return wrapper


def student_required(view_func=None, allow_blocked=False):
    """Authenticated student; stores ``g.student``.

    Blocked students only reach views marked ``allow_blocked``.
    """
    def decorator(func):
        @wraps(func)
        @jwt_required()
        def wrapper(*args, **kwargs):
            actor = _load_actor()
            if actor.kind != "student":
                raise Forbidden()
            student = actor.student
            if student.status == "pending_approval":
                raise Forbidden("Your registration is awaiting approval", code="pending_approval")
            if student.status == "blocked" and not allow_blocked:
                raise Forbidden("Your account is blocked", code="student_blocked")
            g.student = student
            return func(*args, **kwargs)
        return wrapper

    if view_func is not None:
        return decorator(view_func)
    return decorator


def admin_required(view_func):
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        actor = _load_actor()
        if actor.kind != "admin":
            raise Forbidden()
        return view_func(*args, **kwargs)
    return wrapper


def require_confirmation():
    """Deletes go through only with ``?confirm=true`` or ``{"confirm": true}``."""
    if request.args.get("confirm", "").lower() in ("1", "true", "yes"):
        return
    data = request.get_json(silent=True) or {}
    if data.get("confirm") is True:
        return
    raise ConfirmationRequired()


def get_company_record(model, record_id, msg=None):
    """Fetch a row of ``model`` that belongs to the caller's company."""
    record = model.query.filter_by(id=record_id, company_id=g.company.id).first()
    if record is None:
        raise NotFound(msg or f"{model.__name__} not found")
    return record
