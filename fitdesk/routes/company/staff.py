from flask import current_app, g, jsonify, request
from sqlalchemy import or_

from fitdesk.errors import ApiError
from fitdesk.extensions import db
from fitdesk.models import Role, Staff
from fitdesk.schemas.staff import StaffSchema
from fitdesk.services.hr import remove_staff_member
from fitdesk.utils.decorators import get_company_record, permission_required, require_confirmation
from fitdesk.utils.storage import delete_file

from . import company_bp
from .lookups import get_staff


# ================================
# Staff (HR)
# ================================

def _check_role(role_id):
    if role_id is not None:
        get_company_record(Role, role_id, "Role not found")


def _check_email_free(email, staff_id=None):
    query = Staff.query.filter(Staff.company_id == g.company.id, Staff.email == email.lower())
    if staff_id is not None:
        query = query.filter(Staff.id != staff_id)
    if query.first():
        raise ApiError("A staff member with this email already exists", 409)


@company_bp.route("/staff", methods=["GET"])
@permission_required("hr", "view")
def list_staff():
    query = Staff.query.filter_by(company_id=g.company.id)
    search = request.args.get("search", "").strip()
    if search:
        query = query.filter(or_(Staff.full_name.ilike(f"%{search}%"), Staff.email.ilike(f"%{search}%")))
    active = request.args.get("active")
    if active in ("true", "false"):
        query = query.filter(Staff.is_active.is_(active == "true"))
    return jsonify([member.to_dict() for member in query.order_by(Staff.full_name).all()]), 200


@company_bp.route("/staff", methods=["POST"])
@permission_required("hr", "create")
def create_staff():
    data = StaffSchema().load(request.get_json() or {})
    data["email"] = data["email"].lower()
    _check_email_free(data["email"])
    _check_role(data.get("role_id"))

    member = Staff(company_id=g.company.id, **data)
    db.session.add(member)
    db.session.commit()
    current_app.logger.info("Staff member %s created in company %s", member.id, g.company.id)
    return jsonify({"msg": "Staff member created", "staff": member.to_dict()}), 201


@company_bp.route("/staff/<int:staff_id>", methods=["GET"])
@permission_required("hr", "view")
def get_staff_detail(staff_id):
    member = get_staff(staff_id)
    data = member.to_dict()
    data["payment_config"] = member.payment_config.to_dict() if member.payment_config else None
    data["students_count"] = len(member.students)
    return jsonify(data), 200


@company_bp.route("/staff/<int:staff_id>", methods=["PUT"])
@permission_required("hr", "edit")
def update_staff(staff_id):
    member = get_staff(staff_id)
    data = StaffSchema().load(request.get_json() or {}, partial=True)
    if "email" in data:
        data["email"] = data["email"].lower()
        _check_email_free(data["email"], member.id)
    if "role_id" in data:
        _check_role(data["role_id"])

    for key, value in data.items():
        setattr(member, key, value)
    db.session.commit()
    return jsonify({"msg": "Staff member updated", "staff": member.to_dict()}), 200


@company_bp.route("/staff/<int:staff_id>/role", methods=["PUT"])
@permission_required("hr", "edit")
def assign_staff_role(staff_id):
    member = get_staff(staff_id)
    role_id = (request.get_json() or {}).get("role_id")
    _check_role(role_id)
    member.role_id = role_id
    db.session.commit()
    return jsonify({"msg": "Role assigned", "staff": member.to_dict()}), 200


@company_bp.route("/staff/<int:staff_id>/activate", methods=["POST"])
@permission_required("hr", "edit")
def activate_staff(staff_id):
    member = get_staff(staff_id)
    member.is_active = True
    db.session.commit()
    return jsonify({"msg": "Staff member activated", "staff": member.to_dict()}), 200


@company_bp.route("/staff/<int:staff_id>/deactivate", methods=["POST"])
@permission_required("hr", "edit")
def deactivate_staff(staff_id):
    member = get_staff(staff_id)
    if g.actor.staff is not None and g.actor.staff.id == member.id:
        raise ApiError("You cannot deactivate yourself", 400)
    member.is_active = False
    db.session.commit()
    current_app.logger.info("Staff member %s deactivated", member.id)
    return jsonify({"msg": "Staff member deactivated", "staff": member.to_dict()}), 200


@company_bp.route("/staff/<int:staff_id>", methods=["DELETE"])
@permission_required("hr", "delete")
def delete_staff(staff_id):
    member = get_staff(staff_id)
    if g.actor.staff is not None and g.actor.staff.id == member.id:
        raise ApiError("You cannot delete yourself", 400)
    require_confirmation()

    paths = remove_staff_member(member)
    db.session.commit()

    for path in paths:
        delete_file(path)
    current_app.logger.info("Staff member %s deleted", staff_id)
    return jsonify({"msg": "Staff member deleted"}), 200
