from flask import current_app, g, jsonify, request

from fitdesk.errors import ApiError
from fitdesk.extensions import db
from fitdesk.models import Role, RolePermission
from fitdesk.models.role import ACTIONS, MODULES
from fitdesk.schemas.company import RoleSchema
from fitdesk.utils.decorators import get_company_record, permission_required, require_confirmation

from . import company_bp


def _apply_permissions(role, permissions):
    role.permissions = [
        RolePermission(module_key=module, action=action)
        for module, _, action in (p.partition(":") for p in sorted(set(permissions)))
    ]


@company_bp.route("/permissions/catalog", methods=["GET"])
@permission_required("settings", "view")
def permission_catalog():
    return jsonify({"modules": list(MODULES), "actions": list(ACTIONS)}), 200


@company_bp.route("/roles", methods=["GET"])
@permission_required("settings", "view")
def list_roles():
    roles = g.company.roles.order_by(Role.name).all()
    return jsonify([dict(role.to_dict(), staff_count=len(role.staff)) for role in roles]), 200


@company_bp.route("/roles", methods=["POST"])
@permission_required("settings", "create")
def create_role():
    data = RoleSchema().load(request.get_json() or {})
    if g.company.roles.filter_by(name=data["name"]).first():
        raise ApiError("A role with this name already exists", 409)

    role = Role(
        company_id=g.company.id,
        name=data["name"],
        description=data.get("description"),
        color=data.get("color"),
        is_admin=data["is_admin"],
    )
    _apply_permissions(role, data["permissions"])
    db.session.add(role)
    db.session.commit()
    current_app.logger.info("Role %s created in company %s", role.id, g.company.id)
    return jsonify({"msg": "Role created", "role": role.to_dict()}), 201


@company_bp.route("/roles/<int:role_id>", methods=["PUT"])
@permission_required("settings", "edit")
def update_role(role_id):
    role = get_company_record(Role, role_id, "Role not found")
    data = RoleSchema().load(request.get_json() or {}, partial=True)

    if "name" in data and data["name"] != role.name and g.company.roles.filter_by(name=data["name"]).first():
        raise ApiError("A role with this name already exists", 409)
    for key in ("name", "description", "color", "is_admin"):
        if key in data:
            setattr(role, key, data[key])
    if "permissions" in data:
        _apply_permissions(role, data["permissions"])
    db.session.commit()
    return jsonify({"msg": "Role updated", "role": role.to_dict()}), 200


@company_bp.route("/roles/<int:role_id>", methods=["DELETE"])
@permission_required("settings", "delete")
def delete_role(role_id):
    role = get_company_record(Role, role_id, "Role not found")
    require_confirmation()
    for member in role.staff:
        member.role_id = None
    db.session.delete(role)
    db.session.commit()
    current_app.logger.info("Role %s deleted", role_id)
    return jsonify({"msg": "Role deleted"}), 200
