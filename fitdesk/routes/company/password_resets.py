from flask import current_app, g, jsonify, request

from fitdesk.extensions import db
from fitdesk.models import PasswordResetRequest
from fitdesk.schemas.auth import ResetReviewSchema
from fitdesk.services.accounts import approve_password_reset, reject_password_reset
from fitdesk.utils.decorators import company_admin_required, get_company_record

from . import company_bp


# ---------------- API: Password reset requests of students and staff ----------------
@company_bp.route("/password-reset-requests", methods=["GET"])
@company_admin_required
def list_password_resets():
    query = PasswordResetRequest.query.filter_by(company_id=g.company.id)
    status = request.args.get("status")
    if status:
        query = query.filter(PasswordResetRequest.status == status)
    requests = query.order_by(PasswordResetRequest.created_at.desc()).all()
    return jsonify([reset.to_dict() for reset in requests]), 200


@company_bp.route("/password-reset-requests/<int:request_id>/approve", methods=["POST"])
@company_admin_required
def approve_company_password_reset(request_id):
    reset = get_company_record(PasswordResetRequest, request_id, "Request not found")
    data = ResetReviewSchema().load(request.get_json(silent=True) or {})
    temporary_password = approve_password_reset(reset, g.current_user, data.get("notes"))
    db.session.commit()
    current_app.logger.info("Password reset %s approved in company %s", reset.id, g.company.id)
    return jsonify({
        "msg": "Password reset approved",
        "request": reset.to_dict(),
        "temporary_password": temporary_password,
    }), 200


@company_bp.route("/password-reset-requests/<int:request_id>/reject", methods=["POST"])
@company_admin_required
def reject_company_password_reset(request_id):
    reset = get_company_record(PasswordResetRequest, request_id, "Request not found")
    data = ResetReviewSchema().load(request.get_json(silent=True) or {})
    reject_password_reset(reset, g.current_user, data.get("notes"))
    db.session.commit()
    return jsonify({"msg": "Password reset rejected", "request": reset.to_dict()}), 200
