from flask import current_app, g, jsonify, request

from fitdesk.errors import NotFound
from fitdesk.extensions import db
from fitdesk.models import PasswordResetRequest
from fitdesk.schemas.auth import ResetReviewSchema
from fitdesk.services.accounts import approve_password_reset, reject_password_reset
from fitdesk.utils.decorators import admin_required

from . import admin_bp


def _get_owner_request(request_id):
    reset = PasswordResetRequest.query.filter_by(id=request_id, user_type="company").first()
    if reset is None:
        raise NotFound("Request not found")
    return reset


@admin_bp.route("/password-reset-requests", methods=["GET"])
@admin_required
def list_owner_password_resets():
    query = PasswordResetRequest.query.filter_by(user_type="company")
    status = request.args.get("status")
    if status:
        query = query.filter(PasswordResetRequest.status == status)
    requests = query.order_by(PasswordResetRequest.created_at.desc()).all()
    return jsonify([reset.to_dict() for reset in requests]), 200


@admin_bp.route("/password-reset-requests/<int:request_id>/approve", methods=["POST"])
@admin_required
def approve_owner_password_reset(request_id):
    reset = _get_owner_request(request_id)
    data = ResetReviewSchema().load(request.get_json(silent=True) or {})
    temporary_password = approve_password_reset(reset, g.current_user, data.get("notes"))
    db.session.commit()
    current_app.logger.info("Owner password reset %s approved", reset.id)
    return jsonify({
        "msg": "Password reset approved",
        "request": reset.to_dict(),
        "temporary_password": temporary_password,
    }), 200


@admin_bp.route("/password-reset-requests/<int:request_id>/reject", methods=["POST"])
@admin_required
def reject_owner_password_reset(request_id):
    reset = _get_owner_request(request_id)
    data = ResetReviewSchema().load(request.get_json(silent=True) or {})
    reject_password_reset(reset, g.current_user, data.get("notes"))
    db.session.commit()
    return jsonify({"msg": "Password reset rejected", "request": reset.to_dict()}), 200
