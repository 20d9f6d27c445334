from datetime import datetime, timedelta, timezone

from flask import current_app, jsonify, request
from sqlalchemy import or_

from fitdesk.errors import NotFound
from fitdesk.extensions import db
from fitdesk.models import Company, Staff, Student
from fitdesk.schemas.company import BlockCompanySchema, TrialExtensionSchema
from fitdesk.services.accounts import delete_company_account
from fitdesk.utils.decorators import admin_required, require_confirmation
from fitdesk.utils.storage import delete_file

from . import admin_bp


def _company_summary(company):
    data = company.to_dict()
    data.update({
        "owner_name": company.owner.full_name if company.owner else None,
        "owner_email": company.owner.email if company.owner else None,
        "students_count": Student.query.filter_by(company_id=company.id).count(),
        "staff_count": Staff.query.filter_by(company_id=company.id).count(),
    })
    return data


def _get_company(company_id):
    company = db.session.get(Company, company_id)
    if company is None:
        raise NotFound("Company not found")
    return company


@admin_bp.route("/companies", methods=["GET"])
@admin_required
def list_companies():
    query = Company.query
    search = request.args.get("search", "").strip()
    if search:
        query = query.filter(or_(Company.name.ilike(f"%{search}%"), Company.registration_code.ilike(f"%{search}%")))
    status = request.args.get("status")
    if status == "blocked":
        query = query.filter(Company.is_blocked.is_(True))
    elif status == "active":
        query = query.filter(Company.is_blocked.is_(False))
    companies = query.order_by(Company.created_at.desc()).all()
    return jsonify([_company_summary(c) for c in companies]), 200


@admin_bp.route("/companies/<int:company_id>/block", methods=["POST"])
@admin_required
def block_company(company_id):
    company = _get_company(company_id)
    data = BlockCompanySchema().load(request.get_json() or {})
    company.is_blocked = True
    company.blocked_at = datetime.utcnow()
    company.blocked_reason = data["reason"]
    db.session.commit()
    current_app.logger.warning("Company %s blocked: %s", company.id, data["reason"])
    return jsonify({"msg": "Company blocked", "company": company.to_dict()}), 200


@admin_bp.route("/companies/<int:company_id>/unblock", methods=["POST"])
@admin_required
def unblock_company(company_id):
    company = _get_company(company_id)
    company.is_blocked = False
    company.blocked_at = None
    company.blocked_reason = None
    db.session.commit()
    current_app.logger.info("Company %s unblocked", company.id)
    return jsonify({"msg": "Company unblocked", "company": company.to_dict()}), 200


@admin_bp.route("/companies/<int:company_id>/trial", methods=["PUT"])
@admin_required
def extend_trial(company_id):
    company = _get_company(company_id)
    data = TrialExtensionSchema().load(request.get_json() or {})
    if data.get("trial_ends_at"):
        ends_at = data["trial_ends_at"]
        if ends_at.tzinfo is not None:
            ends_at = ends_at.astimezone(timezone.utc).replace(tzinfo=None)
        company.trial_ends_at = ends_at
    else:
        base = max(company.trial_ends_at or datetime.utcnow(), datetime.utcnow())
        company.trial_ends_at = base + timedelta(days=data["extra_days"])
    db.session.commit()
    return jsonify({"msg": "Trial updated", "company": company.to_dict()}), 200


@admin_bp.route("/companies/<int:company_id>", methods=["DELETE"])
@admin_required
def delete_company(company_id):
    company = _get_company(company_id)
    require_confirmation()
    paths = delete_company_account(company)
    db.session.commit()
    for path in paths:
        delete_file(path)
    current_app.logger.warning("Company %s deleted by the platform admin", company_id)
    return jsonify({"msg": "Company and all associated data deleted"}), 200
