from datetime import date

from flask import current_app, g, jsonify, request

from fitdesk.extensions import db
from fitdesk.models import Staff, StaffAbsence
from fitdesk.schemas.hr import AbsenceSchema, LeaveEntitlementSchema, PayrollQuerySchema, WorkScheduleSchema
from fitdesk.services.hr import (calculate_payroll, create_absence, leave_balance, replace_work_schedule,
                                 review_absence, scheduled_weekly_hours, set_leave_entitlement)
from fitdesk.utils.decorators import get_company_record, permission_required, require_confirmation

from . import company_bp
from .lookups import get_staff


# ================================
# HR: work schedule, absences, leave and payroll
# ================================

def _schedule_payload(member):
    return {
        "staff_id": member.id,
        "contract_type": member.contract_type,
        "weekly_hours": member.weekly_hours,
        "scheduled_hours": scheduled_weekly_hours(member),
        "days": [day.to_dict() for day in member.work_schedule],
    }


@company_bp.route("/staff/<int:staff_id>/work-schedule", methods=["GET"])
@permission_required("hr", "view")
def get_work_schedule(staff_id):
    return jsonify(_schedule_payload(get_staff(staff_id))), 200


@company_bp.route("/staff/<int:staff_id>/work-schedule", methods=["PUT"])
@permission_required("hr", "edit")
def update_work_schedule(staff_id):
    member = get_staff(staff_id)
    data = WorkScheduleSchema().load(request.get_json() or {})
    replace_work_schedule(member, data["days"])
    if "contract_type" in data:
        member.contract_type = data["contract_type"]
    if "weekly_hours" in data:
        member.weekly_hours = data["weekly_hours"]
    elif member.weekly_hours is None:
        member.weekly_hours = round(scheduled_weekly_hours(member))
    db.session.commit()
    return jsonify({"msg": "Work schedule saved", "schedule": _schedule_payload(member)}), 200


# ---------------- API: Absences ----------------
@company_bp.route("/absences", methods=["GET"])
@permission_required("hr", "view")
def list_absences():
    query = StaffAbsence.query.filter_by(company_id=g.company.id)
    status = request.args.get("status")
    if status:
        query = query.filter(StaffAbsence.status == status)
    staff_id = request.args.get("staff_id", type=int)
    if staff_id:
        query = query.filter(StaffAbsence.staff_id == staff_id)
    absences = query.order_by(StaffAbsence.start_date.desc()).all()
    return jsonify([absence.to_dict() for absence in absences]), 200


@company_bp.route("/absences", methods=["POST"])
@permission_required("hr", "create")
def add_absence():
    data = AbsenceSchema().load(request.get_json() or {})
    member = get_staff(data["staff_id"])
    absence = create_absence(member, data)
    db.session.commit()
    return jsonify({"msg": "Absence registered", "absence": absence.to_dict()}), 201


def _review(absence_id, status):
    absence = get_company_record(StaffAbsence, absence_id, "Absence not found")
    review_absence(absence, status, g.current_user)
    db.session.commit()
    return absence


@company_bp.route("/absences/<int:absence_id>/approve", methods=["POST"])
@permission_required("hr", "edit")
def approve_absence(absence_id):
    absence = _review(absence_id, "approved")
    return jsonify({"msg": "Absence approved", "absence": absence.to_dict()}), 200


@company_bp.route("/absences/<int:absence_id>/reject", methods=["POST"])
@permission_required("hr", "edit")
def reject_absence(absence_id):
    absence = _review(absence_id, "rejected")
    return jsonify({"msg": "Absence rejected", "absence": absence.to_dict()}), 200


@company_bp.route("/absences/<int:absence_id>", methods=["DELETE"])
@permission_required("hr", "delete")
def delete_absence(absence_id):
    absence = get_company_record(StaffAbsence, absence_id, "Absence not found")
    require_confirmation()
    db.session.delete(absence)
    db.session.commit()
    return jsonify({"msg": "Absence deleted"}), 200


# ---------------- API: Leave balance ----------------
@company_bp.route("/staff/<int:staff_id>/leave-balance", methods=["GET"])
@permission_required("hr", "view")
def get_leave_balance(staff_id):
    member = get_staff(staff_id)
    year = request.args.get("year", type=int) or date.today().year
    return jsonify(leave_balance(member, year)), 200


@company_bp.route("/staff/<int:staff_id>/leave-balance", methods=["PUT"])
@permission_required("hr", "edit")
def update_leave_balance(staff_id):
    member = get_staff(staff_id)
    data = LeaveEntitlementSchema().load(request.get_json() or {})
    set_leave_entitlement(member, data["year"], data.get("vacation_days_entitled"), data.get("personal_days_entitled"))
    db.session.commit()
    return jsonify({"msg": "Leave balance saved", "balance": leave_balance(member, data["year"])}), 200


# ---------------- API: Payroll ----------------
@company_bp.route("/payroll", methods=["GET"])
@permission_required("hr", "view")
def payroll():
    params = PayrollQuerySchema().load(request.args)
    if params.get("staff_id"):
        members = [get_staff(params["staff_id"])]
    else:
        members = (Staff.query.filter_by(company_id=g.company.id, is_active=True)
                   .order_by(Staff.full_name).all())
    result = calculate_payroll(members, params["start_date"], params["end_date"])
    current_app.logger.info("Payroll calculated for company %s", g.company.id)
    return jsonify(result), 200
