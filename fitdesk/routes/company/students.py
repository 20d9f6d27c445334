import io
from datetime import datetime

from flask import current_app, g, jsonify, request, send_file
from sqlalchemy import or_

from fitdesk.errors import ApiError, ValidationFailed
from fitdesk.extensions import db
from fitdesk.models import Student
from fitdesk.models.student import STATUS_LABELS, STUDENT_STATUSES
from fitdesk.schemas.student import AssignTrainerSchema, StudentSchema, StudentStatusSchema
from fitdesk.services.notifications import create_notification
from fitdesk.services.students import export_students, import_students
from fitdesk.utils.decorators import permission_required, require_confirmation
from fitdesk.utils.storage import delete_file

from . import company_bp
from .lookups import get_student, optional_staff_id


# ================================
# Students
# ================================

@company_bp.route("/students", methods=["GET"])
@permission_required("students", "view")
def list_students():
    query = Student.query.filter_by(company_id=g.company.id)

    search = request.args.get("search", "").strip()
    if search:
        query = query.filter(or_(Student.full_name.ilike(f"%{search}%"), Student.email.ilike(f"%{search}%")))

    status = request.args.get("status")
    if status:
        if status not in STUDENT_STATUSES:
            raise ValidationFailed("Unknown status")
        query = query.filter(Student.status == status)

    trainer_id = request.args.get("personal_trainer_id", type=int)
    if trainer_id:
        query = query.filter(Student.personal_trainer_id == trainer_id)

    students = query.order_by(Student.full_name).all()
    return jsonify([student.to_dict() for student in students]), 200


@company_bp.route("/students/statuses", methods=["GET"])
@permission_required("students", "view")
def student_statuses():
    return jsonify([{"status": s, "label": STATUS_LABELS[s]} for s in STUDENT_STATUSES]), 200


@company_bp.route("/students", methods=["POST"])
@permission_required("students", "create")
def create_student():
    data = StudentSchema().load(request.get_json() or {})
    data["personal_trainer_id"] = optional_staff_id(data.get("personal_trainer_id"))
    data.setdefault("status", "active")
    if data["status"] == "blocked":
        raise ValidationFailed("Use the status action to block a student")

    student = Student(company_id=g.company.id, registration_method="company_added", **data)
    db.session.add(student)
    db.session.commit()
    current_app.logger.info("Student %s created in company %s", student.id, g.company.id)
    return jsonify({"msg": "Student created", "student": student.to_dict()}), 201


@company_bp.route("/students/<int:student_id>", methods=["GET"])
@permission_required("students", "view")
def get_student_detail(student_id):
    student = get_student(student_id)
    data = student.to_dict()
    data["active_subscriptions"] = [s.to_dict() for s in student.subscriptions.filter_by(status="active")]
    return jsonify(data), 200


@company_bp.route("/students/<int:student_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_student(student_id):
    student = get_student(student_id)
    data = StudentSchema().load(request.get_json() or {}, partial=True)
    data.pop("status", None)
    if "personal_trainer_id" in data:
        data["personal_trainer_id"] = optional_staff_id(data["personal_trainer_id"])

    for key, value in data.items():
        setattr(student, key, value)
    db.session.commit()
    return jsonify({"msg": "Student updated", "student": student.to_dict()}), 200


@company_bp.route("/students/<int:student_id>", methods=["DELETE"])
@permission_required("students", "delete")
def delete_student(student_id):
    student = get_student(student_id)
    require_confirmation()

    file_paths = [doc.file_path for doc in student.documents]
    file_paths += [proof.proof_file_path for proof in student.payment_proofs]
    user = student.user
    db.session.delete(student)
    if user is not None:
        db.session.delete(user)
    db.session.commit()

    for path in file_paths:
        delete_file(path)
    current_app.logger.info("Student %s deleted from company %s", student_id, g.company.id)
    return jsonify({"msg": "Student deleted"}), 200


@company_bp.route("/students/<int:student_id>/status", methods=["POST"])
@permission_required("students", "edit")
def change_student_status(student_id):
    student = get_student(student_id)
    data = StudentStatusSchema().load(request.get_json() or {})

    if data["status"] == "blocked":
        student.block(data["reason"])
    else:
        student.status = data["status"]
        student.block_reason = None
        student.blocked_at = None
    db.session.commit()
    current_app.logger.info("Student %s status set to %s", student.id, student.status)
    return jsonify({
        "msg": "Status updated",
        "status": student.status,
        "status_label": STATUS_LABELS[student.status],
    }), 200


@company_bp.route("/students/<int:student_id>/approve", methods=["POST"])
@permission_required("students", "edit")
def approve_student(student_id):
    student = get_student(student_id)
    if student.status != "pending_approval":
        raise ApiError("Student is not awaiting approval", 400)

    student.status = "active"
    if student.user_id:
        create_notification(student.user_id, "Your registration was approved",
                            type="account", company_id=g.company.id)
    db.session.commit()
    return jsonify({"msg": "Student approved", "student": student.to_dict()}), 200


@company_bp.route("/students/<int:student_id>/trainer", methods=["PUT"])
@permission_required("students", "edit")
def assign_trainer(student_id):
    student = get_student(student_id)
    data = AssignTrainerSchema().load(request.get_json() or {})
    student.personal_trainer_id = optional_staff_id(data["personal_trainer_id"])
    db.session.commit()
    return jsonify({"msg": "Personal trainer updated", "student": student.to_dict()}), 200


# ---------------- API: CSV import / export ----------------
@company_bp.route("/students/import", methods=["POST"])
@permission_required("students", "import")
def import_students_csv():
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationFailed("No file selected")
    try:
        text = upload.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationFailed("The file must be UTF-8 encoded CSV")

    created, errors = import_students(g.company, text)
    db.session.commit()
    return jsonify({
        "msg": f"{len(created)} students imported",
        "created": len(created),
        "errors": errors,
    }), 200


@company_bp.route("/students/export", methods=["GET"])
@permission_required("students", "export")
def export_students_csv():
    students = Student.query.filter_by(company_id=g.company.id).order_by(Student.full_name).all()
    content = export_students(students)
    return send_file(
        io.BytesIO(content.encode("utf-8")),
        mimetype="text/csv",
        as_attachment=True,
        download_name=f'students_{datetime.now().strftime("%Y%m%d")}.csv'
    )
