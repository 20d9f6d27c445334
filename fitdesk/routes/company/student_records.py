from flask import current_app, g, jsonify, request
from sqlalchemy import or_

from fitdesk.errors import Forbidden, NotFound
from fitdesk.extensions import db
from fitdesk.models import StudentAnamnesis, StudentDocument, StudentNote
from fitdesk.schemas.student import AnamnesisSchema, DocumentFormSchema, NoteSchema
from fitdesk.utils.decorators import permission_required, require_confirmation
from fitdesk.utils.storage import create_signed_url, delete_file, save_upload

from . import company_bp
from .lookups import get_student


# ---------------- API: Anamnesis ----------------
@company_bp.route("/students/<int:student_id>/anamnesis", methods=["GET"])
@permission_required("students", "view")
def get_anamnesis(student_id):
    student = get_student(student_id)
    anamnesis = student.anamnesis or StudentAnamnesis.blank(student.id)
    return jsonify(anamnesis.to_dict()), 200


@company_bp.route("/students/<int:student_id>/anamnesis", methods=["PUT"])
@permission_required("students", "edit")
def upsert_anamnesis(student_id):
    student = get_student(student_id)
    data = AnamnesisSchema().load(request.get_json() or {}, partial=True)

    anamnesis = student.anamnesis
    if anamnesis is None:
        anamnesis = StudentAnamnesis(student=student)
        db.session.add(anamnesis)
    for key, value in data.items():
        setattr(anamnesis, key, value)
    db.session.commit()
    current_app.logger.info("Anamnesis saved for student %s", student.id)
    return jsonify({"msg": "Anamnesis saved", "anamnesis": anamnesis.to_dict()}), 200


# ---------------- API: Notes ----------------
def _get_note(student, note_id):
    note = student.notes.filter_by(id=note_id).first()
    if note is None or (note.is_private and note.created_by != g.current_user.id):
        raise NotFound("Note not found")
    return note


def _check_author(note):
    if note.created_by != g.current_user.id and not g.actor.is_company_admin:
        raise Forbidden("Only the author can change this note")


@company_bp.route("/students/<int:student_id>/notes", methods=["GET"])
@permission_required("students", "view")
def list_notes(student_id):
    student = get_student(student_id)
    notes = (student.notes
             .filter(or_(StudentNote.is_private.is_(False), StudentNote.created_by == g.current_user.id))
             .order_by(StudentNote.created_at.desc())
             .all())
    return jsonify([note.to_dict() for note in notes]), 200


@company_bp.route("/students/<int:student_id>/notes", methods=["POST"])
@permission_required("students", "edit")
def create_note(student_id):
    student = get_student(student_id)
    data = NoteSchema().load(request.get_json() or {})
    note = StudentNote(student=student, created_by=g.current_user.id, **data)
    db.session.add(note)
    db.session.commit()
    return jsonify({"msg": "Note saved", "note": note.to_dict()}), 201


@company_bp.route("/students/<int:student_id>/notes/<int:note_id>", methods=["PUT"])
@permission_required("students", "edit")
def update_note(student_id, note_id):
    note = _get_note(get_student(student_id), note_id)
    _check_author(note)
    data = NoteSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(note, key, value)
    db.session.commit()
    return jsonify({"msg": "Note updated", "note": note.to_dict()}), 200


@company_bp.route("/students/<int:student_id>/notes/<int:note_id>", methods=["DELETE"])
@permission_required("students", "edit")
def delete_note(student_id, note_id):
    note = _get_note(get_student(student_id), note_id)
    _check_author(note)
    require_confirmation()
    db.session.delete(note)
    db.session.commit()
    return jsonify({"msg": "Note deleted"}), 200


# ---------------- API: Documents ----------------
def _get_document(student, document_id):
    document = student.documents.filter_by(id=document_id).first()
    if document is None:
        raise NotFound("Document not found")
    return document


@company_bp.route("/students/<int:student_id>/documents", methods=["GET"])
@permission_required("students", "view")
def list_student_documents(student_id):
    student = get_student(student_id)
    documents = student.documents.order_by(StudentDocument.created_at.desc()).all()
    return jsonify([doc.to_dict() for doc in documents]), 200


@company_bp.route("/students/<int:student_id>/documents", methods=["POST"])
@permission_required("students", "edit")
def upload_student_document(student_id):
    student = get_student(student_id)
    form = DocumentFormSchema().load(request.form.to_dict())
    stored = save_upload(request.files.get("file"), f"companies/{g.company.id}/students/{student.id}")

    document = StudentDocument(
        student=student,
        description=form.get("description"),
        file_name=stored.file_name,
        file_path=stored.file_path,
        file_type=stored.file_type,
        file_size=stored.file_size,
        uploaded_by=g.current_user.id,
    )
    db.session.add(document)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        delete_file(stored.file_path)
        raise
    return jsonify({"msg": "Document uploaded", "document": document.to_dict()}), 201


@company_bp.route("/students/<int:student_id>/documents/<int:document_id>/url", methods=["GET"])
@permission_required("students", "view")
def student_document_url(student_id, document_id):
    document = _get_document(get_student(student_id), document_id)
    return jsonify({
        "url": create_signed_url(document.file_path, document.file_name),
        "expires_in": current_app.config["SIGNED_URL_EXPIRES"],
    }), 200


@company_bp.route("/students/<int:student_id>/documents/<int:document_id>", methods=["DELETE"])
@permission_required("students", "delete")
def delete_student_document(student_id, document_id):
    document = _get_document(get_student(student_id), document_id)
    require_confirmation()
    path = document.file_path
    db.session.delete(document)
    db.session.commit()
    delete_file(path)
    return jsonify({"msg": "Document deleted"}), 200
