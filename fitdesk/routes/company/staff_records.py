from flask import current_app, g, jsonify, request

from fitdesk.errors import NotFound
from fitdesk.extensions import db
from fitdesk.models import StaffDocument, StaffEvaluation, StaffPaymentConfig, StaffTraining
from fitdesk.models.staff_evaluation import SCORE_FIELDS
from fitdesk.schemas.staff import EvaluationSchema, PaymentConfigSchema, StaffDocumentFormSchema, TrainingSchema
from fitdesk.utils.calculations import average_score
from fitdesk.utils.decorators import permission_required, require_confirmation
from fitdesk.utils.storage import create_signed_url, delete_file, save_upload

from . import company_bp
from .lookups import get_staff


def _get_owned(relationship, record_id, msg):
    record = relationship.filter_by(id=record_id).first()
    if record is None:
        raise NotFound(msg)
    return record


# ---------------- API: Payment configuration ----------------
@company_bp.route("/staff/<int:staff_id>/payment-config", methods=["GET"])
@permission_required("hr", "view")
def get_payment_config(staff_id):
    member = get_staff(staff_id)
    config = member.payment_config or StaffPaymentConfig(staff_id=member.id, payment_type="monthly")
    return jsonify(config.to_dict()), 200


@company_bp.route("/staff/<int:staff_id>/payment-config", methods=["PUT"])
@permission_required("hr", "edit")
def upsert_payment_config(staff_id):
    member = get_staff(staff_id)
    data = PaymentConfigSchema().load(request.get_json() or {})
    if data.get("bank_iban"):
        data["bank_iban"] = data["bank_iban"].replace(" ", "").upper()

    config = member.payment_config
    if config is None:
        config = StaffPaymentConfig(staff=member)
        db.session.add(config)
    for key, value in data.items():
        setattr(config, key, value)
    db.session.commit()
    return jsonify({"msg": "Payment configuration saved", "payment_config": config.to_dict()}), 200


# ---------------- API: Evaluations ----------------
def _apply_evaluation(evaluation, data):
    for key, value in data.items():
        setattr(evaluation, key, value)
    evaluation.overall_score = average_score(getattr(evaluation, field) for field in SCORE_FIELDS)


@company_bp.route("/staff/<int:staff_id>/evaluations", methods=["GET"])
@permission_required("hr", "view")
def list_evaluations(staff_id):
    member = get_staff(staff_id)
    evaluations = member.evaluations.order_by(StaffEvaluation.evaluation_date.desc(), StaffEvaluation.id.desc()).all()
    return jsonify([e.to_dict() for e in evaluations]), 200


@company_bp.route("/staff/<int:staff_id>/evaluations", methods=["POST"])
@permission_required("hr", "create")
def create_evaluation(staff_id):
    member = get_staff(staff_id)
    data = EvaluationSchema().load(request.get_json() or {})
    evaluation = StaffEvaluation(company_id=g.company.id, staff=member, evaluator_id=g.current_user.id)
    _apply_evaluation(evaluation, data)
    db.session.add(evaluation)
    db.session.commit()
    return jsonify({"msg": "Evaluation saved", "evaluation": evaluation.to_dict()}), 201


@company_bp.route("/staff/<int:staff_id>/evaluations/<int:evaluation_id>", methods=["PUT"])
@permission_required("hr", "edit")
def update_evaluation(staff_id, evaluation_id):
    evaluation = _get_owned(get_staff(staff_id).evaluations, evaluation_id, "Evaluation not found")
    data = EvaluationSchema().load(request.get_json() or {}, partial=True)
    _apply_evaluation(evaluation, data)
    db.session.commit()
    return jsonify({"msg": "Evaluation updated", "evaluation": evaluation.to_dict()}), 200


@company_bp.route("/staff/<int:staff_id>/evaluations/<int:evaluation_id>", methods=["DELETE"])
@permission_required("hr", "delete")
def delete_evaluation(staff_id, evaluation_id):
    evaluation = _get_owned(get_staff(staff_id).evaluations, evaluation_id, "Evaluation not found")
    require_confirmation()
    db.session.delete(evaluation)
    db.session.commit()
    return jsonify({"msg": "Evaluation deleted"}), 200


# ---------------- API: Trainings ----------------
@company_bp.route("/staff/<int:staff_id>/trainings", methods=["GET"])
@permission_required("hr", "view")
def list_trainings(staff_id):
    member = get_staff(staff_id)
    trainings = member.trainings.order_by(StaffTraining.completion_date.desc()).all()
    return jsonify([t.to_dict() for t in trainings]), 200


@company_bp.route("/staff/<int:staff_id>/trainings", methods=["POST"])
@permission_required("hr", "create")
def create_training(staff_id):
    member = get_staff(staff_id)
    data = TrainingSchema().load(request.get_json() or {})
    training = StaffTraining(company_id=g.company.id, staff=member, **data)
    db.session.add(training)
    db.session.commit()
    return jsonify({"msg": "Training saved", "training": training.to_dict()}), 201


@company_bp.route("/staff/<int:staff_id>/trainings/<int:training_id>", methods=["PUT"])
@permission_required("hr", "edit")
def update_training(staff_id, training_id):
    training = _get_owned(get_staff(staff_id).trainings, training_id, "Training not found")
    data = TrainingSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(training, key, value)
    db.session.commit()
    return jsonify({"msg": "Training updated", "training": training.to_dict()}), 200


@company_bp.route("/staff/<int:staff_id>/trainings/<int:training_id>", methods=["DELETE"])
@permission_required("hr", "delete")
def delete_training(staff_id, training_id):
    training = _get_owned(get_staff(staff_id).trainings, training_id, "Training not found")
    require_confirmation()
    db.session.delete(training)
    db.session.commit()
    return jsonify({"msg": "Training deleted"}), 200


# ---------------- API: Documents ----------------
@company_bp.route("/staff/<int:staff_id>/documents", methods=["GET"])
@permission_required("hr", "view")
def list_staff_documents(staff_id):
    member = get_staff(staff_id)
    documents = member.documents.order_by(StaffDocument.created_at.desc()).all()
    return jsonify([doc.to_dict() for doc in documents]), 200


@company_bp.route("/staff/<int:staff_id>/documents", methods=["POST"])
@permission_required("hr", "edit")
def upload_staff_document(staff_id):
    member = get_staff(staff_id)
    form = StaffDocumentFormSchema().load(request.form.to_dict())
    stored = save_upload(request.files.get("file"), f"companies/{g.company.id}/staff/{member.id}")

    document = StaffDocument(
        company_id=g.company.id,
        staff=member,
        document_type=form["document_type"],
        description=form.get("description"),
        expiry_date=form.get("expiry_date"),
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


@company_bp.route("/staff/<int:staff_id>/documents/<int:document_id>/url", methods=["GET"])
@permission_required("hr", "view")
def staff_document_url(staff_id, document_id):
    document = _get_owned(get_staff(staff_id).documents, document_id, "Document not found")
    return jsonify({
        "url": create_signed_url(document.file_path, document.file_name),
        "expires_in": current_app.config["SIGNED_URL_EXPIRES"],
    }), 200


@company_bp.route("/staff/<int:staff_id>/documents/<int:document_id>", methods=["DELETE"])
@permission_required("hr", "delete")
def delete_staff_document(staff_id, document_id):
    document = _get_owned(get_staff(staff_id).documents, document_id, "Document not found")
    require_confirmation()
    path = document.file_path
    db.session.delete(document)
    db.session.commit()
    delete_file(path)
    return jsonify({"msg": "Document deleted"}), 200
