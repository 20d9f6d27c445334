from flask import current_app, g, jsonify, request

from fitdesk.errors import NotFound
from fitdesk.extensions import db
from fitdesk.models import PaymentProof, StudentSubscription
from fitdesk.schemas.subscriptions import PaymentProofSchema
from fitdesk.utils.decorators import student_required
from fitdesk.utils.storage import delete_file, save_upload

from . import portal_bp


@portal_bp.route("/payments", methods=["GET"])
@student_required(allow_blocked=True)
def my_payments():
    subscriptions = g.student.subscriptions.order_by(StudentSubscription.start_date.desc()).all()
    return jsonify([
        dict(s.to_dict(), payments=[p.to_dict() for p in s.payments])
        for s in subscriptions
    ]), 200


@portal_bp.route("/payment-proofs", methods=["GET"])
@student_required(allow_blocked=True)
def my_payment_proofs():
    proofs = g.student.payment_proofs.order_by(PaymentProof.created_at.desc()).all()
    return jsonify([proof.to_dict() for proof in proofs]), 200


@portal_bp.route("/payment-proofs", methods=["POST"])
@student_required(allow_blocked=True)
def upload_payment_proof():
    student = g.student
    data = PaymentProofSchema().load(request.form.to_dict())
    subscription_id = data.get("subscription_id")
    if subscription_id is not None and not student.subscriptions.filter_by(id=subscription_id).first():
        raise NotFound("Subscription not found")

    stored = save_upload(
        request.files.get("file"),
        f"companies/{student.company_id}/payment-proofs/{student.id}",
        allowed_types=current_app.config["ALLOWED_PROOF_TYPES"],
    )
    proof = PaymentProof(
        student=student,
        subscription_id=subscription_id,
        amount=data["amount"],
        notes=data.get("notes"),
        proof_file_name=stored.file_name,
        proof_file_path=stored.file_path,
        proof_file_type=stored.file_type,
    )
    db.session.add(proof)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        delete_file(stored.file_path)
        raise
    current_app.logger.info("Payment proof %s uploaded by student %s", proof.id, student.id)
    return jsonify({"msg": "Payment proof sent", "proof": proof.to_dict()}), 201
