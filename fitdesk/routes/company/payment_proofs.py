from flask import current_app, g, jsonify, request

from fitdesk.extensions import db
from fitdesk.models import PaymentProof, Student
from fitdesk.schemas.subscriptions import ProofReviewSchema
from fitdesk.services.billing import review_proof
from fitdesk.utils.decorators import permission_required
from fitdesk.utils.storage import create_signed_url

from . import company_bp
from .lookups import get_child_record


@company_bp.route("/payment-proofs", methods=["GET"])
@permission_required("financial", "view")
def list_payment_proofs():
    query = PaymentProof.query.join(Student).filter(Student.company_id == g.company.id)
    status = request.args.get("status")
    if status:
        query = query.filter(PaymentProof.status == status)
    proofs = query.order_by(PaymentProof.created_at.desc()).all()
    return jsonify([proof.to_dict() for proof in proofs]), 200


@company_bp.route("/payment-proofs/<int:proof_id>/url", methods=["GET"])
@permission_required("financial", "view")
def payment_proof_url(proof_id):
    proof = get_child_record(PaymentProof, Student, proof_id, "Payment proof not found")
    return jsonify({
        "url": create_signed_url(proof.proof_file_path, proof.proof_file_name),
        "expires_in": current_app.config["SIGNED_URL_EXPIRES"],
    }), 200


@company_bp.route("/payment-proofs/<int:proof_id>/review", methods=["POST"])
@permission_required("financial", "edit")
def review_payment_proof(proof_id):
    proof = get_child_record(PaymentProof, Student, proof_id, "Payment proof not found")
    data = ProofReviewSchema().load(request.get_json() or {})
    settled = review_proof(proof, data["status"], g.current_user, data.get("notes"))
    db.session.commit()
    return jsonify({
        "msg": "Payment proof approved" if data["status"] == "approved" else "Payment proof rejected",
        "proof": proof.to_dict(),
        "settled_payment": settled.to_dict() if settled else None,
    }), 200
