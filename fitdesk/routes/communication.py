from datetime import datetime

from flask import Blueprint, g, jsonify, request

from fitdesk.errors import Forbidden, NotFound
from fitdesk.extensions import db
from fitdesk.models import Notification
from fitdesk.schemas.messaging import MessageSchema
from fitdesk.services.messaging import company_members, conversations, send_message, thread, unread_count
from fitdesk.utils.decorators import login_required

communication_bp = Blueprint("communication", __name__)


def _company():
    if g.company is None:
        raise Forbidden("Messaging is only available inside a gym")
    if g.actor.kind == "staff" and not g.actor.can("communication", "view"):
        raise Forbidden("Missing permission communication:view")
    return g.company


# ================================
# Messages
# ================================

@communication_bp.route("/messages/conversations", methods=["GET"])
@login_required
def list_conversations():
    return jsonify(conversations(g.current_user, _company())), 200


@communication_bp.route("/messages/contacts", methods=["GET"])
@login_required
def list_contacts():
    company = _company()
    contacts = [u for u in company_members(company) if u.id != g.current_user.id]
    if g.actor.kind == "student":
        contacts = [u for u in contacts if u.role != "student"]
    return jsonify([{"user_id": u.id, "name": u.full_name, "role": u.role} for u in contacts]), 200


@communication_bp.route("/messages/<int:user_id>", methods=["GET"])
@login_required
def get_thread(user_id):
    messages = thread(g.current_user, _company(), user_id)
    db.session.commit()
    return jsonify([m.to_dict() for m in messages]), 200


@communication_bp.route("/messages", methods=["POST"])
@login_required
def post_message():
    company = _company()
    if g.actor.kind == "staff" and not g.actor.can("communication", "create"):
        raise Forbidden("Missing permission communication:create")
    data = MessageSchema().load(request.get_json() or {})
    message = send_message(g.current_user, company, data["receiver_id"], data["content"])
    db.session.commit()
    return jsonify({"msg": "Message sent", "message": message.to_dict()}), 201


@communication_bp.route("/messages/unread-count", methods=["GET"])
@login_required
def messages_unread_count():
    return jsonify({"unread": unread_count(g.current_user)}), 200


# ================================
# Notifications
# ================================

@communication_bp.route("/notifications", methods=["GET"])
@login_required
def list_notifications():
    query = g.current_user.notifications
    if request.args.get("unread") == "true":
        query = query.filter_by(is_read=False)
    limit = request.args.get("limit", 50, type=int)
    notifications = query.order_by(Notification.sent_at.desc()).limit(limit).all()
    return jsonify([n.to_dict() for n in notifications]), 200


@communication_bp.route("/notifications/unread-count", methods=["GET"])
@login_required
def notifications_unread_count():
    return jsonify({"unread": g.current_user.notifications.filter_by(is_read=False).count()}), 200


@communication_bp.route("/notifications/<int:notification_id>/read", methods=["POST"])
@login_required
def mark_notification_read(notification_id):
    notification = g.current_user.notifications.filter_by(id=notification_id).first()
    if notification is None:
        raise NotFound("Notification not found")
    notification.mark_as_read()
    db.session.commit()
    return jsonify({"msg": "Notification marked as read"}), 200


@communication_bp.route("/notifications/read-all", methods=["POST"])
@login_required
def mark_all_notifications_read():
    updated = (Notification.query
               .filter_by(user_id=g.current_user.id, is_read=False)
               .update({"is_read": True, "read_at": datetime.utcnow()}))
    db.session.commit()
    return jsonify({"msg": "All notifications marked as read", "updated": updated}), 200
