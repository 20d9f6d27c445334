import logging
from datetime import datetime

from sqlalchemy import or_

from fitdesk.errors import ApiError, NotFound
from fitdesk.extensions import db
from fitdesk.models import Message, Staff, Student, User
from fitdesk.services.notifications import push_to_user
from fitdesk.utils.access import resolve_actor

logger = logging.getLogger(__name__)


def company_members(company):
    """Users that can exchange messages inside ``company``."""
    users = [company.owner]
    users += [s.user for s in Staff.query.filter_by(company_id=company.id).filter(Staff.user_id.isnot(None))]
    users += [s.user for s in Student.query.filter_by(company_id=company.id).filter(Student.user_id.isnot(None))]
    return [u for u in users if u is not None and u.is_active]


def conversations(user, company):
    """Latest message and unread count per counterpart, newest first."""
    messages = (Message.query
                .filter(Message.company_id == company.id,
                        or_(Message.sender_id == user.id, Message.receiver_id == user.id))
                .order_by(Message.sent_at.desc())
                .all())
    chats = {}
    for message in messages:
        counterpart = message.receiver if message.sender_id == user.id else message.sender
        chat = chats.get(counterpart.id)
        if chat is None:
            chat = chats[counterpart.id] = {
                "user_id": counterpart.id,
                "name": counterpart.full_name,
                "role": counterpart.role,
                "last_message": message.content,
                "last_message_time": message.sent_at.isoformat() if message.sent_at else None,
                "is_sender": message.sender_id == user.id,
                "unread_count": 0,
            }
        if message.receiver_id == user.id and not message.is_read:
            chat["unread_count"] += 1
    return list(chats.values())


def thread(user, company, counterpart_id):
    """Messages between ``user`` and the counterpart; received ones are marked read."""
    messages = (Message.query
                .filter(Message.company_id == company.id,
                        or_((Message.sender_id == user.id) & (Message.receiver_id == counterpart_id),
                            (Message.sender_id == counterpart_id) & (Message.receiver_id == user.id)))
                .order_by(Message.sent_at.asc())
                .all())
    now = datetime.utcnow()
    for message in messages:
        if message.receiver_id == user.id and not message.is_read:
            message.is_read = True
            message.read_at = now
    return messages


def send_message(sender, company, receiver_id, content):
    receiver = db.session.get(User, receiver_id)
    if receiver is None or receiver.id == sender.id:
        raise NotFound("Receiver not found")
    receiver_company = resolve_actor(receiver).company
    if receiver_company is None or receiver_company.id != company.id:
        raise ApiError("You can only message people from your gym", 403)

    message = Message(company_id=company.id, sender_id=sender.id, receiver_id=receiver.id, content=content)
    db.session.add(message)
    db.session.flush()
    push_to_user(receiver.id, "new_message", message.to_dict())
    logger.debug("Message %s sent from %s to %s", message.id, sender.id, receiver.id)
    return message


def unread_count(user):
    return Message.query.filter_by(receiver_id=user.id, is_read=False).count()
