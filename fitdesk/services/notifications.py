import logging

from fitdesk.extensions import db, socketio
from fitdesk.models.notifications import Notification

logger = logging.getLogger(__name__)


def user_room(user_id):
    return f"user_{user_id}"


def push_to_user(user_id, event, payload):
    socketio.emit(event, payload, to=user_room(user_id))


def create_notification(user_id, title, content=None, type="general", company_id=None,
                        reference_type=None, reference_id=None):
    """Add a notification to the session and push it to the user's room."""
    notification = Notification(
        user_id=user_id,
        company_id=company_id,
        title=title,
        content=content,
        type=type,
        reference_type=reference_type,
        reference_id=reference_id,
    )
    db.session.add(notification)
    db.session.flush()
    push_to_user(user_id, "notification", notification.to_dict())
    logger.debug("Notification %s created for user %s", notification.id, user_id)
    return notification
