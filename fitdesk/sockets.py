import logging

from flask import request
from flask_jwt_extended import decode_token, get_jwt_identity, verify_jwt_in_request
from flask_socketio import join_room

from fitdesk.extensions import socketio
from fitdesk.services.notifications import user_room

logger = logging.getLogger(__name__)


def _identity(auth):
    if auth and auth.get("token"):
        return decode_token(auth["token"])["sub"]
    verify_jwt_in_request()
    return get_jwt_identity()


@socketio.on("connect")
def on_connect(auth=None):
    """Authenticated clients join their own room for pushed messages and notifications."""
    try:
        user_id = _identity(auth)
    except Exception as e:
        logger.info("Socket connection refused: %s", e)
        return False
    join_room(user_room(user_id))
    logger.debug("Socket %s joined room of user %s", request.sid, user_id)
