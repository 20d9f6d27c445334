from marshmallow import fields

from .base import BaseSchema, required_text


class MessageSchema(BaseSchema):
    receiver_id = fields.Integer(required=True, error_messages={"required": "Receiver is required"})
    content = required_text("Message")
