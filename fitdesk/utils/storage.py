import logging
import os
import uuid

from flask import current_app, url_for
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

from fitdesk.errors import ApiError, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

SIGNED_URL_SALT = "fitdesk-file-download"


class StoredFile:
    def __init__(self, file_name, file_path, file_type, file_size):
        self.file_name = file_name
        self.file_path = file_path
        self.file_type = file_type
        self.file_size = file_size


def _root():
    return current_app.config["UPLOAD_FOLDER"]


def _file_size(upload):
    stream = upload.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def save_upload(upload, folder, allowed_types=None):
    """Validate and store an uploaded file under ``folder``; returns a StoredFile."""
    if upload is None or not upload.filename:
        raise ValidationFailed("No file selected")

    allowed_types = allowed_types or current_app.config["ALLOWED_DOCUMENT_TYPES"]
    if upload.mimetype not in allowed_types:
        raise ValidationFailed("File type not allowed")

    size = _file_size(upload)
    max_size = current_app.config["MAX_DOCUMENT_SIZE"]
    if size > max_size:
        raise ValidationFailed(f"File exceeds the maximum size of {max_size // (1024 * 1024)}MB")

    original_name = secure_filename(upload.filename) or "file"
    relative_path = "/".join([folder.strip("/"), f"{uuid.uuid4().hex}_{original_name}"])
    absolute_path = safe_join(_root(), relative_path)
    if absolute_path is None:
        raise ValidationFailed("Invalid file path")

    os.makedirs(os.path.dirname(absolute_path), exist_ok=True)
    upload.save(absolute_path)
    logger.info("Stored file %s (%s bytes)", relative_path, size)
    return StoredFile(upload.filename, relative_path, upload.mimetype, size)


def resolve_path(relative_path):
    absolute_path = safe_join(_root(), relative_path)
    if absolute_path is None or not os.path.isfile(absolute_path):
        raise NotFound("File not found")
    return absolute_path


def delete_file(relative_path):
    absolute_path = safe_join(_root(), relative_path) if relative_path else None
    if absolute_path and os.path.isfile(absolute_path):
        os.remove(absolute_path)
        logger.info("Deleted file %s", relative_path)


def _serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=SIGNED_URL_SALT)


def create_signed_url(relative_path, download_name=None):
    token = _serializer().dumps({"path": relative_path, "name": download_name})
    return url_for("files.download", token=token, _external=True)


def read_signed_token(token):
    """Return (path, download name) for a valid token."""
    try:
        data = _serializer().loads(token, max_age=current_app.config["SIGNED_URL_EXPIRES"])
    except SignatureExpired:
        raise ApiError("Link has expired", 410)
    except BadSignature:
        raise NotFound("File not found")
    return data["path"], data.get("name")
