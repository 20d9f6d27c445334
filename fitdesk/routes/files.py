from flask import Blueprint, send_file

from fitdesk.utils.storage import read_signed_token, resolve_path

files_bp = Blueprint("files", __name__)


@files_bp.route("/<token>", methods=["GET"])
def download(token):
    """Serve a stored file from a time-limited signed token."""
    path, download_name = read_signed_token(token)
    return send_file(resolve_path(path), download_name=download_name, as_attachment=False)
