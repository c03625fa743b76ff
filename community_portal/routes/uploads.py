# community_portal/routes/uploads.py
"""Public read-back of stored attachments. No access control."""

from flask import Blueprint, current_app, send_from_directory

bp = Blueprint("uploads", __name__)


@bp.get("/uploads/<path:filename>")
def uploaded_file(filename: str):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
