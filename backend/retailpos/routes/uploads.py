# Overview: Serves images stored by the local storage backend.

from flask import Blueprint, send_from_directory
from werkzeug.utils import secure_filename

from ..services.storage_service import upload_folder

uploads_bp = Blueprint("uploads", __name__)


@uploads_bp.get("/uploads/<path:name>")
def serve_upload(name: str):
    return send_from_directory(upload_folder(), secure_filename(name))
