# Overview: Image storage behind a two-call seam (upload_image / delete_image) backed by UPLOAD_FOLDER.

from __future__ import annotations

import os
from dataclasses import dataclass

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..errors import ValidationError
from ..ids import new_object_id


@dataclass(frozen=True)
class StoredImage:
    url: str
    public_id: str


def upload_folder() -> str:
    folder = current_app.config["UPLOAD_FOLDER"]
    if not os.path.isabs(folder):
        folder = os.path.join(current_app.instance_path, folder)
    os.makedirs(folder, exist_ok=True)
    return folder


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def upload_image(file: FileStorage) -> StoredImage:
    """
    Persist an uploaded image and return where it is served from.

    public_id is the opaque handle delete_image() takes; callers store both
    values verbatim.
    """
    if file is None or not file.filename:
        raise ValidationError("Image file is required")

    ext = _extension(file.filename)
    if ext not in current_app.config["ALLOWED_IMAGE_EXTENSIONS"]:
        raise ValidationError("Only image files are allowed")

    stem = secure_filename(file.filename.rsplit(".", 1)[0])[:40] or "image"
    public_id = f"{new_object_id()}-{stem}.{ext}"
    file.save(os.path.join(upload_folder(), public_id))
    current_app.logger.info("Stored image %s", public_id)
    return StoredImage(url=f"/uploads/{public_id}", public_id=public_id)


def delete_image(public_id: str | None) -> bool:
    """Remove a stored image. Unknown ids are ignored; returns whether a file was removed."""
    if not public_id:
        return False
    path = os.path.join(upload_folder(), secure_filename(public_id))
    if not os.path.exists(path):
        return False
    os.remove(path)
    current_app.logger.info("Deleted image %s", public_id)
    return True
