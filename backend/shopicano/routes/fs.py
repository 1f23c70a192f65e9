# Overview: Flask API routes for uploading and serving blob-stored images.

from flask import Blueprint, current_app, g, request

from ..decorators import require_store_staff
from ..errors import ErrorCode, NotFoundError, StorageError, ValidationError
from ..extensions import get_storage
from ..response import Response, created, invalid_data, not_found, serve_image
from ..storage import object_name_for

fs_bp = Blueprint("fs", __name__, url_prefix="/v1/fs")

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def _storage_failed(message: str):
    current_app.logger.exception(message)
    return Response(status=500, code=ErrorCode.STORAGE_FAILED, title="Storage request failed").server_json()


@fs_bp.post("/")
@require_store_staff
def upload_file():
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return invalid_data(ErrorCode.FILE_UPLOAD_DATA_INVALID, ValidationError({"file": ["file is required"]}))

    content_type = (upload.mimetype or "").lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        return invalid_data(
            ErrorCode.FILE_UPLOAD_DATA_INVALID,
            ValidationError({"file": [f"file type must be one of: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"]}),
        )

    data = upload.read()
    if not data:
        return invalid_data(ErrorCode.FILE_UPLOAD_DATA_INVALID, ValidationError({"file": ["file is empty"]}))

    name = object_name_for(upload.filename, content_type)
    try:
        get_storage().put(name, data, content_type)
    except StorageError:
        return _storage_failed("Failed to upload file")

    current_app.logger.info("File %s uploaded by store %s", name, g.store.store_id)
    return created({"name": name, "content_type": content_type, "size": len(data)})


@fs_bp.get("/<path:name>")
def get_file(name: str):
    """
    Serve a stored object inline.

    Query params (images only): width, height, quality. See response.serve_image.
    """
    try:
        obj = get_storage().get(name)
    except NotFoundError:
        return not_found(ErrorCode.FILE_NOT_FOUND, "File not found")
    except StorageError:
        return _storage_failed("Failed to read file")
    return serve_image(obj, request.args)
