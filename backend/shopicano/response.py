# Overview: Uniform JSON envelope, error-to-status mapping and the image streaming path.

"""
Every JSON response is {code, title, data, errors} with None fields left
out. The HTTP status travels on the response, never in the body, and a
204 carries no body at all.

Platform headers are added to every response (JSON, images, errors) by
the after_request hook registered in create_app().
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any

from flask import Response as FlaskResponse
from flask import current_app, jsonify
from PIL import Image, UnidentifiedImageError

from .errors import ErrorCode, ValidationError, is_duplicate_key_error

PLATFORM_HEADERS = {
    "X-Platform": "Shopicano",
    "X-Platform-Developer": "Coders Garage",
    "X-Platform-Connect": "www.shopicano.com",
}


@dataclass
class Response:
    status: int = 200
    code: str | None = None
    title: str | None = None
    data: Any = None
    errors: Any = None

    def to_dict(self) -> dict:
        body = {"code": self.code, "title": self.title, "data": self.data, "errors": self.errors}
        return {k: v for k, v in body.items() if v is not None}

    def server_json(self):
        if self.status == 204:
            return FlaskResponse(status=204)
        resp = jsonify(self.to_dict())
        resp.status_code = self.status
        return resp


def ok(data: Any = None, status: int = 200):
    return Response(status=status, data=data).server_json()


def created(data: Any = None):
    return Response(status=201, data=data).server_json()


def no_content():
    return Response(status=204).server_json()


def invalid_data(code: str, err: ValidationError):
    return Response(status=422, code=code, title="Invalid data", errors=err.to_dict()).server_json()


def not_found(code: str, title: str):
    return Response(status=404, code=code, title=title).server_json()


def conflict(code: str, title: str):
    return Response(status=409, code=code, title=title).server_json()


def unauthorized(title: str = "Unauthorized"):
    return Response(status=401, code=ErrorCode.UNAUTHORIZED, title=title).server_json()


def forbidden(title: str = "Forbidden", code: str = ErrorCode.FORBIDDEN):
    return Response(status=403, code=code, title=title).server_json()


def database_query_failed(exc: BaseException, message: str):
    current_app.logger.exception(message)
    return Response(
        status=500,
        code=ErrorCode.DATABASE_QUERY_FAILED,
        title="Database query failed",
    ).server_json()


def write_failed(exc: BaseException, duplicate_code: str, message: str):
    """
    Map a failed write: unique-constraint violations are 409 with the
    driver's message as title, everything else is a logged 500.
    """
    msg, duplicate = is_duplicate_key_error(exc)
    if duplicate:
        return conflict(duplicate_code, msg)
    return database_query_failed(exc, message)


# -- images --

MAX_IMAGE_DIMENSION = 4096


def _dimension(value: str | None) -> int:
    try:
        parsed = int(value) if value is not None else 0
    except ValueError:
        return 0
    return min(parsed, MAX_IMAGE_DIMENSION) if parsed > 0 else 0


def _quality(value: str | None) -> int:
    try:
        parsed = int(value) if value is not None else 0
    except ValueError:
        return 100
    return parsed if 1 <= parsed <= 100 else 100


def resize_image(data: bytes, width: int, height: int, quality: int = 100) -> bytes:
    """
    Decode, resize with Lanczos and re-encode as JPEG.

    A zero dimension is derived from the other one so the aspect ratio is
    kept; both sides are capped at MAX_IMAGE_DIMENSION. Raises
    UnidentifiedImageError for bytes Pillow can't decode.
    """
    with Image.open(io.BytesIO(data)) as img:
        src_w, src_h = img.size
        if width == 0:
            width = max(1, round(src_w * height / src_h))
        elif height == 0:
            height = max(1, round(src_h * width / src_w))
        width = min(width, MAX_IMAGE_DIMENSION)
        height = min(height, MAX_IMAGE_DIMENSION)

        resized = img.resize((width, height), Image.Resampling.LANCZOS)
        if resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")

        out = io.BytesIO()
        resized.save(out, format="JPEG", quality=quality)
        return out.getvalue()


def serve_image(obj, args):
    """
    Stream a stored object inline.

    With width and/or height the image is resized and served as JPEG;
    otherwise the stored bytes go out untouched.
    """
    width = _dimension(args.get("width"))
    height = _dimension(args.get("height"))

    filename = f"{obj.etag}.{obj.extension}" if obj.extension else obj.etag
    headers = {"Content-Disposition": f'inline; filename="{filename}"'}

    if not width and not height:
        return FlaskResponse(obj.data, status=200, content_type=obj.content_type, headers=headers)

    try:
        body = resize_image(obj.data, width, height, _quality(args.get("quality")))
    except (UnidentifiedImageError, OSError):
        current_app.logger.info("Refusing to resize non-image object %s", obj.name)
        return Response(
            status=422,
            code=ErrorCode.FILE_NOT_AN_IMAGE,
            title="File is not an image",
        ).server_json()

    return FlaskResponse(body, status=200, mimetype="image/jpeg", headers=headers)
