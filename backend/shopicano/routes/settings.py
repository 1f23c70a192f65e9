# Overview: Flask API routes for the platform settings row.

from flask import Blueprint, current_app, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth, require_permission
from ..errors import ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..permissions import MANAGE_SETTINGS
from ..response import database_query_failed, invalid_data, not_found, ok
from ..validators.store import validate_settings_update

settings_bp = Blueprint("settings", __name__, url_prefix="/v1/settings")


@settings_bp.get("/")
def get_settings():
    try:
        s = get_repositories().settings.get()
    except NotFoundError:
        return not_found(ErrorCode.SETTINGS_NOT_FOUND, "Settings not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to read settings")
    return ok(s.to_dict())


@settings_bp.patch("/")
@require_auth
@require_permission(MANAGE_SETTINGS)
def update_settings():
    try:
        patch = validate_settings_update(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.SETTINGS_UPDATE_DATA_INVALID, e)

    try:
        s = get_repositories().settings.update(patch)
    except NotFoundError:
        return not_found(ErrorCode.SETTINGS_NOT_FOUND, "Settings not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to update settings")

    current_app.logger.info("Settings updated: %s", ", ".join(sorted(patch)))
    return ok(s.to_dict())
