# Overview: Flask API routes for accounts, sessions and the caller's addresses.

"""
User account routes.

Sign-up is gated by the settings row (is_sign_up_enabled). Login returns
an access/refresh token pair; refresh swaps the pair atomically so the
old tokens stop working the moment the new ones are issued.
"""
from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth
from ..errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..models import Address, User
from ..passwords import hash_password
from ..permissions import USER_GROUP_ID
from ..response import (
    Response,
    conflict,
    created,
    database_query_failed,
    forbidden,
    invalid_data,
    no_content,
    not_found,
    ok,
    unauthorized,
    write_failed,
)
from ..validators.user import (
    validate_address,
    validate_login,
    validate_refresh_token,
    validate_sign_up,
    validate_user_update,
)

users_bp = Blueprint("users", __name__, url_prefix="/v1/users")


@users_bp.post("/signup/")
def sign_up():
    repos = get_repositories()
    try:
        if not repos.users.is_sign_up_enabled():
            return forbidden("Sign up is disabled", code=ErrorCode.USER_SIGN_UP_DISABLED)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to read settings")

    try:
        req = validate_sign_up(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.USER_SIGN_UP_DATA_INVALID, e)

    user = User(
        name=req.name,
        email=req.email,
        password=hash_password(req.password, rounds=current_app.config["BCRYPT_ROUNDS"]),
        phone=req.phone,
        permission_id=USER_GROUP_ID,
    )
    try:
        repos.users.register(user)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.USER_ALREADY_EXISTS, "Failed to register user")

    current_app.logger.info("User registered: %s", user.id)
    return created(user.to_dict())


@users_bp.post("/login/")
def login():
    try:
        req = validate_login(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.USER_LOGIN_DATA_INVALID, e)

    try:
        pair = get_repositories().users.login(req.email, req.password)
    except NotFoundError:
        return Response(
            status=401,
            code=ErrorCode.USER_LOGIN_FAILED,
            title="Invalid email or password",
        ).server_json()
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to log in")

    return ok(pair.to_dict())


@users_bp.post("/logout/")
@require_auth
def logout():
    try:
        get_repositories().users.logout(g.access_token)
    except NotFoundError:
        return unauthorized("Session not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to log out")
    return no_content()


@users_bp.post("/refresh-token/")
def refresh_token():
    try:
        token = validate_refresh_token(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.INVALID_REFRESH_TOKEN, e)

    try:
        pair = get_repositories().users.refresh_token(token)
    except NotFoundError:
        return Response(
            status=401,
            code=ErrorCode.INVALID_REFRESH_TOKEN,
            title="Invalid or expired refresh token",
        ).server_json()
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to refresh session")

    current_app.logger.info("Session refreshed for user %s", pair.session.user_id)
    return ok(pair.to_dict())


@users_bp.get("/me/")
@require_auth
def get_me():
    data = g.current_user.to_dict()
    data["permissions"] = sorted(g.permissions)
    return ok(data)


@users_bp.patch("/me/")
@require_auth
def update_me():
    try:
        patch = validate_user_update(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.USER_UPDATE_DATA_INVALID, e)

    try:
        user = get_repositories().users.update(g.current_user.id, patch)
    except NotFoundError:
        return not_found(ErrorCode.USER_NOT_FOUND, "User not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to update user")
    return ok(user.to_dict())


# -- addresses --

@users_bp.post("/me/addresses/")
@require_auth
def create_address():
    try:
        req = validate_address(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.ADDRESS_DATA_INVALID, e)

    address = Address(
        user_id=g.current_user.id,
        name=req.name,
        address=req.address,
        city=req.city,
        country=req.country,
        postcode=req.postcode,
        email=req.email,
        phone=req.phone,
    )
    try:
        get_repositories().addresses.create(address)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to create address")
    return created(address.to_dict())


@users_bp.get("/me/addresses/")
@require_auth
def list_addresses():
    try:
        addresses = get_repositories().addresses.list(g.current_user.id)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list addresses")
    return ok([a.to_dict() for a in addresses])


@users_bp.get("/me/addresses/<address_id>/")
@require_auth
def get_address(address_id: str):
    try:
        address = get_repositories().addresses.get(g.current_user.id, address_id)
    except NotFoundError:
        return not_found(ErrorCode.ADDRESS_NOT_FOUND, "Address not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get address")
    return ok(address.to_dict())


@users_bp.delete("/me/addresses/<address_id>/")
@require_auth
def delete_address(address_id: str):
    try:
        get_repositories().addresses.delete(g.current_user.id, address_id)
    except NotFoundError:
        return not_found(ErrorCode.ADDRESS_NOT_FOUND, "Address not found")
    except ConflictError as e:
        return conflict(ErrorCode.ADDRESS_IN_USE, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to delete address")
    return no_content()
