# Overview: Request authentication and permission decorators for API routes.

from functools import wraps

from flask import g, request

from .errors import NotFoundError
from .extensions import get_repositories
from .response import forbidden, unauthorized


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def _load_user() -> bool:
    """Resolve the bearer token into g.current_user; False if there is none or it is invalid."""
    token = _bearer_token()
    if token is None:
        return False

    context = get_repositories().users.get_permission(token)
    if context is None:
        return False

    g.current_user = context.user
    g.permission_id = context.permission_id
    g.permissions = context.permissions
    g.access_token = token
    return True


def _load_store() -> None:
    """Attach the caller's store profile to g.store, only when that store is active."""
    g.store = None
    try:
        profile = get_repositories().stores.get_store_user_profile(g.current_user.id)
    except NotFoundError:
        return
    if profile.is_store_active:
        g.store = profile


def is_authenticated() -> bool:
    return hasattr(g, "current_user")


def is_store_staff() -> bool:
    """True when the caller acts as staff of an active store for this request."""
    return getattr(g, "store", None) is not None


def has_store_permission(code: str) -> bool:
    return is_store_staff() and code in g.store.permissions


def require_auth(f):
    """
    Require a valid access token.

    Sets:
    - g.current_user: the active User
    - g.permission_id / g.permissions: the user's platform group
    - g.access_token: the raw token (logout deletes its session)

    Returns 401 for a missing, unknown or expired token and for inactive users.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _load_user():
            return unauthorized("Invalid or expired token")
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require a platform permission. Must be applied after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not is_authenticated():
                return unauthorized()
            if permission_code not in g.permissions:
                return forbidden(f"Permission denied: {permission_code}")
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def might_be_store_staff(f):
    """
    Optional authentication for endpoints with a public and a staff view.

    A valid token of an active store's staff member sets g.store; anything
    else (no token, bad token, no store, inactive store) falls through as a
    public request with g.store = None.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.store = None
        if _load_user():
            _load_store()
        return f(*args, **kwargs)

    return decorated_function


def require_store_staff(f):
    """
    Require the caller to be staff of an active store.

    401 without a valid session; 403 when the user is not staff anywhere or
    their store is pending/suspended.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _load_user():
            return unauthorized("Invalid or expired token")
        _load_store()
        if not is_store_staff():
            return forbidden("Not staff of an active store")
        return f(*args, **kwargs)

    return decorated_function


def require_store_permission(permission_code: str):
    """Require a permission from the caller's store group. Must follow @require_store_staff."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not is_store_staff():
                return forbidden("Not staff of an active store")
            if permission_code not in g.store.permissions:
                return forbidden(f"Permission denied: {permission_code}")
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def reset_request_identity() -> None:
    """
    Clear per-request auth state from g.

    Registered as a before_request hook: g lives on the app context, which
    a long-lived context (CLI, tests) may share across requests.
    """
    for key in ("current_user", "permission_id", "permissions", "access_token", "store"):
        g.pop(key, None)
