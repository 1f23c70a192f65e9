# Overview: Flask API routes for store coupons and the customer-facing availability check.

from flask import Blueprint, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..checkout import coupon_unavailable_reason
from ..decorators import require_auth, require_store_permission, require_store_staff
from ..errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..models import Coupon
from ..permissions import MANAGE_COUPONS
from ..response import conflict, created, database_query_failed, invalid_data, no_content, not_found, ok, write_failed
from ..time_utils import to_utc_z, utcnow
from ..validators import parse_pagination
from ..validators.coupon import check_coupon_rules, validate_coupon_create, validate_coupon_update

coupons_bp = Blueprint("coupons", __name__, url_prefix="/v1/coupons")


@coupons_bp.post("/")
@require_store_staff
@require_store_permission(MANAGE_COUPONS)
def create_coupon():
    try:
        req = validate_coupon_create(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.COUPON_CREATION_DATA_INVALID, e)

    coupon = Coupon(
        store_id=g.store.store_id,
        code=req.code,
        is_active=req.is_active,
        discount_amount=req.discount_amount,
        is_flat_discount=req.is_flat_discount,
        max_discount=req.max_discount,
        max_usage=req.max_usage,
        discount_type=req.discount_type,
        start_at=req.start_at,
        end_at=req.end_at,
    )
    try:
        get_repositories().coupons.create(coupon)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.COUPON_ALREADY_EXISTS, "Failed to create coupon")
    return created(coupon.to_dict())


@coupons_bp.get("/")
@require_store_staff
@require_store_permission(MANAGE_COUPONS)
def list_coupons():
    p = parse_pagination(request.args)
    repo = get_repositories().coupons
    try:
        if p.query:
            coupons = repo.search_as_store_staff(p.query, g.store.store_id, p.offset, p.limit)
        else:
            coupons = repo.list_as_store_staff(g.store.store_id, p.offset, p.limit)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list coupons")
    return ok([c.to_dict() for c in coupons])


@coupons_bp.get("/<coupon_id>/")
@require_store_staff
@require_store_permission(MANAGE_COUPONS)
def get_coupon(coupon_id: str):
    repo = get_repositories().coupons
    try:
        coupon = repo.get_as_store_staff(g.store.store_id, coupon_id)
        usage = repo.usage_count(coupon.id)
    except NotFoundError:
        return not_found(ErrorCode.COUPON_NOT_FOUND, "Coupon not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get coupon")

    data = coupon.to_dict()
    data["usage_count"] = usage
    return ok(data)


@coupons_bp.patch("/<coupon_id>/")
@require_store_staff
@require_store_permission(MANAGE_COUPONS)
def update_coupon(coupon_id: str):
    try:
        patch = validate_coupon_update(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.COUPON_CREATION_DATA_INVALID, e)

    repo = get_repositories().coupons
    try:
        coupon = repo.get_as_store_staff(g.store.store_id, coupon_id)
    except NotFoundError:
        return not_found(ErrorCode.COUPON_NOT_FOUND, "Coupon not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get coupon")

    try:
        # Cross-field rules run against the merged record
        check_coupon_rules(
            patch.get("is_flat_discount", coupon.is_flat_discount),
            patch.get("discount_amount", coupon.discount_amount),
            patch.get("start_at", coupon.start_at),
            patch.get("end_at", coupon.end_at),
        )
    except ValidationError as e:
        return invalid_data(ErrorCode.COUPON_CREATION_DATA_INVALID, e)

    try:
        for k, v in patch.items():
            setattr(coupon, k, v)
        repo.update(coupon)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.COUPON_ALREADY_EXISTS, "Failed to update coupon")
    return ok(coupon.to_dict())


@coupons_bp.delete("/<coupon_id>/")
@require_store_staff
@require_store_permission(MANAGE_COUPONS)
def delete_coupon(coupon_id: str):
    try:
        get_repositories().coupons.delete(g.store.store_id, coupon_id)
    except NotFoundError:
        return not_found(ErrorCode.COUPON_NOT_FOUND, "Coupon not found")
    except ConflictError as e:
        return conflict(ErrorCode.COUPON_IN_USE, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to delete coupon")
    return no_content()


@coupons_bp.get("/<code>/check/")
@require_auth
def check_coupon(code: str):
    """
    Whether a customer could redeem `code` at `store_id` right now.

    Unknown codes and codes of inactive stores are 404; a known code that
    can't be used (inactive, outside its window, used up) is 200 with
    is_available = false and the reason.
    """
    store_id = (request.args.get("store_id") or "").strip()
    if not store_id:
        return invalid_data(
            ErrorCode.COUPON_NOT_APPLICABLE,
            ValidationError({"store_id": ["store_id is required"]}),
        )

    repos = get_repositories()
    try:
        repos.stores.find_active_store(store_id)
        coupon = repos.coupons.get_by_code(store_id, code.strip().upper())
        usage = repos.coupons.usage_count(coupon.id)
    except NotFoundError:
        return not_found(ErrorCode.COUPON_NOT_FOUND, "Coupon not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to check coupon")

    reason = coupon_unavailable_reason(coupon, utcnow(), usage)
    return ok({
        "code": coupon.code,
        "store_id": coupon.store_id,
        "discount_amount": coupon.discount_amount,
        "is_flat_discount": coupon.is_flat_discount,
        "max_discount": coupon.max_discount,
        "discount_type": coupon.discount_type,
        "start_at": to_utc_z(coupon.start_at),
        "end_at": to_utc_z(coupon.end_at),
        "is_available": reason is None,
        "reason": reason,
    })
