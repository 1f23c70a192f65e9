# Overview: Flask API routes for stores, their staff and their payment/shipping methods.

"""
Store routes.

Store creation is gated by the settings row unless the caller is a
platform admin. A new store starts `pending`; its staff endpoints open once
a platform admin marks it `active` (see routes/admin.py).

Staff-only routes resolve the store from the caller (g.store); a store id
is never taken from the request for writes.
"""
from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth, require_permission, require_store_permission, require_store_staff
from ..errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..models import PaymentMethod, ShippingMethod, Staff, Store
from ..permissions import CREATE_STORE, MANAGE_SETTINGS, MANAGE_STAFFS, MANAGE_STORE
from ..response import (
    conflict,
    created,
    database_query_failed,
    forbidden,
    invalid_data,
    no_content,
    not_found,
    ok,
    write_failed,
)
from ..validators import parse_pagination
from ..validators.store import (
    validate_payment_method,
    validate_shipping_method,
    validate_staff_add,
    validate_staff_permission,
    validate_store_create,
)

stores_bp = Blueprint("stores", __name__, url_prefix="/v1/stores")


@stores_bp.post("/")
@require_auth
@require_permission(CREATE_STORE)
def create_store():
    repos = get_repositories()
    try:
        # Platform admins may open stores even while creation is switched off
        if MANAGE_SETTINGS not in g.permissions and not repos.users.is_store_creation_enabled():
            return forbidden("Store creation is disabled", code=ErrorCode.STORE_CREATION_DISABLED)
        if repos.stores.is_already_staff(g.current_user.id):
            return conflict(ErrorCode.USER_ALREADY_STAFF, "User is already staff of a store")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to check store creation")

    try:
        req = validate_store_create(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.STORE_CREATION_DATA_INVALID, e)

    store = Store(
        name=req.name,
        description=req.description,
        address=req.address,
        city=req.city,
        country=req.country,
        postcode=req.postcode,
        email=req.email,
        phone=req.phone,
        logo_image=req.logo_image,
        cover_image=req.cover_image,
    )
    try:
        repos.stores.create_store(store, g.current_user.id)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.STORE_ALREADY_EXISTS, "Failed to create store")

    current_app.logger.info("Store created: %s by user %s", store.id, g.current_user.id)
    return created(store.to_dict())


@stores_bp.get("/mine/")
@require_store_staff
def get_my_store():
    try:
        store = get_repositories().stores.find_store_by_id(g.store.store_id)
    except NotFoundError:
        return not_found(ErrorCode.STORE_NOT_FOUND, "Store not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get store")

    data = store.to_dict()
    data["profile"] = g.store.to_dict()
    return ok(data)


@stores_bp.get("/<store_id>/")
def get_store(store_id: str):
    try:
        store = get_repositories().stores.find_active_store(store_id)
    except NotFoundError:
        return not_found(ErrorCode.STORE_NOT_FOUND, "Store not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get store")
    return ok(store.to_dict())


# -- staff --

@stores_bp.post("/staffs/")
@require_store_staff
@require_store_permission(MANAGE_STAFFS)
def add_staff():
    try:
        req = validate_staff_add(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.STAFF_DATA_INVALID, e)

    repos = get_repositories()
    try:
        user = repos.users.get_by_email(req.email)
        if repos.stores.is_already_staff(user.id):
            return conflict(ErrorCode.USER_ALREADY_STAFF, "User is already staff of a store")
    except NotFoundError:
        return not_found(ErrorCode.USER_NOT_FOUND, "User not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to look up user")

    staff = Staff(user_id=user.id, store_id=g.store.store_id, permission_id=req.permission_id)
    try:
        repos.stores.add_store_staff(staff)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.USER_ALREADY_STAFF, "Failed to add staff")

    return created({
        "user_id": staff.user_id,
        "store_id": staff.store_id,
        "permission_id": staff.permission_id,
        "is_creator": staff.is_creator,
    })


@stores_bp.get("/staffs/")
@require_store_staff
@require_store_permission(MANAGE_STAFFS)
def list_staffs():
    p = parse_pagination(request.args)
    repos = get_repositories()
    try:
        if p.query:
            staffs = repos.stores.search_staffs(g.store.store_id, p.query, p.offset, p.limit)
        else:
            staffs = repos.stores.list_staffs(g.store.store_id, p.offset, p.limit)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list staffs")
    return ok(staffs)


@stores_bp.patch("/staffs/<user_id>/")
@require_store_staff
@require_store_permission(MANAGE_STAFFS)
def update_staff_permission(user_id: str):
    try:
        permission_id = validate_staff_permission(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.STAFF_DATA_INVALID, e)

    try:
        staff = get_repositories().stores.update_store_staff_permission(g.store.store_id, user_id, permission_id)
    except NotFoundError:
        return not_found(ErrorCode.STAFF_NOT_FOUND, "Staff not found")
    except ConflictError as e:
        return conflict(ErrorCode.STAFF_NOT_MODIFIABLE, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to update staff permission")

    return ok({
        "user_id": staff.user_id,
        "store_id": staff.store_id,
        "permission_id": staff.permission_id,
        "is_creator": staff.is_creator,
    })


@stores_bp.delete("/staffs/<user_id>/")
@require_store_staff
@require_store_permission(MANAGE_STAFFS)
def remove_staff(user_id: str):
    try:
        get_repositories().stores.delete_store_staff_permission(g.store.store_id, user_id)
    except NotFoundError:
        return not_found(ErrorCode.STAFF_NOT_FOUND, "Staff not found")
    except ConflictError as e:
        return conflict(ErrorCode.STAFF_NOT_MODIFIABLE, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to remove staff")
    return no_content()


# -- payment & shipping methods --

@stores_bp.post("/payment-methods/")
@require_store_staff
@require_store_permission(MANAGE_STORE)
def create_payment_method():
    try:
        req = validate_payment_method(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.PAYMENT_METHOD_DATA_INVALID, e)

    method = PaymentMethod(
        store_id=g.store.store_id,
        name=req.name,
        processing_fee=req.processing_fee,
        is_flat=req.is_flat,
        is_offline_payment=req.is_offline_payment,
        is_published=req.is_published,
    )
    try:
        get_repositories().payment_methods.create(method)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.PAYMENT_METHOD_ALREADY_EXISTS, "Failed to create payment method")
    return created(method.to_dict())


@stores_bp.get("/payment-methods/")
@require_store_staff
@require_store_permission(MANAGE_STORE)
def list_payment_methods():
    try:
        methods = get_repositories().payment_methods.list(g.store.store_id)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list payment methods")
    return ok([m.to_dict() for m in methods])


@stores_bp.delete("/payment-methods/<method_id>/")
@require_store_staff
@require_store_permission(MANAGE_STORE)
def delete_payment_method(method_id: str):
    try:
        get_repositories().payment_methods.delete(g.store.store_id, method_id)
    except NotFoundError:
        return not_found(ErrorCode.PAYMENT_METHOD_NOT_FOUND, "Payment method not found")
    except ConflictError as e:
        return conflict(ErrorCode.PAYMENT_METHOD_IN_USE, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to delete payment method")
    return no_content()


@stores_bp.post("/shipping-methods/")
@require_store_staff
@require_store_permission(MANAGE_STORE)
def create_shipping_method():
    try:
        req = validate_shipping_method(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.SHIPPING_METHOD_DATA_INVALID, e)

    method = ShippingMethod(
        store_id=g.store.store_id,
        name=req.name,
        delivery_charge=req.delivery_charge,
        approximate_delivery_time=req.approximate_delivery_time,
        is_published=req.is_published,
    )
    try:
        get_repositories().shipping_methods.create(method)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.SHIPPING_METHOD_ALREADY_EXISTS, "Failed to create shipping method")
    return created(method.to_dict())


@stores_bp.get("/shipping-methods/")
@require_store_staff
@require_store_permission(MANAGE_STORE)
def list_shipping_methods():
    try:
        methods = get_repositories().shipping_methods.list(g.store.store_id)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list shipping methods")
    return ok([m.to_dict() for m in methods])


@stores_bp.delete("/shipping-methods/<method_id>/")
@require_store_staff
@require_store_permission(MANAGE_STORE)
def delete_shipping_method(method_id: str):
    try:
        get_repositories().shipping_methods.delete(g.store.store_id, method_id)
    except NotFoundError:
        return not_found(ErrorCode.SHIPPING_METHOD_NOT_FOUND, "Shipping method not found")
    except ConflictError as e:
        return conflict(ErrorCode.SHIPPING_METHOD_IN_USE, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to delete shipping method")
    return no_content()


@stores_bp.get("/<store_id>/payment-methods/")
def list_public_payment_methods(store_id: str):
    try:
        methods = get_repositories().payment_methods.list_public(store_id)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list payment methods")
    return ok([m.to_dict() for m in methods])


@stores_bp.get("/<store_id>/shipping-methods/")
def list_public_shipping_methods(store_id: str):
    try:
        methods = get_repositories().shipping_methods.list_public(store_id)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list shipping methods")
    return ok([m.to_dict() for m in methods])
