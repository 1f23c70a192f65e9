# Overview: Permission codes and the default permission groups seeded by `flask migration init`.

"""
Permission groups.

Every user points at one platform group (admin / user). Every staff record
points at one store group (store_admin / store_manager / store_staff).
A group's permissions are stored as a comma-separated string.
"""

# -- PLATFORM --
MANAGE_SETTINGS = "manage_settings"
MANAGE_STORES = "manage_stores"
CREATE_STORE = "create_store"
PLACE_ORDER = "place_order"

# -- STORE --
MANAGE_STORE = "manage_store"
MANAGE_STAFFS = "manage_staffs"
MANAGE_CATEGORIES = "manage_categories"
MANAGE_PRODUCTS = "manage_products"
MANAGE_COUPONS = "manage_coupons"
MANAGE_ORDERS = "manage_orders"
VIEW_REPORTS = "view_reports"

ADMIN_GROUP_ID = "admin"
USER_GROUP_ID = "user"
STORE_ADMIN_GROUP_ID = "store_admin"
STORE_MANAGER_GROUP_ID = "store_manager"
STORE_STAFF_GROUP_ID = "store_staff"

STORE_GROUP_IDS = {STORE_ADMIN_GROUP_ID, STORE_MANAGER_GROUP_ID, STORE_STAFF_GROUP_ID}

# (id, name, permissions)
DEFAULT_PERMISSION_GROUPS = [
    (
        ADMIN_GROUP_ID,
        "Platform Admin",
        [MANAGE_SETTINGS, MANAGE_STORES, CREATE_STORE, PLACE_ORDER],
    ),
    (
        USER_GROUP_ID,
        "User",
        [CREATE_STORE, PLACE_ORDER],
    ),
    (
        STORE_ADMIN_GROUP_ID,
        "Store Admin",
        [
            MANAGE_STORE, MANAGE_STAFFS, MANAGE_CATEGORIES, MANAGE_PRODUCTS,
            MANAGE_COUPONS, MANAGE_ORDERS, VIEW_REPORTS,
        ],
    ),
    (
        STORE_MANAGER_GROUP_ID,
        "Store Manager",
        [MANAGE_CATEGORIES, MANAGE_PRODUCTS, MANAGE_COUPONS, MANAGE_ORDERS, VIEW_REPORTS],
    ),
    (
        STORE_STAFF_GROUP_ID,
        "Store Staff",
        [MANAGE_PRODUCTS, MANAGE_ORDERS],
    ),
]


def parse_permissions(value: str | None) -> set[str]:
    """Split a stored permission string into a set of codes."""
    if not value:
        return set()
    return {p.strip() for p in value.split(",") if p.strip()}


def join_permissions(codes) -> str:
    return ",".join(sorted(set(codes)))
