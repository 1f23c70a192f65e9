# Overview: Flask API routes for product, category and order statistics.

from flask import Blueprint, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import is_store_staff, might_be_store_staff, require_store_permission, require_store_staff
from ..errors import ErrorCode, ValidationError
from ..extensions import get_repositories
from ..permissions import VIEW_REPORTS
from ..reporting import DEFAULT_TIMELINE, TIMELINES, build_time_frames
from ..response import database_query_failed, invalid_data, ok
from ..time_utils import to_utc_z, utcnow

stats_bp = Blueprint("stats", __name__, url_prefix="/v1/stats")

TOP_N = 25


@stats_bp.get("/products/")
@might_be_store_staff
def product_stats():
    """Top products by quantity sold."""
    repo = get_repositories().products
    try:
        if is_store_staff():
            rows = repo.stats_as_store_staff(g.store.store_id, 0, TOP_N)
        else:
            rows = repo.stats(0, TOP_N)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to compute product stats")
    return ok(rows)


@stats_bp.get("/categories/")
@might_be_store_staff
def category_stats():
    """Top categories by number of products."""
    repo = get_repositories().categories
    try:
        if is_store_staff():
            rows = repo.stats_as_store_staff(g.store.store_id, 0, TOP_N)
        else:
            rows = repo.stats(0, TOP_N)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to compute category stats")
    return ok(rows)


@stats_bp.get("/orders/")
@require_store_staff
@require_store_permission(VIEW_REPORTS)
def order_stats():
    """
    Store order report.

    Query params:
    - timeline: w (7 daily buckets, default), m (5 weekly), y (12 x 30 days)

    Response data:
    - report: all-time summary
    - reports_by_time: per-bucket summaries, ascending by bucket start
    - orders_by_time: {bucket start: {order status: count}}
    - earnings_by_time: {bucket start: {payment status: grand total}}
    """
    timeline = request.args.get("timeline") or DEFAULT_TIMELINE
    if timeline not in TIMELINES:
        return invalid_data(
            ErrorCode.STATS_QUERY_INVALID,
            ValidationError({"timeline": [f"timeline must be one of: {', '.join(TIMELINES)}"]}),
        )

    store_id = g.store.store_id
    repo = get_repositories().orders
    frames = build_time_frames(timeline, utcnow())

    reports_by_time = []
    orders_by_time = {}
    earnings_by_time = {}
    try:
        report = repo.store_summary(store_id)
        for start, end in frames:
            key = to_utc_z(start)
            reports_by_time.append(repo.store_summary_by_time(store_id, start, end).to_dict())
            orders_by_time[key] = repo.count_by_status(store_id, start, end)
            earnings_by_time[key] = repo.earnings_by_status(store_id, start, end)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to compute order stats")

    return ok({
        "report": report.to_dict(),
        "reports_by_time": reports_by_time,
        "orders_by_time": orders_by_time,
        "earnings_by_time": earnings_by_time,
    })
