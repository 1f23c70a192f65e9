# backend/shopicano/__init__.py
from flask import Flask
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import REPOSITORIES_KEY, STORAGE_KEY, db, migrate
from .logging_config import configure_logging


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    # Overrides must land before extensions read the config (engine URI, storage)
    if test_config:
        app.config.update(test_config)
    if not app.config.get("MAX_CONTENT_LENGTH"):
        app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_UPLOAD_SIZE_MB"] * 1024 * 1024

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Repositories and blob storage are built exactly once per app
    from .repositories import build_repositories
    from .storage import BlobStorage

    app.extensions[REPOSITORIES_KEY] = build_repositories(db.session, app.config)
    app.extensions[STORAGE_KEY] = app.config.get("BLOB_STORAGE") or BlobStorage.from_config(app.config)

    # Register blueprints
    from .routes.users import users_bp
    from .routes.settings import settings_bp
    from .routes.stores import stores_bp
    from .routes.admin import admin_bp
    from .routes.categories import categories_bp
    from .routes.products import products_bp
    from .routes.coupons import coupons_bp
    from .routes.orders import orders_bp
    from .routes.store_orders import store_orders_bp
    from .routes.stats import stats_bp
    from .routes.fs import fs_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(stores_bp)
    app.register_blueprint(store_orders_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(coupons_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(stats_bp)
    app.register_blueprint(fs_bp)

    from .decorators import reset_request_identity
    from .errors import ErrorCode
    from .response import PLATFORM_HEADERS, Response

    app.before_request(reset_request_identity)

    @app.after_request
    def add_platform_headers(response):
        for name, value in PLATFORM_HEADERS.items():
            response.headers[name] = value
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        code = {
            404: ErrorCode.ROUTE_NOT_FOUND,
            405: ErrorCode.METHOD_NOT_ALLOWED,
        }.get(e.code, e.name.upper().replace(" ", "_"))
        return Response(status=e.code or 500, code=code, title=e.description).server_json()

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
