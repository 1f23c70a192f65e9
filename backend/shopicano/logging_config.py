# Overview: Application log setup; one stdout handler with request context.

from __future__ import annotations

import logging
import sys

from flask import Flask, has_request_context, request

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(method)s %(path)s - %(message)s"


class RequestContextFilter(logging.Filter):
    """Inject the active request's method and path into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if has_request_context():
            record.method = request.method
            record.path = request.path
        else:
            record.method = "-"
            record.path = "-"
        return True


def configure_logging(app: Flask) -> None:
    """Attach a single stdout handler to the app logger, honoring LOG_LEVEL."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestContextFilter())

    # Replace handlers so repeated create_app() calls (tests) don't duplicate output
    app.logger.handlers = [handler]
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    app.logger.propagate = False
