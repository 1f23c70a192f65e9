# Overview: Request validators; pure functions from JSON payloads to typed requests or patch dicts.

from .common import Pagination, PayloadReader, collect_patch, parse_pagination

__all__ = ["Pagination", "PayloadReader", "collect_patch", "parse_pagination"]
