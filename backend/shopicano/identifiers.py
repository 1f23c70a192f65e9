# Overview: Generated identifiers and opaque tokens.

import hashlib
import secrets
import uuid


def new_uuid() -> str:
    return str(uuid.uuid4())


def new_token() -> str:
    """
    Opaque session token: 64 hex characters (32 bytes of entropy).
    This is what the client holds; only hash_token() output is stored.
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 is enough here: tokens are already high-entropy, unlike passwords."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def new_order_hash(nbytes: int = 6) -> str:
    """Short, human-quotable order reference (e.g. '9C04A3F0B17E')."""
    return secrets.token_hex(nbytes).upper()
