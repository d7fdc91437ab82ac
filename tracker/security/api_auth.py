"""API key and HTTP Basic authentication for /api routes.

Credentials come from settings (``TRACKER_API_KEYS`` and
``TRACKER_BASIC_USERS``). Password hashes are either PBKDF2 strings produced
by :func:`hash_password` or a bare hex SHA-256 digest.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import secrets

from fastapi import Request

from ..config import TrackerSettings, settings

logger = logging.getLogger(__name__)

AUTH_HINT = "Use X-API-Key header, Authorization: Bearer <key>, or Authorization: Basic header"


class AuthenticationError(Exception):
    """Request carried no acceptable credential."""

    def __init__(self, message: str = "Valid API key or Basic Auth credentials required"):
        self.message = message
        super().__init__(message)


PBKDF2_SCHEME = "pbkdf2_sha256"


def hash_password(password: str, settings_obj: TrackerSettings | None = None) -> str:
    """Return a ``TRACKER_BASIC_USERS`` hash for ``password``.

    The round count comes from ``password_iterations`` and is stored in the
    hash, so hashes made with an older setting still verify.
    """
    if not password:
        raise ValueError("Password is required")
    rounds = (settings_obj or settings).password_iterations
    if rounds < 1:
        raise ValueError("password_iterations must be positive")
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return "$".join((PBKDF2_SCHEME, str(rounds), salt.hex(), digest.hex()))


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a PBKDF2 hash or a hex SHA-256 digest."""
    if not password or not stored_hash:
        return False

    if not stored_hash.startswith(f"{PBKDF2_SCHEME}$"):
        actual_hex = hashlib.sha256(password.encode("utf-8")).hexdigest()
        return hmac.compare_digest(actual_hex.encode("ascii"), stored_hash.strip().lower().encode("utf-8"))

    try:
        _scheme, iterations_raw, salt_hex, digest_hex = stored_hash.split("$", 3)
        iterations = int(iterations_raw)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
    except ValueError:
        return False
    if iterations < 1:
        return False

    actual = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(actual, expected)


def validate_api_key(api_key: str | None, settings_obj: TrackerSettings) -> bool:
    if not api_key:
        return False
    provided = api_key.encode("utf-8")
    return any(hmac.compare_digest(provided, k.encode("utf-8")) for k in settings_obj.api_keys_set)


def validate_basic_auth(auth_header: str | None, settings_obj: TrackerSettings) -> bool:
    if not auth_header or not auth_header.lower().startswith("basic "):
        return False
    try:
        raw = base64.b64decode(auth_header[6:].strip(), validate=True).decode("utf-8")
        username, password = raw.split(":", 1)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return False
    if not username or not password:
        return False

    stored = settings_obj.basic_users_map.get(username)
    if stored is None:
        return False
    return verify_password(password, stored)


def authenticate_request(request: Request, settings_obj: TrackerSettings) -> str | None:
    """Return the auth method used, ``None`` when auth is disabled.

    Raises :class:`AuthenticationError` when no credential is valid.
    """
    if not settings_obj.auth_enabled or request.method == "OPTIONS":
        return None

    authorization = request.headers.get("authorization", "")
    api_key = request.headers.get("x-api-key", "").strip()
    if not api_key and authorization.lower().startswith("bearer "):
        api_key = authorization[7:].strip()
    if api_key and validate_api_key(api_key, settings_obj):
        return "api-key"

    if validate_basic_auth(authorization, settings_obj):
        return "basic-auth"

    logger.debug("Rejected unauthenticated request to %s", request.url.path)
    raise AuthenticationError()


def require_api_auth(request: Request) -> str | None:
    """FastAPI dependency guarding the /api routers."""
    method = authenticate_request(request, settings)
    request.state.auth_method = method
    return method
