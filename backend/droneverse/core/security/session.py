"""
Signed session tokens carried in a cookie.

The token is opaque to clients and resolves to a user id. Only identity is
encoded; there are no roles or permissions.
"""

from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from droneverse.core.utils.logger import get_logger

_logger = get_logger("session")

_SALT = "droneverse-session"
_DEV_SECRET = "dev-secret-do-not-use-in-production"
_warned_dev_secret = False


def _serializer(secret: str) -> URLSafeTimedSerializer:
    global _warned_dev_secret
    if not secret:
        if not _warned_dev_secret:
            _warned_dev_secret = True
            _logger.warning("SESSION_SECRET not set; using insecure development secret.")
        secret = _DEV_SECRET
    return URLSafeTimedSerializer(secret, salt=_SALT)


def create_session_token(user_id: str, secret: str) -> str:
    if not user_id:
        raise ValueError("user_id cannot be empty")
    return _serializer(secret).dumps({"user_id": user_id})


def read_session_token(token: Optional[str], secret: str, max_age: int) -> Optional[str]:
    """User id from a token, or None when it is missing, tampered with or expired."""
    if not token:
        return None
    try:
        data = _serializer(secret).loads(token, max_age=max_age)
    except SignatureExpired:
        _logger.info("Expired session token")
        return None
    except BadSignature:
        _logger.warning("Invalid session token signature")
        return None
    user_id = data.get("user_id") if isinstance(data, dict) else None
    return str(user_id) if user_id else None
