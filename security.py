import os
from datetime import datetime, timedelta, timezone

from jose import jwt

JWT_ALGORITHM = "HS256"


def _get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError("Missing required env var: JWT_SECRET")
    return secret


def create_access_token(subject: str, tenant_id: str, expires_in: timedelta | None = None) -> str:
    """Token contract shared with the portal's session issuer: sub is the staff id."""
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(hours=12)
    payload = {
        "sub": subject,
        "tenant_id": tenant_id,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(payload, _get_jwt_secret(), algorithm=JWT_ALGORITHM)
