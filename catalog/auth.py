# catalog/auth.py
import datetime
import os
from typing import Optional, Protocol

import pytz
from jose import jwt

from core.logger import get_logger

from .exceptions import CatalogConfigError

logger = get_logger(__name__)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
JWT_ISSUER = os.getenv("JWT_ISSUER", "")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "")
JWT_ALGORITHM = "HS256"

SERVICE_ROLE = os.getenv("SERVICE_ROLE", "User")
SERVICE_TOKEN_MINUTES = int(os.getenv("SERVICE_TOKEN_MINUTES", "60"))


class TokenIssuer(Protocol):
    def __call__(self, role: str, ttl: datetime.timedelta) -> str: ...


def issue_service_token(
    role: str = SERVICE_ROLE,
    ttl: datetime.timedelta = datetime.timedelta(minutes=SERVICE_TOKEN_MINUTES),
    *,
    secret_key: Optional[str] = None,
    issuer: Optional[str] = None,
    audience: Optional[str] = None,
    now: Optional[datetime.datetime] = None,
) -> str:
    """
    Mint a short-lived HS256 service token asserting `role`.
    Depends only on configuration and the current time; nothing is stored.
    """
    secret = secret_key if secret_key is not None else JWT_SECRET_KEY
    if not secret:
        raise CatalogConfigError("JWT secret key not found in configuration (JWT_SECRET_KEY).")

    issued_at = now or datetime.datetime.now(tz=pytz.UTC)
    claims = {
        "role": role,
        "iat": issued_at,
        "nbf": issued_at,
        "exp": issued_at + ttl,
    }
    iss = issuer if issuer is not None else JWT_ISSUER
    aud = audience if audience is not None else JWT_AUDIENCE
    if iss:
        claims["iss"] = iss
    if aud:
        claims["aud"] = aud

    token = jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)
    logger.debug("Issued service token for role=%s valid until %s.", role, claims["exp"])
    return token
