"""
Security utilities: password hashing, admin token check, transport headers
"""

import secrets
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.config import settings
from app.utils.responses import unauthorized_error

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72

BCRYPT_ROUNDS = 12

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self' 'unsafe-inline'; connect-src 'self' https:; img-src 'self' data: https:;",
}

HSTS_HEADER = "max-age=31536000; includeSubDomains; preload"

security = HTTPBearer(auto_error=False)

def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt"""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of a password against a stored bcrypt hash"""
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False

def verify_admin_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """Require the admin bearer token when one is configured"""
    if not settings.ADMIN_TOKEN:
        return None
    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode("utf-8"), settings.ADMIN_TOKEN.encode("utf-8")
    ):
        unauthorized_error("Invalid admin token")
    return credentials.credentials

class SecureTransportMiddleware(BaseHTTPMiddleware):
    """Redirects plain HTTP to HTTPS when enforced and adds security headers"""

    def __init__(self, app, enforce_https: bool = False):
        super().__init__(app)
        self.enforce_https = enforce_https

    async def dispatch(self, request: Request, call_next):
        if self.enforce_https:
            # Behind a proxy the original scheme arrives in X-Forwarded-Proto
            scheme = request.headers.get("x-forwarded-proto", request.url.scheme)
            if scheme != "https":
                return RedirectResponse(
                    url=str(request.url.replace(scheme="https")),
                    status_code=301
                )

        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if self.enforce_https:
            response.headers.setdefault("Strict-Transport-Security", HSTS_HEADER)
        return response
