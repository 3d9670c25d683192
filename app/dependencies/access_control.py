# Admin Access Control
# Purpose: bcrypt credential checks, JWT issuing and cookie-based admin guard
# Main functions: hash_secret(), verify_secret(), create_access_token(), require_admin()
# Dependent files: app/routers/auth.py, every router with write endpoints

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import secrets

import bcrypt
import jwt
from fastapi import HTTPException, Request, Response, status

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"

SHORT_SESSION = timedelta(hours=1)
REMEMBER_ME_SESSION = timedelta(days=365)


@dataclass
class AdminPrincipal:
    """Claims carried by an admin token."""
    subject: str
    role: str = ADMIN_ROLE


@dataclass
class AuthSettings:
    secret_key: str
    cookie_name: str = "token"
    cookie_secure: bool = True
    protect_writes: bool = True

    @classmethod
    def from_config(cls, config: dict) -> "AuthSettings":
        auth_cfg = config.get("auth", {})
        secret = auth_cfg.get("jwt_secret") or ""
        if not secret:
            secret = secrets.token_urlsafe(48)
            logger.warning(
                "JWT_SECRET not set, generated a random key. "
                "Admin sessions will be invalidated on restart. Set JWT_SECRET for persistence."
            )
        return cls(
            secret_key=secret,
            cookie_name=auth_cfg.get("cookie_name", "token"),
            cookie_secure=auth_cfg.get("cookie_secure", True),
            protect_writes=auth_cfg.get("protect_writes", True),
        )


# --- Hashing ---

def hash_secret(value: str) -> str:
    """bcrypt-hash a username or password (cost 10)."""
    return bcrypt.hashpw(value.encode(), bcrypt.gensalt(rounds=10)).decode()


def verify_secret(value: Optional[str], hashed: Optional[str]) -> bool:
    if not value or not hashed:
        return False
    try:
        return bcrypt.checkpw(value.encode(), hashed.encode())
    except ValueError:
        logger.error("Stored admin hash is not a valid bcrypt hash")
        return False


# --- Tokens ---

def session_length(remember_me: bool) -> timedelta:
    return REMEMBER_ME_SESSION if remember_me else SHORT_SESSION


def create_access_token(principal: AdminPrincipal, secret_key: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": principal.subject,
        "role": principal.role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> AdminPrincipal:
    """Validate *token*; raises jwt.InvalidTokenError (incl. expiry) on failure."""
    payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    subject, role = payload.get("sub"), payload.get("role")
    if subject is None or role != ADMIN_ROLE:
        raise jwt.InvalidTokenError("Token is missing admin claims")
    return AdminPrincipal(subject=subject, role=role)


def issue_session_cookie(response: Response, settings: AuthSettings, remember_me: bool):
    """Sign an admin token and attach it as the httpOnly session cookie."""
    lifetime = session_length(remember_me)
    token = create_access_token(AdminPrincipal(subject=ADMIN_ROLE), settings.secret_key, lifetime)
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=int(lifetime.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )


def clear_session_cookie(response: Response, settings: AuthSettings):
    response.delete_cookie(
        key=settings.cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )


# --- FastAPI dependencies ---

def current_admin(request: Request) -> Optional[AdminPrincipal]:
    """Principal from the session cookie, or None when absent/invalid."""
    settings: AuthSettings = request.app.state.auth
    token = request.cookies.get(settings.cookie_name)
    if not token:
        return None
    try:
        return decode_access_token(token, settings.secret_key)
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired admin token")
        return None
    except jwt.InvalidTokenError:
        return None


def require_admin(request: Request) -> Optional[AdminPrincipal]:
    """
    Guard for write endpoints. A no-op when auth.protect_writes is off,
    otherwise raises HTTP 401 unless a valid admin cookie is present.
    """
    settings: AuthSettings = request.app.state.auth
    if not settings.protect_writes:
        return None
    principal = current_admin(request)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin authentication required",
        )
    return principal
