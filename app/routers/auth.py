"""
app/routers/auth.py — Admin login and credential management
============================================================

Login flow used by the admin panel:
  1. POST /compareAdminName      {userName}               → {success} | 401 | 404
  2. POST /compareAdminPassword  {password, rememberMe}   → sets `token` cookie

The OTP path (POST /compareOTP) issues the same cookie from a stored one-time
password; the panel's primary flow does not go through it.

Credentials live in a single admin document whose userName and password are
both bcrypt hashes.

Endpoints:
  POST /compareAdminName
  POST /compareAdminPassword
  POST /compareOTP
  POST /logout
  GET  /checkAuth
  POST /setAdminCredentials   {userName, password, currentPassword}
  POST /initializeAdmin       → create from bootstrap config (only if none exists)
  POST /resetAdmin            → force bootstrap credentials            (admin)
  GET  /debugAdmin            → hash presence/lengths, never values    (admin)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from app.dependencies.access_control import (
    AuthSettings,
    clear_session_cookie,
    current_admin,
    hash_secret,
    issue_session_cookie,
    require_admin,
    verify_secret,
)
from app.dependencies.rate_limit import limiter, login_limit
from app.dependencies.services import get_config, get_content
from app.services.content import ContentService
from db.collections import ADMIN, ADMIN_OTP
from db.mongo import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# --- Pydantic models ---

class AdminNameRequest(BaseModel):
    userName: Optional[str] = None


class PasswordRequest(BaseModel):
    password: Optional[str] = None
    rememberMe: bool = False


class OTPRequest(BaseModel):
    otp: Optional[str] = None
    rememberMe: bool = False


class CredentialsRequest(BaseModel):
    userName: str
    password: str
    currentPassword: str


# --- Helpers ---

def _auth_settings(request: Request) -> AuthSettings:
    return request.app.state.auth


def _admin_doc(content: ContentService) -> Optional[dict]:
    return content.repo.find_singleton(ADMIN)


def _write_admin(content: ContentService, username: str, password: str):
    now = datetime.now(timezone.utc)
    content.repo.insert_singleton(ADMIN, {
        "userName": hash_secret(username),
        "password": hash_secret(password),
        "createdAt": now,
        "updatedAt": now,
    })
    content.invalidate(ADMIN)


def _bootstrap_credentials(config: dict) -> tuple:
    auth_cfg = config.get("auth", {})
    username = auth_cfg.get("bootstrap_username") or ""
    password = auth_cfg.get("bootstrap_password") or ""
    if not username or not password:
        raise HTTPException(
            status_code=400,
            detail="Bootstrap admin credentials are not configured.",
        )
    return username, password


def _as_utc(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# LOGIN
# ============================================================================

@router.post("/compareAdminName")
@limiter.limit(login_limit)
async def compare_admin_name(
    request: Request,
    body: AdminNameRequest,
    content: ContentService = Depends(get_content),
):
    admin = _admin_doc(content)
    if not admin:
        raise HTTPException(status_code=404, detail="No Admin found.")
    if not verify_secret(body.userName, admin.get("userName")):
        raise HTTPException(status_code=401, detail="Incorrect Username")
    return {"success": True}


@router.post("/compareAdminPassword")
@limiter.limit(login_limit)
async def compare_admin_password(
    request: Request,
    response: Response,
    body: PasswordRequest,
    content: ContentService = Depends(get_content),
):
    admin = _admin_doc(content)
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")
    if not verify_secret(body.password, admin.get("password")):
        logger.info("Rejected admin login: incorrect password")
        raise HTTPException(status_code=401, detail="Incorrect Password")

    issue_session_cookie(response, _auth_settings(request), body.rememberMe)
    logger.info(f"Admin logged in (rememberMe={body.rememberMe})")
    return {"success": True, "otpSent": False, "message": "Logged in successfully!"}


@router.post("/compareOTP")
@limiter.limit(login_limit)
async def compare_otp(
    request: Request,
    response: Response,
    body: OTPRequest,
    content: ContentService = Depends(get_content),
):
    otp_doc = content.repo.find_singleton(ADMIN_OTP)
    if not otp_doc or not body.otp or otp_doc.get("otp") != body.otp:
        raise HTTPException(status_code=400, detail="Invalid OTP")
    expires = _as_utc(otp_doc.get("expireTime"))
    if expires is None or expires < datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="OTP expired")

    issue_session_cookie(response, _auth_settings(request), body.rememberMe)
    content.repo.delete_singleton(ADMIN_OTP)
    return {"success": True, "message": "Logged in successfully!"}


@router.post("/logout")
async def logout(request: Request, response: Response):
    clear_session_cookie(response, _auth_settings(request))
    return {"success": True, "message": "Logged out successfully!"}


@router.get("/checkAuth")
async def check_auth(request: Request):
    principal = current_admin(request)
    return {"authenticated": principal is not None}


# ============================================================================
# CREDENTIAL MANAGEMENT
# ============================================================================

@router.post("/setAdminCredentials")
async def set_admin_credentials(
    body: CredentialsRequest,
    content: ContentService = Depends(get_content),
):
    admin = _admin_doc(content)
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found.")
    if not verify_secret(body.currentPassword, admin.get("password")):
        raise HTTPException(status_code=401, detail="Current password is incorrect.")
    _write_admin(content, body.userName, body.password)
    logger.info("Admin credentials changed")
    return {"success": True, "message": "Admin credentials set."}


@router.post("/initializeAdmin")
async def initialize_admin(
    content: ContentService = Depends(get_content),
    config: dict = Depends(get_config),
):
    if _admin_doc(content):
        raise HTTPException(
            status_code=400,
            detail="Admin already exists. Use the update endpoint to change credentials.",
        )
    username, password = _bootstrap_credentials(config)
    _write_admin(content, username, password)
    logger.info("Admin initialized from bootstrap configuration")
    return {"success": True, "message": "Admin initialized successfully", "username": username}


@router.post("/resetAdmin")
async def reset_admin(
    content: ContentService = Depends(get_content),
    config: dict = Depends(get_config),
    _admin=Depends(require_admin),
):
    username, password = _bootstrap_credentials(config)
    _write_admin(content, username, password)
    logger.warning("Admin credentials reset to bootstrap configuration")
    return {"success": True, "message": "Admin reset successfully", "username": username}


@router.get("/debugAdmin")
async def debug_admin(
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    admin = _admin_doc(content)
    if not admin:
        return {"found": False, "message": "No admin document found"}
    return to_jsonable({
        "found": True,
        "hasUserName": bool(admin.get("userName")),
        "hasPassword": bool(admin.get("password")),
        "userNameLength": len(admin.get("userName") or ""),
        "passwordLength": len(admin.get("password") or ""),
        "createdAt": admin.get("createdAt"),
        "updatedAt": admin.get("updatedAt"),
    })
