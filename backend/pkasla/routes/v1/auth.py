# backend/pkasla/routes/v1/auth.py
"""
Authentication routes - API v1

Endpoints:
    POST /register              → Create account, start session
    POST /login                 → Password login (may require 2FA)
    POST /login/verify-2fa      → Finish a 2FA login
    POST /login/oauth           → Sign in with an OAuth identity
    POST /refresh               → Rotate tokens
    POST /logout                → Revoke tokens and clear the session
    POST /2fa/setup|verify|disable
    GET  /me
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import (
    get_audit_service,
    get_auth_service,
    get_two_factor_auth_service,
)
from ...models.audit_log import AuditAction
from ...models.user import User
from ...schemas.base import build_success_response
from ...schemas.user import (
    AuthResponse,
    LoginRequest,
    OAuthLoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenPair,
    TwoFactorDisableRequest,
    TwoFactorSetupResponse,
    TwoFactorVerifyRequest,
    UserResponse,
    VerifyTwoFactorLoginRequest,
)
from ...services.audit_service import AuditService
from ...services.auth_service import AuthService
from ...services.two_factor_auth_service import TwoFactorAuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

PENDING_2FA_KEY = "pendingTwoFactorUserId"


def _start_session(request: Request, user: User, tokens: Dict[str, str]) -> None:
    request.session.clear()
    request.session.update(
        {
            "authenticated": True,
            "userId": user.id,
            "accessToken": tokens["access_token"],
            "refreshToken": tokens["refresh_token"],
        }
    )


def _auth_payload(user: User, tokens: Dict[str, str]) -> AuthResponse:
    return AuthResponse(user=UserResponse.model_validate(user), tokens=tokens)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditService = Depends(get_audit_service),
):
    user, tokens = auth_service.register(payload)
    _start_session(request, user, tokens)
    audit.log(
        AuditAction.CREATE.value,
        "user",
        actor=user,
        resource_id=user.id,
        description="User registered",
        request=request,
    )
    return build_success_response(_auth_payload(user, tokens), "Registration successful")


@router.post("/login")
def login(
    payload: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditService = Depends(get_audit_service),
):
    user = auth_service.authenticate_credentials(payload.email, payload.password)
    if user.two_factor_enabled:
        request.session.clear()
        request.session[PENDING_2FA_KEY] = user.id
        return build_success_response(
            {"requiresTwoFactor": True, "message": "Two-factor authentication required"},
            "Two-factor authentication required",
        )

    tokens = auth_service.issue_tokens(user)
    _start_session(request, user, tokens)
    audit.log(AuditAction.LOGIN.value, "auth", actor=user, resource_id=user.id, request=request)
    return build_success_response(_auth_payload(user, tokens), "Login successful")


@router.post("/login/verify-2fa")
def verify_two_factor_login(
    payload: VerifyTwoFactorLoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditService = Depends(get_audit_service),
):
    pending_user_id = request.session.get(PENDING_2FA_KEY) or ""
    user, tokens, used_backup_code = auth_service.complete_two_factor_login(
        pending_user_id, payload.token
    )
    _start_session(request, user, tokens)
    audit.log(
        AuditAction.LOGIN.value,
        "auth",
        actor=user,
        resource_id=user.id,
        metadata={"twoFactor": True, "usedBackupCode": used_backup_code},
        request=request,
    )
    data = _auth_payload(user, tokens).model_dump(by_alias=True, mode="json")
    data["usedBackupCode"] = used_backup_code
    return build_success_response(data, "Login successful")


@router.post("/login/oauth")
def oauth_login(
    payload: OAuthLoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditService = Depends(get_audit_service),
):
    user, tokens = auth_service.oauth_login(payload)
    _start_session(request, user, tokens)
    audit.log(
        AuditAction.LOGIN.value,
        "auth",
        actor=user,
        resource_id=user.id,
        metadata={"provider": payload.provider},
        request=request,
    )
    return build_success_response(_auth_payload(user, tokens), "Login successful")


@router.post("/refresh")
def refresh_tokens(
    payload: RefreshTokenRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    user, tokens = auth_service.refresh(payload.refresh_token)
    if request.session.get("authenticated"):
        _start_session(request, user, tokens)
    return build_success_response({"tokens": TokenPair(**tokens)}, "Token refreshed")


@router.post("/logout")
def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditService = Depends(get_audit_service),
):
    tokens = [
        getattr(request.state, "token", None),
        request.session.get("accessToken"),
        request.session.get("refreshToken"),
    ]
    auth_service.logout(tokens)
    request.session.clear()
    audit.log(
        AuditAction.LOGOUT.value,
        "auth",
        actor=current_user,
        resource_id=current_user.id,
        request=request,
    )
    return build_success_response(None, "Logout successful")


@router.post("/2fa/setup")
def setup_two_factor(
    current_user: User = Depends(get_current_user),
    two_factor: TwoFactorAuthService = Depends(get_two_factor_auth_service),
):
    result = two_factor.setup_initiate(current_user)
    return build_success_response(
        TwoFactorSetupResponse.model_validate(result),
        "Scan the QR code with your authenticator app",
    )


@router.post("/2fa/verify")
def verify_two_factor_setup(
    payload: TwoFactorVerifyRequest,
    current_user: User = Depends(get_current_user),
    two_factor: TwoFactorAuthService = Depends(get_two_factor_auth_service),
):
    two_factor.setup_verify(current_user, payload.token)
    return build_success_response({"enabled": True}, "Two-factor authentication enabled")


@router.post("/2fa/disable")
def disable_two_factor(
    payload: TwoFactorDisableRequest,
    current_user: User = Depends(get_current_user),
    two_factor: TwoFactorAuthService = Depends(get_two_factor_auth_service),
):
    two_factor.disable(current_user, payload.password)
    return build_success_response({"enabled": False}, "Two-factor authentication disabled")


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return build_success_response(UserResponse.model_validate(current_user))
