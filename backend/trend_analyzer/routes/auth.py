"""Authentication routes — local accounts, mock provider login, settings, upgrade.

Every route that changes the profile ends in ``session.apply_user`` so the
tier-transition check (and pending-action replay) runs in one place.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..schemas.auth_schema import LoginRequest, SettingsUpdate, SignupRequest
from ..schemas.session_schema import SessionSnapshot
from ..services.auth_service import (
    AuthRequired,
    DuplicateAccount,
    InvalidCredentials,
    LocalAuthService,
)
from ..services.report_session import ReportSession
from ..services.session_dependency import get_auth_service, get_report_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_required(session: ReportSession) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=session.context.t("authModal.authRequired"),
    )


# ===================================================================== #
#  Local auth                                                             #
# ===================================================================== #

@router.post(
    "/signup",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new account",
)
async def signup(
    payload: SignupRequest,
    session: ReportSession = Depends(get_report_session),
    auth: LocalAuthService = Depends(get_auth_service),
) -> SessionSnapshot:
    try:
        profile = auth.signup(payload)
    except DuplicateAccount:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=session.context.t("authModal.signupError"),
        )
    await session.apply_user(profile, sign_in=True)
    return session.snapshot()


@router.post(
    "/login",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Login with email and password",
)
async def login(
    payload: LoginRequest,
    session: ReportSession = Depends(get_report_session),
    auth: LocalAuthService = Depends(get_auth_service),
) -> SessionSnapshot:
    try:
        profile = auth.login(payload)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=session.context.t("authModal.loginError"),
        )
    await session.apply_user(profile, sign_in=True)
    return session.snapshot()


@router.post(
    "/google",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Continue with the mock Google profile",
)
async def google_login(
    session: ReportSession = Depends(get_report_session),
    auth: LocalAuthService = Depends(get_auth_service),
) -> SessionSnapshot:
    profile = auth.google_login()
    await session.apply_user(profile, sign_in=True)
    return session.snapshot()


@router.post(
    "/logout",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Logout",
)
async def logout(
    session: ReportSession = Depends(get_report_session),
    auth: LocalAuthService = Depends(get_auth_service),
) -> SessionSnapshot:
    auth.logout()
    await session.apply_user(None)
    return session.snapshot()


# ===================================================================== #
#  Profile                                                                #
# ===================================================================== #

@router.put(
    "/settings",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Save user settings",
)
async def save_settings(
    payload: SettingsUpdate,
    session: ReportSession = Depends(get_report_session),
    auth: LocalAuthService = Depends(get_auth_service),
) -> SessionSnapshot:
    try:
        profile = auth.save_settings(session.context.user, payload)
    except AuthRequired:
        raise _auth_required(session)
    except DuplicateAccount:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=session.context.t("authModal.signupError"),
        )
    await session.apply_user(profile)
    return session.snapshot()


@router.post(
    "/upgrade",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Upgrade to premium",
)
async def upgrade(
    session: ReportSession = Depends(get_report_session),
    auth: LocalAuthService = Depends(get_auth_service),
) -> SessionSnapshot:
    """No payment is processed. A queued sector analysis replays here."""
    try:
        profile = auth.upgrade(session.context.user)
    except AuthRequired:
        raise _auth_required(session)
    await session.apply_user(profile)
    return session.snapshot()


# ===================================================================== #
#  Prompts                                                                #
# ===================================================================== #

@router.delete(
    "/prompt",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Dismiss the sign-in prompt",
)
def dismiss_auth_prompt(session: ReportSession = Depends(get_report_session)) -> SessionSnapshot:
    session.dismiss_auth_prompt()
    return session.snapshot()


@router.delete(
    "/upgrade-prompt",
    response_model=SessionSnapshot,
    response_model_by_alias=True,
    summary="Dismiss the upgrade prompt",
)
def dismiss_upgrade_prompt(session: ReportSession = Depends(get_report_session)) -> SessionSnapshot:
    """The queued action is kept until logout or upgrade."""
    session.dismiss_upgrade_prompt()
    return session.snapshot()
