"""FastAPI dependencies for the single in-process session.

The lifespan hook builds one ProfileStore, LocalAuthService and
ReportSession and parks them on ``app.state``; routes reach them here so
tests can swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from .auth_service import LocalAuthService
from .profile_store import ProfileStore
from .report_session import ReportSession


def get_report_session(request: Request) -> ReportSession:
    session = getattr(request.app.state, "report_session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session not initialised",
        )
    return session


def get_profile_store(request: Request) -> ProfileStore:
    store = getattr(request.app.state, "profile_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Profile store not initialised",
        )
    return store


def get_auth_service(store: ProfileStore = Depends(get_profile_store)) -> LocalAuthService:
    return LocalAuthService(store)
