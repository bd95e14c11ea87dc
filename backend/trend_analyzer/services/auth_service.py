"""Local account service — sign-up, login, settings and subscription upgrade.

Accounts live in the profile store's user table (email → profile + bcrypt
hash). The session profile never carries the credential. This is a
single-device stand-in for a real identity provider.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..schemas.auth_schema import LoginRequest, SettingsUpdate, SignupRequest, UserProfile
from .auth_utils import avatar_url, hash_password, verify_password
from .profile_store import ProfileStore

logger = logging.getLogger(__name__)

# Mock third-party identity used by the "continue with Google" button.
_GOOGLE_PROFILE = {
    "name": "Alex Doe",
    "email": "alex.doe@example.com",
}


class AuthError(Exception):
    """Base class for account errors."""


class AuthRequired(AuthError):
    """The action needs a signed-in user."""


class DuplicateAccount(AuthError):
    """An account already exists for this email."""


class InvalidCredentials(AuthError):
    """Unknown email or wrong password."""


def _profile_from_record(record: dict) -> UserProfile:
    document = {k: v for k, v in record.items() if k != "password_hash"}
    return UserProfile.model_validate(document)


class LocalAuthService:
    def __init__(self, store: ProfileStore) -> None:
        self._store = store

    def load_session(self) -> Optional[UserProfile]:
        """Read the persisted session profile once, at startup."""
        return self._store.load_session_user()

    def signup(self, payload: SignupRequest) -> UserProfile:
        email = str(payload.email).lower()
        users = self._store.load_users()
        if email in users:
            raise DuplicateAccount(email)

        profile = UserProfile(
            name=payload.name,
            email=email,
            subscription="free",
            picture=avatar_url(payload.name),
        )
        users[email] = {
            **profile.model_dump(by_alias=True, exclude_none=True),
            "password_hash": hash_password(payload.password),
        }
        self._store.save_users(users)
        self._store.save_session_user(profile)

        print(f"✅ [AUTH] User signed up: {email}")
        return profile

    def login(self, payload: LoginRequest) -> UserProfile:
        email = str(payload.email).lower()
        record = self._store.load_users().get(email)
        hashed = (record or {}).get("password_hash")
        if not hashed or not verify_password(payload.password, hashed):
            logger.warning("Failed login attempt for %s", email)
            raise InvalidCredentials(email)

        profile = _profile_from_record(record)
        self._store.save_session_user(profile)
        print(f"✅ [AUTH] User logged in: {email}")
        return profile

    def google_login(self) -> UserProfile:
        """Sign in with the mock provider profile, registering it on first use."""
        email = _GOOGLE_PROFILE["email"]
        users = self._store.load_users()
        record = users.get(email)

        if record is not None:
            profile = _profile_from_record(record)
        else:
            profile = UserProfile(
                name=_GOOGLE_PROFILE["name"],
                email=email,
                subscription="free",
                picture=avatar_url(_GOOGLE_PROFILE["name"], style="initials"),
            )
            # No password hash: this account can only sign in through the provider.
            users[email] = profile.model_dump(by_alias=True, exclude_none=True)
            self._store.save_users(users)

        self._store.save_session_user(profile)
        print(f"✅ [AUTH] Provider login: {email}")
        return profile

    def logout(self) -> None:
        self._store.clear_session_user()
        print("👋 [AUTH] User logged out")

    def save_settings(self, current: Optional[UserProfile], update: SettingsUpdate) -> UserProfile:
        if current is None:
            raise AuthRequired("settings")
        new_email = str(update.email).lower() if update.email else None
        if new_email and new_email != (current.email or "").lower():
            if new_email in self._store.load_users():
                raise DuplicateAccount(new_email)
        profile = current.model_copy(
            update={
                "email": new_email or current.email,
                "notifications_enabled": update.notifications_enabled,
            }
        )
        self._persist(current, profile)
        print("✅ [AUTH] Settings saved")
        return profile

    def upgrade(self, current: Optional[UserProfile]) -> UserProfile:
        """Switch the current user to premium. No payment is processed."""
        if current is None:
            raise AuthRequired("upgrade")
        profile = current.model_copy(update={"subscription": "premium"})
        self._persist(current, profile)
        print(f"⭐ [AUTH] Subscription upgraded to premium ({profile.email or profile.name})")
        return profile

    def _persist(self, previous: UserProfile, profile: UserProfile) -> None:
        """Write the session profile and mirror it into the user table."""
        self._store.save_session_user(profile)

        users = self._store.load_users()
        record = users.pop((previous.email or "").lower(), None)
        if record is None:
            return
        # The settings form may change the email, which re-keys the record.
        users[(profile.email or "").lower()] = {
            **record,
            **profile.model_dump(by_alias=True, exclude_none=True),
        }
        self._store.save_users(users)
