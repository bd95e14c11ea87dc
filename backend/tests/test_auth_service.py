"""Account tests — profile store, password policy, signup, login, settings, upgrade."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from trend_analyzer.database import Base
from trend_analyzer.schemas.auth_schema import (
    LoginRequest,
    SettingsUpdate,
    SignupRequest,
    UserProfile,
    validate_password,
)
from trend_analyzer.services.auth_service import (
    AuthRequired,
    DuplicateAccount,
    InvalidCredentials,
    LocalAuthService,
)
from trend_analyzer.services.auth_utils import avatar_url, hash_password, verify_password
from trend_analyzer.services.profile_store import (
    LANGUAGE_KEY,
    SESSION_KEY,
    USERS_KEY,
    ProfileStore,
)

GOOD_PW = "trend-spotter"


@pytest.fixture()
def store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield ProfileStore(factory)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def auth(store):
    return LocalAuthService(store)


def _signup(auth, name="Sam Lee", email="sam@example.com", password=GOOD_PW):
    return auth.signup(SignupRequest(name=name, email=email, password=password))


# ===================================================================== #
#  Unit tests: auth_utils / password policy                               #
# ===================================================================== #

class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password(GOOD_PW)
        assert hashed != GOOD_PW
        assert verify_password(GOOD_PW, hashed) is True

    def test_wrong_password(self):
        assert verify_password("nope-nope", hash_password(GOOD_PW)) is False

    def test_avatar_url_is_deterministic(self):
        assert avatar_url("Sam Lee") == avatar_url("Sam Lee")
        assert "seed=Sam-Lee" in avatar_url("Sam Lee")


class TestPasswordPolicy:
    def test_short_password_rejected(self):
        with pytest.raises(ValueError):
            validate_password("abc")

    def test_common_password_rejected(self):
        with pytest.raises(ValueError):
            validate_password("Password")

    def test_signup_request_validates(self):
        with pytest.raises(ValidationError):
            SignupRequest(name="  ", email="sam@example.com", password=GOOD_PW)
        with pytest.raises(ValidationError):
            SignupRequest(name="Sam", email="not-an-email", password=GOOD_PW)


# ===================================================================== #
#  Profile store                                                          #
# ===================================================================== #

class TestProfileStore:
    def test_read_missing_key(self, store):
        assert store.read("missing") is None

    def test_write_overwrites_whole_document(self, store):
        store.write("doc", {"a": 1})
        store.write("doc", {"b": 2})
        assert store.read("doc") == {"b": 2}

    def test_language_round_trip(self, store):
        assert store.load_language() is None
        store.save_language("fr")
        assert store.load_language() == "fr"
        assert store.read(LANGUAGE_KEY) == "fr"

    def test_session_profile_round_trip(self, store):
        profile = UserProfile(name="Sam", subscription="premium", notifications_enabled=True)
        store.save_session_user(profile)
        assert store.read(SESSION_KEY)["notificationsEnabled"] is True
        assert store.load_session_user() == profile
        store.clear_session_user()
        assert store.load_session_user() is None

    def test_invalid_session_document_is_ignored(self, store):
        store.write(SESSION_KEY, {"subscription": "gold"})
        assert store.load_session_user() is None


# ===================================================================== #
#  Local auth service                                                     #
# ===================================================================== #

class TestSignupLogin:
    def test_signup_creates_free_profile(self, auth, store):
        profile = _signup(auth)
        assert profile.subscription == "free"
        assert profile.picture
        assert store.load_session_user() == profile

    def test_password_never_stored_in_plaintext(self, auth, store):
        _signup(auth)
        record = store.read(USERS_KEY)["sam@example.com"]
        assert GOOD_PW not in str(record)
        assert verify_password(GOOD_PW, record["password_hash"])
        assert "password_hash" not in store.read(SESSION_KEY)

    def test_duplicate_email_rejected(self, auth):
        _signup(auth)
        with pytest.raises(DuplicateAccount):
            _signup(auth, name="Other", email="SAM@example.com")

    def test_login(self, auth, store):
        _signup(auth)
        auth.logout()
        assert store.load_session_user() is None

        profile = auth.login(LoginRequest(email="sam@example.com", password=GOOD_PW))
        assert profile.name == "Sam Lee"
        assert store.load_session_user() == profile

    def test_login_wrong_password(self, auth):
        _signup(auth)
        with pytest.raises(InvalidCredentials):
            auth.login(LoginRequest(email="sam@example.com", password="wrong-password"))

    def test_login_unknown_email(self, auth):
        with pytest.raises(InvalidCredentials):
            auth.login(LoginRequest(email="ghost@example.com", password=GOOD_PW))

    def test_google_login_registers_once(self, auth, store):
        first = auth.google_login()
        second = auth.google_login()
        assert first == second
        assert list(store.load_users()) == ["alex.doe@example.com"]

    def test_google_account_cannot_password_login(self, auth):
        auth.google_login()
        with pytest.raises(InvalidCredentials):
            auth.login(LoginRequest(email="alex.doe@example.com", password=GOOD_PW))


class TestSettingsAndUpgrade:
    def test_settings_require_user(self, auth):
        with pytest.raises(AuthRequired):
            auth.save_settings(None, SettingsUpdate(notifications_enabled=True))

    def test_settings_update_email_and_rekey_record(self, auth, store):
        profile = _signup(auth)
        updated = auth.save_settings(
            profile, SettingsUpdate(email="sam.lee@example.com", notifications_enabled=True)
        )

        assert updated.email == "sam.lee@example.com"
        assert updated.notifications_enabled is True
        users = store.load_users()
        assert "sam@example.com" not in users
        assert users["sam.lee@example.com"]["password_hash"]

        auth.logout()
        assert auth.login(LoginRequest(email="sam.lee@example.com", password=GOOD_PW)).email == "sam.lee@example.com"

    def test_settings_reject_taken_email(self, auth):
        _signup(auth, name="Other", email="other@example.com")
        profile = _signup(auth)
        with pytest.raises(DuplicateAccount):
            auth.save_settings(profile, SettingsUpdate(email="other@example.com"))

    def test_upgrade_requires_user(self, auth):
        with pytest.raises(AuthRequired):
            auth.upgrade(None)

    def test_upgrade_persists_premium(self, auth, store):
        profile = _signup(auth)
        upgraded = auth.upgrade(profile)

        assert upgraded.is_premium
        assert store.load_session_user().is_premium
        assert store.load_users()["sam@example.com"]["subscription"] == "premium"

        auth.logout()
        relogged = auth.login(LoginRequest(email="sam@example.com", password=GOOD_PW))
        assert relogged.is_premium
