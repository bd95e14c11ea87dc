"""Local key-value profile store.

Three fixed keys, each holding one whole JSON document:
  - ``current-user``  — the signed-in profile (no credential)
  - ``user-database`` — email → stored profile + password hash
  - ``app-lang``      — the selected UI language

Every write commits immediately; there is no schema versioning.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session, sessionmaker

from ..database import Base, SessionLocal
from ..models.kv_entry import KeyValueEntry
from ..schemas.auth_schema import UserProfile

logger = logging.getLogger(__name__)

SESSION_KEY = "current-user"
USERS_KEY = "user-database"
LANGUAGE_KEY = "app-lang"


class ProfileStore:
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory
        Base.metadata.create_all(bind=session_factory.kw["bind"])

    # ── Raw documents ────────────────────────────────────────────────

    def read(self, key: str) -> Optional[Any]:
        db: Session = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                return None
            try:
                return json.loads(entry.value)
            except json.JSONDecodeError:
                logger.warning("Discarding unreadable store entry %s", key)
                return None
        finally:
            db.close()

    def write(self, key: str, document: Any) -> None:
        db: Session = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            payload = json.dumps(document, ensure_ascii=False)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=payload))
            else:
                entry.value = payload
            db.commit()
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db: Session = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            if entry is not None:
                db.delete(entry)
                db.commit()
        finally:
            db.close()

    # ── Session profile ──────────────────────────────────────────────

    def load_session_user(self) -> Optional[UserProfile]:
        document = self.read(SESSION_KEY)
        if not isinstance(document, dict):
            return None
        try:
            return UserProfile.model_validate(document)
        except ValueError:
            logger.warning("Stored session profile is invalid — ignoring it")
            return None

    def save_session_user(self, profile: UserProfile) -> None:
        self.write(SESSION_KEY, profile.model_dump(by_alias=True, exclude_none=True))
        print(f"💾 [STORE] Session profile saved ({profile.subscription})")

    def clear_session_user(self) -> None:
        self.delete(SESSION_KEY)
        print("💾 [STORE] Session profile cleared")

    # ── Registered users ─────────────────────────────────────────────

    def load_users(self) -> dict[str, dict[str, Any]]:
        document = self.read(USERS_KEY)
        return document if isinstance(document, dict) else {}

    def save_users(self, users: dict[str, dict[str, Any]]) -> None:
        self.write(USERS_KEY, users)

    # ── Language ─────────────────────────────────────────────────────

    def load_language(self) -> Optional[str]:
        value = self.read(LANGUAGE_KEY)
        return value if isinstance(value, str) else None

    def save_language(self, language: str) -> None:
        self.write(LANGUAGE_KEY, language)
