"""Authentication utilities — password hashing and avatar URLs.

Rules
-----
- Credentials are never stored in plaintext, even in the local store
- Secure password hashing with bcrypt
"""

from __future__ import annotations

from urllib.parse import quote

from passlib.context import CryptContext

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against a hash."""
    return pwd_context.verify(plain, hashed)


# ---------------------------------------------------------------------------
# Avatars
# ---------------------------------------------------------------------------
_AVATAR_BASE = "https://api.dicebear.com/8.x"


def avatar_url(name: str, style: str = "avataaars") -> str:
    """Deterministic generated avatar for a display name."""
    seed = "-".join(name.split())
    return f"{_AVATAR_BASE}/{style}/svg?seed={quote(seed)}"
