"""Security Adapters — JWT token service and bcrypt credential store.

Invariants:
    - Tokens are HS256 JWTs with sub (username), iat and exp claims, UTC
    - verify() returns the subject or raises AuthenticationError, never None
    - Passwords are stored only as bcrypt hashes

Design Decisions:
    - Implements core TokenService / CredentialStore protocols; services never import jose
"""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from taskmanager.core.errors import AuthenticationError


# bcrypt only reads the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def _secret_bytes(raw: str) -> bytes:
    return raw.encode("utf-8")[:BCRYPT_MAX_BYTES]


class JwtTokenService:
    """Issues and verifies signed bearer tokens."""

    def __init__(
        self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, subject: str, expires_delta: timedelta | None = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        claims = {"sub": subject, "iat": now, "exp": expire}
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the verified subject. Expired or tampered tokens are rejected."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise AuthenticationError()
        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError()
        return subject


class BcryptCredentialStore:
    """bcrypt with a per-hash salt."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, raw: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_secret_bytes(raw), salt).decode("utf-8")

    def verify(self, raw: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(_secret_bytes(raw), hashed.encode("utf-8"))
        except ValueError:
            return False
