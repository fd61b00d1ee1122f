"""Session service: issue and validate session tokens.

Token schemes sit behind ``SessionIssuer`` so callers never depend on the
encoding. ``Base64SessionIssuer`` is unsigned: anyone who can build the same
payload can forge a token. ``JWTSessionIssuer`` keeps the same contract with
an HMAC signature and is selected with ``SESSION_BACKEND=jwt``.
"""

import base64
import json
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from meetroom.core.config import settings
from meetroom.models.user import User

logger = logging.getLogger("meetroom.session")

# Largest id a signed 64-bit integer column can hold.
MAX_USER_ID = 2 ** 63


def now_ms() -> int:
    """Current UTC time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class SessionIssuer:
    """Encodes ``{user_id, timestamp}`` into a token and decodes it back."""

    def __init__(self, ttl: Optional[timedelta] = None):
        self.ttl = ttl or timedelta(hours=settings.SESSION_TTL_HOURS)

    @property
    def ttl_ms(self) -> int:
        return int(self.ttl.total_seconds() * 1000)

    def issue(self, user_id: int, issued_at: Optional[int] = None) -> str:
        raise NotImplementedError

    def _load(self, token: str) -> Dict:
        raise NotImplementedError

    def decode(self, token: str, now: Optional[int] = None) -> Optional[int]:
        """Return the user id if the token is well formed and not expired."""
        try:
            payload = self._load(token)
            user_id = payload["userId"]
            timestamp = payload["timestamp"]
        except (ValueError, TypeError, KeyError, JWTError):
            return None

        if isinstance(user_id, bool) or not isinstance(user_id, int):
            return None
        if not 0 < user_id < MAX_USER_ID:
            return None
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            return None
        if not math.isfinite(timestamp):
            return None

        current = now if now is not None else now_ms()
        if current - timestamp > self.ttl_ms:
            return None
        return user_id


class Base64SessionIssuer(SessionIssuer):
    """Unsigned base64(JSON) tokens."""

    def issue(self, user_id: int, issued_at: Optional[int] = None) -> str:
        payload = {
            "userId": user_id,
            "timestamp": issued_at if issued_at is not None else now_ms(),
        }
        return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")

    def _load(self, token: str) -> Dict:
        payload = json.loads(base64.b64decode(token, validate=True).decode("utf-8"))
        if not isinstance(payload, dict):
            raise ValueError("session payload is not an object")
        return payload


class JWTSessionIssuer(SessionIssuer):
    """HMAC-signed tokens carrying the same payload."""

    def __init__(
        self,
        ttl: Optional[timedelta] = None,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
    ):
        super().__init__(ttl)
        self.secret = secret or settings.JWT_SECRET
        self.algorithm = algorithm or settings.JWT_ALGORITHM

    def issue(self, user_id: int, issued_at: Optional[int] = None) -> str:
        claims = {
            "userId": user_id,
            "timestamp": issued_at if issued_at is not None else now_ms(),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def _load(self, token: str) -> Dict:
        return jwt.decode(token, self.secret, algorithms=[self.algorithm])


SESSION_BACKENDS = {
    "basic": Base64SessionIssuer,
    "jwt": JWTSessionIssuer,
}


def get_issuer(backend: Optional[str] = None) -> SessionIssuer:
    """Build the issuer configured by ``SESSION_BACKEND``."""
    name = backend or settings.SESSION_BACKEND
    try:
        return SESSION_BACKENDS[name]()
    except KeyError:
        raise ValueError(f"Unknown session backend '{name}'")


class SessionService:
    """Creates and validates sessions against the current user state."""

    def __init__(self, issuer: Optional[SessionIssuer] = None):
        self._issuer = issuer

    @property
    def issuer(self) -> SessionIssuer:
        if self._issuer is None:
            self._issuer = get_issuer()
        return self._issuer

    def create_session(self, user_id: int, issued_at: Optional[int] = None) -> str:
        """Issue a token for ``user_id``."""
        return self.issuer.issue(user_id, issued_at)

    def validate_session(
        self, db: Session, token: str, now: Optional[int] = None
    ) -> Optional[Dict[str, int]]:
        """Return ``{"user_id": ...}`` for a live session, else None.

        Malformed, expired and inactive-user tokens are indistinguishable to
        the caller.
        """
        user_id = self.issuer.decode(token, now)
        if user_id is None:
            return None

        user = db.query(User).filter(User.id == user_id).first()
        if not user or not user.is_active:
            logger.debug("Session for user %s rejected: user missing or inactive", user_id)
            return None

        return {"user_id": user_id}


session_service = SessionService()
