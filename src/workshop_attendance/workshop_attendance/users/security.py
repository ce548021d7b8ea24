from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Credential service."""

    def hash(self, plaintext: str) -> str:
        return generate_password_hash(plaintext)

    def verify(self, plaintext: str, password_hash: str) -> bool:
        try:
            return check_password_hash(password_hash, plaintext)
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False


class TokenService:
    """Issues and verifies signed bearer tokens (HS256)."""

    algorithm = "HS256"

    def __init__(self, secret: str, *, expire_hours: int = 24):
        self._secret = secret
        self._expire = timedelta(hours=int(expire_hours))

    def issue(self, user_id: int, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {"sub": str(user_id), "iat": now, "exp": now + self._expire}
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[int]:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
            return int(payload["sub"])
        except jwt.ExpiredSignatureError:
            return None
        except (jwt.InvalidTokenError, KeyError, ValueError) as e:
            logger.debug("Rejected token: %s", e)
            return None
