from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from pydantic import ValidationError

from core.errors import Unauthenticated
from core.models.user import SessionUser

_ALGO = "HS256"
_BCRYPT_MAX_BYTES = 72

_LOG = logging.getLogger(__name__)


# ───────────── Credential verifier ─────────────
def _encode(plaintext: str) -> bytes:
    # bcrypt only ever looks at the first 72 bytes
    return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plaintext: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plaintext: str, digest: str) -> bool:
    """False on mismatch; raises ``ValueError`` when `digest` is not a bcrypt hash."""
    return bcrypt.checkpw(_encode(plaintext), digest.encode("utf-8"))


# ───────────── Session tokens ─────────────
class TokenCodec:
    """Issues and verifies signed, time-limited identity tokens."""

    def __init__(self, secret: str, ttl_days: int = 7) -> None:
        self._secret = secret
        self._ttl = timedelta(days=ttl_days)

    def issue(self, user: SessionUser) -> str:
        now = datetime.now(timezone.utc)
        payload = {**user.model_dump(), "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._secret, algorithm=_ALGO)

    def verify(self, token: str) -> SessionUser:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGO])
            return SessionUser.model_validate(payload)
        except jwt.ExpiredSignatureError as exc:
            _LOG.info("rejected expired token: %s", exc)
            raise Unauthenticated("Token inválido.") from exc
        except (jwt.PyJWTError, ValidationError) as exc:
            _LOG.info("rejected invalid token: %s", exc)
            raise Unauthenticated("Token inválido.") from exc
