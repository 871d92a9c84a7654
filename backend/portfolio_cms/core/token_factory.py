"""Signed admin session tokens (compact HS256 JWTs).

Every login mints a token carrying the user id, the role at login time and a
random session id (``sid``). The role claim is informational only: the
session resolver in ``core.auth`` re-reads role and portfolio from the
database on each request. Decoding never raises; any defect yields ``None``.
"""

import base64
import hashlib
import hmac
import json
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_ISSUER = "portfolio-cms"
_AUDIENCE = "portfolio-cms-admin"
_HEADER = {"alg": "HS256", "typ": "JWT"}

# Login sessions last a week unless the caller asks otherwise.
DEFAULT_SESSION_HOURS = 24 * 7

# Tolerated clock drift when checking ``iat``.
CLOCK_SKEW_SECONDS = 60


@dataclass(frozen=True)
class TokenPayload:
    """A verified admin session."""
    sub: str
    role: str
    exp: datetime
    issued_at: datetime
    session_id: str


def create_token(
    subject: str,
    role: str,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: int = DEFAULT_SESSION_HOURS,
    session_id: Optional[str] = None,
) -> str:
    """Mint a session token for an AdminUser.

    Args:
        subject: AdminUser id.
        role: ``"user"`` or ``"super_admin"`` at the time of login.
        secret: HMAC signing key.
        algorithm: Only HS256 supported.
        expires_hours: Hours until expiry.
        session_id: Reuse an existing session id; a fresh one is generated
            when omitted.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    now = int(time.time())
    claims = {
        "sub": subject,
        "role": role,
        "sid": session_id or secrets.token_urlsafe(16),
        "iat": now,
        "exp": now + int(expires_hours * 3600),
        "iss": _ISSUER,
        "aud": _AUDIENCE,
    }

    segments = [_b64encode(_json(_HEADER)), _b64encode(_json(claims))]
    segments.append(_b64encode(_sign(secret, b".".join(segments))))
    return b".".join(segments).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Verify a session token and return its claims, or ``None``.

    Rejects a bad signature, a header that does not declare HS256, a foreign
    issuer or audience, an expired token, one issued in the future, and a
    token without subject or session id.
    """
    if algorithm != "HS256":
        return None
    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        if not hmac.compare_digest(_sign(secret, parts[0] + b"." + parts[1]), _b64decode(parts[2])):
            return None
        if json.loads(_b64decode(parts[0])).get("alg") != "HS256":
            return None

        claims = json.loads(_b64decode(parts[1]))
        if claims.get("iss") != _ISSUER or claims.get("aud") != _AUDIENCE:
            return None

        now = time.time()
        exp = int(claims.get("exp", 0))
        iat = int(claims.get("iat", 0))
        if now > exp or iat > now + CLOCK_SKEW_SECONDS:
            return None

        sub, sid = claims.get("sub"), claims.get("sid")
        if not sub or not sid:
            return None

        return TokenPayload(
            sub=sub,
            role=claims.get("role", ""),
            exp=datetime.fromtimestamp(exp, tz=timezone.utc),
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            session_id=sid,
        )
    except (json.JSONDecodeError, AttributeError, KeyError, ValueError, TypeError, UnicodeError):
        return None


def _sign(secret: str, signing_input: bytes) -> bytes:
    return hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()


def _json(data: dict) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode()


# --- base64url helpers (no padding, URL-safe) ---

def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
