"""Identity tokens issued by the identity provider.

HS256 JWTs whose claims describe the acting user: ``sub`` (subject id),
``name`` and ``nickname`` (display names). ``issue_token`` is what the
provider (and the test suite) uses; ``read_claims`` is what the auth
dependency uses. Both are pure.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

SUPPORTED_ALGORITHM = "HS256"
ISSUER = "doctree"

_HEADER = {"alg": SUPPORTED_ALGORITHM, "typ": "JWT"}


@dataclass(frozen=True)
class IdentityClaims:
    """Verified claims of an identity token."""
    sub: str
    exp: datetime
    name: Optional[str] = None
    nickname: Optional[str] = None


def _segment(obj: dict) -> bytes:
    raw = json.dumps(obj, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=")


def _unsegment(segment: bytes) -> bytes:
    return base64.urlsafe_b64decode(segment + b"=" * (-len(segment) % 4))


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()


def issue_token(
    subject: str,
    secret: str,
    name: Optional[str] = None,
    nickname: Optional[str] = None,
    expires_hours: float = 24,
) -> str:
    """Sign a token for *subject*. Display-name claims are omitted when empty."""
    issued_at = int(time.time())
    claims = {
        "sub": subject,
        "iss": ISSUER,
        "iat": issued_at,
        "exp": int(issued_at + expires_hours * 3600),
    }
    claims.update({k: v for k, v in (("name", name), ("nickname", nickname)) if v})

    signing_input = _segment(_HEADER) + b"." + _segment(claims)
    signature = base64.urlsafe_b64encode(_sign(signing_input, secret)).rstrip(b"=")
    return (signing_input + b"." + signature).decode()


def read_claims(token: str, secret: str, algorithm: str = SUPPORTED_ALGORITHM) -> Optional[IdentityClaims]:
    """Verify *token* and return its claims.

    ``None`` for anything unusable: another algorithm, a bad signature,
    an expired token, a missing subject or plain garbage.
    """
    if algorithm != SUPPORTED_ALGORITHM:
        return None

    head, sep, signature = token.encode().rpartition(b".")
    if not sep or head.count(b".") != 1:
        return None

    try:
        if not hmac.compare_digest(_sign(head, secret), _unsegment(signature)):
            return None
        claims = json.loads(_unsegment(head.split(b".")[1]))
    except ValueError:
        # binascii.Error and JSONDecodeError are both ValueErrors
        return None

    if not isinstance(claims, dict) or not claims.get("sub"):
        return None
    expires = claims.get("exp", 0)
    if not isinstance(expires, (int, float)) or time.time() > expires:
        return None

    return IdentityClaims(
        sub=claims["sub"],
        exp=datetime.fromtimestamp(expires, tz=timezone.utc),
        name=claims.get("name"),
        nickname=claims.get("nickname"),
    )
