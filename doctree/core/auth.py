"""Identity resolution at the boundary to the external identity provider.

Public interface:
    ``Identity``          -- the acting user passed explicitly into every
                             service call.
    ``optional_identity`` -- FastAPI dependency returning ``Identity`` or
                             ``None``. Never raises; services decide whether a
                             missing identity means "empty result" (queries) or
                             ``AuthenticationError`` (mutations).

When ``settings.auth_enabled`` is False every request acts as a fixed
development identity so the local workflow needs no token.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import read_claims

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The acting user as asserted by the identity provider."""

    subject: str
    name: Optional[str] = None
    nickname: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.nickname or "Unknown"


DEV_IDENTITY = Identity(subject="dev-user", name="Developer")


def optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[Identity]:
    """Resolve the acting identity from the bearer token, or None."""
    if not settings.auth_enabled:
        return DEV_IDENTITY

    if credentials is None:
        return None

    claims = read_claims(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if claims is None:
        logger.debug("Rejected bearer token")
        return None

    return Identity(subject=claims.sub, name=claims.name, nickname=claims.nickname)
