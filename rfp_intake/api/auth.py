"""Bearer token validation."""

from abc import ABC, abstractmethod

import jwt
from pydantic import BaseModel

from rfp_intake.config import Settings
from rfp_intake.errors import AuthenticationError
from rfp_intake.utils.logging import LoggerMixin

ORGANIZATION_CLAIMS = ("organizationId", "organization_id", "org_id")


class CallerIdentity(BaseModel):
    """Authenticated caller and the organization it acts for."""

    user_id: str
    organization_id: str
    email: str | None = None


class IdentityProvider(ABC):
    """Resolves a bearer credential to a caller identity."""

    @abstractmethod
    def authenticate(self, token: str) -> CallerIdentity:
        """Raises AuthenticationError for missing or invalid credentials."""
        pass


class JWTIdentityProvider(IdentityProvider, LoggerMixin):
    """Validates signed JWT access tokens.

    ``sub`` is the user id; the organization comes from ``organizationId``
    (``organization_id`` and ``org_id`` are accepted too).
    """

    def __init__(self, secret: str, algorithm: str = "HS256", audience: str | None = None):
        self._secret = secret
        self.algorithm = algorithm
        self.audience = audience

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTIdentityProvider":
        return cls(
            settings.jwt_secret_key.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            audience=settings.jwt_audience,
        )

    def authenticate(self, token: str) -> CallerIdentity:
        if not token:
            raise AuthenticationError("Missing authentication credentials")

        options = {"require": ["sub"], "verify_aud": self.audience is not None}
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options=options,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            self.log_debug("Rejected token", error=str(e))
            raise AuthenticationError("Invalid authentication token") from e

        organization_id = next((payload[c] for c in ORGANIZATION_CLAIMS if payload.get(c)), None)
        if not organization_id:
            raise AuthenticationError("Token carries no organization")

        return CallerIdentity(
            user_id=str(payload["sub"]),
            organization_id=str(organization_id),
            email=payload.get("email"),
        )
