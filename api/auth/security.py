"""
Auth security helpers: token service and password hashing.

Tokens are standard HS256 JWTs (header.payload.signature, base64url). The
service is configured once at startup and is safe to share between requests.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import bcrypt
import jwt

from core.settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)

# Only usable when APP_ENV=development.
DEV_JWT_SECRET = "dev-change-this-secret-not-for-production"
DEFAULT_ALGORITHM = "HS256"
DEFAULT_EXPIRES_IN_SECONDS = 24 * 60 * 60

# Signature and required claims are checked by PyJWT; lifetime is checked
# against the service clock. Other registered claims are opaque caller data.
_DECODE_OPTIONS = {
    "require": ["exp", "iat"],
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


class AuthSecurityError(RuntimeError):
    pass


class TokenIssuanceError(AuthSecurityError):
    pass


class TokenInvalidReason(str, Enum):
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    INVALID = "invalid"


class TokenInvalidError(AuthSecurityError):
    def __init__(self, reason: TokenInvalidReason, message: str = "Invalid token.") -> None:
        super().__init__(message)
        self.reason = reason


class ErrorLogger(Protocol):
    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    algorithm: str = DEFAULT_ALGORITHM
    expires_in_seconds: int = DEFAULT_EXPIRES_IN_SECONDS

    def __post_init__(self) -> None:
        if not self.secret:
            raise ConfigurationError("Token secret is empty.")
        if self.expires_in_seconds <= 0:
            raise ConfigurationError("Token lifetime must be positive.")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        secret = settings.jwt_secret
        if not secret:
            if not settings.is_development:
                raise ConfigurationError(
                    f"JWT_SECRET must be set when APP_ENV={settings.app_env}."
                )
            logger.warning("JWT_SECRET is not set; using the development secret.")
            secret = DEV_JWT_SECRET
        return cls(secret=secret, expires_in_seconds=settings.jwt_expires_in_seconds)


class TokenService:
    """
    Issue and verify signed, time-bounded tokens over an opaque claims dict.

    `sign` adds `iat` and `exp`; `verify` returns the claims with both still
    present. Failures are logged through `logger` and surfaced as
    `TokenIssuanceError` / `TokenInvalidError`.
    """

    def __init__(
        self,
        config: TokenConfig,
        *,
        logger: ErrorLogger | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.config = config
        self._logger = logger or logging.getLogger(__name__)
        self._now = now or time.time

    def sign(self, claims: Mapping[str, Any]) -> str:
        try:
            payload = self._build_payload(claims)
            return jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)
        except Exception as exc:
            self._logger.error("Failed to sign token: %s", exc)
            raise TokenIssuanceError("Failed to sign token.") from exc

    def verify(self, token: str) -> dict[str, Any]:
        raw = (token or "").strip() if isinstance(token, str) else ""
        try:
            if not raw:
                raise jwt.DecodeError("Token is empty.")
            claims = jwt.decode(
                raw,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options=_DECODE_OPTIONS,
            )
            self._check_lifetime(claims)
            return claims
        except jwt.InvalidTokenError as exc:
            reason = _invalid_reason(exc)
            self._logger.error("Failed to verify token (%s): %s", reason.value, exc)
            raise TokenInvalidError(reason) from exc

    def _check_lifetime(self, claims: dict[str, Any]) -> None:
        # Expiry is judged on the service clock so sign and verify agree.
        now = self._now()
        expires_at = claims["exp"]
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            raise jwt.DecodeError("Expiration Time claim (exp) must be a number.")
        if now >= expires_at:
            raise jwt.ExpiredSignatureError("Signature has expired.")

        not_before = claims.get("nbf")
        if isinstance(not_before, (int, float)) and not isinstance(not_before, bool) and now < not_before:
            raise jwt.ImmatureSignatureError("The token is not yet valid (nbf).")

    def _build_payload(self, claims: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(claims, Mapping):
            raise TypeError(f"Claims must be a mapping, got {type(claims).__name__}.")
        if "exp" in claims:
            raise ValueError("Claims already carry an 'exp' value.")

        payload = dict(claims)
        issued_at = payload.get("iat")
        if issued_at is None:
            issued_at = int(self._now())
        elif isinstance(issued_at, bool) or not isinstance(issued_at, (int, float)):
            raise ValueError("'iat' must be a number of seconds since the epoch.")

        payload["iat"] = int(issued_at)
        payload["exp"] = int(issued_at) + self.config.expires_in_seconds
        return payload


def _invalid_reason(exc: jwt.InvalidTokenError) -> TokenInvalidReason:
    # InvalidSignatureError subclasses DecodeError, so check it first.
    if isinstance(exc, jwt.InvalidSignatureError):
        return TokenInvalidReason.INVALID_SIGNATURE
    if isinstance(exc, jwt.ExpiredSignatureError):
        return TokenInvalidReason.EXPIRED
    if isinstance(exc, (jwt.DecodeError, jwt.MissingRequiredClaimError)):
        return TokenInvalidReason.MALFORMED
    return TokenInvalidReason.INVALID


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False
