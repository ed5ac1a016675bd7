"""Signed, time-bounded credentials (JWT) carrying identity and role.

Credentials are stateless: nothing is stored server side, every request
re-verifies the token. There is no refresh or revocation; an expired token
requires a fresh login.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt
from jose.exceptions import JWTError

from ..common.datetime_utils import now_utc
from ..core.constants import CREDENTIAL_ALGORITHM, CREDENTIAL_TTL
from ..core.enums import Role
from ..core.exceptions import ConfigurationError, InvalidCredentialError
from ..identities.model import Identity


@dataclass(frozen=True)
class Credential:
    subject_email: str
    role: Role
    display_name: str
    issued_at: datetime
    expires_at: datetime


class CredentialService:
    def __init__(
        self,
        secret: str,
        *,
        ttl: timedelta = CREDENTIAL_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ConfigurationError("JWT_SECRET is not configured")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock or now_utc

    def issue(self, identity: Identity) -> str:
        issued_at = self._clock()
        claims = {
            "sub": identity.email,
            "role": identity.role.value,
            "name": identity.display_name,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=CREDENTIAL_ALGORITHM)

    def verify(self, token: str) -> Credential:
        if not isinstance(token, str) or token.count(".") != 2:
            raise InvalidCredentialError("Malformed credential")

        try:
            # python-jose checks the signature first, then exp against wall-clock time.
            claims = jwt.decode(token, self._secret, algorithms=[CREDENTIAL_ALGORITHM])
        except JWTError as e:
            raise InvalidCredentialError("Invalid or expired token") from e

        try:
            subject = claims["sub"]
            role = Role(claims["role"])
            issued_at = datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidCredentialError("Invalid token payload") from e

        if not isinstance(subject, str) or not subject:
            raise InvalidCredentialError("Invalid token payload")
        if expires_at <= self._clock():
            raise InvalidCredentialError("Invalid or expired token")

        return Credential(
            subject_email=subject,
            role=role,
            display_name=str(claims.get("name") or ""),
            issued_at=issued_at,
            expires_at=expires_at,
        )
