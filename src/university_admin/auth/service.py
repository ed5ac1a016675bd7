from __future__ import annotations

import logging
from dataclasses import dataclass

from ..common.validators import normalize_email
from ..core.exceptions import AuthenticationError, ValidationError
from ..identities.model import Identity
from ..identities.store import IdentityStore
from .credentials import CredentialService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    identity: Identity


class AuthService:
    """Use case: authenticate an account (login) and hand out a credential."""

    def __init__(self, identities: IdentityStore, credentials: CredentialService):
        self._identities = identities
        self._credentials = credentials

    def login(self, email: str, password: str) -> LoginResult:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        identity = self._identities.find_by_email(email)
        if not identity or not self._identities.verify_password(identity, password):
            logger.info("Login failed for %s", email)
            raise AuthenticationError("Invalid email or password")

        logger.info("Login successful for %s (%s)", identity.email, identity.role.value)
        return LoginResult(token=self._credentials.issue(identity), identity=identity)
