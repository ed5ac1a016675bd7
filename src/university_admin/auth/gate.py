from __future__ import annotations

from typing import Iterable, Optional

from ..common.validators import normalize_email
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, InvalidCredentialError
from .credentials import Credential, CredentialService


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    if not header_value:
        return None
    parts = header_value.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class AccessGate:
    """Validates credentials and restricts operations to allow-listed roles."""

    def __init__(self, credentials: CredentialService):
        self._credentials = credentials

    def authorize(self, token: Optional[str], allowed_roles: Iterable[Role]) -> Credential:
        if not token:
            raise AuthenticationError("No token provided")
        try:
            credential = self._credentials.verify(token)
        except InvalidCredentialError as e:
            raise AuthenticationError(str(e)) from e

        allowed = frozenset(allowed_roles)
        if allowed and credential.role not in allowed:
            raise AuthorizationError("Insufficient role permissions")
        return credential

    @staticmethod
    def ensure_self(credential: Credential, owner_email: str) -> None:
        """Self-scoped check: same role is not enough, it must be the same account."""
        if normalize_email(owner_email) != normalize_email(credential.subject_email):
            raise AuthorizationError("You can only access your own profile")
