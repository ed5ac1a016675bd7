from __future__ import annotations

from typing import Optional, Protocol

from .model import Identity


class IdentityRepository(Protocol):
    """Repository interface for Identity.

    Note: the service layer depends on this interface, not on a concrete DB.
    Implementations must raise DuplicateIdentityError when the unique email
    constraint is violated; that constraint is the authoritative guard.
    """

    def get_by_email(self, email: str) -> Optional[Identity]:
        raise NotImplementedError

    def create(self, identity: Identity) -> Identity:
        raise NotImplementedError

    def update(self, current_email: str, identity: Identity) -> bool:
        """Replace the stored row for current_email (email itself may change)."""

        raise NotImplementedError

    def update_password_hash(self, email: str, password_hash: str) -> bool:
        raise NotImplementedError

    def delete_by_email(self, email: str) -> bool:
        raise NotImplementedError
