from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import FieldErrors, normalize_email, require_min_length, require_non_empty
from ..core.constants import MIN_ACCOUNT_PASSWORD_LENGTH
from ..core.enums import Language, Role, Theme, TimeZone
from ..core.exceptions import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from .model import Identity, IdentityPatch, Preferences
from .repository import IdentityRepository

logger = logging.getLogger(__name__)


class IdentityStore:
    """Use cases on the login account, independent of role-specific attributes."""

    def __init__(self, identities: IdentityRepository):
        self._identities = identities

    def create(self, draft: Identity) -> Identity:
        email = normalize_email(draft.email)
        require_non_empty(email, "email")
        require_non_empty(draft.display_name, "displayName")

        if self._identities.get_by_email(email):
            raise DuplicateIdentityError(f"Email already registered: {email}")

        # Repository raises DuplicateIdentityError itself if a concurrent create won.
        return self._identities.create(replace(draft, email=email, display_name=draft.display_name.strip()))

    def find_by_email(self, email: str) -> Optional[Identity]:
        email = normalize_email(email)
        if not email:
            return None
        return self._identities.get_by_email(email)

    def get(self, email: str) -> Identity:
        identity = self.find_by_email(email)
        if not identity:
            raise NotFoundError("Account not found")
        return identity

    def update_profile(self, email: str, patch: IdentityPatch) -> Identity:
        if patch.is_empty():
            raise ValidationError("No valid fields provided for update")

        current = self.get(email)
        updated = current

        if patch.display_name is not None:
            updated = replace(updated, display_name=require_non_empty(patch.display_name, "displayName"))

        if patch.preferences is not None:
            updated = replace(updated, preferences=patch.preferences)

        if patch.email is not None:
            new_email = normalize_email(patch.email)
            require_non_empty(new_email, "email")
            if new_email != current.email:
                # Students and teachers share their email with a role profile.
                if current.role != Role.ADMIN:
                    raise ValidationError(
                        "Email of a student or teacher account cannot be changed here",
                        fields={"email": "immutable for this role"},
                    )
                other = self._identities.get_by_email(new_email)
                if other:
                    raise DuplicateIdentityError(f"Email already registered: {new_email}")
                updated = replace(updated, email=new_email)

        self._identities.update(current.email, updated)
        return updated

    def set_profile_image(self, email: str, image_ref: str) -> Identity:
        current = self.get(email)
        updated = replace(current, profile_image_ref=require_non_empty(image_ref, "profileImage"))
        self._identities.update(current.email, updated)
        return updated

    @staticmethod
    def verify_password(identity: Identity, candidate: str) -> bool:
        if not candidate:
            return False
        try:
            return check_password_hash(identity.password_hash, candidate)
        except ValueError:
            # e.g. placeholder or corrupted hash values
            return False

    def change_password(self, email: str, current_password: str, new_password: str) -> None:
        identity = self.get(email)
        if not self.verify_password(identity, current_password):
            raise InvalidCredentialsError("Current password is incorrect")
        require_min_length(new_password, "newPassword", MIN_ACCOUNT_PASSWORD_LENGTH)

        self._identities.update_password_hash(identity.email, generate_password_hash(new_password))
        logger.info("Password changed for %s", identity.email)

    def delete(self, email: str) -> bool:
        """Administrative cascade only (teacher deregistration)."""
        return self._identities.delete_by_email(normalize_email(email))


def merge_preferences(current: Preferences, raw: Any) -> Preferences:
    """Apply a partial `settings` payload on top of the current preferences."""
    if not isinstance(raw, Mapping):
        raise ValidationError("settings must be an object", fields={"settings": "object required"})

    errors = FieldErrors()
    merged = current
    if "language" in raw:
        merged = replace(merged, language=_preference(errors, raw, "language", Language))
    if "theme" in raw:
        merged = replace(merged, theme=_preference(errors, raw, "theme", Theme))
    if "timeZone" in raw:
        merged = replace(merged, time_zone=_preference(errors, raw, "timeZone", TimeZone))
    if "notifications" in raw:
        if isinstance(raw["notifications"], bool):
            merged = replace(merged, notifications=raw["notifications"])
        else:
            errors.add("settings.notifications", "must be true or false")
    errors.raise_if_any("Invalid settings")
    return merged


def _preference(errors: FieldErrors, raw: Mapping[str, Any], key: str, enum_cls):
    try:
        return enum_cls(raw[key])
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        errors.add(f"settings.{key}", f"must be one of: {allowed}")
        return None
