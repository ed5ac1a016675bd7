from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import Language, Role, Theme, TimeZone


@dataclass(frozen=True)
class Preferences:
    language: Language = Language.ENGLISH
    theme: Theme = Theme.LIGHT
    notifications: bool = True
    time_zone: TimeZone = TimeZone.ADDIS_ABABA


@dataclass(frozen=True)
class Identity:
    """Domain entity: the login account of a person.

    Note: Plain data object, independent of the role-specific profile.
    """

    email: str
    display_name: str
    password_hash: str
    role: Role
    profile_image_ref: str = ""
    preferences: Preferences = field(default_factory=Preferences)


@dataclass(frozen=True)
class IdentityPatch:
    """Partial update accepted by the identity store (None = unchanged)."""

    display_name: Optional[str] = None
    email: Optional[str] = None
    preferences: Optional[Preferences] = None

    def is_empty(self) -> bool:
        return self.display_name is None and self.email is None and self.preferences is None
