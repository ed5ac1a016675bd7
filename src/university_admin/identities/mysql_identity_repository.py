from __future__ import annotations

from typing import Optional

from ..core.enums import Language, Role, Theme, TimeZone
from ..core.exceptions import DuplicateIdentityError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, is_duplicate_key
from .model import Identity, Preferences
from .repository import IdentityRepository

_COLUMNS = "email, display_name, password_hash, role, profile_image_ref, language, theme, notifications, time_zone"


def _row_to_identity(r: dict) -> Identity:
    return Identity(
        email=r["email"],
        display_name=r["display_name"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        profile_image_ref=r.get("profile_image_ref") or "",
        preferences=Preferences(
            language=Language(r.get("language") or ""),
            theme=Theme(r.get("theme") or "light"),
            notifications=bool(r.get("notifications", True)),
            time_zone=TimeZone(r.get("time_zone") or ""),
        ),
    )


class MySQLIdentityRepository(IdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM identities WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_identity(row) if row else None

    def create(self, identity: Identity) -> Identity:
        prefs = identity.preferences
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO identities({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        identity.email,
                        identity.display_name,
                        identity.password_hash,
                        identity.role.value,
                        identity.profile_image_ref,
                        prefs.language.value,
                        prefs.theme.value,
                        int(prefs.notifications),
                        prefs.time_zone.value,
                    ),
                )
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateIdentityError(f"Email already registered: {identity.email}") from e
            raise
        return identity

    def update(self, current_email: str, identity: Identity) -> bool:
        prefs = identity.preferences
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE identities
                    SET email=%s, display_name=%s, profile_image_ref=%s,
                        language=%s, theme=%s, notifications=%s, time_zone=%s
                    WHERE email=%s
                    """,
                    (
                        identity.email,
                        identity.display_name,
                        identity.profile_image_ref,
                        prefs.language.value,
                        prefs.theme.value,
                        int(prefs.notifications),
                        prefs.time_zone.value,
                        current_email,
                    ),
                )
                return cur.rowcount > 0
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateIdentityError(f"Email already registered: {identity.email}") from e
            raise

    def update_password_hash(self, email: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE identities SET password_hash=%s WHERE email=%s", (password_hash, email))
            return cur.rowcount > 0

    def delete_by_email(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM identities WHERE email=%s", (email,))
            return cur.rowcount > 0
