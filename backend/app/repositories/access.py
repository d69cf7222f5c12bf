"""Row-level access rules applied by the repositories.

Patients read and write only their own rows. Admins may read every row but,
like everyone else, may only modify rows they own. The same rules exist as
PostgreSQL row-level-security policies (see the initial migration).
"""

from dataclasses import dataclass

from sqlalchemy import Select

from app.models.profile import ProfileRole


class EntryNotFoundError(ValueError):
    """Raised when a row does not exist or is not visible to the viewer."""

    pass


class AccessDeniedError(PermissionError):
    """Raised when the viewer may see a row but not modify it."""

    pass


@dataclass(frozen=True)
class Viewer:
    """The authenticated identity a query runs on behalf of."""

    user_id: str
    role: ProfileRole = ProfileRole.PATIENT

    @property
    def is_admin(self) -> bool:
        return self.role == ProfileRole.ADMIN


def scope_to_viewer(query: Select, owner_column, viewer: Viewer) -> Select:
    """Restrict a select to rows the viewer may read."""
    if viewer.is_admin:
        return query
    return query.where(owner_column == viewer.user_id)


def ensure_owner(owner_id: str, viewer: Viewer) -> None:
    """Raise AccessDeniedError unless the viewer owns the row."""
    if owner_id != viewer.user_id:
        raise AccessDeniedError("Only the owner may modify this record")
