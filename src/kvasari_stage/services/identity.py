"""Read-only access to users and the bans between them."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from kvasari_stage.models.user import Ban, User

__all__ = ["IdentityDirectory"]


class IdentityDirectory:
    """Lookups over the user directory kept by the account service."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_user(self, user_id: str) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def get_by_alias(self, alias: str) -> User | None:
        """Return a user by public alias."""
        return self.session.scalars(select(User).where(User.alias == alias)).first()

    def is_banned(self, source_id: str, target_id: str) -> bool:
        """Report whether ``source_id`` has banned ``target_id``."""
        return self.session.get(Ban, (source_id, target_id)) is not None

    def either_banned(self, first_id: str, second_id: str) -> bool:
        """Report whether a ban exists between two users, in either direction."""
        return self.is_banned(first_id, second_id) or self.is_banned(second_id, first_id)
