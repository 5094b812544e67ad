"""Actor abstractions for callers of the booking API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

ROLE_ADMIN = "admin"
ROLE_USER = "user"

GET_BOOKINGS = "get_bookings"
MANAGE_BOOKINGS = "manage_bookings"

ROLE_RIGHTS: Dict[str, FrozenSet[str]] = {
    ROLE_USER: frozenset(),
    ROLE_ADMIN: frozenset({GET_BOOKINGS, MANAGE_BOOKINGS}),
}


@dataclass(frozen=True)
class Actor:
    """The caller behind a request: an authenticated subject with a role, or anonymous."""

    actor_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.actor_id is not None

    @property
    def rights(self) -> FrozenSet[str]:
        if not self.is_authenticated or self.role is None:
            return frozenset()
        return ROLE_RIGHTS.get(self.role, frozenset())

    def has_right(self, right: str) -> bool:
        return right in self.rights


ANONYMOUS = Actor()
