"""Actor context handed to every engine command by the session boundary.

Authentication happens upstream; the engine trusts the id and role it is
given and only decides what that actor may do.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Header

from app.core.exceptions import UnauthorizedError
from app.domain.enums import Role


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self) -> str:
        return f"{self.role.value}:{self.id}"


def get_current_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> Actor:
    """FastAPI dependency reading the identity set by the session gateway."""
    if not x_actor_id or not x_actor_role:
        raise UnauthorizedError()
    try:
        role = Role(x_actor_role.strip().lower())
    except ValueError:
        raise UnauthorizedError(f"Unknown role '{x_actor_role}'") from None
    return Actor(id=x_actor_id.strip(), role=role)


def get_optional_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> Actor | None:
    """Like :func:`get_current_actor` but allows anonymous callers (registration)."""
    if not x_actor_id and not x_actor_role:
        return None
    return get_current_actor(x_actor_id, x_actor_role)
