from __future__ import annotations

from typing import Callable

from fastapi import Request

from ..errors import AuthenticationError, AuthorizationError
from ..taxonomy import Role


def get_current_user(request: Request) -> dict | None:
    """Return the user dict from the session, or ``None``."""
    return request.session.get("user")


def require_user(request: Request) -> dict:
    """Raise 401 if no user is logged in."""
    user = request.session.get("user")
    if not user:
        raise AuthenticationError()
    return user


def require_role(*roles: Role) -> Callable[[Request], dict]:
    """Build a dependency that raises 401 if not logged in, 403 on other roles."""
    allowed = {r.value for r in roles}

    def dependency(request: Request) -> dict:
        user = require_user(request)
        if user.get("role") not in allowed:
            raise AuthorizationError(
                f"{' or '.join(sorted(r.title() for r in allowed))} access required"
            )
        return user

    return dependency


require_admin = require_role(Role.admin)
require_author = require_role(Role.admin, Role.chef)
