from __future__ import annotations

import logging
from typing import Any

import bcrypt

from ..config import DEFAULT_APP_CONFIG
from ..errors import InvalidStateError
from ..storage.collection import Collection, utcnow
from ..storage.pagination import Page, build_page, page_window
from ..taxonomy import Role
from .models import ProfileUpdate, RegisterRequest, User, normalize_email

logger = logging.getLogger(__name__)

MAX_USER_PAGE_LIMIT = 50

_users: Collection[User] = Collection("users", label="User", unique=("email",))

DEMO_USERS: list[dict[str, str]] = [
    {"name": "Demo User", "email": "user@cookmate.app", "password": "user123", "role": "user"},
    {"name": "Demo Admin", "email": "admin@cookmate.app", "password": "admin123", "role": "admin"},
    {"name": "Demo Chef", "email": "chef@cookmate.app", "password": "chef123", "role": "chef"},
]


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def users_collection() -> Collection[User]:
    return _users


def create_user(name: str, email: str, password: str, role: Role = Role.user) -> User:
    user = User(
        name=name,
        email=normalize_email(email),
        password_hash=_hash_password(password),
        role=role,
    )
    _users.insert(user)
    logger.info("Account %s created with role %s", user.id, user.role.value)
    return user


def register(request: RegisterRequest) -> User:
    return create_user(request.name, request.email, request.password)


def authenticate(email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the session identity or ``None``."""
    key = email.strip().lower()
    user = _users.find_one(lambda u: u.email == key)
    if user is None or not user.is_active:
        return None
    if not _verify_password(password, user.password_hash):
        return None
    user = _users.update(user.id, {"last_login": utcnow()})
    return user.session_identity()


def get_user(user_id: str) -> User:
    return _users.require(user_id)


def list_users(
    role: Role | None = None,
    is_active: bool | None = None,
    page: int = 1,
    limit: int = 20,
) -> Page[User]:
    skip, limit = page_window(page, limit, MAX_USER_PAGE_LIMIT)

    def where(u: User) -> bool:
        if role is not None and u.role != role:
            return False
        if is_active is not None and u.is_active != is_active:
            return False
        return True

    items = _users.find(where, sort=[("created_at", True)], skip=skip, limit=limit)
    return build_page(items, _users.count(where), page, limit)


def set_role(user_id: str, role: Role) -> User:
    user = _users.update(user_id, {"role": role})
    logger.info("Account %s role set to %s", user_id, role.value)
    return user


def set_active(user_id: str, is_active: bool) -> User:
    return _users.update(user_id, {"is_active": is_active})


def delete_user(user_id: str, actor: dict[str, Any]) -> None:
    if actor.get("id") == user_id:
        raise InvalidStateError("Cannot delete your own account")
    _users.delete(user_id)
    logger.info("Account %s deleted by %s", user_id, actor.get("id"))


def update_profile(user_id: str, changes: ProfileUpdate) -> User:
    """Apply the provided profile, preference and name fields."""
    fields = {f: getattr(changes, f) for f in changes.model_fields_set}

    def mutate(user: User) -> User:
        profile_fields = {
            k: v for k, v in fields.items()
            if k in type(user.profile).model_fields and v is not None
        }
        pref_fields = {
            k: v for k, v in fields.items()
            if k in type(user.preferences).model_fields and v is not None
        }
        update: dict[str, Any] = {
            "profile": user.profile.model_copy(update=profile_fields),
            "preferences": user.preferences.model_copy(update=pref_fields),
        }
        if fields.get("name"):
            update["name"] = fields["name"]
        return user.model_copy(update=update)

    return _users.find_one_and_update(user_id, mutate)


def _seed_users() -> None:
    """Pre-seed demo accounts."""
    for demo in DEMO_USERS:
        create_user(demo["name"], demo["email"], demo["password"], Role(demo["role"]))


def reset_users() -> None:
    """Drop every account and restore the demo accounts."""
    _users.clear()
    if DEFAULT_APP_CONFIG.seed_demo_users:
        _seed_users()


if DEFAULT_APP_CONFIG.seed_demo_users:
    _seed_users()
