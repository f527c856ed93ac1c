from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import uuid
from typing import Optional

from fastapi import Request

from stockroom.config import Settings
from stockroom.core.constants import USERS
from stockroom.core.errors import UnauthenticatedError
from stockroom.database.store import RecordStore

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "userId"


def hash_password(password: str, salt: str, rounds: int) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        rounds,
    )
    return digest.hex()


def verify_password(password: str, user: dict) -> bool:
    salt = user.get("passwordSalt")
    expected = user.get("passwordHash")
    rounds = user.get("passwordRounds")
    if not salt or not expected or not rounds:
        return False
    computed = hash_password(password, salt, int(rounds))
    return hmac.compare_digest(computed, expected)


def public_user(user: dict) -> dict:
    return {"id": user["id"], "username": user["username"], "role": user.get("role", "admin")}


def seed_admin_user(store: RecordStore, settings: Settings) -> bool:
    if store.is_initialized(USERS):
        return False

    if settings.ADMIN_PASSWORD_HASH:
        if not settings.ADMIN_PASSWORD_SALT:
            raise ValueError("Admin password salt is not configured.")
        salt = settings.ADMIN_PASSWORD_SALT
        password_hash = settings.ADMIN_PASSWORD_HASH
    elif settings.ADMIN_PASSWORD:
        salt = secrets.token_hex(16)
        password_hash = hash_password(settings.ADMIN_PASSWORD, salt, settings.PBKDF2_ROUNDS)
    else:
        logger.warning("No admin password configured; login stays disabled until ADMIN_PASSWORD is set")
        return False

    user = {
        "id": uuid.uuid4().hex,
        "username": settings.ADMIN_USERNAME.strip(),
        "role": "admin",
        "passwordSalt": salt,
        "passwordHash": password_hash,
        "passwordRounds": settings.PBKDF2_ROUNDS,
    }
    return store.seed(USERS, [user])


def authenticate(store: RecordStore, username: str, password: str) -> Optional[dict]:
    username = (username or "").strip()
    for user in store.load(USERS):
        if hmac.compare_digest(
            str(user.get("username", "")).encode("utf-8"), username.encode("utf-8")
        ):
            if verify_password(password or "", user):
                return user
            break
    logger.info("Failed login for %r", username)
    return None


def current_user(request: Request, store: RecordStore) -> Optional[dict]:
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None
    for user in store.load(USERS):
        if user.get("id") == user_id:
            return user
    return None


def require_login(request: Request) -> None:
    if request.session.get(SESSION_USER_KEY):
        return
    raise UnauthenticatedError()
