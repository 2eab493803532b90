from __future__ import annotations

import logging
import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from marketplace.models.user import User
from marketplace.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

_ph = PasswordHasher()

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


class UserValidationError(ValueError):
    pass


class UserAlreadyExistsError(Exception):
    pass


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


async def register_user(
    repo: UserRepo,
    *,
    name: str,
    email: str,
    password: str,
    admin_emails: frozenset[str] = frozenset(),
) -> User:
    """Validate and store a new learner account.

    Addresses listed in ``admin_emails`` are created with the admin role.
    """
    email = email.strip().lower()
    name = name.strip()

    if not _EMAIL_RE.match(email):
        raise UserValidationError("Invalid email address")
    if not name:
        raise UserValidationError("Name is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise UserValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if await repo.get_by_email(email) is not None:
        logger.warning("Rejected duplicate email=%s", email)
        raise UserAlreadyExistsError(email)

    roles = ("user", "admin") if email in admin_emails else ("user",)
    user = User.new(
        email=email,
        password_hash=hash_password(password),
        name=name,
        roles=roles,
    )
    try:
        await repo.add(user)
    except ValueError:
        # Another request registered the same email after our lookup
        raise UserAlreadyExistsError(email) from None

    logger.info("User registered  user_id=%s email=%s", user.id, email)
    return user


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    user = await repo.get_by_email(email)
    if user is None:
        return None
    if not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None

    try:
        if _ph.check_needs_rehash(user.password_hash):
            await repo.update_password_hash(user.id, _ph.hash(password))
            logger.info("Rehashed password for user=%s", user.id)
    except InvalidHash:
        return None

    return user
