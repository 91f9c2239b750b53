# Overview: Session gate; authenticates users against the user repository and tracks the current session.

"""
Authentication Service

Contract: username + password -> session. The user must exist and be
active; if the account has a credential, the password must verify. Accounts
without any credential authenticate by username alone.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- bcrypt.checkpw() is timing-safe; legacy plaintext credentials found in
  stored state are compared with hmac.compare_digest and replaced by a hash
  on the first successful login
- The current-session record never contains credential fields
- Every failure returns the same generic InvalidCredentials outcome, so
  callers cannot tell an unknown username from a wrong password
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

import bcrypt

from ..models import User
from .record_store import CURRENT_USER, CorruptStateError, RecordStore
from .repositories import UserRepository


logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    WHY: Cost factor 12 provides good security/performance balance.
    Test configurations drop it to the minimum (4) to keep suites fast.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in the record store


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise (including for
    malformed hashes).
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


@dataclass(frozen=True)
class InvalidCredentials:
    """Failed login outcome. Deliberately carries no reason."""
    message: str = "Invalid credentials"

    def __bool__(self) -> bool:
        return False


class SessionGate:
    def __init__(self, store: RecordStore, users: UserRepository, *, bcrypt_rounds: int = 12):
        self.store = store
        self.users = users
        self.bcrypt_rounds = bcrypt_rounds

    def _check_credential(self, user: User, password: str | None) -> bool:
        if not user.has_credential:
            return True
        if password is None:
            return False
        if user.password_hash:
            return verify_password(password, user.password_hash)
        return hmac.compare_digest(password.encode('utf-8'), user.legacy_password.encode('utf-8'))

    def login(self, username: str, password: str | None = None) -> User | InvalidCredentials:
        """
        Authenticate and open a session.

        Returns the User on success, InvalidCredentials otherwise. Never
        raises for a bad username or password.
        """
        user = self.users.find_by_username(username)
        if user is None or not user.is_active:
            logger.warning("Rejected login for username %r", username)
            return InvalidCredentials()

        if not self._check_credential(user, password):
            logger.warning("Rejected login for username %r", username)
            return InvalidCredentials()

        if user.legacy_password and not user.password_hash:
            user = self.users.set_password(user.id, password)
            logger.info("Upgraded legacy plaintext credential for user %s", user.id)

        self.store.put(CURRENT_USER, user.to_dict(include_credentials=False))
        logger.info("User %s logged in", user.username)
        return user

    def logout(self) -> None:
        self.store.delete(CURRENT_USER)

    def current_user(self) -> User | None:
        """The user of the open session, or None if absent or unreadable."""
        try:
            data = self.store.get(CURRENT_USER)
        except CorruptStateError:
            logger.warning("Discarding unreadable session record")
            return None
        if not isinstance(data, dict):
            return None
        try:
            return User.from_dict(data)
        except ValueError:
            logger.warning("Discarding unreadable session record")
            return None
