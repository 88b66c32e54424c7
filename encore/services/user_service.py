"""Local user accounts and the process-wide sign-in session.

Accounts live in the ``users`` collection.  Which user is signed in is
held by one :class:`Session` object for the whole process; the
``is_current_login`` flag on stored records is only written so data files
stay readable by older builds, and :meth:`UserService.restore_session`
reads it once at startup.

Passwords are peppered with HMAC-SHA256 before bcrypt so the stored hash
is useless without the server-side pepper.  bcrypt is CPU bound, so both
hashing and verification run in a worker thread.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import bcrypt
import structlog

from encore.interfaces.collection_store import ICollectionStore
from encore.models.user import User
from encore.providers.store.repository import CollectionRepository
from encore.utils.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    NotLoggedInError,
)

logger = structlog.get_logger(logger_name=__name__)

USERS_COLLECTION = "users"

# Hash compared against when the username does not exist, so a miss
# costs the same as a wrong password.
_DUMMY_HASH = bcrypt.hashpw(b"timing-equalization", bcrypt.gensalt(4)).decode("utf-8")


class Session:
    """Holds the id of the signed-in user, if any."""

    def __init__(self) -> None:
        self._user_id: str | None = None

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def is_active(self) -> bool:
        return self._user_id is not None

    def sign_in(self, user_id: str) -> None:
        self._user_id = user_id

    def clear(self) -> None:
        self._user_id = None


class UserService:
    """Sign-up, login and access to the signed-in user's record."""

    def __init__(
        self,
        store: ICollectionStore,
        session: Session | None = None,
        pepper: str = "",
        bcrypt_rounds: int = 12,
    ) -> None:
        self._users: CollectionRepository[User] = CollectionRepository(
            store, USERS_COLLECTION, User, key=lambda user: user.username
        )
        self._session = session or Session()
        self._pepper = pepper.encode("utf-8")
        self._bcrypt_rounds = bcrypt_rounds

    @property
    def session(self) -> Session:
        return self._session

    # -- Password hashing ------------------------------------------------------

    def _peppered(self, password: str) -> bytes:
        # Hex digest is 64 bytes, inside bcrypt's 72-byte input limit.
        return hmac.new(self._pepper, password.encode("utf-8"), hashlib.sha256).hexdigest().encode("ascii")

    async def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(self._bcrypt_rounds)
        hashed = await asyncio.to_thread(bcrypt.hashpw, self._peppered(password), salt)
        return hashed.decode("utf-8")

    async def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw, self._peppered(password), password_hash.encode("utf-8")
            )
        except ValueError:
            # Stored hash is not a bcrypt hash.
            return False

    # -- Accounts --------------------------------------------------------------

    async def sign_up(self, username: str, password: str) -> User:
        """Create an account and sign it in.

        Raises:
            ValueError: If the username or password is blank.
            ConflictError: If the username is taken.
        """
        username = username.strip()
        if not username or not password:
            raise ValueError("Username and password must not be blank")

        password_hash = await self.hash_password(password)

        async with self._users.mutate() as users:
            if any(u.username == username for u in users):
                raise ConflictError(f"User with username {username} already exists")
            for other in users:
                other.is_current_login = False
            user = User(username=username, password_hash=password_hash, is_current_login=True)
            users.append(user)

        self._session.sign_in(user.id)
        logger.info("user_signed_up", username=username)
        return user

    async def login(self, username: str, password: str) -> User:
        """Verify credentials, start the session and stamp ``last_login``.

        Raises:
            AuthenticationError: On an unknown username or wrong password.
        """
        existing = await self._users.get(username)
        stored_hash = existing.password_hash if existing is not None else _DUMMY_HASH
        verified = await self.verify_password(password, stored_hash)
        if existing is None or not verified:
            logger.info("login_failed", username=username)
            raise AuthenticationError()

        now = datetime.now(timezone.utc)
        async with self._users.mutate() as users:
            user = None
            for record in users:
                record.is_current_login = record.id == existing.id
                if record.id == existing.id:
                    record.last_login = now
                    user = record
            if user is None:
                raise AuthenticationError()

        self._session.sign_in(user.id)
        logger.info("user_logged_in", username=username)
        return user

    async def logout(self) -> None:
        """End the session.

        Raises:
            NotLoggedInError: If nobody is signed in.
        """
        user_id = self._session.user_id
        if user_id is None:
            raise NotLoggedInError()

        async with self._users.mutate() as users:
            for record in users:
                if record.id == user_id:
                    record.is_current_login = False

        self._session.clear()
        logger.info("user_logged_out", user_id=user_id)

    async def restore_session(self) -> User | None:
        """Adopt the user flagged ``is_current_login`` on disk, if any."""
        for user in await self._users.all():
            if user.is_current_login:
                self._session.sign_in(user.id)
                logger.info("session_restored", username=user.username)
                return user
        return None

    # -- Signed-in user --------------------------------------------------------

    async def current_user(self) -> User | None:
        """Return the signed-in user's record, or ``None``."""
        user_id = self._session.user_id
        if user_id is None:
            return None
        for user in await self._users.all():
            if user.id == user_id:
                return user
        return None

    async def require_current_user(self) -> User:
        user = await self.current_user()
        if user is None:
            raise NotLoggedInError()
        return user

    @asynccontextmanager
    async def modify_current_user(self) -> AsyncIterator[User]:
        """Yield the signed-in user's live record; changes are saved on exit.

        The users collection stays locked for the duration, so the body must
        not call providers.

        Raises:
            NotLoggedInError: If nobody is signed in or the record vanished.
        """
        user_id = self._session.user_id
        if user_id is None:
            raise NotLoggedInError()

        async with self._users.mutate() as users:
            user = next((u for u in users if u.id == user_id), None)
            if user is None:
                raise NotLoggedInError()
            yield user

    async def update_user(self, user: User) -> None:
        """Replace the stored record with the same id.

        Raises:
            NotFoundError: If no stored user has ``user.id``.
        """
        async with self._users.mutate() as users:
            for index, record in enumerate(users):
                if record.id == user.id:
                    users[index] = user
                    break
            else:
                raise NotFoundError(f"User {user.id} not found")
