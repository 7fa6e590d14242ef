"""
Credential verification - Argon2id password checks shared by login and publishing.

Security Design - Timing Oracle Prevention:
------------------------------------------
1. **PHC strings**: Stored hashes embed algorithm, parameters and salt, so no
   separate salt column exists and parameters can change without migration.

2. **_dummy_hash**: When a username doesn't exist we still run a full Argon2
   verification against a hash computed with the same parameters as real
   ones. Response time for "unknown user" and "wrong password" is then
   dominated by the same work.

3. **Uniform failure**: Both cases raise InvalidCredentials. Callers must not
   reveal which one occurred.

4. **Worker thread**: Argon2 is deliberately memory- and CPU-hard. It runs via
   asyncio.to_thread so concurrent requests keep being served.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass, field
from uuid import UUID

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .exceptions import InvalidCredentials, StoreError, UnexpectedAuthError
from .ports import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """Username and candidate password supplied by a client."""

    username: str
    password: str = field(repr=False)


class CredentialVerifier:
    """Verifies operator credentials against PHC-format Argon2 hashes."""

    def __init__(self, users: UserRepository, hasher: PasswordHasher) -> None:
        self._users = users
        self._hasher = hasher
        self._dummy_hash = hasher.hash(secrets.token_urlsafe(32))

    def hash_password(self, password: str) -> str:
        """Hash a password into a PHC string using the configured parameters."""
        return self._hasher.hash(password)

    async def validate_credentials(self, credentials: Credentials) -> UUID:
        """
        Authenticate a username/password pair.

        Returns:
            The user id of the authenticated operator

        Raises:
            InvalidCredentials: Unknown username or wrong password
            UnexpectedAuthError: Store failure or malformed stored hash
        """
        try:
            stored = await self._users.get_stored_credentials(credentials.username)
        except StoreError as e:
            raise UnexpectedAuthError("Failed to retrieve stored credentials") from e

        if stored is not None:
            user_id, expected_hash = stored
        else:
            user_id, expected_hash = None, self._dummy_hash

        # CRITICAL: always verify, even for unknown users
        await self.verify(credentials.password, expected_hash)

        if user_id is None:
            raise InvalidCredentials("Unknown username")
        return user_id

    async def verify(self, candidate_password: str, stored_hash: str) -> None:
        """
        Compare a candidate password with a stored PHC hash off the event loop.

        Raises:
            InvalidCredentials: Password does not match
            UnexpectedAuthError: Stored hash cannot be parsed or verified
        """
        await asyncio.to_thread(self._verify_password_hash, candidate_password, stored_hash)

    def _verify_password_hash(self, candidate_password: str, stored_hash: str) -> None:
        try:
            self._hasher.verify(stored_hash, candidate_password)
        except VerifyMismatchError as e:
            raise InvalidCredentials("Invalid password") from e
        except InvalidHashError as e:
            raise UnexpectedAuthError("Failed to parse hash in PHC string format") from e
        except VerificationError as e:
            raise UnexpectedAuthError("Password hash verification failed") from e
