"""Authentication service: login with lockout, registration, profiles.

Every login attempt consults the login guard before the credential store is
touched, so a locked-out client cannot keep guessing passwords.
"""

from __future__ import annotations

import logging
import math

from storefront.adapters.rate_limit.base import AbstractLoginGuard
from storefront.adapters.store.base import AbstractUserStore, UserRecord
from storefront.core.errors import (
    AuthenticationAppError,
    ConflictAppError,
    NotFoundAppError,
    ThrottledAppError,
)
from storefront.core.logging import hash_identifier
from storefront.core.security import create_access_token, hash_password
from storefront.schemas.user import ProfileUpdateRequest, SessionResponse, UserResponse

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def to_user_response(user: UserRecord) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email, is_admin=user.is_admin)


def to_session(user: UserRecord) -> SessionResponse:
    """Build the login/register payload with a freshly issued token."""
    return SessionResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        is_admin=user.is_admin,
        token=create_access_token(user.id),
    )


class AuthService:
    """Service for credential checks and account management.

    Attributes:
        users: Credential store.
        guard: Failed-login lockout tracker shared by all requests.
    """

    def __init__(self, users: AbstractUserStore, guard: AbstractLoginGuard) -> None:
        self.users = users
        self.guard = guard

    def login(self, email: str, password: str, *, client_key: str) -> SessionResponse:
        """Authenticate a user on behalf of ``client_key``.

        Args:
            email: Account email (case-insensitive).
            password: Plaintext password.
            client_key: Identity the lockout is tracked under (client address).

        Returns:
            Session payload with a bearer token.

        Raises:
            ThrottledAppError: Client is locked out; credentials were not checked.
            AuthenticationAppError: Unknown email or wrong password.
        """
        decision = self.guard.check(client_key)
        if not decision.allowed:
            logger.warning(
                "auth.login_locked_out",
                extra={
                    "client_hash": hash_identifier(client_key),
                    "failure_count": decision.failure_count,
                    "retry_after_s": round(decision.retry_after_seconds, 1),
                },
            )
            raise ThrottledAppError(
                code="too_many_login_attempts",
                message=(
                    "Too many failed attempts. Please try again in "
                    f"{decision.retry_after_minutes} minutes."
                ),
                details={"retry_after": int(math.ceil(decision.retry_after_seconds))},
            )

        user = self.users.find_by_email(normalize_email(email))
        if user is not None and self.users.verify_password(user, password):
            self.guard.record_success(client_key)
            logger.info("auth.login_succeeded", extra={"user_id": user.id})
            return to_session(user)

        record = self.guard.record_failure(client_key)
        attempts_left = max(0, self.guard.max_failures - record.failure_count)
        logger.warning(
            "auth.login_failed",
            extra={
                "client_hash": hash_identifier(client_key),
                "failure_count": record.failure_count,
                "attempts_left": attempts_left,
            },
        )
        raise AuthenticationAppError(
            code="invalid_credentials",
            message="Invalid email or password",
            details={"attempts_left": attempts_left},
        )

    def register(self, name: str, email: str, password: str, *, is_admin: bool = False) -> SessionResponse:
        """Create an account and log it in.

        Raises:
            ConflictAppError: If the email is already registered.
        """
        email = normalize_email(email)
        if self.users.find_by_email(email) is not None:
            raise ConflictAppError(code="user_exists", message="User already exists")

        record = UserRecord(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            is_admin=is_admin,
        )
        try:
            self.users.create(record)
        except ValueError as exc:
            raise ConflictAppError(code="user_exists", message="User already exists") from exc

        logger.info("auth.user_registered", extra={"user_id": record.id, "is_admin": is_admin})
        return to_session(record)

    def get_profile(self, user_id: str) -> UserResponse:
        return to_user_response(self._require_user(user_id))

    def update_profile(self, user_id: str, changes: ProfileUpdateRequest) -> SessionResponse:
        """Apply a partial profile update and re-issue the token.

        Empty values keep the current field, matching the storefront form
        which submits every field.
        """
        user = self._require_user(user_id)

        if changes.name:
            user.name = changes.name.strip()
        if changes.email:
            email = normalize_email(changes.email)
            existing = self.users.find_by_email(email)
            if existing is not None and existing.id != user.id:
                raise ConflictAppError(code="email_in_use", message="Email already in use")
            user.email = email
        if changes.password:
            user.password_hash = hash_password(changes.password)

        self.users.save(user)
        logger.info(
            "auth.profile_updated",
            extra={"user_id": user.id, "password_changed": bool(changes.password)},
        )
        return to_session(user)

    def _require_user(self, user_id: str) -> UserRecord:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundAppError(code="user_not_found", message="User not found")
        return user
