"""Identity provider.

Authentication is delegated to an identity provider reached through a narrow
call/response interface. ``LocalIdentityProvider`` keeps identities in the
``auth_identities`` table with bcrypt password hashes and issues recovery
links backed by the ``password_resets`` table.
"""

import logging
import secrets
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
import pytz
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import APP_BASE_URL, PASSWORD_RESET_EXPIRE_HOURS
from core.exceptions import ConflictError, NotFoundError, UpstreamError
from models.auth_identity import AuthIdentityModel
from models.password_reset import PasswordResetModel

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12


class IdentityProvider(ABC):
    """Operations the application needs from an identity provider."""

    @abstractmethod
    def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Create a confirmed identity with admin privileges. Returns its id."""

    @abstractmethod
    def sign_up(
        self,
        email: str,
        password: str,
        user_metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Self-service sign-up; the identity starts unconfirmed."""

    @abstractmethod
    def generate_recovery_link(
        self, email: str, user_id: Optional[str] = None
    ) -> PasswordResetModel:
        """Issue a password recovery token for an existing identity."""

    @abstractmethod
    def get_identity_id(self, email: str) -> Optional[str]:
        """Return the identity id registered for ``email``, if any."""

    @abstractmethod
    def verify_credentials(self, email: str, password: str) -> Optional[str]:
        """Return the identity id when the password matches, else None."""

    @abstractmethod
    def update_password(self, email: str, password: str) -> None:
        """Replace the password of an existing identity."""

    @abstractmethod
    def delete_user(self, identity_id: str) -> None:
        """Delete an identity; unknown ids are ignored."""


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password.

    Returns:
        Hashed password (bcrypt hash string).
    """
    # Truncate password if it exceeds bcrypt's 72-byte limit
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        logger.warning("Password exceeds 72 bytes, truncating")
        password_bytes = password_bytes[:72]

    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def check_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify.
        hashed_password: Bcrypt hash string to verify against.

    Returns:
        True if password matches, False otherwise.
    """
    password_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.error("Password verification error: %s", e)
        return False


def build_recovery_link(token: str) -> str:
    return f"{APP_BASE_URL.rstrip('/')}/auth/reset-password?token={token}"


class LocalIdentityProvider(IdentityProvider):
    """Identity provider backed by the application's own database."""

    def __init__(self, db: Session):
        """Initialize LocalIdentityProvider.

        Args:
            db: SQLAlchemy Session with privileged credentials.
        """
        self.db = db

    def _get_model(self, email: str) -> Optional[AuthIdentityModel]:
        return (
            self.db.query(AuthIdentityModel)
            .filter(AuthIdentityModel.email == email.strip().lower())
            .first()
        )

    def _insert(
        self,
        email: str,
        password: str,
        email_confirmed: bool,
        user_metadata: Optional[Dict[str, Any]],
    ) -> str:
        email = email.strip().lower()
        model = AuthIdentityModel(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=hash_password(password),
            email_confirmed=email_confirmed,
            user_metadata=dict(user_metadata or {}),
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        try:
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("A user with this email address has already been registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to create identity")
            raise UpstreamError("Identity provider failure") from e
        logger.info("Created identity %s (confirmed=%s)", model.id, email_confirmed)
        return model.id

    def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        return self._insert(email, password, email_confirm, user_metadata)

    def sign_up(
        self,
        email: str,
        password: str,
        user_metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        return self._insert(email, password, False, user_metadata)

    def get_identity_id(self, email: str) -> Optional[str]:
        model = self._get_model(email)
        return model.id if model else None

    def verify_credentials(self, email: str, password: str) -> Optional[str]:
        model = self._get_model(email)
        if model is None:
            return None
        if not check_password(password, model.password_hash):
            return None
        return model.id

    def generate_recovery_link(
        self, email: str, user_id: Optional[str] = None
    ) -> PasswordResetModel:
        """Create a recovery token for ``email``.

        Args:
            email: Email of an existing identity.
            user_id: Optional users-table id to link the request to.

        Returns:
            The stored PasswordResetModel. The link itself is built with
            ``build_recovery_link(model.reset_token)``.

        Raises:
            NotFoundError: If no identity exists for the email.
        """
        if self._get_model(email) is None:
            raise NotFoundError("User not found")

        now = datetime.now(pytz.utc)
        model = PasswordResetModel(
            id=str(uuid.uuid4()),
            user_id=user_id,
            email=email.strip().lower(),
            reset_token=secrets.token_urlsafe(24),
            expires_at=(now + timedelta(hours=PASSWORD_RESET_EXPIRE_HOURS)).isoformat(),
            created_at=now.isoformat(),
        )
        try:
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to store recovery token")
            raise UpstreamError("Identity provider failure") from e
        logger.info("Generated recovery link for reset request %s", model.id)
        return model

    def update_password(self, email: str, password: str) -> None:
        model = self._get_model(email)
        if model is None:
            raise NotFoundError("User not found")
        model.password_hash = hash_password(password)
        self.db.commit()
        logger.info("Updated password for identity %s", model.id)

    def delete_user(self, identity_id: str) -> None:
        deleted = (
            self.db.query(AuthIdentityModel)
            .filter(AuthIdentityModel.id == identity_id)
            .delete()
        )
        self.db.commit()
        if deleted:
            logger.info("Deleted identity %s", identity_id)
