"""User management utilities.

This module provides student account storage, login, deletion and password
recovery requests. Passwords themselves live with the identity provider.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import (
    ADMIN_EMAIL,
    ADMIN_FULL_NAME,
    ADMIN_PASSWORD,
    ADMIN_USER_ID,
    MIN_PASSWORD_LENGTH,
)
from core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PasswordMismatch,
    PasswordTooShort,
    ValidationError,
)
from models.password_reset import PasswordResetModel
from models.student_invitation import StudentInvitationModel
from models.user import UserModel
from schemas.user import User
from utils.identity_provider import IdentityProvider

logger = logging.getLogger(__name__)


def check_new_password(password: str, confirm_password: str) -> None:
    """Validate a new password and its confirmation.

    Raises:
        PasswordMismatch: If the two values differ.
        PasswordTooShort: If the password is shorter than the minimum.
    """
    if password != confirm_password:
        raise PasswordMismatch()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordTooShort(MIN_PASSWORD_LENGTH)


def admin_user() -> User:
    """The configured administrator, who has no users-table row."""
    return User(
        id=ADMIN_USER_ID,
        email=ADMIN_EMAIL,
        full_name=ADMIN_FULL_NAME,
        role="admin",
    )


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session, identity_provider: IdentityProvider):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            identity_provider: Provider holding login identities.
        """
        self.db = db
        self.identity_provider = identity_provider

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )

    def get_user_by_id(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.id == user_id).first()

    def create_user(
        self,
        auth_id: str,
        email: str,
        full_name: str,
        student_id: Optional[str] = None,
        role: str = "student",
    ) -> UserModel:
        """Create a user row bound to an identity.

        Args:
            auth_id: Identity provider id.
            email: Email address; stored lower-cased.
            full_name: Display name.
            student_id: Institution student identifier.
            role: 'student' or 'admin'. Cannot be changed later.

        Returns:
            Created UserModel.

        Raises:
            ConflictError: If the email or identity is already bound.
        """
        if role not in ["admin", "student"]:
            raise ValidationError(f"Invalid role: {role}", field="role")

        model = UserModel(
            id=str(uuid.uuid4()),
            auth_id=auth_id,
            email=email.strip().lower(),
            full_name=full_name.strip(),
            role=role,
            student_id=student_id,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        try:
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("A user with this email already exists") from e

        logger.info("Created user %s with role %s", model.id, role)
        return model

    def list_students(self) -> List[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.role == "student")
            .order_by(UserModel.created_at.desc())
            .all()
        )

    def delete_student(self, user_id: str) -> None:
        """Delete a student, their invitations and their identity.

        Raises:
            NotFoundError: If no student has this id.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.id == user_id, UserModel.role == "student")
            .first()
        )
        if not model:
            raise NotFoundError("Student not found")

        email, auth_id = model.email, model.auth_id
        self.db.query(StudentInvitationModel).filter(
            StudentInvitationModel.email == email
        ).delete()
        self.db.query(PasswordResetModel).filter(
            PasswordResetModel.email == email
        ).delete()
        self.db.delete(model)
        self.db.commit()
        self.identity_provider.delete_user(auth_id)
        logger.info("Deleted student: %s", user_id)

    def authenticate(self, email: str, password: str) -> User:
        """Check login credentials.

        The configured admin pair is accepted without a database lookup.
        Students are looked up by email and role, then the identity provider
        checks the password.

        Raises:
            AuthenticationError: If the credentials are invalid.
        """
        if email == ADMIN_EMAIL and password == ADMIN_PASSWORD:
            return admin_user()

        model = self.get_user_by_email(email)
        if model is None or model.role != "student":
            raise AuthenticationError("Invalid email or password")

        identity_id = self.identity_provider.verify_credentials(model.email, password)
        if identity_id is None or identity_id != model.auth_id:
            raise AuthenticationError("Invalid email or password")
        return User.model_validate(model)

    # --- Password recovery ---

    def request_password_reset(self, email: str) -> PasswordResetModel:
        """Create a password recovery request for a student.

        Earlier unused requests for the same email are discarded.

        Raises:
            NotFoundError: If no student has this email.
        """
        model = self.get_user_by_email(email)
        if model is None or model.role != "student":
            raise NotFoundError("Student not found")

        self.db.query(PasswordResetModel).filter(
            PasswordResetModel.email == model.email,
            PasswordResetModel.used_at.is_(None),
        ).delete()
        self.db.commit()

        reset = self.identity_provider.generate_recovery_link(model.email, user_id=model.id)
        logger.info("Created password reset request %s for user %s", reset.id, model.id)
        return reset

    def complete_password_reset(
        self, token: str, password: str, confirm_password: str
    ) -> None:
        """Set a new password using a recovery token.

        Raises:
            NotFoundError: If the token is unknown, used or expired.
            PasswordMismatch: If the confirmation differs.
            PasswordTooShort: If the password is too short.
        """
        check_new_password(password, confirm_password)

        reset = (
            self.db.query(PasswordResetModel)
            .filter(PasswordResetModel.reset_token == token.strip())
            .first()
        )
        if reset is None or reset.used_at:
            raise NotFoundError("Invalid or expired reset token")
        expires_at = datetime.fromisoformat(reset.expires_at.replace("Z", "+00:00"))
        if datetime.now(pytz.utc) > expires_at:
            raise NotFoundError("Invalid or expired reset token")

        self.identity_provider.update_password(reset.email, password)
        reset.used_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        logger.info("Completed password reset request %s", reset.id)

    def list_password_resets(self) -> List[PasswordResetModel]:
        return (
            self.db.query(PasswordResetModel)
            .order_by(PasswordResetModel.created_at.desc())
            .all()
        )

    def delete_password_reset(self, reset_id: str) -> None:
        self.db.query(PasswordResetModel).filter(
            PasswordResetModel.id == reset_id
        ).delete()
        self.db.commit()
        logger.info("Deleted password reset request: %s", reset_id)
