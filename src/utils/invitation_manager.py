"""Student invitation management utilities.

This module provides invitation creation with unique six-digit invite codes,
code regeneration, consumption and cleanup.
"""

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import (
    INVITATION_EXPIRE_DAYS,
    INVITE_CODE_MAX,
    INVITE_CODE_MAX_ATTEMPTS,
    INVITE_CODE_MIN,
)
from core.exceptions import (
    AlreadyConsumed,
    CodeGenerationExhausted,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from models.student_invitation import StudentInvitationModel
from models.user import UserModel

logger = logging.getLogger(__name__)


def generate_invite_code() -> str:
    """Return a uniformly random code in [100000, 999999]."""
    return str(INVITE_CODE_MIN + secrets.randbelow(INVITE_CODE_MAX - INVITE_CODE_MIN + 1))


def is_expired(model: StudentInvitationModel) -> bool:
    if not model.expires_at:
        return False
    expires_at = datetime.fromisoformat(model.expires_at.replace("Z", "+00:00"))
    return datetime.now(pytz.utc) > expires_at


def is_active(model: StudentInvitationModel) -> bool:
    """Unregistered, not a password reset record, and not expired."""
    return (
        not model.is_registered
        and not model.is_password_reset
        and not is_expired(model)
    )


def _require(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError("This field is required", field=field)
    return value


class InvitationManager:
    """Manages student invitations using SQLAlchemy."""

    def __init__(self, db: Session, max_attempts: int = INVITE_CODE_MAX_ATTEMPTS):
        """Initialize InvitationManager.

        Args:
            db: SQLAlchemy Session.
            max_attempts: Bound on invite code generation attempts.
        """
        self.db = db
        self.max_attempts = max_attempts

    def _code_exists(self, code: str) -> bool:
        return (
            self.db.query(StudentInvitationModel.id)
            .filter(StudentInvitationModel.invite_code == code)
            .first()
            is not None
        )

    def _store_with_unique_code(
        self, apply_code: Callable[[str], StudentInvitationModel]
    ) -> StudentInvitationModel:
        """Pick a free code, write it and commit, retrying on collisions.

        A collision is either a pre-check hit or a unique-index violation on
        ``invite_code`` at commit time (another writer took the code first).

        Args:
            apply_code: Callback that stages the given code on a model in the
                session and returns that model.

        Returns:
            The committed model.

        Raises:
            CodeGenerationExhausted: If every attempt collided.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = generate_invite_code()
            if self._code_exists(code):
                logger.debug("Invite code collision on attempt %d", attempt)
                continue

            model = apply_code(code)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                if "invite_code" in str(e.orig).lower():
                    logger.debug("Invite code taken concurrently on attempt %d", attempt)
                    continue
                logger.exception("Integrity error while storing invitation")
                raise UpstreamError("Failed to store invitation") from e
            self.db.refresh(model)
            return model

        logger.error("Invite code generation exhausted after %d attempts", self.max_attempts)
        raise CodeGenerationExhausted(self.max_attempts)

    def _check_available(
        self, email: str, student_id: str, exclude_id: Optional[str] = None
    ) -> None:
        """Refuse an email or student id that is already taken.

        Args:
            email: Normalized email.
            student_id: Student identifier.
            exclude_id: Invitation to ignore, when renewing it.

        Raises:
            ConflictError: If the email has another active invitation, belongs
                to a registered user, or the student id has another active
                invitation.
        """
        pending = (
            self.db.query(StudentInvitationModel)
            .filter(
                StudentInvitationModel.email == email,
                StudentInvitationModel.id != exclude_id,
            )
            .all()
        )
        if any(is_active(m) for m in pending):
            raise ConflictError("A pending invitation for this email already exists")

        existing_user = self.db.query(UserModel.id).filter(UserModel.email == email).first()
        if existing_user:
            raise ConflictError("A user with this email already exists")

        same_student_id = (
            self.db.query(StudentInvitationModel)
            .filter(
                StudentInvitationModel.student_id == student_id,
                StudentInvitationModel.id != exclude_id,
            )
            .all()
        )
        if any(is_active(m) for m in same_student_id):
            raise ConflictError("A student with this ID already exists")

    def has_consumed_invitation(self, email: str, exclude_id: Optional[str] = None) -> bool:
        """Whether another invitation for ``email`` was already used to register."""
        return (
            self.db.query(StudentInvitationModel.id)
            .filter(
                StudentInvitationModel.email == email.strip().lower(),
                StudentInvitationModel.is_registered.is_(True),
                StudentInvitationModel.id != exclude_id,
            )
            .first()
            is not None
        )

    def create_invitation(
        self, email: str, full_name: str, student_id: str
    ) -> StudentInvitationModel:
        """Create an invitation for a student.

        Args:
            email: Student email; stored trimmed and lower-cased.
            full_name: Student full name.
            student_id: Institution student identifier.

        Returns:
            Created StudentInvitationModel, including its invite code.

        Raises:
            ValidationError: If a field is blank.
            ConflictError: If the email has an active invitation, belongs to a
                registered user, or the student id has an active invitation.
            CodeGenerationExhausted: If no unique code could be generated.
        """
        email = _require(email, "email").lower()
        full_name = _require(full_name, "full_name")
        student_id = _require(student_id, "student_id")
        self._check_available(email, student_id)

        def stage(code: str) -> StudentInvitationModel:
            now = datetime.now(pytz.utc)
            model = StudentInvitationModel(
                id=str(uuid.uuid4()),
                email=email,
                invite_code=code,
                student_id=student_id,
                full_name=full_name,
                is_registered=False,
                is_password_reset=False,
                expires_at=(now + timedelta(days=INVITATION_EXPIRE_DAYS)).isoformat(),
                created_at=now.isoformat(),
            )
            self.db.add(model)
            return model

        model = self._store_with_unique_code(stage)
        logger.info("Created invitation %s for student id %s", model.id, student_id)
        return model

    def get_invitation(self, invitation_id: str) -> StudentInvitationModel:
        model = (
            self.db.query(StudentInvitationModel)
            .filter(StudentInvitationModel.id == invitation_id)
            .first()
        )
        if not model:
            raise NotFoundError("Invitation not found")
        return model

    def get_invitation_by_code(self, code: str) -> Optional[StudentInvitationModel]:
        return (
            self.db.query(StudentInvitationModel)
            .filter(StudentInvitationModel.invite_code == code.strip())
            .first()
        )

    def list_invitations(self) -> List[StudentInvitationModel]:
        """List registration invitations, newest first."""
        return (
            self.db.query(StudentInvitationModel)
            .filter(StudentInvitationModel.is_password_reset.is_(False))
            .order_by(StudentInvitationModel.created_at.desc())
            .all()
        )

    def regenerate_invite_code(self, invitation_id: str) -> StudentInvitationModel:
        """Replace an invitation's code with a freshly generated one.

        The invitation's expiry is renewed, so the same availability checks as
        for a new invitation apply.

        Raises:
            NotFoundError: If the invitation does not exist.
            AlreadyConsumed: If the invitation was already used to register.
            ConflictError: If the email or student id has been taken since.
            CodeGenerationExhausted: If no unique code could be generated.
        """
        current = self.get_invitation(invitation_id)
        if current.is_registered:
            raise AlreadyConsumed()
        self._check_available(current.email, current.student_id, exclude_id=current.id)

        def stage(code: str) -> StudentInvitationModel:
            # Re-read after a possible rollback
            model = self.get_invitation(invitation_id)
            now = datetime.now(pytz.utc)
            model.invite_code = code
            model.updated_at = now.isoformat()
            model.expires_at = (now + timedelta(days=INVITATION_EXPIRE_DAYS)).isoformat()
            return model

        model = self._store_with_unique_code(stage)
        logger.info("Regenerated invite code for invitation %s", invitation_id)
        return model

    def delete_invitation(self, invitation_id: str) -> None:
        self.db.query(StudentInvitationModel).filter(
            StudentInvitationModel.id == invitation_id
        ).delete()
        self.db.commit()
        logger.info("Deleted invitation: %s", invitation_id)

    def mark_registered(self, invitation_id: str) -> StudentInvitationModel:
        model = self.get_invitation(invitation_id)
        if not model.is_registered:
            model.is_registered = True
            model.updated_at = datetime.now(pytz.utc).isoformat()
            self.db.commit()
            self.db.refresh(model)
            logger.info("Invitation %s marked as registered", invitation_id)
        return model

    def cleanup_invitations(self) -> int:
        """Delete consumed and expired invitations.

        Returns:
            Number of invitations deleted.
        """
        stale = [
            m
            for m in self.db.query(StudentInvitationModel).all()
            if m.is_registered or is_expired(m)
        ]
        for model in stale:
            self.db.delete(model)
        self.db.commit()
        logger.info("Cleaned up %d invitations", len(stale))
        return len(stale)
