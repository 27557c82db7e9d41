"""Student self-registration flow.

Registration has two steps. ``verify`` checks an email and invite code and
returns a verified state carrying a snapshot of the invitation. ``register``
takes that state back together with the chosen password and creates the
account. The state is a plain value owned by the caller.

The register step performs three writes without a spanning transaction:
identity creation, user row insertion and invitation consumption. Each write
is skipped when its effect is already present, so retrying a registration
that crashed half way resumes it instead of failing on duplicates.
"""

import logging
import re

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import (
    AlreadyConsumed,
    ConflictError,
    EmailMismatch,
    InvalidCode,
    LearningHubError,
    RegistrationFailed,
    ValidationError,
)
from models.student_invitation import StudentInvitationModel
from schemas.registration import (
    InvitationSnapshot,
    RegistrationStage,
    RegistrationState,
)
from utils.identity_provider import IdentityProvider
from utils.invitation_manager import InvitationManager, is_expired
from utils.user_manager import UserManager, check_new_password

logger = logging.getLogger(__name__)

INVITE_CODE_PATTERN = re.compile(r"^[0-9]{6}$")


class RegistrationFlow:
    """Verify → Register → Completed state machine."""

    def __init__(
        self,
        invitation_manager: InvitationManager,
        user_manager: UserManager,
        identity_provider: IdentityProvider,
    ):
        self.invitation_manager = invitation_manager
        self.user_manager = user_manager
        self.identity_provider = identity_provider

    def _ensure_email_unclaimed(self, invitation: StudentInvitationModel) -> None:
        """Refuse an invitation whose email was registered through another one.

        Raises:
            ConflictError: If another invitation for the email was consumed.
        """
        if self.invitation_manager.has_consumed_invitation(
            invitation.email, exclude_id=invitation.id
        ):
            logger.warning(
                "Invitation %s refused: email already registered", invitation.id
            )
            raise ConflictError("An account with this email is already registered")

    def verify(self, email: str, invite_code: str) -> RegistrationState:
        """Check an email/code pair.

        Args:
            email: Email the student typed.
            invite_code: Six-digit code from the invitation.

        Returns:
            RegistrationState in the verified stage.

        Raises:
            ValidationError: If the code is not six digits.
            InvalidCode: If no usable invitation has this code.
            EmailMismatch: If the invitation belongs to another email.
            AlreadyConsumed: If the invitation was already used.
            ConflictError: If the email was registered through another invitation.
        """
        code = (invite_code or "").strip()
        if not INVITE_CODE_PATTERN.match(code):
            raise ValidationError("Invite code must be 6 digits", field="invite_code")

        invitation = self.invitation_manager.get_invitation_by_code(code)
        if invitation is None or invitation.is_password_reset:
            raise InvalidCode()
        if invitation.email.lower() != (email or "").strip().lower():
            raise EmailMismatch()
        if invitation.is_registered:
            raise AlreadyConsumed()
        if is_expired(invitation):
            raise InvalidCode()
        self._ensure_email_unclaimed(invitation)

        logger.info("Verified invitation %s", invitation.id)
        return RegistrationState(
            stage=RegistrationStage.VERIFIED,
            invitation=InvitationSnapshot(
                id=invitation.id,
                email=invitation.email,
                invite_code=invitation.invite_code,
                full_name=invitation.full_name,
                student_id=invitation.student_id,
            ),
        )

    def register(
        self, state: RegistrationState, password: str, confirm_password: str
    ) -> RegistrationState:
        """Create the student account for a verified invitation.

        Args:
            state: State returned by ``verify``.
            password: New password.
            confirm_password: Confirmation; must equal ``password``.

        Returns:
            RegistrationState in the completed stage with ``user_id`` set.

        Raises:
            ValidationError: If the state is not verified.
            PasswordMismatch: If the confirmation differs.
            PasswordTooShort: If the password is too short.
            InvalidCode: If the invitation no longer matches the snapshot.
            AlreadyConsumed: If the invitation was used meanwhile.
            ConflictError: If the email was registered through another invitation.
            RegistrationFailed: If a write step fails.
        """
        if state.stage != RegistrationStage.VERIFIED or state.invitation is None:
            raise ValidationError("Invitation has not been verified", field="state")
        check_new_password(password, confirm_password)

        snapshot = state.invitation
        # The snapshot comes from the client; re-check it against the store
        invitation = self.invitation_manager.get_invitation_by_code(snapshot.invite_code)
        if (
            invitation is None
            or invitation.id != snapshot.id
            or invitation.email != snapshot.email
            or invitation.is_password_reset
        ):
            raise InvalidCode()
        if invitation.is_registered:
            raise AlreadyConsumed()
        # An existing identity is only reused to resume this same invitation
        self._ensure_email_unclaimed(invitation)

        metadata = {
            "full_name": invitation.full_name,
            "role": "student",
            "student_id": invitation.student_id,
        }

        try:
            auth_id = self.identity_provider.get_identity_id(invitation.email)
            if auth_id is None:
                auth_id = self.identity_provider.create_user(
                    invitation.email,
                    password,
                    email_confirm=True,
                    user_metadata=metadata,
                )
            else:
                # Left over from an interrupted attempt; keep the latest password
                self.identity_provider.update_password(invitation.email, password)
        except (LearningHubError, SQLAlchemyError) as e:
            logger.error("Identity creation failed for invitation %s: %s", invitation.id, e)
            raise RegistrationFailed("could not create login account") from e

        try:
            user = self.user_manager.get_user_by_email(invitation.email)
            if user is None:
                user = self.user_manager.create_user(
                    auth_id=auth_id,
                    email=invitation.email,
                    full_name=invitation.full_name,
                    student_id=invitation.student_id,
                    role="student",
                )
            elif user.auth_id != auth_id:
                raise ConflictError("email is bound to another account")
        except (LearningHubError, SQLAlchemyError) as e:
            logger.error("User creation failed for invitation %s: %s", invitation.id, e)
            raise RegistrationFailed("could not create user profile") from e

        try:
            self.invitation_manager.mark_registered(invitation.id)
        except (LearningHubError, SQLAlchemyError) as e:
            logger.error("Consuming invitation %s failed: %s", invitation.id, e)
            raise RegistrationFailed("could not update invitation status") from e

        logger.info("Registered user %s from invitation %s", user.id, invitation.id)
        return RegistrationState(
            stage=RegistrationStage.COMPLETED,
            invitation=snapshot,
            user_id=user.id,
        )
