"""
Unit tests for registration_flow
"""
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
import pytz

from core.exceptions import (
    AlreadyConsumed,
    AuthenticationError,
    ConflictError,
    EmailMismatch,
    InvalidCode,
    PasswordMismatch,
    PasswordTooShort,
    RegistrationFailed,
    UpstreamError,
    ValidationError,
)
from schemas.registration import InvitationSnapshot, RegistrationStage, RegistrationState
from utils.identity_provider import IdentityProvider
from utils.registration_flow import RegistrationFlow


@pytest.fixture
def invitation(invitation_manager):
    return invitation_manager.create_invitation("new@example.com", "New Student", "S-42")


class TestVerify:
    def test_verify_returns_snapshot(self, registration_flow, invitation):
        state = registration_flow.verify(" NEW@example.com ", invitation.invite_code)
        assert state.stage == RegistrationStage.VERIFIED
        assert state.invitation.id == invitation.id
        assert state.invitation.full_name == "New Student"
        assert state.invitation.student_id == "S-42"
        assert state.user_id is None

    @pytest.mark.parametrize("code", ["12345", "1234567", "abcdef", ""])
    def test_malformed_code_rejected(self, registration_flow, code):
        with pytest.raises(ValidationError):
            registration_flow.verify("new@example.com", code)

    def test_unknown_code(self, registration_flow, invitation):
        other = "100000" if invitation.invite_code != "100000" else "100001"
        with pytest.raises(InvalidCode):
            registration_flow.verify("new@example.com", other)

    def test_email_mismatch(self, registration_flow, invitation):
        with pytest.raises(EmailMismatch):
            registration_flow.verify("someone.else@example.com", invitation.invite_code)

    def test_password_reset_record_is_not_usable(self, registration_flow, invitation, db_session):
        invitation.is_password_reset = True
        db_session.commit()
        with pytest.raises(InvalidCode):
            registration_flow.verify("new@example.com", invitation.invite_code)

    def test_expired_invitation_is_invalid(self, registration_flow, invitation, db_session):
        invitation.expires_at = (datetime.now(pytz.utc) - timedelta(minutes=1)).isoformat()
        db_session.commit()
        with pytest.raises(InvalidCode, match="Invalid or expired invitation code"):
            registration_flow.verify("new@example.com", invitation.invite_code)

    def test_consumed_invitation(self, registration_flow, invitation_manager, invitation):
        invitation_manager.mark_registered(invitation.id)
        with pytest.raises(AlreadyConsumed):
            registration_flow.verify("new@example.com", invitation.invite_code)


class TestRegister:
    def test_register_creates_account_and_consumes_invitation(
        self, registration_flow, invitation_manager, user_manager, invitation
    ):
        state = registration_flow.verify("new@example.com", invitation.invite_code)
        completed = registration_flow.register(state, "secret123", "secret123")

        assert completed.stage == RegistrationStage.COMPLETED
        assert completed.user_id is not None
        assert invitation_manager.get_invitation(invitation.id).is_registered is True

        user = user_manager.get_user_by_id(completed.user_id)
        assert user.email == "new@example.com"
        assert user.role == "student"
        assert user.student_id == "S-42"
        assert user_manager.authenticate("new@example.com", "secret123").id == user.id

    def test_second_register_is_rejected(self, registration_flow, invitation):
        state = registration_flow.verify("new@example.com", invitation.invite_code)
        registration_flow.register(state, "secret123", "secret123")
        with pytest.raises(AlreadyConsumed):
            registration_flow.register(state, "secret123", "secret123")

    def test_unverified_state_rejected(self, registration_flow):
        with pytest.raises(ValidationError):
            registration_flow.register(RegistrationState(), "secret123", "secret123")

    def test_tampered_snapshot_rejected(self, registration_flow, invitation):
        state = registration_flow.verify("new@example.com", invitation.invite_code)
        forged = state.model_copy(
            update={
                "invitation": state.invitation.model_copy(update={"email": "evil@example.com"})
            }
        )
        with pytest.raises(InvalidCode):
            registration_flow.register(forged, "secret123", "secret123")

    @pytest.mark.parametrize(
        "password,confirm,error",
        [
            ("abc", "abc", PasswordTooShort),
            ("secret123", "secret124", PasswordMismatch),
            ("abc", "abd", PasswordMismatch),
        ],
    )
    def test_password_checked_before_provider(
        self, invitation_manager, user_manager, invitation, password, confirm, error
    ):
        provider = MagicMock(spec=IdentityProvider)
        flow = RegistrationFlow(invitation_manager, user_manager, provider)
        state = flow.verify("new@example.com", invitation.invite_code)

        with pytest.raises(error):
            flow.register(state, password, confirm)
        assert provider.method_calls == []
        assert invitation_manager.get_invitation(invitation.id).is_registered is False

    def test_provider_failure_leaves_invitation_unconsumed(
        self, invitation_manager, user_manager, invitation
    ):
        provider = MagicMock(spec=IdentityProvider)
        provider.get_identity_id.return_value = None
        provider.create_user.side_effect = UpstreamError("provider down")
        flow = RegistrationFlow(invitation_manager, user_manager, provider)
        state = flow.verify("new@example.com", invitation.invite_code)

        with pytest.raises(RegistrationFailed) as exc_info:
            flow.register(state, "secret123", "secret123")
        assert exc_info.value.reason == "could not create login account"
        assert invitation_manager.get_invitation(invitation.id).is_registered is False


class TestResume:
    """A registration interrupted after a write can be retried"""

    def test_resume_after_identity_created(
        self, registration_flow, identity_provider, user_manager, invitation
    ):
        identity_id = identity_provider.create_user("new@example.com", "first-try")
        state = registration_flow.verify("new@example.com", invitation.invite_code)

        completed = registration_flow.register(state, "second-try", "second-try")
        user = user_manager.get_user_by_id(completed.user_id)
        assert user.auth_id == identity_id
        assert user_manager.authenticate("new@example.com", "second-try").id == user.id

    def test_resume_after_user_created(
        self, registration_flow, identity_provider, user_manager, invitation_manager, invitation
    ):
        identity_id = identity_provider.create_user("new@example.com", "secret123")
        user = user_manager.create_user(
            auth_id=identity_id,
            email="new@example.com",
            full_name="New Student",
            student_id="S-42",
        )
        state = registration_flow.verify("new@example.com", invitation.invite_code)

        completed = registration_flow.register(state, "secret123", "secret123")
        assert completed.user_id == user.id
        assert len(user_manager.list_students()) == 1
        assert invitation_manager.get_invitation(invitation.id).is_registered is True


class TestEmailAlreadyRegistered:
    """A second invitation for an email cannot take over the registered account"""

    def _stale_and_current(self, invitation_manager, db_session):
        stale = invitation_manager.create_invitation("x@example.com", "X", "S-1")
        stale.expires_at = (datetime.now(pytz.utc) - timedelta(days=1)).isoformat()
        db_session.commit()
        current = invitation_manager.create_invitation("x@example.com", "X", "S-2")
        return stale, current

    def _register(self, flow, invitation, password):
        state = flow.verify("x@example.com", invitation.invite_code)
        return flow.register(state, password, password)

    def test_stale_invitation_cannot_be_renewed_after_registration(
        self, registration_flow, invitation_manager, user_manager, db_session
    ):
        stale, current = self._stale_and_current(invitation_manager, db_session)
        self._register(registration_flow, current, "owner-pass")

        with pytest.raises(ConflictError):
            invitation_manager.regenerate_invite_code(stale.id)
        assert user_manager.authenticate("x@example.com", "owner-pass")

    def test_second_invitation_cannot_reset_password(
        self, registration_flow, invitation_manager, user_manager, db_session
    ):
        stale, current = self._stale_and_current(invitation_manager, db_session)
        owner = self._register(registration_flow, current, "owner-pass")

        # Revive the stale record directly in the store
        stale.expires_at = (datetime.now(pytz.utc) + timedelta(days=1)).isoformat()
        db_session.commit()

        with pytest.raises(ConflictError):
            registration_flow.verify("x@example.com", stale.invite_code)

        forged = RegistrationState(
            stage=RegistrationStage.VERIFIED,
            invitation=InvitationSnapshot(
                id=stale.id,
                email=stale.email,
                invite_code=stale.invite_code,
                full_name=stale.full_name,
                student_id=stale.student_id,
            ),
        )
        with pytest.raises(ConflictError):
            registration_flow.register(forged, "takeover", "takeover")

        assert user_manager.authenticate("x@example.com", "owner-pass").id == owner.user_id
        with pytest.raises(AuthenticationError):
            user_manager.authenticate("x@example.com", "takeover")
        assert invitation_manager.get_invitation(stale.id).is_registered is False
