"""
Unit tests for invitation_manager
"""
import re
from datetime import datetime, timedelta

import pytest
import pytz

from core.exceptions import (
    AlreadyConsumed,
    CodeGenerationExhausted,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from utils import invitation_manager as invitation_module
from utils.invitation_manager import generate_invite_code, is_active, is_expired


def _code_sequence(monkeypatch, codes):
    """Make generate_invite_code return the given codes in order"""
    iterator = iter(codes)
    monkeypatch.setattr(invitation_module, "generate_invite_code", lambda: next(iterator))


class TestGenerateInviteCode:
    def test_six_digits_in_range(self):
        for _ in range(200):
            code = generate_invite_code()
            assert re.fullmatch(r"[0-9]{6}", code)
            assert 100000 <= int(code) <= 999999


class TestCreateInvitation:
    def test_create_invitation_normalizes_fields(self, invitation_manager):
        """Email is lower-cased and trimmed, flags start false"""
        model = invitation_manager.create_invitation(
            "  Jane.Doe@Example.COM ", " Jane Doe ", " S-100 "
        )
        assert model.email == "jane.doe@example.com"
        assert model.full_name == "Jane Doe"
        assert model.student_id == "S-100"
        assert model.is_registered is False
        assert model.is_password_reset is False
        assert re.fullmatch(r"[0-9]{6}", model.invite_code)
        assert model.expires_at is not None

    def test_codes_unique_across_invitations(self, invitation_manager):
        codes = {
            invitation_manager.create_invitation(
                f"student{i}@example.com", f"Student {i}", f"S-{i}"
            ).invite_code
            for i in range(20)
        }
        assert len(codes) == 20

    def test_duplicate_active_email_conflicts(self, invitation_manager):
        invitation_manager.create_invitation("dup@example.com", "First", "S-1")
        with pytest.raises(ConflictError, match="pending invitation"):
            invitation_manager.create_invitation("DUP@example.com", "Second", "S-2")

    def test_registered_user_email_conflicts(self, invitation_manager, registered_student):
        with pytest.raises(ConflictError, match="user with this email"):
            invitation_manager.create_invitation("student@example.com", "Again", "S-9")

    def test_duplicate_active_student_id_conflicts(self, invitation_manager):
        invitation_manager.create_invitation("a@example.com", "A", "S-1")
        with pytest.raises(ConflictError, match="student with this ID"):
            invitation_manager.create_invitation("b@example.com", "B", "S-1")

    def test_expired_invitation_does_not_block_email(self, invitation_manager, db_session):
        old = invitation_manager.create_invitation("late@example.com", "Late", "S-1")
        old.expires_at = (datetime.now(pytz.utc) - timedelta(days=1)).isoformat()
        db_session.commit()
        assert not is_active(old)

        fresh = invitation_manager.create_invitation("late@example.com", "Late", "S-2")
        assert fresh.id != old.id

    def test_blank_field_rejected(self, invitation_manager):
        with pytest.raises(ValidationError) as exc_info:
            invitation_manager.create_invitation("x@example.com", "   ", "S-1")
        assert exc_info.value.field == "full_name"

    def test_retries_after_precheck_collision(self, invitation_manager, monkeypatch):
        _code_sequence(monkeypatch, ["111111"])
        invitation_manager.create_invitation("a@example.com", "A", "S-1")

        _code_sequence(monkeypatch, ["111111", "111111", "222222"])
        second = invitation_manager.create_invitation("b@example.com", "B", "S-2")
        assert second.invite_code == "222222"

    def test_unique_index_violation_counts_as_collision(self, invitation_manager, monkeypatch):
        """A code taken between the check and the write is retried"""
        _code_sequence(monkeypatch, ["333333"])
        invitation_manager.create_invitation("a@example.com", "A", "S-1")

        monkeypatch.setattr(invitation_manager, "_code_exists", lambda code: False)
        _code_sequence(monkeypatch, ["333333", "444444"])
        second = invitation_manager.create_invitation("b@example.com", "B", "S-2")
        assert second.invite_code == "444444"

    def test_gives_up_after_max_attempts(self, invitation_manager, monkeypatch):
        _code_sequence(monkeypatch, ["555555"])
        invitation_manager.create_invitation("a@example.com", "A", "S-1")

        calls = []

        def always_taken():
            calls.append(1)
            return "555555"

        monkeypatch.setattr(invitation_module, "generate_invite_code", always_taken)
        with pytest.raises(CodeGenerationExhausted):
            invitation_manager.create_invitation("b@example.com", "B", "S-2")
        assert len(calls) == 10


class TestInvitationLifecycle:
    def test_regenerate_invite_code(self, invitation_manager, monkeypatch):
        _code_sequence(monkeypatch, ["123456"])
        model = invitation_manager.create_invitation("a@example.com", "A", "S-1")

        _code_sequence(monkeypatch, ["123456", "654321"])
        updated = invitation_manager.regenerate_invite_code(model.id)
        assert updated.id == model.id
        assert updated.invite_code == "654321"
        assert updated.updated_at is not None
        assert invitation_manager.get_invitation_by_code("123456") is None

    def test_regenerate_unknown_invitation(self, invitation_manager):
        with pytest.raises(NotFoundError):
            invitation_manager.regenerate_invite_code("missing")

    def test_delete_is_unconditional(self, invitation_manager):
        model = invitation_manager.create_invitation("a@example.com", "A", "S-1")
        invitation_manager.delete_invitation(model.id)
        invitation_manager.delete_invitation(model.id)
        assert invitation_manager.list_invitations() == []

    def test_mark_registered_is_idempotent(self, invitation_manager):
        model = invitation_manager.create_invitation("a@example.com", "A", "S-1")
        invitation_manager.mark_registered(model.id)
        again = invitation_manager.mark_registered(model.id)
        assert again.is_registered is True

    def test_list_excludes_password_reset_records(self, invitation_manager, db_session):
        keep = invitation_manager.create_invitation("a@example.com", "A", "S-1")
        reset = invitation_manager.create_invitation("b@example.com", "B", "S-2")
        reset.is_password_reset = True
        db_session.commit()

        listed = invitation_manager.list_invitations()
        assert [m.id for m in listed] == [keep.id]

    def test_cleanup_removes_consumed_and_expired(self, invitation_manager, db_session):
        consumed = invitation_manager.create_invitation("a@example.com", "A", "S-1")
        expired = invitation_manager.create_invitation("b@example.com", "B", "S-2")
        pending = invitation_manager.create_invitation("c@example.com", "C", "S-3")
        invitation_manager.mark_registered(consumed.id)
        expired.expires_at = (datetime.now(pytz.utc) - timedelta(minutes=1)).isoformat()
        db_session.commit()

        assert invitation_manager.cleanup_invitations() == 2
        assert [m.id for m in invitation_manager.list_invitations()] == [pending.id]


def _expire(model, db_session):
    model.expires_at = (datetime.now(pytz.utc) - timedelta(days=1)).isoformat()
    db_session.commit()


class TestRegenerateAvailability:
    """Renewing a code re-applies the checks made for a new invitation"""

    def test_expired_invitation_is_renewed(self, invitation_manager, db_session):
        model = invitation_manager.create_invitation("a@example.com", "A", "S-1")
        _expire(model, db_session)

        renewed = invitation_manager.regenerate_invite_code(model.id)
        assert not is_expired(renewed)
        assert is_active(renewed)

    def test_consumed_invitation_is_refused(self, invitation_manager):
        model = invitation_manager.create_invitation("a@example.com", "A", "S-1")
        invitation_manager.mark_registered(model.id)
        old_code = model.invite_code

        with pytest.raises(AlreadyConsumed):
            invitation_manager.regenerate_invite_code(model.id)
        assert invitation_manager.get_invitation(model.id).invite_code == old_code

    def test_newer_invitation_for_email_blocks_renewal(self, invitation_manager, db_session):
        old = invitation_manager.create_invitation("x@example.com", "X", "S-1")
        _expire(old, db_session)
        invitation_manager.create_invitation("x@example.com", "X", "S-2")

        with pytest.raises(ConflictError, match="pending invitation"):
            invitation_manager.regenerate_invite_code(old.id)
        assert is_expired(invitation_manager.get_invitation(old.id))

        active = [
            m for m in invitation_manager.list_invitations()
            if m.email == "x@example.com" and is_active(m)
        ]
        assert len(active) == 1

    def test_newer_invitation_for_student_id_blocks_renewal(self, invitation_manager, db_session):
        old = invitation_manager.create_invitation("x@example.com", "X", "S-1")
        _expire(old, db_session)
        invitation_manager.create_invitation("y@example.com", "Y", "S-1")

        with pytest.raises(ConflictError, match="student with this ID"):
            invitation_manager.regenerate_invite_code(old.id)

    def test_registered_user_blocks_renewal(self, invitation_manager, user_manager, db_session):
        old = invitation_manager.create_invitation("x@example.com", "X", "S-1")
        _expire(old, db_session)
        user_manager.create_user(auth_id="identity-1", email="x@example.com", full_name="X")

        with pytest.raises(ConflictError, match="user with this email"):
            invitation_manager.regenerate_invite_code(old.id)

    def test_has_consumed_invitation(self, invitation_manager):
        first = invitation_manager.create_invitation("x@example.com", "X", "S-1")
        assert not invitation_manager.has_consumed_invitation("x@example.com")

        invitation_manager.mark_registered(first.id)
        assert invitation_manager.has_consumed_invitation("X@example.com")
        assert not invitation_manager.has_consumed_invitation(
            "x@example.com", exclude_id=first.id
        )
