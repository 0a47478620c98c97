"""
Tests for invitation codes and their redemption.
"""
import pytest

from help_system.core.exceptions import (
    DuplicateKeyError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from help_system.models.invitation_code import InvitationCodeModel
from help_system.schemas.common import Role


def test_redeem_consumes_code(service, admin):
    service.create_invitation(admin, 'student', code='INV1')

    assert service.invitations.exists('INV1') is True
    assert service.invitations.role_of('INV1') == Role.STUDENT

    alice = service.redeem_invitation('INV1', 'alice', 'pw')

    assert alice.role == Role.STUDENT
    assert service.invitations.exists('INV1') is False
    with pytest.raises(NotFoundError):
        service.redeem_invitation('INV1', 'alice2', 'pw')


def test_redeem_with_taken_username_keeps_code(service, admin, student):
    service.create_invitation(admin, 'instructor', code='INV2')

    with pytest.raises(DuplicateKeyError):
        service.redeem_invitation('INV2', 'stu', 'pw')
    assert service.invitations.exists('INV2') is True


def test_generated_codes_are_unique(service, admin):
    first = service.create_invitation(admin, 'student')
    second = service.create_invitation(admin, 'student')

    assert first.code != second.code
    assert first.created_by == 'root'
    assert {i.code for i in service.list_invitations(admin)} == {first.code, second.code}


def test_duplicate_code(service, admin):
    service.create_invitation(admin, 'student', code='INV1')
    with pytest.raises(DuplicateKeyError):
        service.create_invitation(admin, 'instructor', code='INV1')


def test_admin_role_is_not_invitable(service, admin):
    with pytest.raises(InvalidArgumentError):
        service.create_invitation(admin, 'admin')


def test_expired_code_is_absent(service, db, admin):
    service.create_invitation(admin, 'student', code='OLD')
    db.get(InvitationCodeModel, 'OLD').expires_at = '2000-01-01T00:00:00+00:00'
    db.commit()

    assert service.invitations.exists('OLD') is False
    with pytest.raises(NotFoundError):
        service.invitations.role_of('OLD')


def test_revoke_is_idempotent(service, admin):
    service.create_invitation(admin, 'student', code='INV1')

    assert service.revoke_invitation(admin, 'INV1') is True
    assert service.revoke_invitation(admin, 'INV1') is False


def test_only_admin_creates_invitations(service, student):
    with pytest.raises(PermissionDeniedError):
        service.create_invitation(student, 'student')
