"""
Tests for registration, authentication and the one-time password workflow.
"""
from datetime import timedelta

import pytest

from help_system.core.exceptions import (
    AuthFailedError,
    DuplicateKeyError,
    InvalidArgumentError,
    OTPExpiredError,
    OTPInvalidError,
    PermissionDeniedError,
)
from help_system.schemas.common import Role

from conftest import PASSWORD, TODAY, make_user


class TestBootstrap:
    def test_first_user_becomes_admin(self, service):
        user = service.register('root', 'pw')

        assert user.role == Role.ADMIN
        assert service.users.authenticate('root', 'pw', 'admin') is True
        assert service.users.authenticate('root', 'pw', 'student') is False

    def test_second_bootstrap_is_refused(self, service, admin):
        with pytest.raises(PermissionDeniedError):
            service.register_first_admin('other', 'pw')

    def test_registration_needs_invitation_once_users_exist(self, service, admin):
        with pytest.raises(InvalidArgumentError):
            service.register('someone', 'pw')


class TestAuthentication:
    def test_wrong_password_or_role_fails(self, service, admin):
        assert service.users.authenticate('root', 'wrong', 'admin') is False
        assert service.users.authenticate('nobody', PASSWORD, 'admin') is False

    def test_login_raises_auth_failed(self, service, admin):
        with pytest.raises(AuthFailedError) as exc_info:
            service.login('root', 'wrong', 'admin')
        assert exc_info.value.kind == 'auth_failed'

    def test_password_is_not_stored_verbatim(self, service, admin):
        user = service.users.get_user('root')
        assert user.password_hash != PASSWORD
        assert user.password_hash.startswith('$2')

    def test_duplicate_username(self, service, admin):
        with pytest.raises(DuplicateKeyError):
            service.users.register('root', 'pw', Role.STUDENT)

    def test_invalid_role_rejected(self, service):
        with pytest.raises(InvalidArgumentError):
            service.users.register('x', 'pw', 'superuser')


class TestAdministration:
    def test_change_role(self, service, admin, student):
        updated = service.change_role(admin, 'stu', 'instructor')

        assert updated.role == Role.INSTRUCTOR
        assert service.users.role_of_user('stu') == Role.INSTRUCTOR
        assert service.users.authenticate('stu', PASSWORD, 'instructor') is True
        assert service.users.authenticate('stu', PASSWORD, 'student') is False

    def test_only_admin_lists_users(self, service, admin, student):
        assert [u.username for u in service.list_users(admin)] == ['root', 'stu']
        with pytest.raises(PermissionDeniedError):
            service.list_users(student)

    def test_delete_user_removes_memberships(self, service, admin, student):
        service.groups.add_student('stu', 'G')

        assert service.delete_user(admin, 'stu') is True
        assert service.users.user_exists('stu') is False
        assert service.groups.groups_for('stu') == []
        assert service.delete_user(admin, 'stu') is False

    def test_admin_cannot_delete_self(self, service, admin):
        with pytest.raises(InvalidArgumentError):
            service.delete_user(admin, 'root')

    def test_update_profile(self, service, student):
        user = service.update_profile(student, email='stu@example.com', skill_level='advanced')

        assert user.email == 'stu@example.com'
        assert user.skill_level.value == 'advanced'


class TestOneTimePassword:
    def test_reset_flow(self, service, admin):
        make_user(service, admin, 'bob', Role.STUDENT)
        service.issue_otp(admin, 'bob', 'OTP42', TODAY + timedelta(days=1))

        assert service.users.validate_otp('bob', 'OTP42') is True
        service.reset_password('bob', 'OTP42', 'newpw', today=TODAY)

        assert service.users.validate_otp('bob', 'OTP42') is False
        assert service.users.validate_otp('bob', 'newpw') is False
        assert service.users.authenticate('bob', 'newpw', 'student') is True
        assert service.users.get_user('bob').one_time_password is False

    def test_otp_replaces_password_until_used(self, service, admin, student):
        service.issue_otp(admin, 'stu', 'OTP42', TODAY)

        assert service.users.authenticate('stu', PASSWORD, 'student') is False
        assert service.users.get_user('stu').one_time_password is True

    def test_expired_otp(self, service, admin, student):
        service.issue_otp(admin, 'stu', 'OTP42', TODAY - timedelta(days=1))

        with pytest.raises(OTPExpiredError):
            service.reset_password('stu', 'OTP42', 'newpw', today=TODAY)
        assert service.users.validate_otp('stu', 'OTP42') is True

    def test_expiry_day_itself_is_valid(self, service, admin, student):
        service.issue_otp(admin, 'stu', 'OTP42', TODAY)

        service.reset_password('stu', 'OTP42', 'newpw', today=TODAY)
        assert service.users.authenticate('stu', 'newpw', 'student') is True

    def test_wrong_secret(self, service, admin, student):
        service.issue_otp(admin, 'stu', 'OTP42', TODAY)

        with pytest.raises(OTPInvalidError):
            service.reset_password('stu', 'nope', 'newpw', today=TODAY)

    def test_reset_without_otp(self, service, student):
        with pytest.raises(OTPInvalidError):
            service.reset_password('stu', PASSWORD, 'newpw', today=TODAY)

    def test_generated_secret_is_returned(self, service, admin, student):
        secret = service.issue_otp(admin, 'stu')

        assert secret
        assert service.users.validate_otp('stu', secret) is True

    def test_only_admin_issues_otp(self, service, student):
        with pytest.raises(PermissionDeniedError):
            service.issue_otp(student, 'stu', 'OTP42')
