"""
Tests for special access group membership and rights.
"""
import pytest

from help_system.core.exceptions import (
    DuplicateKeyError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from help_system.schemas.common import Role

from conftest import make_user


class TestMembership:
    def test_founding_instructor_holds_both_rights(self, service):
        member = service.groups.add_first_instructor('ira', 'G')

        assert member.admin_rights is True
        assert member.viewing_rights is True
        assert member.role == Role.INSTRUCTOR
        assert service.groups.group_exists('G') is True

    def test_group_cannot_be_founded_twice(self, service):
        service.groups.add_first_instructor('ira', 'G')
        with pytest.raises(DuplicateKeyError):
            service.groups.add_first_instructor('ivy', 'G')

    def test_first_member_of_any_kind_founds_group(self, service):
        member = service.groups.add_student('stu', 'G')

        assert member.admin_rights is True
        assert member.viewing_rights is True

    def test_later_members_get_viewing_rights_only(self, service):
        service.groups.add_first_instructor('ira', 'G')

        for add, name in (
            (service.groups.add_admin, 'ada'),
            (service.groups.add_instructor, 'ivy'),
            (service.groups.add_student, 'stu'),
        ):
            member = add(name, 'G')
            assert member.admin_rights is False
            assert member.viewing_rights is True

    def test_membership_is_unique(self, service):
        service.groups.add_first_instructor('ira', 'G')
        service.groups.add_student('stu', 'G')
        with pytest.raises(DuplicateKeyError):
            service.groups.add_instructor('stu', 'G')

    def test_empty_group_name(self, service):
        with pytest.raises(InvalidArgumentError):
            service.groups.add_student('stu', '  ')

    def test_group_name_is_not_trimmed(self, service):
        with pytest.raises(InvalidArgumentError):
            service.groups.add_first_instructor('ira', ' G')
        with pytest.raises(InvalidArgumentError):
            service.groups.add_student('stu', 'G ')
        assert service.groups.group_exists('G') is False
        assert service.groups.group_exists(' G') is False

    def test_group_exists_iff_it_has_members(self, service):
        assert service.groups.group_exists('G') is False
        service.groups.add_first_instructor('ira', 'G')
        service.groups.remove_user('ira')
        assert service.groups.group_exists('G') is False


class TestRights:
    def test_grant_rights(self, service):
        service.groups.add_first_instructor('ira', 'G')
        service.groups.add_student('stu', 'G')

        assert service.groups.has_admin_rights('stu', 'G') is False
        service.groups.grant_admin_rights('stu', 'G')
        assert service.groups.has_admin_rights('stu', 'G') is True
        assert service.groups.has_viewing_rights('stu', 'G') is True

    def test_grant_to_non_member(self, service):
        service.groups.add_first_instructor('ira', 'G')
        with pytest.raises(NotFoundError):
            service.groups.grant_viewing_rights('stu', 'G')

    def test_rights_do_not_leak_between_groups(self, service):
        service.groups.add_first_instructor('ira', 'G')

        assert service.groups.has_viewing_rights('ira', 'H') is False
        assert service.groups.has_admin_rights('ira', None) is False

    def test_list_by_role_and_capability(self, service):
        service.groups.add_first_instructor('ira', 'G')
        service.groups.add_instructor('ivy', 'G')
        service.groups.add_first_instructor('ivy', 'H')

        admins = service.groups.list_by_role_and_capability('instructor', 'admin')
        viewers = service.groups.list_by_role_and_capability('instructor', 'viewing', 'G')

        assert [(m.username, m.group_name) for m in admins] == [('ira', 'G'), ('ivy', 'H')]
        assert [m.username for m in viewers] == ['ira', 'ivy']


class TestLookups:
    def test_user_groups(self, service):
        service.groups.add_first_instructor('ira', 'G')
        service.groups.add_first_instructor('ira', 'H')

        assert service.groups.get_user_group('ira') == 'G'
        assert service.groups.groups_for('ira') == ['G', 'H']
        assert service.groups.get_user_group('stu') is None
        assert service.groups.is_member('ira', 'H') is True
        assert service.groups.is_member('stu', 'H') is False
        assert service.groups.list_groups() == ['G', 'H']

    def test_list_members(self, service):
        service.groups.add_first_instructor('ira', 'G')
        service.groups.add_student('stu', 'G')

        assert [m.username for m in service.groups.list_members('G')] == ['ira', 'stu']


class TestServicePolicy:
    def test_create_group_and_add_member(self, service, instructor, student):
        service.create_group(instructor, 'G')
        member = service.add_group_member(instructor, 'G', 'stu', 'student')

        assert member.viewing_rights is True
        assert service.my_groups(student) == ['G']

    def test_students_cannot_create_groups(self, service, student):
        with pytest.raises(PermissionDeniedError):
            service.create_group(student, 'G')

    def test_member_without_admin_rights_cannot_add(self, service, admin, instructor, student):
        make_user(service, admin, 'ivy', Role.INSTRUCTOR)
        service.create_group(instructor, 'G')
        service.add_group_member(instructor, 'G', 'stu', 'student')

        with pytest.raises(PermissionDeniedError):
            service.add_group_member(student, 'G', 'ivy', 'instructor')

    def test_system_admin_manages_any_group(self, service, admin, instructor, student):
        service.create_group(instructor, 'G')

        service.add_group_member(admin, 'G', 'stu', 'student')
        member = service.grant_group_rights(admin, 'G', 'stu', 'admin')

        assert member.admin_rights is True

    def test_unknown_user_cannot_be_added(self, service, instructor):
        service.create_group(instructor, 'G')
        with pytest.raises(NotFoundError):
            service.add_group_member(instructor, 'G', 'ghost', 'student')

    def test_member_listing_needs_viewing_rights(self, service, instructor, student):
        service.create_group(instructor, 'G')
        with pytest.raises(PermissionDeniedError):
            service.list_group_members(student, 'G')
