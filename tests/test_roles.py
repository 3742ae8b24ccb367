"""Tests for the role hierarchy."""

import pytest

from personachat.core.roles import ASSIGNABLE_ROLES, Role, can_manage, is_staff


class TestOrdering:
    def test_declared_lowest_to_highest(self):
        assert Role.USER < Role.MODERATOR < Role.ADMIN < Role.SUPER_ADMIN

    def test_sorting_follows_rank(self):
        assert sorted([Role.SUPER_ADMIN, Role.USER, Role.ADMIN]) == [Role.USER, Role.ADMIN, Role.SUPER_ADMIN]

    def test_super_admin_not_assignable(self):
        assert Role.SUPER_ADMIN not in ASSIGNABLE_ROLES

    @pytest.mark.parametrize("role,expected", [
        (Role.USER, False),
        (Role.MODERATOR, True),
        (Role.ADMIN, True),
        (Role.SUPER_ADMIN, True),
    ])
    def test_is_staff(self, role, expected):
        assert is_staff(role) is expected

    def test_accepts_plain_strings(self):
        assert is_staff("ADMIN")


class TestCanManage:
    def test_higher_rank_manages_lower(self):
        assert can_manage(Role.ADMIN, Role.MODERATOR)
        assert can_manage(Role.MODERATOR, Role.USER)

    def test_equal_rank_cannot_manage(self):
        assert not can_manage(Role.ADMIN, Role.ADMIN)
        assert not can_manage(Role.MODERATOR, Role.MODERATOR)

    def test_lower_rank_cannot_manage_higher(self):
        assert not can_manage(Role.MODERATOR, Role.ADMIN)

    def test_cannot_promote_to_own_rank(self):
        """A moderator may not hand out moderator."""
        assert not can_manage(Role.MODERATOR, Role.USER, Role.MODERATOR)
        assert can_manage(Role.ADMIN, Role.USER, Role.MODERATOR)

    def test_super_admin_can_grant_admin(self):
        assert can_manage(Role.SUPER_ADMIN, Role.MODERATOR, Role.ADMIN)
