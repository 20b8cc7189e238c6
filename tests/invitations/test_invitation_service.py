from __future__ import annotations

from datetime import timedelta

import pytest
from werkzeug.security import check_password_hash

from src.attendance_console.attendance_console.access.model import AccessScope
from src.attendance_console.attendance_console.core.enums import Role, ScopeType
from src.attendance_console.attendance_console.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.attendance_console.attendance_console.invitations.service import InvitationService
from src.attendance_console.attendance_console.users.assignment import RoleAssignmentPolicy

from tests.fakes import NOW


class Clock:
    def __init__(self):
        self.now = NOW

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def service(world, clock):
    return InvitationService(
        world.invitations,
        world.users,
        world.container.user_service,
        RoleAssignmentPolicy(world.branches, world.classes),
        expiry_days=7,
        clock=clock,
    )


def test_create_invitation(world, service, north_admin):
    invitation = service.create(
        north_admin, email=" New.Admin@Example.com ", role="branch_admin", scope_type="sub_branch", scope_id=world.penang.id
    )

    assert invitation.email == "new.admin@example.com"
    assert invitation.role == Role.BRANCH_ADMIN
    assert invitation.scope_type == ScopeType.SUB_BRANCH
    assert invitation.invited_by == north_admin.user_id
    assert len(invitation.token) == 64
    assert invitation.expires_at == NOW + timedelta(days=7)
    assert service.list_by_inviter(north_admin.user_id) == [invitation]


def test_create_checks_email_and_policy(world, service, north_admin):
    world.users.add("taken@example.com", Role.STUDENT)

    with pytest.raises(ValidationError):
        service.create(north_admin, email="not-an-email", role="student")
    with pytest.raises(ConflictError):
        service.create(north_admin, email="TAKEN@example.com", role="student")
    with pytest.raises(AuthorizationError):
        service.create(north_admin, email="x@example.com", role="class_admin", scope_type="class", scope_id=world.class_z.id)
    with pytest.raises(ValidationError):
        service.create(north_admin, email="x@example.com", role="cadre", student_code="S9999")


def test_accept_creates_account_once(world, service, north_admin):
    invitation = service.create(north_admin, email="cadre@example.com", role="cadre", student_code="S0001")

    user = service.accept(invitation.token, full_name="陈小明", password="secret1", confirm_password="secret1")

    assert user.role == Role.CADRE
    assert user.student_db_id == world.s1.id
    assert check_password_hash(user.password_hash, "secret1")
    assert service.is_valid(service.get_by_token(invitation.token)) is False
    with pytest.raises(ValidationError):
        service.accept(invitation.token, full_name="again", password="secret1")


def test_accept_rejects_expired_and_mismatched(world, service, clock, super_admin):
    invitation = service.create(super_admin, email="late@example.com", role="student")

    with pytest.raises(ValidationError, match="confirmation"):
        service.accept(invitation.token, full_name="Late", password="secret1", confirm_password="secret2")

    clock.now = NOW + timedelta(days=8)
    with pytest.raises(ValidationError, match="expired"):
        service.accept(invitation.token, full_name="Late", password="secret1")
    assert world.users.get_by_email("late@example.com") is None


def test_unknown_token(service):
    with pytest.raises(NotFoundError):
        service.get_by_token("nope")


def test_only_inviter_or_super_admin_deletes(world, service, north_admin, super_admin):
    invitation = service.create(north_admin, email="a@example.com", role="student")
    stranger = AccessScope(role=Role.STATE_ADMIN, scope_type=ScopeType.MAIN_BRANCH, scope_id=world.central.id, user_id=9)

    with pytest.raises(AuthorizationError):
        service.delete(stranger, invitation.id)
    service.delete(super_admin, invitation.id)
    with pytest.raises(NotFoundError):
        service.delete(north_admin, invitation.id)
