from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.resolver import ScopeResolver
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .branches.mysql_branch_repository import MySQLBranchRepository
from .branches.repository import BranchRepository
from .branches.service import BranchService
from .cadres.service import CadreService
from .classes.mysql_cadre_repository import MySQLCadreRepository
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.mysql_enrollment_repository import MySQLEnrollmentRepository
from .classes.repository import CadreRepository, ClassRepository, EnrollmentRepository
from .classes.service import ClassService
from .core.constants import DEFAULT_INVITATION_DAYS
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .invitations.mysql_invitation_repository import MySQLInvitationRepository
from .invitations.repository import InvitationRepository
from .invitations.service import InvitationService
from .reports.service import ReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .users.assignment import RoleAssignmentPolicy
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    branches_repo: BranchRepository
    classes_repo: ClassRepository
    enrollments_repo: EnrollmentRepository
    cadres_repo: CadreRepository
    attendance_repo: AttendanceRepository
    users_repo: UserRepository
    invitations_repo: InvitationRepository

    scope_resolver: ScopeResolver
    student_service: StudentService
    branch_service: BranchService
    attendance_service: AttendanceService
    class_service: ClassService
    cadre_service: CadreService
    report_service: ReportService
    auth_service: AuthService
    user_service: UserService
    invitation_service: InvitationService
    dashboard_service: DashboardService


def wire(
    *,
    conn: Optional[DatabaseConnection] = None,
    students_repo: StudentRepository,
    branches_repo: BranchRepository,
    classes_repo: ClassRepository,
    enrollments_repo: EnrollmentRepository,
    cadres_repo: CadreRepository,
    attendance_repo: AttendanceRepository,
    users_repo: UserRepository,
    invitations_repo: InvitationRepository,
    invitation_days: int = DEFAULT_INVITATION_DAYS,
) -> Container:
    """Build every service on top of the given repositories."""

    scope_resolver = ScopeResolver(branches_repo, classes_repo, enrollments_repo, cadres_repo)
    policy = RoleAssignmentPolicy(branches_repo, classes_repo)

    student_service = StudentService(students_repo)
    branch_service = BranchService(branches_repo, students_repo, classes_repo, enrollments_repo)
    attendance_service = AttendanceService(attendance_repo, classes_repo, enrollments_repo, students_repo)
    class_service = ClassService(
        classes_repo, enrollments_repo, cadres_repo, students_repo, branches_repo, attendance_service
    )
    cadre_service = CadreService(cadres_repo, classes_repo, students_repo, branches_repo)
    report_service = ReportService(attendance_repo, classes_repo, scope_resolver)
    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo, students_repo, policy)
    invitation_service = InvitationService(
        invitations_repo, users_repo, user_service, policy, expiry_days=invitation_days
    )
    dashboard_service = DashboardService(
        students_repo,
        classes_repo,
        enrollments_repo,
        cadres_repo,
        branches_repo,
        scope_resolver,
        attendance_service,
    )

    return Container(
        conn=conn,
        students_repo=students_repo,
        branches_repo=branches_repo,
        classes_repo=classes_repo,
        enrollments_repo=enrollments_repo,
        cadres_repo=cadres_repo,
        attendance_repo=attendance_repo,
        users_repo=users_repo,
        invitations_repo=invitations_repo,
        scope_resolver=scope_resolver,
        student_service=student_service,
        branch_service=branch_service,
        attendance_service=attendance_service,
        class_service=class_service,
        cadre_service=cadre_service,
        report_service=report_service,
        auth_service=auth_service,
        user_service=user_service,
        invitation_service=invitation_service,
        dashboard_service=dashboard_service,
    )


def build_container(*, db_config: dict, invitation_days: int = DEFAULT_INVITATION_DAYS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        conn=conn,
        students_repo=MySQLStudentRepository(conn),
        branches_repo=MySQLBranchRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        cadres_repo=MySQLCadreRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        users_repo=MySQLUserRepository(conn),
        invitations_repo=MySQLInvitationRepository(conn),
        invitation_days=invitation_days,
    )
