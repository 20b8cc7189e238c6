"""In-memory repositories implementing the repository protocols."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Sequence

from src.attendance_console.attendance_console.attendance.model import AttendanceRecord
from src.attendance_console.attendance_console.branches.model import Classroom, MainBranch, SubBranch
from src.attendance_console.attendance_console.classes.model import ClassCadre, ClassInfo
from src.attendance_console.attendance_console.container import Container, wire
from src.attendance_console.attendance_console.core.enums import AttendanceStatus, CadreRole, Region, Role, ScopeType
from src.attendance_console.attendance_console.invitations.model import Invitation
from src.attendance_console.attendance_console.students.model import Student
from src.attendance_console.attendance_console.users.model import User

NOW = datetime(2026, 3, 2, 9, 0, 0)


class _Table:
    def __init__(self):
        self.rows: dict[int, Any] = {}
        self._next_id = 1

    def next_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid


class FakeStudentRepo(_Table):
    def add(self, student_code: str, chinese_name: str, english_name: str = "", **fields) -> Student:
        student = Student(
            id=self.next_id(), student_id=student_code, chinese_name=chinese_name, english_name=english_name, **fields
        )
        self.rows[student.id] = student
        return student

    def list_all(self):
        return sorted(self.rows.values(), key=lambda s: s.id, reverse=True)

    def get_by_id(self, student_db_id):
        return self.rows.get(int(student_db_id)) if student_db_id is not None else None

    def get_by_code(self, student_code):
        return next((s for s in self.rows.values() if s.student_id == student_code), None)

    def get_many(self, student_db_ids):
        return [self.rows[i] for i in student_db_ids if i in self.rows]

    def find_identity(self, *, english_name, postcode, year_of_birth):
        for s in self.rows.values():
            if (s.english_name or "").lower() == english_name.lower() and s.postcode == postcode and s.year_of_birth == year_of_birth:
                return s
        return None

    def search(self, query):
        q = query.lower()
        return [
            s
            for s in self.list_all()
            if q in s.student_id.lower() or q in (s.chinese_name or "").lower() or q in (s.english_name or "").lower()
        ]

    def create(self, fields):
        student = Student(id=self.next_id(), **fields)
        self.rows[student.id] = student
        return student.id

    def update(self, student_db_id, changes):
        self.rows[student_db_id] = replace(self.rows[student_db_id], **changes)

    def delete(self, student_db_id):
        return self.rows.pop(int(student_db_id), None) is not None

    def count(self, student_db_ids=None):
        if student_db_ids is None:
            return len(self.rows)
        return len([i for i in student_db_ids if i in self.rows])


class FakeBranchRepo:
    def __init__(self):
        self.main = _Table()
        self.sub = _Table()
        self.rooms = _Table()

    # helpers for tests
    def add_main(self, name: str, region: Optional[Region] = None) -> MainBranch:
        branch = MainBranch(id=self.main.next_id(), name=name, region=region)
        self.main.rows[branch.id] = branch
        return branch

    def add_sub(self, name: str, main_branch_id: Optional[int]) -> SubBranch:
        sub = SubBranch(id=self.sub.next_id(), name=name, main_branch_id=main_branch_id)
        self.sub.rows[sub.id] = sub
        return sub

    def add_classroom(self, name: str, sub_branch_id: int) -> Classroom:
        room = Classroom(id=self.rooms.next_id(), name=name, sub_branch_id=sub_branch_id)
        self.rooms.rows[room.id] = room
        return room

    @staticmethod
    def _main_fields(fields):
        fields = dict(fields)
        if fields.get("region"):
            fields["region"] = Region(fields["region"])
        return fields

    def list_main_branches(self):
        return list(self.main.rows.values())

    def get_main_branch(self, main_branch_id):
        return self.main.rows.get(int(main_branch_id))

    def create_main_branch(self, fields):
        branch = MainBranch(id=self.main.next_id(), **self._main_fields(fields))
        self.main.rows[branch.id] = branch
        return branch.id

    def update_main_branch(self, main_branch_id, changes):
        self.main.rows[main_branch_id] = replace(self.main.rows[main_branch_id], **self._main_fields(changes))

    def delete_main_branch(self, main_branch_id):
        return self.main.rows.pop(int(main_branch_id), None) is not None

    def list_sub_branches(self):
        return list(self.sub.rows.values())

    def get_sub_branch(self, sub_branch_id):
        return self.sub.rows.get(int(sub_branch_id))

    def search_sub_branches(self, query):
        return [s for s in self.sub.rows.values() if query.lower() in s.name.lower()]

    def create_sub_branch(self, fields):
        sub = SubBranch(id=self.sub.next_id(), **fields)
        self.sub.rows[sub.id] = sub
        return sub.id

    def update_sub_branch(self, sub_branch_id, changes):
        self.sub.rows[sub_branch_id] = replace(self.sub.rows[sub_branch_id], **changes)

    def delete_sub_branch(self, sub_branch_id):
        return self.sub.rows.pop(int(sub_branch_id), None) is not None

    def list_classrooms(self):
        return list(self.rooms.rows.values())

    def get_classroom(self, classroom_id):
        return self.rooms.rows.get(int(classroom_id))

    def get_classroom_by_name(self, name):
        return next((c for c in self.rooms.rows.values() if c.name == name), None)

    def search_classrooms(self, query):
        return [c for c in self.rooms.rows.values() if query.lower() in c.name.lower()]

    def create_classroom(self, fields):
        room = Classroom(id=self.rooms.next_id(), **fields)
        self.rooms.rows[room.id] = room
        return room.id

    def update_classroom(self, classroom_id, changes):
        self.rooms.rows[classroom_id] = replace(self.rooms.rows[classroom_id], **changes)

    def delete_classroom(self, classroom_id):
        return self.rooms.rows.pop(int(classroom_id), None) is not None


class FakeClassRepo(_Table):
    def __init__(self, enrollments: "FakeEnrollmentRepo", cadres: "FakeCadreRepo"):
        super().__init__()
        self._enrollments = enrollments
        self._cadres = cadres

    def add(self, name: str, **fields) -> ClassInfo:
        cls = ClassInfo(id=self.next_id(), name=name, **fields)
        self.rows[cls.id] = cls
        return cls

    def list_classes(self, *, include_archived=False):
        items = sorted(self.rows.values(), key=lambda c: c.id, reverse=True)
        return items if include_archived else [c for c in items if not c.is_archived]

    def list_archived(self):
        return [c for c in self.rows.values() if c.is_archived]

    def get_by_id(self, class_id):
        return self.rows.get(int(class_id))

    def get_many(self, class_ids):
        return [self.rows[i] for i in class_ids if i in self.rows]

    def search(self, query):
        return [c for c in self.list_classes(include_archived=True) if query.lower() in c.name.lower()]

    def list_by_sub_branch(self, sub_branch_id):
        return [c for c in self.rows.values() if c.manage_by_sub_branch_id == sub_branch_id]

    def create(self, fields):
        cls = ClassInfo(id=self.next_id(), **fields)
        self.rows[cls.id] = cls
        return cls.id

    def update(self, class_id, changes):
        self.rows[class_id] = replace(self.rows[class_id], **changes)

    def set_archived(self, class_id, *, archived):
        if class_id not in self.rows:
            return False
        self.rows[class_id] = replace(self.rows[class_id], is_archived=archived)
        return True

    def delete(self, class_id):
        self._enrollments.pairs = [p for p in self._enrollments.pairs if p[0] != class_id]
        self._cadres.rows = [c for c in self._cadres.rows if c.class_id != class_id]
        return self.rows.pop(int(class_id), None) is not None


class FakeEnrollmentRepo:
    def __init__(self):
        self.pairs: list[tuple[int, int]] = []

    def student_ids_for_class(self, class_id):
        return [s for c, s in self.pairs if c == class_id]

    def class_ids_for_student(self, student_db_id):
        return [c for c, s in self.pairs if s == student_db_id]

    def counts_by_class(self, class_ids=None):
        out: dict[int, int] = {}
        for c, _ in self.pairs:
            if class_ids is None or c in class_ids:
                out[c] = out.get(c, 0) + 1
        return out

    def distinct_students(self, class_ids):
        return sorted({s for c, s in self.pairs if c in class_ids})

    def is_enrolled(self, class_id, student_db_id):
        return (class_id, student_db_id) in self.pairs

    def add(self, class_id, student_db_id):
        self.pairs.append((class_id, student_db_id))

    def remove(self, class_id, student_db_id):
        if (class_id, student_db_id) not in self.pairs:
            return False
        self.pairs.remove((class_id, student_db_id))
        return True

    def replace(self, class_id, student_db_ids):
        self.pairs = [p for p in self.pairs if p[0] != class_id] + [(class_id, s) for s in student_db_ids]


class FakeCadreRepo:
    def __init__(self):
        self.rows: list[ClassCadre] = []

    def list_for_class(self, class_id):
        return [c for c in self.rows if c.class_id == class_id]

    def list_all(self):
        return list(self.rows)

    def list_for_student(self, student_db_id):
        return [c for c in self.rows if c.student_id == student_db_id]

    def add(self, class_id, student_db_id, role):
        self.rows.append(ClassCadre(class_id=class_id, student_id=student_db_id, role=CadreRole(role)))

    def remove(self, class_id, student_db_id, role):
        target = ClassCadre(class_id=class_id, student_id=student_db_id, role=CadreRole(role))
        if target not in self.rows:
            return False
        self.rows.remove(target)
        return True

    def replace_role(self, class_id, role, student_db_ids):
        self.rows = [c for c in self.rows if not (c.class_id == class_id and c.role == role)]
        self.rows.extend(ClassCadre(class_id=class_id, student_id=s, role=role) for s in student_db_ids)

    def remove_all_for_student(self, student_db_id):
        before = len(self.rows)
        self.rows = [c for c in self.rows if c.student_id != student_db_id]
        return before - len(self.rows)


class FakeAttendanceRepo(_Table):
    def add(self, class_id: int, student_id: int, attendance_date: date, status: AttendanceStatus, **fields):
        record = AttendanceRecord(
            id=self.next_id(),
            class_id=class_id,
            student_id=student_id,
            attendance_date=attendance_date,
            attendance_status=AttendanceStatus(status),
            **fields,
        )
        self.rows[record.id] = record
        return record

    def list_records(self, *, class_ids=None, student_id=None, attendance_date=None, start=None, end=None, limit=None):
        out = [
            r
            for r in self.rows.values()
            if (class_ids is None or r.class_id in class_ids)
            and (student_id is None or r.student_id == student_id)
            and (attendance_date is None or r.attendance_date == attendance_date)
            and (start is None or r.attendance_date >= start)
            and (end is None or r.attendance_date <= end)
        ]
        out.sort(key=lambda r: (r.attendance_date, r.id), reverse=True)
        return out[:limit] if limit else out

    def latest_date(self, *, class_ids=None, student_id=None):
        dates = [r.attendance_date for r in self.list_records(class_ids=class_ids, student_id=student_id)]
        return max(dates) if dates else None

    def get_by_id(self, record_id):
        return self.rows.get(int(record_id))

    def find_one(self, class_id, student_id, attendance_date):
        return next(
            (
                r
                for r in self.rows.values()
                if r.class_id == class_id and r.student_id == student_id and r.attendance_date == attendance_date
            ),
            None,
        )

    def create(self, fields):
        fields = dict(fields)
        fields["attendance_status"] = AttendanceStatus(fields["attendance_status"])
        record = AttendanceRecord(id=self.next_id(), **fields)
        self.rows[record.id] = record
        return record.id

    def update(self, record_id, changes):
        changes = dict(changes)
        if "attendance_status" in changes:
            changes["attendance_status"] = AttendanceStatus(changes["attendance_status"])
        self.rows[record_id] = replace(self.rows[record_id], **changes)

    def delete(self, record_id):
        return self.rows.pop(int(record_id), None) is not None

    def replace_sheet(self, class_id, attendance_date, rows):
        self.rows = {
            k: r for k, r in self.rows.items() if not (r.class_id == class_id and r.attendance_date == attendance_date)
        }
        for row in rows:
            self.create(row)


class FakeUserRepo(_Table):
    def add(self, email: str, role: Role, *, password_hash: str = "x", **fields) -> User:
        user = User(
            user_id=self.next_id(),
            email=email,
            full_name=fields.pop("full_name", email.split("@")[0]),
            password_hash=password_hash,
            role=role,
            **fields,
        )
        self.rows[user.user_id] = user
        return user

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.rows.values() if u.email.lower() == email.lower()), None)

    def list_page(self, *, offset, limit):
        return list(self.rows.values())[offset : offset + limit]

    def count(self):
        return len(self.rows)

    def create_user(self, *, email, full_name, password_hash, role, scope_type, scope_id, student_db_id):
        user = User(
            user_id=self.next_id(),
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            scope_type=scope_type,
            scope_id=scope_id,
            student_db_id=student_db_id,
        )
        self.rows[user.user_id] = user
        return user.user_id

    def update_password(self, user_id, password_hash):
        self.rows[user_id] = replace(self.rows[user_id], password_hash=password_hash)

    def update_role(self, user_id, *, role, scope_type, scope_id, student_db_id):
        self.rows[user_id] = replace(
            self.rows[user_id], role=role, scope_type=scope_type, scope_id=scope_id, student_db_id=student_db_id
        )

    def set_active(self, user_id, *, is_active):
        if user_id not in self.rows:
            return False
        self.rows[user_id] = replace(self.rows[user_id], is_active=is_active)
        return True


class FakeInvitationRepo(_Table):
    def create(self, fields):
        fields = dict(fields)
        fields["role"] = Role(fields["role"])
        fields["scope_type"] = ScopeType(fields["scope_type"]) if fields.get("scope_type") else None
        invitation = Invitation(id=self.next_id(), created_at=NOW, **fields)
        self.rows[invitation.id] = invitation
        return invitation.id

    def get_by_id(self, invitation_id):
        return self.rows.get(int(invitation_id))

    def get_by_token(self, token):
        return next((i for i in self.rows.values() if i.token == token), None)

    def list_by_inviter(self, user_id):
        return [i for i in self.rows.values() if i.invited_by == user_id]

    def mark_accepted(self, token, accepted_at):
        invitation = self.get_by_token(token)
        if not invitation or invitation.accepted_at is not None:
            return False
        self.rows[invitation.id] = replace(invitation, accepted_at=accepted_at)
        return True

    def delete(self, invitation_id):
        return self.rows.pop(int(invitation_id), None) is not None


class World:
    """All fake repositories plus the wired container."""

    def __init__(self):
        self.students = FakeStudentRepo()
        self.branches = FakeBranchRepo()
        self.enrollments = FakeEnrollmentRepo()
        self.cadres = FakeCadreRepo()
        self.classes = FakeClassRepo(self.enrollments, self.cadres)
        self.attendance = FakeAttendanceRepo()
        self.users = FakeUserRepo()
        self.invitations = FakeInvitationRepo()
        self.container: Container = wire(
            students_repo=self.students,
            branches_repo=self.branches,
            classes_repo=self.classes,
            enrollments_repo=self.enrollments,
            cadres_repo=self.cadres,
            attendance_repo=self.attendance,
            users_repo=self.users,
            invitations_repo=self.invitations,
        )
