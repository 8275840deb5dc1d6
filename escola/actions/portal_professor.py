"""Portal do professor.

Toda leitura e escrita parte do professor vinculado ao usuário logado; um
curso, matrícula ou tarefa de outro professor é tratado como inexistente
para quem chama (``Forbidden``).
"""
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from escola.errors import Conflict, Forbidden, NotFound, ValidationFailed
from escola.extensions import db
from escola.fields import Money, OptMoney, OptStr
from escola.models import Assignment, Attendance, Course, Enrollment, Grade, Teacher
from escola.permissions import TEACHER
from escola.pipeline import ById, Empty, Schema, action_client

PORTAL = ("/portal-professor",)

AttendanceStatus = Literal["present", "absent", "late", "excused"]
AssignmentType = Literal["exam", "assignment", "project", "activity"]

COURSE_DENIED = "Curso não encontrado ou você não tem permissão"
ASSIGNMENT_DENIED = "Tarefa não encontrada ou você não tem permissão"


# ------------------------- schemas -------------------------
class CourseIdInput(Schema):
    course_id: str = Field(min_length=1)


class AttendanceDayInput(Schema):
    course_id: str = Field(min_length=1)
    date: date


class CreateAttendanceInput(Schema):
    enrollment_id: str = Field(min_length=1)
    date: date
    status: AttendanceStatus
    notes: OptStr = None


class UpdateAttendanceInput(CreateAttendanceInput):
    id: str = Field(min_length=1)


class CreateGradeInput(Schema):
    enrollment_id: str = Field(min_length=1)
    assignment_id: OptStr = None
    grade: Money = Field(ge=0)
    type: str = Field(min_length=1)
    description: OptStr = None


class UpdateGradeInput(CreateGradeInput):
    id: str = Field(min_length=1)


class CreateAssignmentInput(Schema):
    course_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: OptStr = None
    type: AssignmentType
    due_date: date
    max_grade: OptMoney = Field(default=None, gt=0)


class UpdateAssignmentInput(CreateAssignmentInput):
    id: str = Field(min_length=1)


# ------------------------- posse -------------------------
def current_teacher(caller) -> Teacher:
    teacher = Teacher.query.filter_by(user_id=caller.user_id).first()
    if teacher is None:
        raise NotFound("Professor não encontrado")
    return teacher


def _own_course(teacher, course_id) -> Course:
    course = Course.query.filter_by(id=course_id, teacher_id=teacher.id).first()
    if course is None:
        raise Forbidden(COURSE_DENIED)
    return course


def _own_enrollment(teacher, enrollment_id) -> Enrollment:
    enrollment = (
        Enrollment.query.join(Course, Enrollment.course_id == Course.id)
        .filter(Enrollment.id == enrollment_id, Course.teacher_id == teacher.id)
        .first()
    )
    if enrollment is None:
        raise Forbidden("Matrícula não encontrada ou você não tem permissão")
    return enrollment


def _own_assignment(teacher, assignment_id) -> Assignment:
    assignment = Assignment.query.filter_by(id=assignment_id, teacher_id=teacher.id).first()
    if assignment is None:
        raise Forbidden(ASSIGNMENT_DENIED)
    return assignment


def _check_grade(teacher, enrollment, assignment_id, grade):
    if not assignment_id:
        return
    assignment = _own_assignment(teacher, assignment_id)
    if assignment.course_id != enrollment.course_id:
        raise ValidationFailed({"assignment_id": "Tarefa não pertence ao curso da matrícula"})
    if assignment.max_grade is not None and grade > Decimal(assignment.max_grade):
        raise ValidationFailed({"grade": f"Nota máxima é {assignment.max_grade}"})


# ------------------------- leituras -------------------------
@action_client.action(Empty, roles=(TEACHER,))
def list_my_courses(data, caller):
    teacher = current_teacher(caller)
    courses = (
        Course.query.filter_by(teacher_id=teacher.id, status="active")
        .order_by(Course.name.asc())
        .all()
    )
    out = []
    for c in courses:
        item = c.to_dict()
        item["classroom"] = {"id": c.classroom.id, "name": c.classroom.name} if c.classroom else None
        item["enrollment_count"] = Enrollment.query.filter_by(course_id=c.id, status="active").count()
        out.append(item)
    return {"courses": out}


@action_client.action(CourseIdInput, roles=(TEACHER,))
def list_course_enrollments(data, caller):
    course = _own_course(current_teacher(caller), data.course_id)
    rows = Enrollment.query.filter_by(course_id=course.id, status="active").all()
    out = []
    for e in rows:
        item = e.to_dict()
        item["student"] = {
            "id": e.student.id,
            "name": e.student.user.name if e.student.user else None,
            "enrollment_number": e.student.enrollment_number,
        }
        out.append(item)
    out.sort(key=lambda i: i["student"]["name"] or "")
    return {"enrollments": out}


@action_client.action(AttendanceDayInput, roles=(TEACHER,))
def list_attendance(data, caller):
    course = _own_course(current_teacher(caller), data.course_id)
    rows = (
        Attendance.query.join(Enrollment, Attendance.enrollment_id == Enrollment.id)
        .filter(Enrollment.course_id == course.id, Attendance.date == data.date)
        .all()
    )
    return {"attendance": [a.to_dict() for a in rows]}


@action_client.action(CourseIdInput, roles=(TEACHER,))
def list_grades(data, caller):
    course = _own_course(current_teacher(caller), data.course_id)
    rows = (
        Grade.query.join(Enrollment, Grade.enrollment_id == Enrollment.id)
        .filter(Enrollment.course_id == course.id)
        .order_by(Grade.created_at.desc())
        .all()
    )
    return {"grades": [g.to_dict() for g in rows]}


@action_client.action(CourseIdInput, roles=(TEACHER,))
def list_assignments(data, caller):
    teacher = current_teacher(caller)
    course = _own_course(teacher, data.course_id)
    rows = (
        Assignment.query.filter_by(course_id=course.id, teacher_id=teacher.id)
        .order_by(Assignment.due_date.asc())
        .all()
    )
    return {"assignments": [a.to_dict() for a in rows]}


# ------------------------- frequência -------------------------
@action_client.action(CreateAttendanceInput, roles=(TEACHER,), revalidate=PORTAL)
def create_attendance(data, caller):
    enrollment = _own_enrollment(current_teacher(caller), data.enrollment_id)

    # uma chamada por aluno por dia; repetir atualiza a existente
    row = Attendance.query.filter_by(enrollment_id=enrollment.id, date=data.date).first()
    if row is None:
        row = Attendance(enrollment_id=enrollment.id, date=data.date)
        db.session.add(row)
    row.status = data.status
    row.notes = data.notes
    db.session.commit()
    return {"id": row.id}


@action_client.action(UpdateAttendanceInput, roles=(TEACHER,), revalidate=PORTAL)
def update_attendance(data, caller):
    teacher = current_teacher(caller)
    row = db.session.get(Attendance, data.id)
    if row is None:
        raise NotFound("Frequência não encontrada")
    _own_enrollment(teacher, row.enrollment_id)
    enrollment = _own_enrollment(teacher, data.enrollment_id)

    taken = Attendance.query.filter(
        Attendance.enrollment_id == enrollment.id,
        Attendance.date == data.date,
        Attendance.id != row.id,
    ).first()
    if taken is not None:
        raise Conflict("Frequência já registrada para este aluno nesta data")

    row.enrollment_id = enrollment.id
    row.date = data.date
    row.status = data.status
    row.notes = data.notes
    db.session.commit()
    return {}


# ------------------------- notas -------------------------
@action_client.action(CreateGradeInput, roles=(TEACHER,), revalidate=PORTAL)
def create_grade(data, caller):
    teacher = current_teacher(caller)
    enrollment = _own_enrollment(teacher, data.enrollment_id)
    _check_grade(teacher, enrollment, data.assignment_id, data.grade)

    grade = Grade(**data.model_dump())
    db.session.add(grade)
    db.session.commit()
    return {"id": grade.id}


def _own_grade(teacher, grade_id) -> Grade:
    grade = db.session.get(Grade, grade_id)
    if grade is None:
        raise NotFound("Nota não encontrada")
    _own_enrollment(teacher, grade.enrollment_id)
    return grade


@action_client.action(UpdateGradeInput, roles=(TEACHER,), revalidate=PORTAL)
def update_grade(data, caller):
    teacher = current_teacher(caller)
    grade = _own_grade(teacher, data.id)
    enrollment = _own_enrollment(teacher, data.enrollment_id)
    _check_grade(teacher, enrollment, data.assignment_id, data.grade)

    for key, value in data.model_dump(exclude={"id"}).items():
        setattr(grade, key, value)
    db.session.commit()
    return {}


@action_client.action(ById, roles=(TEACHER,), revalidate=PORTAL)
def delete_grade(data, caller):
    grade = _own_grade(current_teacher(caller), data.id)
    db.session.delete(grade)
    db.session.commit()
    return {}


# ------------------------- tarefas -------------------------
@action_client.action(CreateAssignmentInput, roles=(TEACHER,), revalidate=PORTAL)
def create_assignment(data, caller):
    teacher = current_teacher(caller)
    _own_course(teacher, data.course_id)

    assignment = Assignment(teacher_id=teacher.id, **data.model_dump())
    db.session.add(assignment)
    db.session.commit()
    return {"id": assignment.id}


@action_client.action(UpdateAssignmentInput, roles=(TEACHER,), revalidate=PORTAL)
def update_assignment(data, caller):
    teacher = current_teacher(caller)
    assignment = _own_assignment(teacher, data.id)
    _own_course(teacher, data.course_id)

    for key, value in data.model_dump(exclude={"id"}).items():
        setattr(assignment, key, value)
    db.session.commit()
    return {}


@action_client.action(ById, roles=(TEACHER,), revalidate=PORTAL)
def delete_assignment(data, caller):
    assignment = _own_assignment(current_teacher(caller), data.id)
    db.session.delete(assignment)
    db.session.commit()
    return {}
