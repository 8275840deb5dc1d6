"""Portal do aluno: somente leitura, restrito às matrículas do próprio aluno."""
from pydantic import Field

from escola.errors import NotFound
from escola.extensions import db
from escola.models import Assignment, Attendance, Course, Enrollment, Grade, Invoice, Student
from escola.permissions import STUDENT
from escola.pipeline import Empty, Schema, action_client


class EnrollmentIdInput(Schema):
    enrollment_id: str = Field(min_length=1)


def current_student(caller):
    return Student.query.filter_by(user_id=caller.user_id).first()


def _own_enrollment(caller, enrollment_id) -> Enrollment:
    student = current_student(caller)
    enrollment = None
    if student is not None:
        enrollment = Enrollment.query.filter_by(id=enrollment_id, student_id=student.id).first()
    if enrollment is None:
        raise NotFound("Matrícula não encontrada")
    return enrollment


def _teacher_summary(course):
    teacher = course.teacher
    if teacher is None:
        return None
    return {"id": teacher.id, "name": teacher.user.name if teacher.user else None}


def _active_enrollments(student):
    return (
        Enrollment.query.filter_by(student_id=student.id, status="active")
        .order_by(Enrollment.enrollment_date.desc())
        .all()
    )


@action_client.action(Empty, roles=(STUDENT,))
def list_my_enrollments(data, caller):
    student = current_student(caller)
    if student is None:
        return {"enrollments": []}

    out = []
    for e in _active_enrollments(student):
        item = e.to_dict()
        item["course"] = e.course.to_dict()
        item["course"]["teacher"] = _teacher_summary(e.course)
        out.append(item)
    return {"enrollments": out}


@action_client.action(EnrollmentIdInput, roles=(STUDENT,))
def list_my_attendance(data, caller):
    enrollment = _own_enrollment(caller, data.enrollment_id)
    rows = (
        Attendance.query.filter_by(enrollment_id=enrollment.id)
        .order_by(Attendance.date.desc())
        .all()
    )
    return {"attendance": [a.to_dict() for a in rows]}


@action_client.action(EnrollmentIdInput, roles=(STUDENT,))
def list_my_grades(data, caller):
    enrollment = _own_enrollment(caller, data.enrollment_id)
    rows = (
        Grade.query.filter_by(enrollment_id=enrollment.id)
        .order_by(Grade.created_at.desc())
        .all()
    )
    out = []
    for g in rows:
        item = g.to_dict()
        assignment = db.session.get(Assignment, g.assignment_id) if g.assignment_id else None
        item["assignment"] = {"id": assignment.id, "title": assignment.title} if assignment else None
        out.append(item)
    return {"grades": out}


@action_client.action(EnrollmentIdInput, roles=(STUDENT,))
def list_my_assignments(data, caller):
    enrollment = _own_enrollment(caller, data.enrollment_id)
    rows = (
        Assignment.query.filter_by(course_id=enrollment.course_id)
        .order_by(Assignment.due_date.asc())
        .all()
    )
    return {"assignments": [a.to_dict() for a in rows]}


@action_client.action(Empty, roles=(STUDENT,))
def list_all_my_assignments(data, caller):
    student = current_student(caller)
    if student is None:
        return {"assignments": []}

    course_ids = [e.course_id for e in _active_enrollments(student)]
    if not course_ids:
        return {"assignments": []}

    rows = (
        Assignment.query.join(Course, Assignment.course_id == Course.id)
        .filter(Assignment.course_id.in_(course_ids))
        .order_by(Assignment.due_date.asc())
        .all()
    )
    out = []
    for a in rows:
        item = a.to_dict()
        course = db.session.get(Course, a.course_id)
        item["course"] = {"id": course.id, "name": course.name, "code": course.code}
        out.append(item)
    return {"assignments": out}


@action_client.action(Empty, roles=(STUDENT,))
def list_my_invoices(data, caller):
    student = current_student(caller)
    if student is None:
        return {"invoices": []}
    rows = Invoice.query.filter_by(student_id=student.id).order_by(Invoice.created_at.desc()).all()
    return {"invoices": [i.to_dict() for i in rows]}
