from datetime import date
from typing import Literal, Optional

from pydantic import Field

from escola.errors import Conflict, NotFound, ValidationFailed
from escola.extensions import db
from escola.fields import Money, OptMoney, OptStr
from escola.models import Classroom, Course, Enrollment, Student, Teacher
from escola.pipeline import ById, Empty, Schema, action_client

CURSOS = ("/cursos",)

Status = Literal["active", "inactive", "completed"]


class CreateCourseInput(Schema):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    description: OptStr = None
    duration: Optional[int] = Field(default=None, gt=0)
    price: Money = Field(ge=0)
    teacher_id: OptStr = None
    classroom_id: OptStr = None
    schedule: OptStr = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Status = "active"


class UpdateCourseInput(Schema):
    id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    code: Optional[str] = Field(default=None, min_length=1)
    description: OptStr = None
    duration: Optional[int] = Field(default=None, gt=0)
    price: OptMoney = Field(default=None, ge=0)
    teacher_id: OptStr = None
    classroom_id: OptStr = None
    schedule: OptStr = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[Status] = None


class EnrollStudentInput(Schema):
    course_id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)


def _get_course(course_id) -> Course:
    course = db.session.get(Course, course_id)
    if course is None:
        raise NotFound("Curso não encontrado")
    return course


def _code_taken(code, exclude_id=None) -> bool:
    q = Course.query.filter_by(code=code)
    if exclude_id:
        q = q.filter(Course.id != exclude_id)
    return q.first() is not None


def _check_refs(teacher_id=None, classroom_id=None):
    errors = {}
    if teacher_id and db.session.get(Teacher, teacher_id) is None:
        errors["teacher_id"] = "Professor não encontrado"
    if classroom_id and db.session.get(Classroom, classroom_id) is None:
        errors["classroom_id"] = "Sala não encontrada"
    if errors:
        raise ValidationFailed(errors)


def _check_dates(start, end):
    if start and end and end < start:
        raise ValidationFailed({"end_date": "Data de término anterior ao início"})


def _course_dict(course: Course) -> dict:
    data = course.to_dict()
    data["teacher"] = (
        {"id": course.teacher.id, "name": course.teacher.user.name if course.teacher.user else None}
        if course.teacher else None
    )
    data["classroom"] = {"id": course.classroom.id, "name": course.classroom.name} if course.classroom else None
    return data


@action_client.action(CreateCourseInput, perm="gerenciar_cursos", revalidate=CURSOS)
def create_course(data, caller):
    if _code_taken(data.code):
        raise Conflict("Código do curso já cadastrado")
    _check_refs(data.teacher_id, data.classroom_id)
    _check_dates(data.start_date, data.end_date)

    course = Course(**data.model_dump())
    db.session.add(course)
    db.session.commit()
    return {"id": course.id}


@action_client.action(UpdateCourseInput, perm="gerenciar_cursos", revalidate=CURSOS)
def update_course(data, caller):
    course = _get_course(data.id)
    changes = data.model_dump(exclude_unset=True, exclude={"id"})

    if changes.get("code") and changes["code"] != course.code and _code_taken(changes["code"], course.id):
        raise Conflict("Código do curso já cadastrado")
    _check_refs(changes.get("teacher_id"), changes.get("classroom_id"))
    _check_dates(changes.get("start_date", course.start_date), changes.get("end_date", course.end_date))

    for key, value in changes.items():
        if value is None and key in ("name", "code", "price", "status"):
            continue
        setattr(course, key, value)
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_cursos", revalidate=CURSOS)
def delete_course(data, caller):
    course = _get_course(data.id)
    db.session.delete(course)
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_cursos")
def get_course(data, caller):
    return {"course": _course_dict(_get_course(data.id))}


@action_client.action(Empty, perm="gerenciar_cursos")
def list_courses(data, caller):
    courses = Course.query.order_by(Course.created_at.desc()).all()
    return {"courses": [_course_dict(c) for c in courses]}


@action_client.action(EnrollStudentInput, perm="gerenciar_cursos", revalidate=CURSOS)
def enroll_student(data, caller):
    course = _get_course(data.course_id)
    if db.session.get(Student, data.student_id) is None:
        raise NotFound("Aluno não encontrado")
    if Enrollment.query.filter_by(student_id=data.student_id, course_id=course.id).first():
        raise Conflict("Aluno já matriculado neste curso")

    enrollment = Enrollment(student_id=data.student_id, course_id=course.id, status="active")
    db.session.add(enrollment)
    db.session.commit()
    return {"id": enrollment.id}


@action_client.action(ById, perm="gerenciar_cursos")
def list_course_enrollments(data, caller):
    course = _get_course(data.id)
    rows = Enrollment.query.filter_by(course_id=course.id).order_by(Enrollment.enrollment_date.asc()).all()
    out = []
    for e in rows:
        item = e.to_dict()
        item["student"] = e.student.to_dict() if e.student else None
        out.append(item)
    return {"enrollments": out}
