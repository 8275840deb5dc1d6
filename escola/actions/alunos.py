from datetime import date
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from escola.actions.usuarios import email_taken
from escola.errors import Conflict, NotFound
from escola.extensions import db
from escola.fields import Cpf, OptCpf, OptStr
from escola.models import Student, User
from escola.pipeline import ById, Empty, Schema, action_client

ALUNOS = ("/alunos",)

Status = Literal["active", "inactive", "suspended"]


class CreateStudentInput(Schema):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    cpf: Cpf
    enrollment_number: str = Field(min_length=1)
    phone: OptStr = None
    birth_date: Optional[date] = None
    address: OptStr = None
    city: OptStr = None
    state: OptStr = None
    zip_code: OptStr = None
    parent_name: OptStr = None
    parent_phone: OptStr = None
    parent_email: Optional[EmailStr] = None
    status: Status = "active"

    @field_validator("parent_email", mode="before")
    @classmethod
    def _blank_parent_email(cls, v):
        return v or None


class UpdateStudentInput(Schema):
    id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    password: OptStr = Field(default=None, min_length=8)
    cpf: OptCpf = None
    enrollment_number: Optional[str] = Field(default=None, min_length=1)
    phone: OptStr = None
    birth_date: Optional[date] = None
    address: OptStr = None
    city: OptStr = None
    state: OptStr = None
    zip_code: OptStr = None
    parent_name: OptStr = None
    parent_phone: OptStr = None
    parent_email: Optional[EmailStr] = None
    status: Optional[Status] = None

    @field_validator("parent_email", mode="before")
    @classmethod
    def _blank_parent_email(cls, v):
        return v or None


STUDENT_FIELDS = (
    "cpf", "enrollment_number", "phone", "birth_date", "address", "city", "state",
    "zip_code", "parent_name", "parent_phone", "parent_email", "status",
)


def _get_student(student_id) -> Student:
    student = db.session.get(Student, student_id)
    if student is None:
        raise NotFound("Aluno não encontrado")
    return student


def _check_unique(cpf=None, enrollment_number=None, exclude_id=None):
    if enrollment_number:
        q = Student.query.filter_by(enrollment_number=enrollment_number)
        if exclude_id:
            q = q.filter(Student.id != exclude_id)
        if q.first():
            raise Conflict("Número de matrícula já cadastrado")
    if cpf:
        q = Student.query.filter_by(cpf=cpf)
        if exclude_id:
            q = q.filter(Student.id != exclude_id)
        if q.first():
            raise Conflict("CPF já cadastrado")


@action_client.action(CreateStudentInput, perm="gerenciar_alunos", revalidate=ALUNOS)
def create_student(data, caller):
    if email_taken(data.email):
        raise Conflict("E-mail já cadastrado")
    _check_unique(cpf=data.cpf, enrollment_number=data.enrollment_number)

    user = User(name=data.name, email=data.email.lower(), role="student", active=True)
    user.set_password(data.password)
    db.session.add(user)
    db.session.flush()

    student = Student(user_id=user.id, **data.model_dump(include=set(STUDENT_FIELDS)))
    db.session.add(student)
    db.session.commit()
    return {"id": student.id}


@action_client.action(UpdateStudentInput, perm="gerenciar_alunos", revalidate=ALUNOS)
def update_student(data, caller):
    student = _get_student(data.id)
    user = student.user
    if user is None:
        raise NotFound("Usuário não encontrado")

    changes = data.model_dump(exclude_unset=True, exclude={"id"})

    if changes.get("email") and changes["email"].lower() != user.email.lower():
        if email_taken(changes["email"], exclude_user_id=user.id):
            raise Conflict("E-mail já cadastrado")
    _check_unique(
        cpf=changes.get("cpf") if changes.get("cpf") != student.cpf else None,
        enrollment_number=(
            changes.get("enrollment_number")
            if changes.get("enrollment_number") != student.enrollment_number else None
        ),
        exclude_id=student.id,
    )

    if changes.get("name"):
        user.name = changes["name"]
    if changes.get("email"):
        user.email = changes["email"].lower()
    if changes.get("password"):
        user.set_password(changes["password"])

    for key in STUDENT_FIELDS:
        if key not in changes:
            continue
        if key in ("cpf", "enrollment_number", "status") and not changes[key]:
            continue
        setattr(student, key, changes[key])

    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_alunos", revalidate=ALUNOS)
def delete_student(data, caller):
    student = _get_student(data.id)
    # remove o login junto; o aluno sai por ON DELETE CASCADE
    user = student.user
    if user is not None:
        db.session.delete(user)
    else:
        db.session.delete(student)
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_alunos")
def get_student(data, caller):
    return {"student": _get_student(data.id).to_dict()}


@action_client.action(Empty, perm="gerenciar_alunos")
def list_students(data, caller):
    students = Student.query.join(User).order_by(Student.created_at.desc()).all()
    return {"students": [s.to_dict() for s in students]}
