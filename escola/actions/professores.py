from datetime import date
from typing import Literal, Optional

from pydantic import EmailStr, Field

from escola.actions.usuarios import email_taken
from escola.errors import Conflict, NotFound
from escola.extensions import db
from escola.fields import Cpf, OptCpf, OptMoney, OptStr
from escola.models import Teacher, User
from escola.pipeline import ById, Empty, Schema, action_client

PROFESSORES = ("/professores",)

Status = Literal["active", "inactive", "suspended"]


class CreateTeacherInput(Schema):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    cpf: Cpf
    phone: OptStr = None
    birth_date: Optional[date] = None
    address: OptStr = None
    city: OptStr = None
    state: OptStr = None
    zip_code: OptStr = None
    specialization: OptStr = None
    hire_date: date
    salary: OptMoney = Field(default=None, ge=0)
    status: Status = "active"


class UpdateTeacherInput(Schema):
    id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    password: OptStr = Field(default=None, min_length=8)
    cpf: OptCpf = None
    phone: OptStr = None
    birth_date: Optional[date] = None
    address: OptStr = None
    city: OptStr = None
    state: OptStr = None
    zip_code: OptStr = None
    specialization: OptStr = None
    hire_date: Optional[date] = None
    salary: OptMoney = Field(default=None, ge=0)
    status: Optional[Status] = None


TEACHER_FIELDS = (
    "cpf", "phone", "birth_date", "address", "city", "state", "zip_code",
    "specialization", "hire_date", "salary", "status",
)

# não podem ser apagados numa edição parcial
REQUIRED_FIELDS = ("cpf", "hire_date", "status")


def get_teacher(teacher_id) -> Teacher:
    teacher = db.session.get(Teacher, teacher_id)
    if teacher is None:
        raise NotFound("Professor não encontrado")
    return teacher


def _cpf_taken(cpf, exclude_id=None) -> bool:
    q = Teacher.query.filter_by(cpf=cpf)
    if exclude_id:
        q = q.filter(Teacher.id != exclude_id)
    return q.first() is not None


@action_client.action(CreateTeacherInput, perm="gerenciar_professores", revalidate=PROFESSORES)
def create_teacher(data, caller):
    if email_taken(data.email):
        raise Conflict("E-mail já cadastrado")
    if _cpf_taken(data.cpf):
        raise Conflict("CPF já cadastrado")

    user = User(name=data.name, email=data.email.lower(), role="teacher", active=True)
    user.set_password(data.password)
    db.session.add(user)
    db.session.flush()

    teacher = Teacher(user_id=user.id, **data.model_dump(include=set(TEACHER_FIELDS)))
    db.session.add(teacher)
    db.session.commit()
    return {"id": teacher.id}


@action_client.action(UpdateTeacherInput, perm="gerenciar_professores", revalidate=PROFESSORES)
def update_teacher(data, caller):
    teacher = get_teacher(data.id)
    user = teacher.user
    if user is None:
        raise NotFound("Usuário não encontrado")

    changes = data.model_dump(exclude_unset=True, exclude={"id"})

    if changes.get("email") and changes["email"].lower() != user.email.lower():
        if email_taken(changes["email"], exclude_user_id=user.id):
            raise Conflict("E-mail já cadastrado")
    if changes.get("cpf") and changes["cpf"] != teacher.cpf:
        if _cpf_taken(changes["cpf"], exclude_id=teacher.id):
            raise Conflict("CPF já cadastrado")

    if changes.get("name"):
        user.name = changes["name"]
    if changes.get("email"):
        user.email = changes["email"].lower()
    if changes.get("password"):
        user.set_password(changes["password"])

    for key in TEACHER_FIELDS:
        if key not in changes:
            continue
        if key in REQUIRED_FIELDS and not changes[key]:
            continue
        setattr(teacher, key, changes[key])

    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_professores", revalidate=PROFESSORES)
def delete_teacher(data, caller):
    teacher = get_teacher(data.id)
    user = teacher.user
    db.session.delete(user if user is not None else teacher)
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_professores")
def get_teacher_detail(data, caller):
    return {"teacher": get_teacher(data.id).to_dict()}


@action_client.action(Empty, perm="gerenciar_professores")
def list_teachers(data, caller):
    teachers = Teacher.query.join(User).order_by(Teacher.created_at.desc()).all()
    return {"teachers": [t.to_dict() for t in teachers]}
