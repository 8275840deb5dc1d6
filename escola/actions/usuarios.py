from typing import Literal

from pydantic import EmailStr, Field

from escola.errors import Conflict, Forbidden, NotFound
from escola.extensions import db
from escola.models import Student, Teacher, User
from escola.permissions import ADMIN
from escola.pipeline import ById, Empty, Schema, action_client

USUARIOS = ("/usuarios",)

Role = Literal["admin", "student", "teacher"]


class CreateUserInput(Schema):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role = "student"


class UpdateUserRoleInput(Schema):
    id: str = Field(min_length=1)
    role: Role


def email_taken(email, exclude_user_id=None) -> bool:
    query = User.query.filter(db.func.lower(User.email) == email.lower())
    if exclude_user_id:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


@action_client.action(Empty, roles=(ADMIN,))
def list_users(data, caller):
    users = User.query.order_by(User.name.asc()).all()
    student_ids = {uid for (uid,) in db.session.query(Student.user_id).all()}
    teacher_ids = {uid for (uid,) in db.session.query(Teacher.user_id).all()}

    out = []
    for u in users:
        item = u.to_dict()
        item["has_student_profile"] = u.id in student_ids
        item["has_teacher_profile"] = u.id in teacher_ids
        out.append(item)
    return {"users": out}


@action_client.action(CreateUserInput, roles=(ADMIN,), revalidate=USUARIOS)
def create_user(data, caller):
    if email_taken(data.email):
        raise Conflict("E-mail já cadastrado")

    u = User(name=data.name, email=data.email.lower(), role=data.role, active=True)
    u.set_password(data.password)
    db.session.add(u)
    db.session.commit()
    return {"id": u.id}


@action_client.action(UpdateUserRoleInput, roles=(ADMIN,), revalidate=USUARIOS)
def update_user_role(data, caller):
    if data.id == caller.user_id:
        raise Forbidden("Você não pode alterar seu próprio papel")

    u = db.session.get(User, data.id)
    if u is None:
        raise NotFound("Usuário não encontrado")
    u.role = data.role
    db.session.commit()
    return {}


@action_client.action(ById, roles=(ADMIN,), revalidate=USUARIOS)
def delete_user(data, caller):
    if data.id == caller.user_id:
        raise Forbidden("Você não pode excluir sua própria conta")

    u = db.session.get(User, data.id)
    if u is None:
        raise NotFound("Usuário não encontrado")
    db.session.delete(u)
    db.session.commit()
    return {}
