from typing import Literal, Optional

from pydantic import Field

from escola.errors import Conflict, NotFound
from escola.extensions import db
from escola.models import Classroom
from escola.fields import OptStr
from escola.pipeline import ById, Empty, Schema, action_client

SALAS = ("/salas",)

Status = Literal["available", "occupied", "maintenance"]


class CreateClassroomInput(Schema):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    location: OptStr = None
    description: OptStr = None
    status: Status = "available"


class UpdateClassroomInput(Schema):
    id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    capacity: Optional[int] = Field(default=None, gt=0)
    location: OptStr = None
    description: OptStr = None
    status: Optional[Status] = None


def _get_classroom(classroom_id) -> Classroom:
    sala = db.session.get(Classroom, classroom_id)
    if sala is None:
        raise NotFound("Sala não encontrada")
    return sala


def _name_taken(name, exclude_id=None) -> bool:
    q = Classroom.query.filter_by(name=name)
    if exclude_id:
        q = q.filter(Classroom.id != exclude_id)
    return q.first() is not None


@action_client.action(CreateClassroomInput, perm="gerenciar_salas", revalidate=SALAS)
def create_classroom(data, caller):
    if _name_taken(data.name):
        raise Conflict("Nome da sala já cadastrado")
    sala = Classroom(**data.model_dump())
    db.session.add(sala)
    db.session.commit()
    return {"id": sala.id}


@action_client.action(UpdateClassroomInput, perm="gerenciar_salas", revalidate=SALAS)
def update_classroom(data, caller):
    sala = _get_classroom(data.id)
    changes = data.model_dump(exclude_unset=True, exclude={"id"})

    if changes.get("name") and changes["name"] != sala.name and _name_taken(changes["name"], sala.id):
        raise Conflict("Nome da sala já cadastrado")

    for key, value in changes.items():
        if value is None and key in ("name", "capacity", "status"):
            continue
        setattr(sala, key, value)
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_salas", revalidate=SALAS)
def delete_classroom(data, caller):
    sala = _get_classroom(data.id)
    db.session.delete(sala)
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_salas")
def get_classroom(data, caller):
    return {"classroom": _get_classroom(data.id).to_dict()}


@action_client.action(Empty, perm="gerenciar_salas")
def list_classrooms(data, caller):
    salas = Classroom.query.order_by(Classroom.name.asc()).all()
    return {"classrooms": [s.to_dict() for s in salas]}
