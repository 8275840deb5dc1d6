from typing import Literal, Optional

from pydantic import Field
from sqlalchemy import or_

from escola import ledger
from escola.errors import NotFound
from escola.extensions import db
from escola.fields import OptMoney, OptStr
from escola.models import Material, MaterialMovement, User
from escola.pipeline import ById, Schema, action_client

ESTOQUE = ("/estoque",)


# ------------------------- schemas -------------------------
class CreateMaterialInput(Schema):
    name: str = Field(min_length=1)
    description: OptStr = None
    category: OptStr = None
    quantity: int = Field(ge=0)
    min_quantity: int = Field(default=0, ge=0)
    unit: str = Field(default="unidade", min_length=1)
    price: OptMoney = Field(default=None, ge=0)
    supplier: OptStr = None
    location: OptStr = None


class UpdateMaterialInput(Schema):
    """Edição de cadastro; o saldo só muda por movimentação."""

    id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    description: OptStr = None
    category: OptStr = None
    min_quantity: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, min_length=1)
    price: OptMoney = Field(default=None, ge=0)
    supplier: OptStr = None
    location: OptStr = None


class ListMaterialsInput(Schema):
    q: OptStr = None
    low_stock: bool = False


class MaterialIdInput(Schema):
    material_id: str = Field(min_length=1)


class AddMovementInput(Schema):
    material_id: str = Field(min_length=1)
    direction: Literal["entry", "exit"]
    quantity: int = Field(gt=0)
    reason: OptStr = None


def _get_material(material_id) -> Material:
    material = db.session.get(Material, material_id)
    if material is None:
        raise NotFound("Material não encontrado")
    return material


# ------------------------- materiais -------------------------
@action_client.action(CreateMaterialInput, perm="gerenciar_materiais", revalidate=ESTOQUE)
def create_material(data, caller):
    material = Material(**data.model_dump(exclude={"quantity"}))
    db.session.add(material)
    ledger.open_balance(material, data.quantity, caller.user_id)
    db.session.commit()
    return {"id": material.id}


@action_client.action(UpdateMaterialInput, perm="gerenciar_materiais", revalidate=ESTOQUE)
def update_material(data, caller):
    material = _get_material(data.id)

    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    for required in ("name", "unit", "min_quantity"):
        if changes.get(required, ...) is None:
            changes.pop(required)

    for key, value in changes.items():
        setattr(material, key, value)
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_materiais", revalidate=ESTOQUE)
def delete_material(data, caller):
    material = _get_material(data.id)
    db.session.delete(material)
    db.session.commit()
    return {}


@action_client.action(ById, perm="ver_estoque")
def get_material(data, caller):
    return {"material": _get_material(data.id).to_dict()}


@action_client.action(ListMaterialsInput, perm="ver_estoque")
def list_materials(data, caller):
    query = Material.query
    if data.q:
        like = f"%{data.q}%"
        query = query.filter(or_(
            Material.name.ilike(like),
            Material.category.ilike(like),
            Material.supplier.ilike(like),
        ))
    if data.low_stock:
        # quantity <= 1.5 * min_quantity, sem ponto flutuante
        query = query.filter(Material.min_quantity > 0, Material.quantity * 2 <= Material.min_quantity * 3)
    materials = query.order_by(Material.created_at.desc()).all()
    return {"materials": [m.to_dict() for m in materials]}


# ------------------------- movimentações -------------------------
@action_client.action(AddMovementInput, perm="movimentar_estoque", revalidate=ESTOQUE)
def add_material_movement(data, caller):
    result = ledger.record_movement(
        data.material_id,
        data.direction,
        data.quantity,
        reason=data.reason,
        acting_user_id=caller.user_id,
    )
    return {"id": result.movement.id, "quantity": result.quantity}


@action_client.action(MaterialIdInput, perm="ver_estoque")
def list_material_movements(data, caller):
    _get_material(data.material_id)
    rows = (
        db.session.query(MaterialMovement, User)
        .outerjoin(User, MaterialMovement.user_id == User.id)
        .filter(MaterialMovement.material_id == data.material_id)
        .order_by(MaterialMovement.created_at.desc())
        .all()
    )
    movements = []
    for movement, user in rows:
        item = movement.to_dict()
        item["user"] = {"id": user.id, "name": user.name} if user else None
        movements.append(item)
    return {"movements": movements}


@action_client.action(MaterialIdInput, perm="ver_estoque")
def get_material_balance(data, caller):
    material = _get_material(data.material_id)
    balance = ledger.ledger_balance(material.id)
    return {
        "quantity": material.quantity,
        "ledger_balance": balance,
        "consistent": balance == material.quantity,
    }
