"""Razão de estoque de materiais.

Único ponto do sistema que altera ``Material.quantity``. Cada alteração gera
uma ``MaterialMovement`` imutável na mesma transação, de modo que o saldo
gravado é sempre igual à soma das entradas menos a soma das saídas.

A baixa usa um UPDATE condicional (``quantity + delta >= 0``) em vez de
ler-calcular-gravar, então duas saídas concorrentes não conseguem deixar o
saldo negativo: a perdedora afeta zero linhas e recebe InsufficientStock.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import case, event, func, select, update
from sqlalchemy.orm import Session

from .errors import ImmutableRecordError, InsufficientStock, NotFound, ValidationFailed
from .extensions import db
from .models import Material, MaterialMovement
from .models.material import DIRECTIONS, ENTRY
from .models.mixins import utcnow

logger = logging.getLogger(__name__)

OPENING_REASON = "Saldo inicial"


@dataclass(frozen=True)
class MovementResult:
    movement: MaterialMovement
    quantity: int


def stock_status(quantity, min_quantity):
    """Situação exibida na tela; não interfere nas movimentações."""
    if not min_quantity:
        return None
    if quantity <= min_quantity:
        return "critical"
    if quantity <= min_quantity * 1.5:
        return "low"
    return "normal"


def _check_movement(direction, quantity):
    erros = {}
    if direction not in DIRECTIONS:
        erros["direction"] = "Valor inválido. Use: 'entry' ou 'exit'"
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        erros["quantity"] = "Quantidade deve ser positiva"
    if erros:
        raise ValidationFailed(erros)


def open_balance(material: Material, quantity: int, user_id=None):
    """Lança o saldo de abertura de um material recém-criado (sem commit)."""
    material.quantity = 0
    if not quantity:
        return None
    _check_movement(ENTRY, quantity)
    movement = MaterialMovement(
        material=material,
        direction=ENTRY,
        quantity=quantity,
        reason=OPENING_REASON,
        user_id=user_id,
        created_at=utcnow(),
    )
    material.quantity = quantity
    db.session.add(movement)
    return movement


def record_movement(material_id, direction, quantity, reason=None, acting_user_id=None) -> MovementResult:
    _check_movement(direction, quantity)

    # relê do banco: o objeto em cache pode ter saldo defasado
    material = db.session.get(Material, material_id, populate_existing=True)
    if material is None:
        raise NotFound("Material não encontrado")

    delta = quantity if direction == ENTRY else -quantity
    current = material.quantity
    if current + delta < 0:
        logger.info(
            "saída recusada: material=%s saldo=%s solicitado=%s",
            material_id, current, quantity,
        )
        raise InsufficientStock(available=current, requested=quantity)

    now = utcnow()
    stmt = (
        update(Material)
        .where(Material.id == material_id, Material.quantity + delta >= 0)
        .values(quantity=Material.quantity + delta, updated_at=now)
        .execution_options(synchronize_session=False)
    )

    try:
        result = db.session.execute(stmt)
        if result.rowcount != 1:
            if db.session.scalar(select(Material.id).where(Material.id == material_id)) is None:
                raise NotFound("Material não encontrado")
            # outra movimentação consumiu o saldo entre a leitura e a baixa
            raise InsufficientStock(requested=quantity)

        movement = MaterialMovement(
            material_id=material_id,
            direction=direction,
            quantity=quantity,
            reason=reason or None,
            user_id=acting_user_id,
            created_at=now,
        )
        db.session.add(movement)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(material)
    logger.info(
        "movimentação %s de %s em %s por %s: saldo %s -> %s",
        direction, quantity, material_id, acting_user_id, current, material.quantity,
    )
    return MovementResult(movement=movement, quantity=material.quantity)


def ledger_balance(material_id) -> int:
    """Saldo recalculado a partir do histórico de movimentações."""
    signed = case(
        (MaterialMovement.direction == ENTRY, MaterialMovement.quantity),
        else_=-MaterialMovement.quantity,
    )
    total = db.session.execute(
        select(func.coalesce(func.sum(signed), 0)).where(MaterialMovement.material_id == material_id)
    ).scalar_one()
    return int(total)


def movement_history(material_id, newest_first=True):
    order = MaterialMovement.created_at.desc() if newest_first else MaterialMovement.created_at.asc()
    return (
        MaterialMovement.query
        .filter_by(material_id=material_id)
        .order_by(order)
        .all()
    )


# ---------------------------------------------------------------
# Histórico somente-inclusão
# ---------------------------------------------------------------
@event.listens_for(Session, "before_flush")
def _guard_movements(session, flush_context, instances):
    for obj in session.dirty:
        if isinstance(obj, MaterialMovement) and session.is_modified(obj, include_collections=False):
            raise ImmutableRecordError()
    for obj in session.deleted:
        if isinstance(obj, MaterialMovement):
            raise ImmutableRecordError("Movimentações de estoque não podem ser excluídas")
