from flask import jsonify
from sqlalchemy import func

from escola.actions import estoque as actions
from escola.extensions import db
from escola.models import Material, MaterialMovement
from escola.http import call
from escola.permissions import perm_required

from . import estoque_bp


# ------------------------- dashboard -------------------------
@estoque_bp.get("/dashboard")
@perm_required("ver_estoque")
def dashboard():
    total_materiais = Material.query.count()
    total_estoque = db.session.query(func.sum(Material.quantity)).scalar() or 0
    abaixo_minimo = (
        Material.query
        .filter(Material.min_quantity > 0, Material.quantity <= Material.min_quantity)
        .count()
    )
    ultimas = (
        MaterialMovement.query
        .order_by(MaterialMovement.created_at.desc())
        .limit(10)
        .all()
    )
    return jsonify({
        "success": True,
        "total_materials": total_materiais,
        "total_quantity": int(total_estoque),
        "critical_count": abaixo_minimo,
        "recent_movements": [m.to_dict() for m in ultimas],
    })


# ------------------------- materiais -------------------------
@estoque_bp.get("/materiais")
def listar_materiais():
    return call(actions.list_materials)


@estoque_bp.post("/materiais")
def criar_material():
    return call(actions.create_material)


@estoque_bp.get("/materiais/<material_id>")
def ver_material(material_id):
    return call(actions.get_material, id=material_id)


@estoque_bp.route("/materiais/<material_id>", methods=["PUT", "PATCH"])
def editar_material(material_id):
    return call(actions.update_material, id=material_id)


@estoque_bp.delete("/materiais/<material_id>")
def excluir_material(material_id):
    return call(actions.delete_material, id=material_id)


# ------------------------- movimentações -------------------------
@estoque_bp.get("/materiais/<material_id>/movimentacoes")
def listar_movimentacoes(material_id):
    return call(actions.list_material_movements, material_id=material_id)


@estoque_bp.post("/materiais/<material_id>/movimentacoes")
def registrar_movimentacao(material_id):
    return call(actions.add_material_movement, material_id=material_id)


@estoque_bp.get("/materiais/<material_id>/saldo")
def conferir_saldo(material_id):
    return call(actions.get_material_balance, material_id=material_id)
