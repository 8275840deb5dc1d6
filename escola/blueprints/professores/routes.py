from escola.actions import professores as actions
from escola.http import call

from . import professores_bp


@professores_bp.get("")
def listar():
    return call(actions.list_teachers)


@professores_bp.post("")
def criar():
    return call(actions.create_teacher)


@professores_bp.get("/<teacher_id>")
def ver(teacher_id):
    return call(actions.get_teacher_detail, id=teacher_id)


@professores_bp.route("/<teacher_id>", methods=["PUT", "PATCH"])
def editar(teacher_id):
    return call(actions.update_teacher, id=teacher_id)


@professores_bp.delete("/<teacher_id>")
def excluir(teacher_id):
    return call(actions.delete_teacher, id=teacher_id)
