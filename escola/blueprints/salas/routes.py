from escola.actions import salas as actions
from escola.http import call

from . import salas_bp


@salas_bp.get("")
def listar():
    return call(actions.list_classrooms)


@salas_bp.post("")
def criar():
    return call(actions.create_classroom)


@salas_bp.get("/<classroom_id>")
def ver(classroom_id):
    return call(actions.get_classroom, id=classroom_id)


@salas_bp.route("/<classroom_id>", methods=["PUT", "PATCH"])
def editar(classroom_id):
    return call(actions.update_classroom, id=classroom_id)


@salas_bp.delete("/<classroom_id>")
def excluir(classroom_id):
    return call(actions.delete_classroom, id=classroom_id)
