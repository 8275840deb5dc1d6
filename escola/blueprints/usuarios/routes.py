from escola.actions import usuarios as actions
from escola.http import call

from . import usuarios_bp


@usuarios_bp.get("")
def listar():
    return call(actions.list_users)


@usuarios_bp.post("")
def criar():
    return call(actions.create_user)


@usuarios_bp.route("/<user_id>/papel", methods=["PUT", "PATCH"])
def alterar_papel(user_id):
    return call(actions.update_user_role, id=user_id)


@usuarios_bp.delete("/<user_id>")
def excluir(user_id):
    return call(actions.delete_user, id=user_id)
