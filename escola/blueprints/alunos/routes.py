from escola.actions import alunos as actions
from escola.http import call

from . import alunos_bp


@alunos_bp.get("")
def listar():
    return call(actions.list_students)


@alunos_bp.post("")
def criar():
    return call(actions.create_student)


@alunos_bp.get("/<student_id>")
def ver(student_id):
    return call(actions.get_student, id=student_id)


@alunos_bp.route("/<student_id>", methods=["PUT", "PATCH"])
def editar(student_id):
    return call(actions.update_student, id=student_id)


@alunos_bp.delete("/<student_id>")
def excluir(student_id):
    return call(actions.delete_student, id=student_id)
