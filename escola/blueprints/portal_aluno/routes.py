from escola.actions import portal_aluno as actions
from escola.http import call

from . import portal_aluno_bp


@portal_aluno_bp.get("/matriculas")
def minhas_matriculas():
    return call(actions.list_my_enrollments)


@portal_aluno_bp.get("/matriculas/<enrollment_id>/frequencia")
def minha_frequencia(enrollment_id):
    return call(actions.list_my_attendance, enrollment_id=enrollment_id)


@portal_aluno_bp.get("/matriculas/<enrollment_id>/notas")
def minhas_notas(enrollment_id):
    return call(actions.list_my_grades, enrollment_id=enrollment_id)


@portal_aluno_bp.get("/matriculas/<enrollment_id>/tarefas")
def minhas_tarefas(enrollment_id):
    return call(actions.list_my_assignments, enrollment_id=enrollment_id)


@portal_aluno_bp.get("/tarefas")
def todas_as_tarefas():
    return call(actions.list_all_my_assignments)


@portal_aluno_bp.get("/boletos")
def meus_boletos():
    return call(actions.list_my_invoices)
