from escola.actions import portal_professor as actions
from escola.http import call

from . import portal_professor_bp


@portal_professor_bp.get("/cursos")
def meus_cursos():
    return call(actions.list_my_courses)


@portal_professor_bp.get("/cursos/<course_id>/matriculas")
def matriculas(course_id):
    return call(actions.list_course_enrollments, course_id=course_id)


@portal_professor_bp.get("/cursos/<course_id>/frequencia")
def frequencia_do_dia(course_id):
    return call(actions.list_attendance, course_id=course_id)


@portal_professor_bp.get("/cursos/<course_id>/notas")
def notas(course_id):
    return call(actions.list_grades, course_id=course_id)


@portal_professor_bp.get("/cursos/<course_id>/tarefas")
def tarefas(course_id):
    return call(actions.list_assignments, course_id=course_id)


# ------------------------- frequência -------------------------
@portal_professor_bp.post("/frequencia")
def lancar_frequencia():
    return call(actions.create_attendance)


@portal_professor_bp.put("/frequencia/<attendance_id>")
def editar_frequencia(attendance_id):
    return call(actions.update_attendance, id=attendance_id)


# ------------------------- notas -------------------------
@portal_professor_bp.post("/notas")
def lancar_nota():
    return call(actions.create_grade)


@portal_professor_bp.put("/notas/<grade_id>")
def editar_nota(grade_id):
    return call(actions.update_grade, id=grade_id)


@portal_professor_bp.delete("/notas/<grade_id>")
def excluir_nota(grade_id):
    return call(actions.delete_grade, id=grade_id)


# ------------------------- tarefas -------------------------
@portal_professor_bp.post("/tarefas")
def criar_tarefa():
    return call(actions.create_assignment)


@portal_professor_bp.put("/tarefas/<assignment_id>")
def editar_tarefa(assignment_id):
    return call(actions.update_assignment, id=assignment_id)


@portal_professor_bp.delete("/tarefas/<assignment_id>")
def excluir_tarefa(assignment_id):
    return call(actions.delete_assignment, id=assignment_id)
