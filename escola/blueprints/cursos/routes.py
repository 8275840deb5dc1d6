from escola.actions import cursos as actions
from escola.http import call

from . import cursos_bp


@cursos_bp.get("")
def listar():
    return call(actions.list_courses)


@cursos_bp.post("")
def criar():
    return call(actions.create_course)


@cursos_bp.get("/<course_id>")
def ver(course_id):
    return call(actions.get_course, id=course_id)


@cursos_bp.route("/<course_id>", methods=["PUT", "PATCH"])
def editar(course_id):
    return call(actions.update_course, id=course_id)


@cursos_bp.delete("/<course_id>")
def excluir(course_id):
    return call(actions.delete_course, id=course_id)


# ------------------------- matrículas -------------------------
@cursos_bp.get("/<course_id>/matriculas")
def matriculas(course_id):
    return call(actions.list_course_enrollments, id=course_id)


@cursos_bp.post("/<course_id>/matriculas")
def matricular(course_id):
    return call(actions.enroll_student, course_id=course_id)
