from flask import Blueprint

alunos_bp = Blueprint("alunos", __name__, url_prefix="/alunos")

from . import routes  # noqa: E402,F401
