from flask import Blueprint

cursos_bp = Blueprint("cursos", __name__, url_prefix="/cursos")

from . import routes  # noqa: E402,F401
