from flask import Blueprint

portal_aluno_bp = Blueprint("portal_aluno", __name__, url_prefix="/portal-aluno")

from . import routes  # noqa: E402,F401
