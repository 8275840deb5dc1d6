from flask import Blueprint

salas_bp = Blueprint("salas", __name__, url_prefix="/salas")

from . import routes  # noqa: E402,F401
