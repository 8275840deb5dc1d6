from flask import Blueprint

portal_professor_bp = Blueprint("portal_professor", __name__, url_prefix="/portal-professor")

from . import routes  # noqa: E402,F401
