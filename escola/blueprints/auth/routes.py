import logging

from flask import jsonify
from flask_login import current_user, login_required, login_user, logout_user
from pydantic import EmailStr, Field
from sqlalchemy import func

from escola.actions.conta import admin_setup, change_password
from escola.errors import ActionError, Unauthenticated
from escola.http import call, request_payload, respond
from escola.models import User
from escola.pipeline import Schema, parse_payload

from . import auth_bp

logger = logging.getLogger(__name__)


class LoginInput(Schema):
    email: EmailStr
    password: str = Field(min_length=1)


@auth_bp.post("/login")
def login_post():
    try:
        data = parse_payload(LoginInput, request_payload())
    except ActionError as err:
        return respond(err.to_result())

    u = User.query.filter(func.lower(User.email) == data.email.lower()).first()
    if not u or not u.active or not u.check_password(data.password):
        logger.info("login recusado para %s", data.email)
        return respond(Unauthenticated("Login inválido").to_result())

    login_user(u)
    return respond({"success": True, "user": u.to_dict()})


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return respond({"success": True})


@auth_bp.get("/me")
@login_required
def me():
    return jsonify({"success": True, "user": current_user.to_dict()})


@auth_bp.post("/trocar-senha")
def trocar_senha():
    return call(change_password)


@auth_bp.post("/admin-setup")
def admin_setup_post():
    return call(admin_setup)
