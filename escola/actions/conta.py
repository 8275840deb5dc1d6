from pydantic import Field, model_validator

from escola.errors import Forbidden, NotFound, ValidationFailed
from escola.extensions import db
from escola.models import User
from escola.permissions import ADMIN
from escola.pipeline import Schema, action_client


class ChangePasswordInput(Schema):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
    confirm: str

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.new_password != self.confirm:
            raise ValueError("As senhas não coincidem")
        return self


class AdminSetupInput(Schema):
    user_id: str = Field(min_length=1)


def _caller_user(caller) -> User:
    user = db.session.get(User, caller.user_id)
    if user is None:
        raise NotFound("Usuário não encontrado")
    return user


@action_client.action(ChangePasswordInput)
def change_password(data, caller):
    user = _caller_user(caller)
    if not user.check_password(data.current_password):
        raise ValidationFailed({"current_password": "Senha atual incorreta"})
    user.set_password(data.new_password)
    db.session.commit()
    return {}


@action_client.action(AdminSetupInput, revalidate=("/usuarios",))
def admin_setup(data, caller):
    """Promove o próprio usuário a administrador na primeira instalação."""
    if data.user_id != caller.user_id:
        raise Forbidden("Você só pode atualizar seu próprio usuário")
    if User.query.filter_by(role=ADMIN).first() is not None:
        raise Forbidden("Já existe um administrador cadastrado")

    user = _caller_user(caller)
    user.role = ADMIN
    db.session.commit()
    return {}
