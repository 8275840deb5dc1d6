"""Pipeline das operações que alteram estado.

Toda operação exposta passa por ``ActionClient.action``: resolve a sessão,
valida o payload contra um modelo pydantic, confere o papel do chamador,
chama o handler e normaliza o resultado num dicionário discriminado.

    client = ActionClient()

    @client.action(AddMovementInput, perm="movimentar_estoque", revalidate=("/estoque",))
    def add_material_movement(data, caller):
        ...
        return {"quantity": 7}

    add_material_movement({"material_id": "...", "direction": "exit", "quantity": 3})
    # -> {"success": True, "quantity": 7}

A sessão e o aviso de views desatualizadas são injetados no construtor, o
que permite testar o pipeline sem request Flask.
"""
import functools
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from flask import g, has_app_context, has_request_context
from flask_login import current_user
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.exc import IntegrityError

from .errors import ActionError, Conflict, ServerError, Unauthenticated, ValidationFailed
from .extensions import db
from .permissions import check_caller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str


SessionResolver = Callable[[], Optional[Caller]]
StaleViewsNotifier = Callable[[Iterable[str]], None]


class Schema(BaseModel):
    """Base dos payloads: sem campos extras, strings sem espaços nas pontas."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class Empty(Schema):
    pass


class ById(Schema):
    id: str = Field(min_length=1)


# ---------------------------------------------------------------
# Sessão e views desatualizadas no contexto Flask
# ---------------------------------------------------------------
def flask_session_resolver() -> Optional[Caller]:
    if not has_request_context():
        return None
    if not current_user.is_authenticated or not current_user.active:
        return None
    return Caller(user_id=current_user.id, role=current_user.role)


def flask_stale_views(paths: Iterable[str]) -> None:
    if not has_request_context():
        return
    stale = g.setdefault("stale_views", [])
    for path in paths:
        if path not in stale:
            stale.append(path)


# ---------------------------------------------------------------
# Mensagens de validação
# ---------------------------------------------------------------
_MESSAGES = {
    "missing": "Campo obrigatório",
    "extra_forbidden": "Campo não permitido",
    "string_type": "Deve ser um texto",
    "string_too_short": "Deve ter pelo menos {min_length} caractere(s)",
    "string_too_long": "Deve ter no máximo {max_length} caracteres",
    "int_type": "Deve ser um número inteiro",
    "int_parsing": "Deve ser um número inteiro",
    "int_from_float": "Deve ser um número inteiro",
    "decimal_parsing": "Número inválido",
    "decimal_type": "Número inválido",
    "greater_than": "Deve ser maior que {gt}",
    "greater_than_equal": "Deve ser maior ou igual a {ge}",
    "less_than": "Deve ser menor que {lt}",
    "less_than_equal": "Deve ser menor ou igual a {le}",
    "literal_error": "Valor inválido. Use: {expected}",
    "enum": "Valor inválido. Use: {expected}",
    "date_parsing": "Data inválida",
    "date_from_datetime_parsing": "Data inválida",
    "date_type": "Data inválida",
    "datetime_parsing": "Data inválida",
    "datetime_from_date_parsing": "Data inválida",
    "datetime_type": "Data inválida",
    "bool_parsing": "Deve ser verdadeiro ou falso",
    "model_type": "O payload deve ser um objeto",
    "dict_type": "O payload deve ser um objeto",
}


def _message(err: dict) -> str:
    err_type = err.get("type", "")
    ctx = err.get("ctx") or {}
    if err_type == "value_error":
        if "email" in err.get("msg", ""):
            return "E-mail inválido"
        return str(ctx.get("error", err.get("msg")))
    template = _MESSAGES.get(err_type)
    if template is None:
        return err.get("msg", "Valor inválido")
    try:
        return template.format(**ctx)
    except (KeyError, IndexError):
        return template


def validation_errors(exc: ValidationError) -> dict:
    fields = {}
    for err in exc.errors():
        key = ".".join(str(p) for p in err.get("loc", ())) or "_root"
        fields.setdefault(key, _message(err))
    return fields


def parse_payload(schema, payload):
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationFailed({"_root": "O payload deve ser um objeto"})
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(validation_errors(exc)) from exc


def _rollback():
    if has_app_context():
        db.session.rollback()


UNIQUE_VIOLATION = "23505"


def is_unique_violation(err: IntegrityError) -> bool:
    """Só unicidade vira Conflict; FK, CHECK e NOT NULL são erro interno."""
    orig = err.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    return str(orig).startswith("UNIQUE constraint failed")


# ---------------------------------------------------------------
# Cliente de ações
# ---------------------------------------------------------------
class ActionClient:

    def __init__(self, resolve_session: SessionResolver = flask_session_resolver,
                 notify_stale: StaleViewsNotifier = flask_stale_views):
        self.resolve_session = resolve_session
        self.notify_stale = notify_stale

    def action(self, schema=Empty, perm: str | None = None, roles=None, revalidate=()):
        roles = tuple(roles) if roles else None
        revalidate = tuple(revalidate)

        def decorator(handler):
            @functools.wraps(handler)
            def operation(payload=None):
                name = handler.__name__
                try:
                    caller = self.resolve_session()
                    if caller is None:
                        raise Unauthenticated()
                    data = parse_payload(schema, payload)
                    check_caller(caller, perm=perm, roles=roles)
                except ActionError as err:
                    logger.info("%s recusada: %s (%s)", name, err.kind, err.message)
                    return err.to_result()

                try:
                    result = handler(data, caller)
                except ActionError as err:
                    _rollback()
                    logger.warning("%s falhou: %s (%s)", name, err.kind, err.message)
                    return err.to_result()
                except IntegrityError as err:
                    _rollback()
                    if is_unique_violation(err):
                        logger.warning("%s violou restrição de unicidade: %s", name, err.orig)
                        return Conflict().to_result()
                    logger.error("%s violou restrição de integridade: %s", name, err.orig)
                    return ServerError().to_result()
                except Exception as err:
                    _rollback()
                    logger.exception("%s: erro inesperado", name)
                    return ServerError(str(err) or None).to_result()

                if revalidate:
                    self.notify_stale(revalidate)
                return {"success": True, **(result or {})}

            operation.schema = schema
            operation.perm = perm
            operation.roles = roles
            return operation

        return decorator


action_client = ActionClient()
