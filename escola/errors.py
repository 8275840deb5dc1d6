"""Falhas tipadas das operações.

Toda operação devolve um resultado discriminado; estas exceções são a forma
de um handler (ou do próprio pipeline) dizer *qual* falha aconteceu. O
pipeline converte cada uma no formato::

    {"success": False, "kind": "NotFound", "serverError": "Material não encontrado"}

ou, para validação::

    {"success": False, "kind": "ValidationFailed", "validationErrors": {"quantity": "..."}}
"""


class ActionError(Exception):
    kind = "ServerError"
    http_status = 500
    default_message = "Erro interno do servidor"

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_result(self) -> dict:
        return {"success": False, "kind": self.kind, "serverError": self.message}


class Unauthenticated(ActionError):
    kind = "Unauthenticated"
    http_status = 401
    default_message = "Não autenticado"


class Forbidden(ActionError):
    kind = "Forbidden"
    http_status = 403
    default_message = "Acesso negado"


class ValidationFailed(ActionError):
    kind = "ValidationFailed"
    http_status = 422
    default_message = "Dados inválidos"

    def __init__(self, fields: dict, message=None):
        super().__init__(message)
        self.fields = dict(fields)

    def to_result(self) -> dict:
        return {"success": False, "kind": self.kind, "validationErrors": self.fields}


class NotFound(ActionError):
    kind = "NotFound"
    http_status = 404
    default_message = "Registro não encontrado"


class Conflict(ActionError):
    kind = "Conflict"
    http_status = 409
    default_message = "Registro já cadastrado"


class InsufficientStock(ActionError):
    kind = "InsufficientStock"
    http_status = 409
    default_message = "Quantidade insuficiente em estoque"


class ServerError(ActionError):
    pass


class ImmutableRecordError(Forbidden):
    """Tentativa de alterar ou apagar uma movimentação já registrada."""

    default_message = "Movimentações de estoque não podem ser alteradas"


HTTP_STATUS = {
    cls.kind: cls.http_status
    for cls in (ServerError, Unauthenticated, Forbidden, ValidationFailed, NotFound, Conflict, InsufficientStock)
}


def http_status_for(result: dict) -> int:
    if result.get("success"):
        return 200
    return HTTP_STATUS.get(result.get("kind"), 500)
