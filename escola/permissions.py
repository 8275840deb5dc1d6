from functools import wraps

from flask import jsonify
from flask_login import current_user

from .errors import Forbidden, Unauthenticated

ADMIN = "admin"
TEACHER = "teacher"
STUDENT = "student"

ROLES = (ADMIN, TEACHER, STUDENT)

ROLE_LABELS = {
    ADMIN: "administrador",
    TEACHER: "professor",
    STUDENT: "aluno",
}


# -------------------------------
# Permissões por papel (role)
# -------------------------------
ROLE_PERMS = {

    ADMIN: [
        "ver_estoque",
        "gerenciar_materiais",
        "movimentar_estoque",
        "gerenciar_alunos",
        "gerenciar_professores",
        "gerenciar_cursos",
        "gerenciar_salas",
        "gerenciar_financeiro",
        "gerenciar_usuarios",
        "ver_relatorios",
    ],

    TEACHER: [
        "ver_estoque",
        "movimentar_estoque",
        "portal_professor",
    ],

    STUDENT: [
        "portal_aluno",
    ],
}

def has_perm(role: str, perm: str) -> bool:
    return perm in ROLE_PERMS.get(role, ())


def roles_for(perm: str) -> list:
    return [role for role in ROLES if has_perm(role, perm)]


def forbidden_message(required) -> str:
    nomes = " ou ".join(ROLE_LABELS.get(r, r) for r in required)
    return f"Acesso negado. Apenas {nomes} pode executar esta operação."


def check_caller(caller, perm=None, roles=None):
    """Levanta Forbidden se o papel do chamador não atende ``perm``/``roles``."""
    if roles and caller.role not in roles:
        raise Forbidden(forbidden_message(roles))
    if perm and not has_perm(caller.role, perm):
        raise Forbidden(forbidden_message(roles_for(perm)))


# -------------------------------
# Decorator para views Flask comuns
# -------------------------------
def roles_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                err = Unauthenticated()
                return jsonify(err.to_result()), err.http_status

            if current_user.role not in roles:
                err = Forbidden(forbidden_message(roles))
                return jsonify(err.to_result()), err.http_status

            return fn(*args, **kwargs)
        return wrapper
    return decorator


def perm_required(perm_name: str):
    return roles_required(*roles_for(perm_name))
