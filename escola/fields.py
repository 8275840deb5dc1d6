import re
from decimal import Decimal, InvalidOperation
from typing import Annotated, Optional

from pydantic import BeforeValidator


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def to_decimal(v):
    """Aceita 10, "10.5", "10,50" e "R$ 1.234,56"."""
    if v is None or isinstance(v, (int, float, Decimal)):
        return v if v is None else Decimal(str(v))
    s = re.sub(r"[^\d,.\-]", "", str(v))
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    try:
        return Decimal(s)
    except InvalidOperation:
        raise ValueError("Valor monetário inválido")


def _money(v):
    v = _blank_to_none(v)
    if v is None:
        return None
    return to_decimal(v)


def _cpf(v):
    v = _blank_to_none(v)
    if v is None:
        return None
    digits = re.sub(r"\D+", "", str(v))
    if len(digits) != 11:
        raise ValueError("CPF inválido")
    return digits


OptStr = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
Money = Annotated[Decimal, BeforeValidator(_money)]
OptMoney = Annotated[Optional[Decimal], BeforeValidator(_money)]
Cpf = Annotated[str, BeforeValidator(_cpf)]
OptCpf = Annotated[Optional[str], BeforeValidator(_cpf)]
