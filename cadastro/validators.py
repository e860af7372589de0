# cadastro/validators.py
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .errors import ValidationError

_NON_DIGITS = re.compile(r"[^0-9]")

CPF_LENGTH = 11
PHONE_LENGTH = 11
POSTAL_CODE_LENGTH = 8

SORT_ORDERS = ("ASC", "DESC")


def normalize_only_numbers(value: Optional[str]) -> str:
    """Remove tudo que não for dígito. '529.982.247-25' -> '52998224725'."""
    return _NON_DIGITS.sub("", value or "")


def is_digit(value: Any) -> bool:
    """True para inteiros não negativos ou strings compostas só de dígitos ASCII."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    return isinstance(value, str) and value.isascii() and value.isdigit()


def is_valid_cpf(cpf: Optional[str]) -> bool:
    """
    Valida CPF pelo algoritmo dos dígitos verificadores.
    Espera o CPF apenas com dígitos; qualquer outra coisa é inválida.
    """
    if not cpf or len(cpf) != CPF_LENGTH or not cpf.isdigit():
        return False
    # 000.000.000-00, 111.111.111-11... passam no cálculo mas não existem
    if cpf == cpf[0] * CPF_LENGTH:
        return False
    for i in (9, 10):
        total = sum(int(cpf[j]) * ((i + 1) - j) for j in range(i))
        digit = (total * 10) % 11 % 10
        if int(cpf[i]) != digit:
            return False
    return True


def _has_length(n: int) -> Callable[[str], bool]:
    return lambda v: len(v) == n


@dataclass(frozen=True)
class FieldRule:
    normalize: Callable[[Optional[str]], str]
    check: Callable[[str], bool]
    message: str


# Ordem importa: é a ordem em que os campos são validados na atualização.
UPDATE_RULES: Dict[str, FieldRule] = {
    "phone": FieldRule(
        normalize_only_numbers,
        _has_length(PHONE_LENGTH),
        "O telefone precisa ter 11 caracteres.",
    ),
    "cpf": FieldRule(
        normalize_only_numbers,
        lambda v: len(v) == CPF_LENGTH and is_valid_cpf(v),
        "O CPF precisa ser válido e ter 11 caracteres.",
    ),
    "postal_code": FieldRule(
        normalize_only_numbers,
        _has_length(POSTAL_CODE_LENGTH),
        "O CEP precisa ter 8 caracteres.",
    ),
}

REQUIRED_FIELDS = ("name", "cpf", "phone", "postal_code")


def validate_user(payload: Any) -> bool:
    """
    Validação estrutural do payload de criação.
    Retorna True se o usuário estiver INVÁLIDO.
    """
    if not isinstance(payload, dict):
        return True
    for key in REQUIRED_FIELDS:
        value = payload.get(key)
        if not isinstance(value, str) or not value.strip():
            return True
    if not _has_length(PHONE_LENGTH)(normalize_only_numbers(payload["phone"])):
        return True
    if not _has_length(POSTAL_CODE_LENGTH)(normalize_only_numbers(payload["postal_code"])):
        return True
    return False


def handle_user(payload: Dict[str, Any]) -> Dict[str, str]:
    """Monta o registro normalizado a partir de um payload já validado."""
    return {
        "name": " ".join(payload["name"].split()),
        "cpf": normalize_only_numbers(payload["cpf"]),
        "phone": normalize_only_numbers(payload["phone"]),
        "postal_code": normalize_only_numbers(payload["postal_code"]),
    }


def check_update_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aplica UPDATE_RULES aos campos presentes no payload.
    Retorna uma cópia com os campos normalizados; levanta ValidationError
    no primeiro campo que falhar.
    """
    fields = dict(payload)
    for key, rule in UPDATE_RULES.items():
        if fields.get(key) is None:
            continue
        raw = fields[key]
        normalized = rule.normalize(raw if isinstance(raw, str) else str(raw))
        if not rule.check(normalized):
            raise ValidationError(rule.message)
        fields[key] = normalized
    if isinstance(fields.get("name"), str):
        fields["name"] = " ".join(fields["name"].split())
    return fields
