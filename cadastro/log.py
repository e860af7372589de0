"""
Configuração de logging da aplicação.

Nunca registra dados sensíveis (CPF completo, corpo das requisições).
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Configura o logging da aplicação.

    Args:
        level: nível de log (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    # urllib3 (requests) é verboso em DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def mask_cpf(cpf: str | None) -> str:
    """'52998224725' -> '***.***.*47-25'; usado apenas em mensagens de log."""
    digits = cpf or ""
    if len(digits) != 11:
        return "***"
    return f"***.***.*{digits[7:9]}-{digits[9:]}"
