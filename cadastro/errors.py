"""
Erros de domínio do cadastro e seu mapeamento para respostas HTTP.

Toda resposta de erro tem o formato {"error": "<mensagem>"}.
Falhas de infraestrutura (banco, ViaCEP) não são tratadas nos serviços:
sobem até o handler genérico, que responde 500 sem expor detalhes.
"""

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_404 = 404
HTTP_500 = 500


class CadastroError(Exception):
    """Base de todos os erros de negócio do cadastro."""

    status_code = HTTP_400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CadastroError):
    """Entrada malformada ou fora da faixa aceita."""

    status_code = HTTP_400


class DuplicateError(CadastroError):
    """Violação de unicidade (CPF já cadastrado)."""

    status_code = HTTP_400


class NotFoundError(CadastroError):
    """Nenhum registro corresponde aos dados informados."""

    status_code = HTTP_404


def _error_response(status_code: int, error: str):
    return jsonify({"error": error}), status_code


def register_error_handlers(app: Flask) -> None:
    """Registra os handlers de erro na aplicação Flask."""

    @app.errorhandler(CadastroError)
    def handle_cadastro_error(exc: CadastroError):
        logger.info("%s (%d): %s", type(exc).__name__, exc.status_code, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        response, status = _error_response(exc.code or HTTP_500, exc.description or exc.name)
        # preserva Allow (405), WWW-Authenticate etc.; o corpo agora é JSON
        for key, value in exc.get_headers():
            if key.lower() != "content-type":
                response.headers[key] = value
        return response, status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        """Catch-all. Nunca expõe detalhes internos."""
        logger.exception("Erro inesperado: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Erro interno do servidor.")
