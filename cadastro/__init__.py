# cadastro/__init__.py
import logging

import click
from flask import Flask

from .config import Config
from .db import init_db, init_schema
from .errors import register_error_handlers
from .log import configure_logging
from .repositories.users import UserRepository
from .services.address_service import AddressService
from .services.user_service import UserService
from .blueprints.users import bp as users_bp

logger = logging.getLogger(__name__)

def create_app(config=None, users=None, addresses=None):
    """
    Monta a aplicação.

    config:    objeto/classe de configuração (padrão: Config, lido do .env)
    users:     repositório de usuários; se omitido, usa o Postgres de DB_CFG
    addresses: serviço de endereço; se omitido, usa o ViaCEP
    """
    app = Flask(__name__)
    app.config.from_object(config or Config())
    app.json.ensure_ascii = False  # mensagens em português sem \uXXXX

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if users is None:
        init_db(app.config["DB_CFG"])
        users = UserRepository(max_page_size=app.config["MAX_PAGE_SIZE"])
    if addresses is None:
        addresses = AddressService(
            url=app.config["VIACEP_URL"],
            timeout=app.config["VIACEP_TIMEOUT"],
        )

    app.extensions["user_service"] = UserService(
        users,
        addresses,
        default_page_size=app.config["DEFAULT_PAGE_SIZE"],
        require_address_on_update=app.config["REQUIRE_ADDRESS_ON_UPDATE"],
    )

    register_error_handlers(app)
    app.register_blueprint(users_bp)

    @app.cli.command("init-db")
    def init_db_command():
        """Cria a tabela users."""
        init_schema()
        click.echo("Tabela users pronta.")

    logger.info("Aplicação cadastro iniciada")
    return app
