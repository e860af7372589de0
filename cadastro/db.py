# cadastro/db.py
import logging
from contextlib import contextmanager
from psycopg2.pool import SimpleConnectionPool
import psycopg2.extras

logger = logging.getLogger(__name__)

_pool: SimpleConnectionPool | None = None

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS users (
        id            SERIAL PRIMARY KEY,
        name          TEXT        NOT NULL,
        cpf           CHAR(11)    NOT NULL UNIQUE,
        phone         CHAR(11)    NOT NULL,
        postal_code   CHAR(8)     NOT NULL,
        street        TEXT,
        neighborhood  TEXT,
        city          TEXT,
        state         CHAR(2),
        created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
"""

def init_db(db_cfg: dict) -> None:
    """
    Inicializa o pool de conexões. Chamado uma vez pelo create_app()
    quando nenhum repositório é injetado.

    db_cfg vem do Config.DB_CFG: host, port, dbname, user, password, sslmode...
    """
    global _pool
    if _pool is not None:
        return

    _pool = SimpleConnectionPool(
        minconn=1,
        maxconn=10,
        cursor_factory=psycopg2.extras.RealDictCursor,  # linhas viram dict
        **db_cfg,
    )
    logger.info("Pool de conexões criado (%s:%s/%s)",
                db_cfg.get("host"), db_cfg.get("port"), db_cfg.get("dbname"))

def _ensure_pool() -> None:
    if _pool is None:
        raise RuntimeError(
            "Sem pool de conexões: create_app() sem repositório injetado "
            "ou init_db(DB_CFG) precisa rodar antes do primeiro acesso ao banco."
        )

@contextmanager
def get_conn():
    """Empresta uma conexão do pool; commit ao sair, rollback se algo falhar."""
    _ensure_pool()
    conn = _pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        _pool.putconn(conn)

def init_schema() -> None:
    """Cria a tabela users se ainda não existir."""
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(SCHEMA_SQL)

def close_pool() -> None:
    """Descarta o pool; o próximo init_db cria outro."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
