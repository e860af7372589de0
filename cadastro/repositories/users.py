# cadastro/repositories/users.py
import logging
from typing import Optional, Dict, Any

from psycopg2 import errors as pg_errors

from ..db import get_conn
from ..errors import DuplicateError
from ..models import AddressInfo, Page, User

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, cpf, phone, postal_code, street, neighborhood, city, state"

class UserRepository:
    def __init__(self, max_page_size: int = 100) -> None:
        self.max_page_size = max_page_size

    def find_all(self, page: int, limit: int, sort: str = "DESC") -> Page:
        """
        Página de usuários ordenada por id. `sort` já chega validado
        (ASC/DESC), mas é conferido de novo porque entra no SQL como texto.
        """
        order = "ASC" if str(sort).upper() == "ASC" else "DESC"
        page = max(1, page)
        limit = max(1, min(limit, self.max_page_size))
        params = {"limit": limit, "offset": (page - 1) * limit}
        with get_conn() as conn, conn.cursor() as cur:
            cur.execute("SELECT COUNT(*) AS total FROM users;")
            total = cur.fetchone()["total"]
            # página além do fim: nada a buscar (e OFFSET enorme estoura bigint)
            if params["offset"] >= total:
                return Page(data=[], page=page, limit=limit, total=total)
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                  FROM users
                 ORDER BY id {order}
                 LIMIT %(limit)s OFFSET %(offset)s;
                """,
                params,
            )
            rows = cur.fetchall()
        return Page(
            data=[User.from_row(r) for r in rows],
            page=page,
            limit=limit,
            total=total,
        )

    def find_by_cpf(self, cpf: str) -> Optional[User]:
        with get_conn() as conn, conn.cursor() as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE cpf=%s;", (cpf,))
            row = cur.fetchone()
        return User.from_row(row) if row else None

    def create(self, data: Dict[str, Any]) -> User:
        sql = f"""
            INSERT INTO users (
              name, cpf, phone, postal_code, street, neighborhood, city, state
            )
            VALUES (
              %(name)s, %(cpf)s, %(phone)s, %(postal_code)s,
              NULLIF(%(street)s,''), NULLIF(%(neighborhood)s,''),
              NULLIF(%(city)s,''), NULLIF(%(state)s,'')
            )
            RETURNING {_COLUMNS};
        """
        params = {
            "street": None, "neighborhood": None, "city": None, "state": None,
            **data,
        }
        try:
            with get_conn() as conn, conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
        except pg_errors.UniqueViolation:
            # outra requisição gravou o mesmo CPF entre a checagem e o INSERT
            raise DuplicateError("Usuário já cadastrado.")
        return User.from_row(row)

    def remove(self, user_id: int) -> int:
        """Retorna a quantidade de linhas apagadas (0 ou 1)."""
        with get_conn() as conn, conn.cursor() as cur:
            cur.execute("DELETE FROM users WHERE id=%s;", (user_id,))
            return cur.rowcount

    def update(
        self,
        user_id: int,
        fields: Dict[str, Any],
        address: Optional[AddressInfo],
    ) -> Optional[User]:
        """
        Atualiza só os campos presentes em `fields`; o endereço é
        sobrescrito apenas quando `address` vier preenchido.
        Retorna None se o id não existir.
        """
        params = {
            "id": user_id,
            "name": fields.get("name"),
            "cpf": fields.get("cpf"),
            "phone": fields.get("phone"),
            "postal_code": fields.get("postal_code"),
            "set_address": address is not None,
            **(address.to_fields() if address else
               {"street": None, "neighborhood": None, "city": None, "state": None}),
        }
        sql = f"""
            UPDATE users
               SET name=COALESCE(%(name)s, name),
                   cpf=COALESCE(%(cpf)s, cpf),
                   phone=COALESCE(%(phone)s, phone),
                   postal_code=COALESCE(%(postal_code)s, postal_code),
                   street=CASE WHEN %(set_address)s THEN NULLIF(%(street)s,'') ELSE street END,
                   neighborhood=CASE WHEN %(set_address)s THEN NULLIF(%(neighborhood)s,'') ELSE neighborhood END,
                   city=CASE WHEN %(set_address)s THEN NULLIF(%(city)s,'') ELSE city END,
                   state=CASE WHEN %(set_address)s THEN NULLIF(%(state)s,'') ELSE state END,
                   updated_at=NOW()
             WHERE id=%(id)s
         RETURNING {_COLUMNS};
        """
        try:
            with get_conn() as conn, conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
        except pg_errors.UniqueViolation:
            raise DuplicateError("CPF já está em uso.")
        return User.from_row(row) if row else None
