"""
Testes do SQL enviado pelo UserRepository.

O psycopg2 nunca é acionado: get_conn é substituído por uma conexão falsa.
"""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest
from psycopg2 import errors as pg_errors

from cadastro.errors import DuplicateError
from cadastro.models import AddressInfo
from cadastro.repositories.users import UserRepository

ROW = {
    "id": 7,
    "name": "Maria da Silva",
    "cpf": "52998224725",
    "phone": "11987654321",
    "postal_code": "01001000",
    "street": "Praça da Sé",
    "neighborhood": "Sé",
    "city": "São Paulo",
    "state": "SP",
}


@pytest.fixture
def cur():
    cursor = MagicMock()
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor

    @contextmanager
    def fake_get_conn():
        yield conn

    with patch("cadastro.repositories.users.get_conn", fake_get_conn):
        yield cursor


class TestFindAll:
    """Testes de find_all."""

    def test_page_and_offset(self, cur) -> None:
        cur.fetchone.return_value = {"total": 21}
        cur.fetchall.return_value = [ROW]

        page = UserRepository().find_all(3, 10, "ASC")

        sql, params = cur.execute.call_args_list[1].args
        assert "ORDER BY id ASC" in sql
        assert params == {"limit": 10, "offset": 20}
        assert page.total == 21
        assert page.last_page == 3
        assert page.data[0].cpf == "52998224725"

    def test_sort_whitelisted(self, cur) -> None:
        cur.fetchone.return_value = {"total": 1}
        cur.fetchall.return_value = []
        UserRepository().find_all(1, 10, "id; DROP TABLE users")
        sql = cur.execute.call_args_list[1].args[0]
        assert "ORDER BY id DESC" in sql
        assert "DROP" not in sql

    def test_limit_clamped(self, cur) -> None:
        cur.fetchone.return_value = {"total": 1}
        cur.fetchall.return_value = []
        page = UserRepository(max_page_size=50).find_all(0, 500)
        params = cur.execute.call_args_list[1].args[1]
        assert params == {"limit": 50, "offset": 0}
        assert page.page == 1

    def test_page_past_end_skips_select(self, cur) -> None:
        cur.fetchone.return_value = {"total": 3}
        page = UserRepository().find_all(99999999999999999999, 10)
        assert cur.execute.call_count == 1
        assert page.data == []
        assert page.total == 3
        assert page.page == 99999999999999999999

    def test_empty_table_skips_select(self, cur) -> None:
        cur.fetchone.return_value = {"total": 0}
        page = UserRepository().find_all(1, 10)
        assert cur.execute.call_count == 1
        assert page.last_page == 1


class TestFindByCPF:
    """Testes de find_by_cpf."""

    def test_found(self, cur) -> None:
        cur.fetchone.return_value = ROW
        user = UserRepository().find_by_cpf("52998224725")
        assert user.id == 7
        assert cur.execute.call_args.args[1] == ("52998224725",)

    def test_absent(self, cur) -> None:
        cur.fetchone.return_value = None
        assert UserRepository().find_by_cpf("52998224725") is None


class TestCreate:
    """Testes de create."""

    def test_returns_user(self, cur) -> None:
        cur.fetchone.return_value = ROW
        user = UserRepository().create({
            "name": "Maria da Silva", "cpf": "52998224725",
            "phone": "11987654321", "postal_code": "01001000",
        })
        params = cur.execute.call_args.args[1]
        assert params["street"] is None
        assert user.city == "São Paulo"

    def test_unique_violation_is_duplicate(self, cur) -> None:
        cur.execute.side_effect = pg_errors.UniqueViolation("duplicate key")
        with pytest.raises(DuplicateError):
            UserRepository().create({"name": "x", "cpf": "52998224725",
                                     "phone": "11987654321", "postal_code": "01001000"})


class TestRemove:
    """Testes de remove."""

    @pytest.mark.parametrize("rowcount", [0, 1])
    def test_affected_count(self, cur, rowcount) -> None:
        cur.rowcount = rowcount
        assert UserRepository().remove(7) == rowcount


class TestUpdate:
    """Testes de update."""

    def test_with_address(self, cur) -> None:
        cur.fetchone.return_value = ROW
        address = AddressInfo("01001000", "Praça da Sé", "Sé", "São Paulo", "SP")
        UserRepository().update(7, {"phone": "11987654321"}, address)
        params = cur.execute.call_args.args[1]
        assert params["set_address"] is True
        assert params["street"] == "Praça da Sé"
        assert params["cpf"] is None
        assert params["id"] == 7

    def test_without_address(self, cur) -> None:
        cur.fetchone.return_value = ROW
        UserRepository().update(7, {"name": "Maria"}, None)
        params = cur.execute.call_args.args[1]
        assert params["set_address"] is False
        assert params["name"] == "Maria"

    def test_missing_id(self, cur) -> None:
        cur.fetchone.return_value = None
        assert UserRepository().update(99, {}, None) is None
