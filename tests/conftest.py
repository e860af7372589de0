"""Configuração do pytest e fixtures."""

from typing import Dict, Optional

import pytest

from cadastro import create_app
from cadastro.config import Config
from cadastro.models import AddressInfo, Page, User

VALID_CPF = "52998224725"
OTHER_VALID_CPF = "11144477735"


class InMemoryUserRepository:
    """Repositório em memória com o mesmo contrato do UserRepository."""

    def __init__(self) -> None:
        self.rows: Dict[int, User] = {}
        self.next_id = 1
        self.find_all_calls = []

    def find_all(self, page: int, limit: int, sort: str = "DESC") -> Page:
        self.find_all_calls.append((page, limit, sort))
        ordered = sorted(self.rows.values(), key=lambda u: u.id, reverse=(sort == "DESC"))
        start = (max(page, 1) - 1) * limit
        return Page(data=ordered[start:start + limit], page=page, limit=limit, total=len(ordered))

    def find_by_cpf(self, cpf: str) -> Optional[User]:
        return next((u for u in self.rows.values() if u.cpf == cpf), None)

    def create(self, data: dict) -> User:
        user = User(id=self.next_id, **data)
        self.rows[user.id] = user
        self.next_id += 1
        return user

    def remove(self, user_id: int) -> int:
        return 1 if self.rows.pop(user_id, None) else 0

    def update(self, user_id: int, fields: dict, address: Optional[AddressInfo]) -> Optional[User]:
        user = self.rows.get(user_id)
        if user is None:
            return None
        for key, value in fields.items():
            setattr(user, key, value)
        if address is not None:
            for key, value in address.to_fields().items():
                setattr(user, key, value)
        return user


class StubAddressService:
    """Conhece apenas os CEPs cadastrados em `known`."""

    def __init__(self) -> None:
        self.known = {
            "01001000": AddressInfo("01001000", "Praça da Sé", "Sé", "São Paulo", "SP"),
            "20040002": AddressInfo("20040002", "Rua da Assembleia", "Centro", "Rio de Janeiro", "RJ"),
        }
        self.calls = []

    def find_one(self, postal_code: str) -> Optional[AddressInfo]:
        self.calls.append(postal_code)
        return self.known.get(postal_code)


class ConfigForTests(Config):
    TESTING = True
    LOG_LEVEL = "WARNING"
    REQUIRE_ADDRESS_ON_UPDATE = True


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def addresses() -> StubAddressService:
    return StubAddressService()


@pytest.fixture
def app(users, addresses):
    return create_app(ConfigForTests, users=users, addresses=addresses)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_payload() -> dict:
    """Payload de criação completo, com máscaras."""
    return {
        "name": "  Maria   da Silva ",
        "cpf": "529.982.247-25",
        "phone": "(11) 98765-4321",
        "postal_code": "01001-000",
    }


@pytest.fixture
def existing_user(users) -> User:
    return users.create({
        "name": "Maria da Silva",
        "cpf": VALID_CPF,
        "phone": "11987654321",
        "postal_code": "01001000",
        "street": "Praça da Sé",
        "neighborhood": "Sé",
        "city": "São Paulo",
        "state": "SP",
    })
