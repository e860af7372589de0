# cadastro/services/user_service.py
import logging
from typing import Any, Dict, Optional

import requests

from ..errors import DuplicateError, NotFoundError, ValidationError
from ..log import mask_cpf
from ..models import AddressInfo, Page, User
from ..validators import (
    SORT_ORDERS,
    check_update_fields,
    handle_user,
    is_digit,
    is_valid_cpf,
    normalize_only_numbers,
    validate_user,
)

logger = logging.getLogger(__name__)

MSG_QUERY_NOT_NUMERIC = "Os parâmetros de consulta precisam ser numéricos."
MSG_INVALID_SORT = "A ordenação deve ser ASC ou DESC."
MSG_INVALID_USER = "Dados do usuário estão inválidos."
MSG_INVALID_CPF = "CPF inválido."
MSG_USER_EXISTS = "Usuário já cadastrado."
MSG_USER_NOT_FOUND = "Nenhum usuário encontrado com estes dados."
MSG_NOTHING_DELETED = "Nenhum usuário deletado."
MSG_USER_DELETED = "Usuário deletado com sucesso."
MSG_ID_NOT_NUMERIC = "O parâmetro ID precisa ser numérico."
MSG_CPF_IN_USE = "CPF já está em uso."
MSG_ADDRESS_NOT_FOUND = "Dados de endereço não encontrados."

UPDATABLE_FIELDS = ("name", "cpf", "phone", "postal_code")


class UserService:
    """
    Valida as entradas e despacha para o repositório de usuários e para o
    serviço de endereços. Cada regra violada levanta um CadastroError;
    o mapeamento para status HTTP fica em errors.register_error_handlers.
    """

    def __init__(self, users, addresses, default_page_size: int = 10,
                 require_address_on_update: bool = True) -> None:
        self.users = users
        self.addresses = addresses
        self.default_page_size = default_page_size
        self.require_address_on_update = require_address_on_update

    # ---- Listagem ----
    def list_users(self, page: Any = None, limit: Any = None,
                   sort: Any = None, sort_first: bool = True) -> Page:
        """
        page/limit/sort como chegaram na query string (None = não enviado).
        sort_first=False reproduz a rota antiga, que checa os números antes.
        """
        page = 1 if page is None else page
        limit = self.default_page_size if limit is None else limit
        sort = "DESC" if sort is None else sort

        if sort_first:
            order = self._check_sort(sort)
            self._check_numeric(page, limit)
        else:
            self._check_numeric(page, limit)
            order = self._check_sort(sort)

        return self.users.find_all(int(page), int(limit), order)

    @staticmethod
    def _check_sort(sort: Any) -> str:
        order = sort.upper() if isinstance(sort, str) else ""
        if order not in SORT_ORDERS:
            raise ValidationError(MSG_INVALID_SORT)
        return order

    @staticmethod
    def _check_numeric(*values: Any) -> None:
        if not all(is_digit(v) for v in values):
            raise ValidationError(MSG_QUERY_NOT_NUMERIC)

    # ---- Criação ----
    def create_user(self, payload: Any) -> User:
        if validate_user(payload):
            raise ValidationError(MSG_INVALID_USER)

        data = handle_user(payload)
        if not is_valid_cpf(data["cpf"]):
            raise ValidationError(MSG_INVALID_CPF)

        if self.users.find_by_cpf(data["cpf"]):
            logger.info("Cadastro recusado: CPF %s já existe", mask_cpf(data["cpf"]))
            raise DuplicateError(MSG_USER_EXISTS)

        # endereço é opcional na criação
        try:
            address = self.addresses.find_one(data["postal_code"])
        except requests.RequestException as e:
            logger.warning("Falha ao consultar o CEP %s: %s", data["postal_code"], e)
            address = None
        else:
            if not address:
                logger.warning("CEP %s sem endereço; usuário criado sem logradouro",
                               data["postal_code"])
        if address:
            data.update(address.to_fields())

        user = self.users.create(data)
        logger.info("Usuário %s criado", user.id)
        return user

    # ---- Consulta ----
    def find_by_cpf(self, cpf: Optional[str]) -> User:
        normalized = normalize_only_numbers(cpf)
        if not is_valid_cpf(normalized):
            raise ValidationError(MSG_INVALID_CPF)
        user = self.users.find_by_cpf(normalized)
        if not user:
            raise NotFoundError(MSG_USER_NOT_FOUND)
        return user

    # ---- Remoção ----
    def delete_user(self, raw_id: Any) -> str:
        user_id = self._parse_id(raw_id)
        affected = self.users.remove(user_id)
        if not affected:
            raise NotFoundError(MSG_NOTHING_DELETED)
        logger.info("Usuário %s removido", user_id)
        return MSG_USER_DELETED

    # ---- Atualização ----
    def update_user(self, raw_id: Any, payload: Any) -> User:
        user_id = self._parse_id(raw_id)

        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError(MSG_INVALID_USER)
        fields = {k: payload[k] for k in UPDATABLE_FIELDS if payload.get(k) is not None}

        fields = check_update_fields(fields)
        if "name" in fields and not (isinstance(fields["name"], str) and fields["name"].strip()):
            raise ValidationError(MSG_INVALID_USER)

        if "cpf" in fields:
            existing = self.users.find_by_cpf(fields["cpf"])
            if existing and existing.id != user_id:
                logger.info("Atualização do usuário %s recusada: CPF %s em uso",
                            user_id, mask_cpf(fields["cpf"]))
                raise DuplicateError(MSG_CPF_IN_USE)

        address = self._resolve_address(fields.get("postal_code"))

        user = self.users.update(user_id, fields, address)
        if not user:
            raise NotFoundError(MSG_USER_NOT_FOUND)
        logger.info("Usuário %s atualizado (%s)", user_id, ", ".join(sorted(fields)) or "endereço")
        return user

    def _resolve_address(self, postal_code: Optional[str]) -> Optional[AddressInfo]:
        """
        Sem CEP no payload: com require_address_on_update (padrão) a
        atualização é recusada; sem ele o endereço salvo é mantido.
        """
        if postal_code is None:
            if self.require_address_on_update:
                raise ValidationError(MSG_ADDRESS_NOT_FOUND)
            return None
        address = self.addresses.find_one(postal_code)
        if not address:
            raise ValidationError(MSG_ADDRESS_NOT_FOUND)
        return address

    @staticmethod
    def _parse_id(raw_id: Any) -> int:
        if not is_digit(raw_id) or int(raw_id) < 1:
            raise ValidationError(MSG_ID_NOT_NUMERIC)
        return int(raw_id)
