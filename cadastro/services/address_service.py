# cadastro/services/address_service.py
import logging
from typing import Optional

import requests

from ..models import AddressInfo
from ..validators import normalize_only_numbers, POSTAL_CODE_LENGTH

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://viacep.com.br/ws/{cep}/json/"


class AddressService:
    """
    Consulta de endereço por CEP na API do ViaCEP.
    Resposta de exemplo:
      {"cep": "01001-000", "logradouro": "Praça da Sé", "bairro": "Sé",
       "localidade": "São Paulo", "uf": "SP", ...}
    CEP inexistente volta 200 com {"erro": true}.
    """

    def __init__(self, url: str = DEFAULT_URL, timeout: float = 5,
                 session: Optional[requests.Session] = None) -> None:
        self.url = url
        self.timeout = timeout
        self.http = session or requests.Session()

    def find_one(self, postal_code: str) -> Optional[AddressInfo]:
        """
        Retorna o endereço do CEP ou None se o ViaCEP não o conhecer.
        Erros de rede/HTTP 5xx sobem como requests.RequestException.
        """
        cep = normalize_only_numbers(postal_code)
        if len(cep) != POSTAL_CODE_LENGTH:
            return None

        response = self.http.get(self.url.format(cep=cep), timeout=self.timeout)
        if response.status_code == 400:
            # ViaCEP responde 400 para CEP com formato inválido
            return None
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError:
            logger.warning("ViaCEP retornou corpo inválido para o CEP %s", cep)
            return None

        if not isinstance(data, dict) or data.get("erro"):
            logger.info("CEP %s não encontrado no ViaCEP", cep)
            return None

        return AddressInfo(
            postal_code=normalize_only_numbers(data.get("cep")) or cep,
            street=data.get("logradouro") or None,
            neighborhood=data.get("bairro") or None,
            city=data.get("localidade") or None,
            state=data.get("uf") or None,
        )
