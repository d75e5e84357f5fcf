"""
WhatsApp (Evolution API) gateway.

Uma única operação: enviar texto para um telefone. Nunca levanta exceção;
falhas de rede viram ``False`` e ficam registradas no log.
"""

import logging
import re

import httpx

from agenda_clinica.core.config import settings

logger = logging.getLogger(__name__)

COUNTRY_CODE = "55"


def normalize_phone(phone: str) -> str:
    """Só dígitos, com o DDI do Brasil quando ausente."""
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return ""
    return digits if digits.startswith(COUNTRY_CODE) else f"{COUNTRY_CODE}{digits}"


class EvolutionGateway:
    def __init__(self, api_url: str, api_key: str, instance_name: str, timeout: float = None, transport=None):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.instance_name = instance_name
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    def send_text(self, phone: str, text: str) -> bool:
        number = normalize_phone(phone)
        if not number:
            logger.warning("Telefone vazio, mensagem não enviada")
            return False

        url = f"{self.api_url}/message/sendText/{self.instance_name}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    url,
                    headers={"apikey": self.api_key},
                    json={"number": number, "text": text},
                )
        except httpx.HTTPError as exc:
            logger.error("Falha ao enviar WhatsApp para %s: %s", number, exc)
            return False

        if response.is_success:
            logger.info("WhatsApp enviado para %s (%s)", number, response.status_code)
            return True

        logger.warning(
            "Evolution API recusou envio para %s: %s %s",
            number, response.status_code, response.text[:200],
        )
        return False
