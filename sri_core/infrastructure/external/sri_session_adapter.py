# sri_core/infrastructure/external/sri_session_adapter.py
import logging
import random
from typing import Any, Dict, Optional

import httpx

import config
from sri_core.domain.models.errors import ErrorCode
from sri_core.domain.models.results import Result
from sri_core.domain.ports.session_provider import ProtocolSession, SessionProvider
from sri_core.infrastructure.external.sri_http import build_client, decode_body, transport_reason


class SriSession(ProtocolSession):
    """
    Sesión del SRI: un `httpx.AsyncClient` cuyo cookie jar se reutiliza sin
    cambios en el captcha y en la consulta de datos. `challenge` es el JSON
    (ya decodificado de entidades HTML) devuelto por el start del captcha.
    """

    def __init__(self, client: httpx.AsyncClient, challenge: str = ""):
        self.client = client
        self.challenge = challenge

    @property
    def cookies(self) -> httpx.Cookies:
        return self.client.cookies

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None,
                  headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        return await self.client.get(path, params=params, headers=headers)

    async def aclose(self) -> None:
        await self.client.aclose()


class SriSessionAdapter(SessionProvider):
    """
    Adaptador para el servicio de captcha del SRI. Obtiene la cookie de
    sesión pidiendo `captcha/start` con un valor aleatorio que evita la caché.
    """

    def __init__(
        self,
        base_url: str = config.SRI_BASE_URL,
        timeout_seconds: float = config.SRI_TIMEOUT_SECONDS,
        verify_ssl: bool = config.SRI_VERIFY_SSL,
        user_agent: str = config.SRI_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent
        self.transport = transport
        self.rng = rng or random.Random()

    def _client(self) -> httpx.AsyncClient:
        return build_client(self.base_url, self.timeout_seconds, self.verify_ssl, self.user_agent, self.transport)

    def nonce(self) -> str:
        """Seis dígitos con ceros a la izquierda, p. ej. '004217'."""
        return f"{self.rng.randrange(1_000_000):06d}"

    async def acquire(self) -> Result[ProtocolSession]:
        client = self._client()
        acquired = False
        try:
            try:
                response = await client.get(config.CAPTCHA_START_PATH, params={"r": self.nonce()})
            except httpx.HTTPError as e:
                logging.warning(f"No se pudo abrir sesión con el SRI: {e}")
                return Result.failure(
                    ErrorCode.SESSION_ERROR,
                    "No se pudo obtener la sesión del SRI",
                    reason=transport_reason(e),
                )

            if not response.is_success:
                logging.warning(f"El SRI respondió {response.status_code} al iniciar sesión.")
                return Result.failure(
                    ErrorCode.SESSION_ERROR,
                    f"El servicio de captcha respondió {response.status_code}",
                    reason="status",
                    status_code=response.status_code,
                )

            acquired = True
            return Result.ok(SriSession(client, decode_body(response)))
        finally:
            # También cubre la cancelación: el cliente nunca queda abierto sin dueño
            if not acquired:
                await client.aclose()
