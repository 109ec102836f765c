# sri_core/infrastructure/external/sri_registry_adapter.py
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

import config
from sri_core.domain.models.errors import DomainError, ErrorCode
from sri_core.domain.models.identity import Establishment, IdentificationKind, IdentityRecord
from sri_core.domain.models.results import Result
from sri_core.domain.ports.identity_registry import IdentityRegistry
from sri_core.domain.ports.session_provider import ProtocolSession
from sri_core.infrastructure.external.sri_http import (
    build_client,
    decode_body,
    strip_array_wrapper,
    transport_reason,
)

# Endpoint y nombre del parámetro por tipo de identificación
EXISTENCE_ENDPOINTS = {
    IdentificationKind.CEDULA: (config.CEDULA_EXISTENCE_PATH, "numeroIdentificacion"),
    IdentificationKind.RUC: (config.RUC_EXISTENCE_PATH, "numeroRuc"),
}
DATA_ENDPOINTS = {
    IdentificationKind.CEDULA: (config.CEDULA_DATA_PATH, "numeroIdentificacion"),
    IdentificationKind.RUC: (config.RUC_DATA_PATH, "ruc"),
}


class SriRegistryAdapter(IdentityRegistry):
    """
    Adaptador para el Registro Civil (cédulas) y el Catastro (RUC) del SRI.
    La consulta de existencia es pública; los datos completos requieren el
    token del captcha y la misma sesión en la que se emitió.
    """

    def __init__(
        self,
        base_url: str = config.SRI_BASE_URL,
        timeout_seconds: float = config.SRI_TIMEOUT_SECONDS,
        verify_ssl: bool = config.SRI_VERIFY_SSL,
        user_agent: str = config.SRI_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent
        self.transport = transport

    async def exists(self, identification: str, kind: IdentificationKind) -> Result[bool]:
        path, param = EXISTENCE_ENDPOINTS[kind]
        async with build_client(self.base_url, self.timeout_seconds, self.verify_ssl,
                                self.user_agent, self.transport) as client:
            try:
                response = await client.get(path, params={param: identification})
            except httpx.HTTPError as e:
                logging.warning(f"[{identification}] Fallo de red en la consulta de existencia: {e}")
                return Result.fail(DomainError.network(
                    "No se pudo consultar la existencia de la identificación", transport_reason(e)
                ))

        if not response.is_success:
            logging.warning(f"[{identification}] Consulta de existencia respondió {response.status_code}.")
            return Result.fail(DomainError.network(
                f"La consulta de existencia respondió {response.status_code}", "status", response.status_code
            ))

        body = decode_body(response).strip('"').lower()
        if body == "true":
            return Result.ok(True)
        if body == "false":
            return Result.ok(False)

        logging.error(f"[{identification}] Respuesta inesperada en la consulta de existencia: {body[:200]!r}")
        return Result.failure(
            ErrorCode.DESERIALIZATION_ERROR,
            "La consulta de existencia devolvió una respuesta no reconocida",
        )

    async def fetch(
        self,
        identification: str,
        kind: IdentificationKind,
        token: str,
        session: ProtocolSession,
    ) -> Result[IdentityRecord]:
        path, param = DATA_ENDPOINTS[kind]
        payload = await self._get_json(session, path, {param: identification}, token, identification)
        if not payload.is_success:
            return Result.fail(payload.error)

        body = payload.value
        if not body:
            return Result.failure(ErrorCode.NOT_FOUND, f"No existen datos para la identificación {identification}")

        try:
            record = IdentityRecord.model_validate(json.loads(body))
        except (ValueError, ValidationError) as e:
            logging.error(f"[{identification}] No se pudo interpretar la respuesta de datos: {e}")
            return Result.failure(
                ErrorCode.DESERIALIZATION_ERROR,
                "La respuesta de datos del SRI no tiene el formato esperado",
            )

        if kind == IdentificationKind.RUC:
            establishments = await self._fetch_establishments(identification, token, session)
            if not establishments.is_success:
                return Result.fail(establishments.error)
            record = record.with_establishments(establishments.value)

        return Result.ok(record)

    async def _fetch_establishments(
        self, ruc: str, token: str, session: ProtocolSession
    ) -> Result[List[Establishment]]:
        payload = await self._get_json(
            session, config.RUC_ESTABLISHMENTS_PATH, {"numeroRuc": ruc}, token, ruc, unwrap=False
        )
        if not payload.is_success:
            return Result.fail(payload.error)

        try:
            items = json.loads(payload.value) if payload.value else []
            if not isinstance(items, list):
                items = [items]
            establishments = [Establishment.model_validate(item) for item in items]
        except (ValueError, ValidationError) as e:
            logging.error(f"[{ruc}] No se pudo interpretar la lista de establecimientos: {e}")
            return Result.failure(
                ErrorCode.DESERIALIZATION_ERROR,
                "La lista de establecimientos del SRI no tiene el formato esperado",
            )
        return Result.ok(establishments)

    async def _get_json(
        self,
        session: ProtocolSession,
        path: str,
        params: Dict[str, Any],
        token: str,
        identification: str,
        unwrap: bool = True,
    ) -> Result[str]:
        """GET autenticado sobre la sesión; retorna el cuerpo decodificado."""
        try:
            response = await session.get(path, params=params, headers={"Authorization": token})
        except httpx.HTTPError as e:
            logging.warning(f"[{identification}] Fallo de red consultando {path}: {e}")
            return Result.fail(DomainError.network(
                "No se pudo consultar el servicio de datos del SRI", transport_reason(e)
            ))

        if not response.is_success:
            logging.warning(f"[{identification}] {path} respondió {response.status_code}.")
            return Result.fail(DomainError.network(
                f"El servicio de datos respondió {response.status_code}", "status", response.status_code
            ))

        body = decode_body(response)
        return Result.ok(strip_array_wrapper(body) if unwrap else body)
