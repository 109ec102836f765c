# sri_core/infrastructure/external/sri_captcha_adapter.py
import json
import logging
from urllib.parse import quote

import httpx

import config
from sri_core.domain.models.errors import ErrorCode
from sri_core.domain.models.results import Result
from sri_core.domain.ports.captcha_validator import CaptchaValidator
from sri_core.domain.ports.session_provider import ProtocolSession
from sri_core.infrastructure.external.sri_http import decode_body, transport_reason


class SriCaptchaAdapter(CaptchaValidator):
    """
    Canjea el desafío del captcha por el token que exigen los servicios
    protegidos. El desafío ya trae en texto plano los valores válidos
    (`values`); se envía el primero.
    """

    async def validate(self, challenge: str, session: ProtocolSession) -> Result[str]:
        try:
            payload = json.loads(challenge)
        except (TypeError, ValueError):
            return self._error("El desafío del captcha no es un JSON válido", reason="malformed")

        values = payload.get("values") if isinstance(payload, dict) else None
        if not isinstance(values, list) or not values:
            return self._error("El desafío del captcha no contiene valores", reason="malformed")

        answer = str(values[0])
        path = config.CAPTCHA_VALIDATE_PATH.format(answer=quote(answer, safe=""))
        try:
            response = await session.get(path, params={"emitirToken": "true"})
        except httpx.HTTPError as e:
            return self._error(f"Fallo de red al validar el captcha: {e}", reason=transport_reason(e))

        if not response.is_success:
            return self._error(
                f"El servicio de captcha respondió {response.status_code}",
                reason="status",
                status_code=response.status_code,
            )

        try:
            envelope = json.loads(decode_body(response))
        except ValueError:
            return self._error("La respuesta del captcha no es un JSON válido", reason="malformed")

        token = envelope.get("mensaje") if isinstance(envelope, dict) else None
        if not isinstance(token, str) or not token:
            return self._error("La respuesta del captcha no contiene el token", reason="malformed")

        return Result.ok(token)

    def _error(self, message: str, **details) -> Result[str]:
        logging.warning(message)
        return Result.failure(ErrorCode.CAPTCHA_ERROR, message, **details)
