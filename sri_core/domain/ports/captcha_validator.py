# sri_core/domain/ports/captcha_validator.py
from abc import ABC, abstractmethod

from sri_core.domain.models.results import Result
from sri_core.domain.ports.session_provider import ProtocolSession


class CaptchaValidator(ABC):
    """Puerto para canjear el desafío del captcha por un token de acceso."""
    @abstractmethod
    async def validate(self, challenge: str, session: ProtocolSession) -> Result[str]:
        """
        Envía la respuesta del desafío usando la misma sesión y retorna el
        token emitido. Cualquier fallo se reporta como CAPTCHA_ERROR.
        """
        pass
