# sri_core/domain/ports/session_provider.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from sri_core.domain.models.results import Result


class ProtocolSession(ABC):
    """
    Sesión con afinidad de cookies para una sola resolución de identidad.
    Todas las etapas posteriores al start del captcha deben usar esta misma
    instancia; no se comparte entre llamadas.
    """
    challenge: str

    @abstractmethod
    async def get(self, path: str, params: Optional[Dict[str, Any]] = None,
                  headers: Optional[Dict[str, str]] = None) -> Any:
        """Ejecuta un GET sobre la sesión. Puede lanzar errores de transporte."""
        pass

    @abstractmethod
    async def aclose(self) -> None:
        pass

    async def __aenter__(self) -> "ProtocolSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class SessionProvider(ABC):
    """Puerto para obtener la cookie de sesión del servicio de captcha."""
    @abstractmethod
    async def acquire(self) -> Result[ProtocolSession]:
        """
        Abre una sesión nueva y descarga el desafío del captcha.
        Falla con SESSION_ERROR si el servicio no responde 2xx.
        """
        pass
