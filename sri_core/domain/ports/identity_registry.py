# sri_core/domain/ports/identity_registry.py
from abc import ABC, abstractmethod

from sri_core.domain.models.identity import IdentificationKind, IdentityRecord
from sri_core.domain.models.results import Result
from sri_core.domain.ports.session_provider import ProtocolSession


class IdentityRegistry(ABC):
    """Puerto para los registros de identidad del SRI (Registro Civil y Catastro RUC)."""
    @abstractmethod
    async def exists(self, identification: str, kind: IdentificationKind) -> Result[bool]:
        """Consulta pública, sin sesión. `False` significa que la identificación no existe."""
        pass

    @abstractmethod
    async def fetch(
        self,
        identification: str,
        kind: IdentificationKind,
        token: str,
        session: ProtocolSession,
    ) -> Result[IdentityRecord]:
        """
        Descarga los datos protegidos con el token del captcha, sobre la
        misma sesión en la que se emitió el token.
        """
        pass
