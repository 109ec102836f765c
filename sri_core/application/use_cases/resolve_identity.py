# sri_core/application/use_cases/resolve_identity.py
import logging

from sri_core.domain.models.errors import DomainError, ErrorCode
from sri_core.domain.models.identity import (
    IdentificationKind,
    IdentityRecord,
    IdentityResolution,
    ResolutionState,
)
from sri_core.domain.ports.captcha_validator import CaptchaValidator
from sri_core.domain.ports.identity_registry import IdentityRegistry
from sri_core.domain.ports.session_provider import SessionProvider


class ResolveIdentityUseCase:
    """
    Resuelve una cédula o un RUC en los datos del contribuyente siguiendo el
    protocolo del SRI, estrictamente en orden:
        IDLE -> EXISTENCE_CHECKED -> SESSION_ACQUIRED -> CAPTCHA_VALIDATED -> DATA_RETRIEVED
    Cualquier etapa fallida lleva a FAILED y ninguna etapa posterior se ejecuta.
    Todo el estado (sesión, token) vive dentro de una sola llamada a `execute`.
    """

    def __init__(
        self,
        registry: IdentityRegistry,
        session_provider: SessionProvider,
        captcha_validator: CaptchaValidator,
    ):
        self.registry = registry
        self.session_provider = session_provider
        self.captcha_validator = captcha_validator

    async def execute(self, identification: str) -> IdentityResolution:
        identification = (identification or "").strip()
        state = ResolutionState.IDLE

        kind = IdentificationKind.detect(identification)
        if kind is None:
            return self._failed(identification, state, DomainError(
                code=ErrorCode.INVALID_IDENTIFICATION,
                message="La identificación debe ser una cédula (10 dígitos) o un RUC (13 dígitos)",
            ))

        # PASO 1: Existencia (consulta pública)
        exists = await self.registry.exists(identification, kind)
        if not exists.is_success:
            return self._failed(identification, state, exists.error)
        if not exists.value:
            return self._failed(identification, state, DomainError(
                code=ErrorCode.NOT_FOUND,
                message=f"La identificación {identification} no existe en el SRI",
            ))
        state = self._transition(identification, state, ResolutionState.EXISTENCE_CHECKED)

        # PASO 2: Sesión
        session_result = await self.session_provider.acquire()
        if not session_result.is_success:
            return self._failed(identification, state, session_result.error)

        async with session_result.value as session:
            state = self._transition(identification, state, ResolutionState.SESSION_ACQUIRED)

            # PASO 3: Captcha, con la misma sesión
            token = await self.captcha_validator.validate(session.challenge, session)
            if not token.is_success:
                return self._failed(identification, state, token.error)
            state = self._transition(identification, state, ResolutionState.CAPTCHA_VALIDATED)

            # PASO 4: Datos protegidos, con el token y la misma sesión
            record = await self.registry.fetch(identification, kind, token.value, session)
            if not record.is_success:
                return self._failed(identification, state, record.error)
            state = self._transition(identification, state, ResolutionState.DATA_RETRIEVED)

        return self._succeeded(identification, record.value)

    def _transition(self, identification: str, current: ResolutionState, target: ResolutionState) -> ResolutionState:
        logging.info(f"[{identification}] {current.value} -> {target.value}")
        return target

    def _failed(self, identification: str, stage: ResolutionState, error: DomainError) -> IdentityResolution:
        logging.warning(f"[{identification}] {stage.value} -> FAILED ({error.code.value}): {error.message}")
        return IdentityResolution(
            identification=identification,
            state=ResolutionState.FAILED,
            error=error,
        )

    def _succeeded(self, identification: str, record: IdentityRecord) -> IdentityResolution:
        logging.info(f"[{identification}] Datos obtenidos para {record.full_name}.")
        return IdentityResolution(
            identification=identification,
            state=ResolutionState.DATA_RETRIEVED,
            record=record,
        )
