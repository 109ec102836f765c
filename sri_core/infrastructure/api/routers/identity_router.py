# sri_core/infrastructure/api/routers/identity_router.py
from fastapi import APIRouter, Depends, HTTPException

from sri_core.application.use_cases.resolve_identity import ResolveIdentityUseCase
from sri_core.domain.models.errors import ErrorCode
from sri_core.infrastructure.external.sri_captcha_adapter import SriCaptchaAdapter
from sri_core.infrastructure.external.sri_registry_adapter import SriRegistryAdapter
from sri_core.infrastructure.external.sri_session_adapter import SriSessionAdapter

router = APIRouter(prefix="/api/v1/identificaciones", tags=["Identificaciones"])

# Código de error del protocolo -> status HTTP
ERROR_STATUS = {
    ErrorCode.INVALID_IDENTIFICATION: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.DESERIALIZATION_ERROR: 502,
    ErrorCode.SESSION_ERROR: 503,
    ErrorCode.CAPTCHA_ERROR: 503,
    ErrorCode.NETWORK_ERROR: 503,
}


def get_identity_use_case() -> ResolveIdentityUseCase:
    return ResolveIdentityUseCase(
        registry=SriRegistryAdapter(),
        session_provider=SriSessionAdapter(),
        captcha_validator=SriCaptchaAdapter(),
    )


@router.get("/{identificacion}", summary="Consultar datos de una cédula o RUC en el SRI")
async def resolve_identification(
    identificacion: str,
    use_case: ResolveIdentityUseCase = Depends(get_identity_use_case),
):
    resolution = await use_case.execute(identificacion)
    if not resolution.is_success:
        error = resolution.error
        raise HTTPException(
            status_code=ERROR_STATUS.get(error.code, 502),
            detail={
                "error_code": error.code.value,
                "message": error.message,
                "retryable": error.retryable,
            },
        )
    return resolution.record.model_dump(mode="json")
