# sri_core/domain/models/identity.py
import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from sri_core.domain.models.errors import DomainError

ASCII_DIGITS = re.compile(r"[0-9]+")


class IdentificationKind(str, Enum):
    CEDULA = "cedula"
    RUC = "ruc"

    @classmethod
    def detect(cls, identification: str) -> Optional["IdentificationKind"]:
        """Cédula: 10 dígitos. RUC: 13 dígitos. Cualquier otra cosa no aplica."""
        if not identification or not ASCII_DIGITS.fullmatch(identification):
            return None
        if len(identification) == 10:
            return cls.CEDULA
        if len(identification) == 13:
            return cls.RUC
        return None


class Establishment(BaseModel):
    trade_name: Optional[str] = Field(default=None, validation_alias="nombreFantasiaComercial")
    establishment_type: Optional[str] = Field(default=None, validation_alias="tipoEstablecimiento")
    full_address: Optional[str] = Field(default=None, validation_alias="direccionCompleta")
    status: Optional[str] = Field(default=None, validation_alias="estado")
    number: Optional[str] = Field(default=None, validation_alias="numeroEstablecimiento")
    head_office: Optional[str] = Field(default=None, validation_alias="matriz")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class IdentityRecord(BaseModel):
    """
    Datos de un contribuyente o ciudadano devueltos por el SRI. Acepta tanto
    la respuesta del Registro Civil (cédula) como la del Catastro (RUC).
    """
    identification: str = Field(validation_alias=AliasChoices("identification", "identificacion", "numeroRuc"))
    full_name: str = Field(validation_alias=AliasChoices("full_name", "nombreCompleto", "razonSocial"))
    death_date: Optional[Any] = Field(default=None, validation_alias=AliasChoices("death_date", "fechaDefuncion"))

    # --- Campos propios del RUC ---
    trade_name: Optional[str] = None
    taxpayer_status: Optional[str] = Field(default=None, validation_alias=AliasChoices("taxpayer_status", "estadoContribuyenteRuc"))
    taxpayer_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("taxpayer_type", "tipoContribuyente"))
    economic_activity: Optional[str] = Field(default=None, validation_alias=AliasChoices("economic_activity", "actividadEconomicaPrincipal"))
    accounting_required: Optional[str] = Field(default=None, validation_alias=AliasChoices("accounting_required", "obligadoLlevarContabilidad"))
    establishments: List[Establishment] = Field(default_factory=list)

    # --- Campos que el SRI no entrega y se completan después ---
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    def with_establishments(self, establishments: List[Establishment]) -> "IdentityRecord":
        if not establishments:
            return self
        first = establishments[0]
        return self.model_copy(update={
            "establishments": establishments,
            "address": first.full_address or self.address,
            "trade_name": first.trade_name or self.trade_name,
        })


class ResolutionState(str, Enum):
    IDLE = "IDLE"
    EXISTENCE_CHECKED = "EXISTENCE_CHECKED"
    SESSION_ACQUIRED = "SESSION_ACQUIRED"
    CAPTCHA_VALIDATED = "CAPTCHA_VALIDATED"
    DATA_RETRIEVED = "DATA_RETRIEVED"
    FAILED = "FAILED"


class IdentityResolution(BaseModel):
    identification: str
    state: ResolutionState
    record: Optional[IdentityRecord] = None
    error: Optional[DomainError] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_success(self) -> bool:
        return self.state == ResolutionState.DATA_RETRIEVED and self.record is not None

    @property
    def not_found(self) -> bool:
        return self.error is not None and self.error.is_not_found

    @property
    def network_error(self) -> bool:
        """Fallos del servicio o de red: el llamador puede reintentar."""
        return self.error is not None and self.error.retryable
