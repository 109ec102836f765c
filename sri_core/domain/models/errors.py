# sri_core/domain/models/errors.py
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    UNSUPPORTED_DOCUMENT_TYPE = "UNSUPPORTED_DOCUMENT_TYPE"
    FIELD_PARSE_ERROR = "FIELD_PARSE_ERROR"
    SESSION_ERROR = "SESSION_ERROR"
    CAPTCHA_ERROR = "CAPTCHA_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DESERIALIZATION_ERROR = "DESERIALIZATION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_IDENTIFICATION = "INVALID_IDENTIFICATION"


# Errores que no se resuelven reintentando la misma consulta
NON_RETRYABLE_CODES = {ErrorCode.NOT_FOUND, ErrorCode.INVALID_IDENTIFICATION}


class DomainError(BaseModel):
    """
    Error tipado que viaja dentro de un `Result`. La capa HTTP usa `code`
    para decidir el status de la respuesta.
    """
    code: ErrorCode
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def is_not_found(self) -> bool:
        return self.code == ErrorCode.NOT_FOUND

    @property
    def retryable(self) -> bool:
        return self.code not in NON_RETRYABLE_CODES

    @classmethod
    def network(cls, message: str, reason: str, status_code: Optional[int] = None) -> "DomainError":
        details: Dict[str, Any] = {"reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        return cls(code=ErrorCode.NETWORK_ERROR, message=message, details=details)


# --- Excepciones internas del pipeline de comprobantes ---
# Nunca salen de ElectronicDocumentService: se convierten en ParseOutcome.

class DocumentParseError(Exception):
    code = ErrorCode.FIELD_PARSE_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_error(self) -> DomainError:
        return DomainError(code=self.code, message=self.message)


class SchemaValidationError(DocumentParseError):
    code = ErrorCode.SCHEMA_VALIDATION_ERROR

    def __init__(self, message: str, issues: Optional[List[Any]] = None):
        super().__init__(message)
        self.issues = issues or []


class UnsupportedDocumentTypeError(DocumentParseError):
    code = ErrorCode.UNSUPPORTED_DOCUMENT_TYPE

    def __init__(self, doc_code: Optional[str], message: Optional[str] = None):
        super().__init__(message or f"Tipo de comprobante no soportado: {doc_code}")
        self.doc_code = doc_code


class FieldParseError(DocumentParseError):
    """Fallo al interpretar un campo; `path` apunta al nodo problemático."""
    code = ErrorCode.FIELD_PARSE_ERROR

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path

    def to_error(self) -> DomainError:
        return DomainError(code=self.code, message=self.message, details={"path": self.path})
