# sri_core/domain/models/results.py
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from sri_core.domain.models.errors import DomainError, ErrorCode

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """
    Resultado de una etapa: contiene `value` o `error`, nunca ambos.
    """
    value: Optional[T] = None
    error: Optional[DomainError] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: DomainError) -> "Result[T]":
        return cls(error=error)

    @classmethod
    def failure(cls, code: ErrorCode, message: str, **details) -> "Result[T]":
        return cls(error=DomainError(code=code, message=message, details=details))
