from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional


@dataclass(eq=False)
class DomainError(Exception):
    """Base class for all domain-level errors.

    These represent business or validation failures that occur within
    the application's core logic, independent of transport concerns.
    Raise subclasses of this in services, repositories, or adapters
    and let the translator turn them into responses.
    """

    message: str = ''
    details: Optional[Dict[str, Any]] = None

    code: ClassVar[str] = 'domain_error'

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# 4xx
class NotFoundError(DomainError):  # 404
    code = 'not_found'


class ValidationError(DomainError):  # 422
    code = 'validation_error'


class UnauthorizedError(DomainError):  # 401
    code = 'unauthorized'


class ConflictError(DomainError):  # 409
    code = 'conflict'


# 5xx
class InternalError(DomainError):  # 500
    code = 'internal_error'


class ConfigError(InternalError):
    """Raised when the system is misconfigured.

    Use this for invalid handler registrations or settings values
    that prevent the app from starting.
    """

    code = 'config_error'
