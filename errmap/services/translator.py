import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from errmap.domain.errors import DomainError
from errmap.domain.models import ErrorResponse
from errmap.domain.registry import (
    DEFAULT_CODE,
    DEFAULT_STATUS_CODE,
    HandlerRegistration,
    HandlerRegistry,
)
from errmap.utils import condition_message, kind_name

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_TEMPLATE = 'An error occurred: {message}'
GENERIC_MESSAGE = 'An error occurred.'


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorTranslator:
    """
    Maps a raised error condition to an ``ErrorResponse``.

    The translator is the handler of last resort: ``translate`` never
    raises. Failures inside a body builder are logged once and replaced
    with the default response. Logging the translated condition itself
    is left to the caller.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        message_template: str = DEFAULT_MESSAGE_TEMPLATE,
        generic_message: str = GENERIC_MESSAGE,
        expose_internal_messages: bool = True,
    ) -> None:
        self.registry = registry
        self.clock = clock or _utcnow
        self.message_template = message_template
        self.generic_message = generic_message or GENERIC_MESSAGE
        self.expose_internal_messages = expose_internal_messages

    def translate(self, condition: BaseException) -> ErrorResponse:
        try:
            registration = self.registry.resolve(type(condition))
        except Exception:
            logger.exception('Handler lookup failed for %s', type(condition).__name__)
            return self._last_resort()

        if registration.is_default:
            return self._default_response(condition)

        try:
            return self._registered_response(condition, registration)
        except Exception:
            logger.exception(
                'Response builder for %s failed; using the default response',
                kind_name(registration.kind),
            )
            return self._default_response(condition)

    __call__ = translate

    def _registered_response(
        self, condition: BaseException, registration: HandlerRegistration
    ) -> ErrorResponse:
        message = condition_message(condition) or registration.title or self.generic_message

        if registration.body is not None:
            body = registration.body(condition)
        elif isinstance(condition, DomainError):
            body = condition.details
        else:
            body = None

        response = ErrorResponse(
            status=registration.status_code,
            code=registration.code,
            message=message,
            # copy so callers never share the builder's mapping
            details=dict(body) if body is not None else None,
            timestamp=self.clock(),
        )
        # details must survive JSON serialization; otherwise fall back here
        response.model_dump(mode='json')
        return response

    def _default_message(self, condition: BaseException) -> str:
        raw = condition_message(condition)
        if not raw or not self.expose_internal_messages:
            return self.generic_message
        return self.message_template.format(message=raw)

    def _default_response(self, condition: BaseException) -> ErrorResponse:
        default = self.registry.default
        try:
            return ErrorResponse(
                status=default.status_code,
                code=default.code,
                message=self._default_message(condition),
                timestamp=self.clock(),
            )
        except Exception:
            logger.exception('Default response could not be built')
            return self._last_resort()

    def _last_resort(self) -> ErrorResponse:
        try:
            timestamp = self.clock()
            if not isinstance(timestamp, datetime):
                raise TypeError(f'clock returned {timestamp!r}')
        except Exception:
            timestamp = _utcnow()
        return ErrorResponse.model_construct(
            status=DEFAULT_STATUS_CODE,
            code=DEFAULT_CODE,
            message=GENERIC_MESSAGE,
            details=None,
            timestamp=timestamp,
        )
