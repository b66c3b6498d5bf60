from errmap.domain.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from errmap.domain.registry import HandlerRegistry, RegistryBuilder
from errmap.services.translator import ErrorTranslator
from errmap.settings import settings


def default_builder() -> RegistryBuilder:
    return (
        RegistryBuilder()
        .register(NotFoundError, 404, title='Not found')
        .register(ValidationError, 422, title='Invalid request')
        .register(UnauthorizedError, 401, title='Unauthorized')
        .register(ConflictError, 409, title='Conflict')
        .register(InternalError, 500, title='Internal error')
        .set_default(settings.DEFAULT_STATUS_CODE, code=settings.DEFAULT_CODE, title='Internal error')
    )


def build_default_registry() -> HandlerRegistry:
    return default_builder().build()


def make_translator(registry: HandlerRegistry = None) -> ErrorTranslator:
    return ErrorTranslator(
        registry or build_default_registry(),
        message_template=settings.DEFAULT_MESSAGE_TEMPLATE,
        generic_message=settings.GENERIC_MESSAGE,
        expose_internal_messages=settings.EXPOSE_INTERNAL_MESSAGES,
    )
