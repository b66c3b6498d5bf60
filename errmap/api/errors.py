import logging
from typing import Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette import status as st
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from errmap.domain import errors as de
from errmap.domain.models import ErrorResponse
from errmap.services.translator import ErrorTranslator
from errmap.utils import cause_chain, condition_message, kind_name

logger = logging.getLogger(__name__)

_HTTP_STATUS_KINDS = {
    st.HTTP_400_BAD_REQUEST: de.ValidationError,
    st.HTTP_401_UNAUTHORIZED: de.UnauthorizedError,
    st.HTTP_404_NOT_FOUND: de.NotFoundError,
    st.HTTP_409_CONFLICT: de.ConflictError,
    st.HTTP_422_UNPROCESSABLE_ENTITY: de.ValidationError,
}


def to_json_response(
    response: ErrorResponse, headers: Optional[Mapping[str, str]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=response.status,
        content=response.model_dump(mode='json', exclude_none=True),
        headers=dict(headers) if headers else None,
    )


def log_condition(request: Request, exc: BaseException, response: ErrorResponse) -> None:
    """Emit exactly one record for a translated condition."""
    causes = ' <- '.join(cause_chain(exc)) or '-'
    args = (
        request.method,
        request.url.path,
        response.status,
        kind_name(type(exc)),
        condition_message(exc),
        causes,
    )
    if response.status >= st.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            '%s %s -> %s %s: %s (caused by: %s)',
            *args,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.warning('%s %s -> %s %s: %s (caused by: %s)', *args)


def wrap_http_exception(exc: StarletteHTTPException) -> BaseException:
    """
    Map a transport-level HTTPException onto the domain taxonomy.

    Statuses without a taxonomy kind are handed to the translator unchanged.
    """
    kind = _HTTP_STATUS_KINDS.get(exc.status_code)
    if kind is None:
        return exc
    if isinstance(exc.detail, str):
        wrapped = kind(exc.detail)
    else:
        wrapped = kind('', details={'detail': jsonable_encoder(exc.detail)})
    wrapped.__cause__ = exc
    return wrapped


class TranslateUnhandledMiddleware(BaseHTTPMiddleware):
    """Answers exceptions no handler claimed, without re-raising them.

    Sits inside Starlette's ServerErrorMiddleware, so the condition is
    logged here once and never reaches the server's own error log.
    """

    def __init__(self, app, translator: ErrorTranslator) -> None:
        super().__init__(app)
        self.translator = translator

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            response = self.translator.translate(exc)
            log_condition(request, exc, response)
            return to_json_response(response)


def register_exception_handlers(app: FastAPI, translator: ErrorTranslator) -> None:
    def _respond(request: Request, exc: BaseException, headers=None) -> JSONResponse:
        response = translator.translate(exc)
        log_condition(request, exc, response)
        return to_json_response(response, headers=headers)

    async def _translate(request: Request, exc: Exception) -> JSONResponse:
        return _respond(request, exc)

    async def _request_validation(request: Request, exc: RequestValidationError):
        # transport-level validation goes through the same table as domain validation
        wrapped = de.ValidationError('Invalid request payload', details={'errors': jsonable_encoder(exc.errors())})
        wrapped.__cause__ = exc
        return _respond(request, wrapped)

    async def _http_exception(request: Request, exc: StarletteHTTPException):
        return _respond(request, wrap_http_exception(exc), headers=getattr(exc, 'headers', None))

    for kind in translator.registry.kinds():
        # catch-all kinds are answered by the middleware
        if kind in (Exception, BaseException):
            continue
        app.add_exception_handler(kind, _translate)

    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(StarletteHTTPException, _http_exception)
    app.add_middleware(TranslateUnhandledMiddleware, translator=translator)
