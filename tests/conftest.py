# conftest.py
import pytest
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from errmap.api.errors import register_exception_handlers
from errmap.domain import errors as de
from errmap.factories import build_default_registry
from errmap.services.translator import ErrorTranslator
from tests.fakes import FixedClock, Unregistered

load_dotenv()


@pytest.fixture()
def clock():
    return FixedClock()


@pytest.fixture()
def registry():
    return build_default_registry()


@pytest.fixture()
def translator(registry, clock):
    return ErrorTranslator(registry, clock=clock)


class PostIn(BaseModel):
    title: str
    views: int


def build_app(translator: ErrorTranslator) -> FastAPI:
    """
    A throwaway app whose routes only exist to raise conditions.
    """
    app = FastAPI()
    register_exception_handlers(app, translator)

    @app.get('/posts/{post_id}')
    async def get_post(post_id: int):
        raise de.NotFoundError(f'post {post_id} not found')

    @app.post('/posts')
    async def create_post(post: PostIn):
        raise de.ConflictError('post already exists', details={'title': post.title})

    @app.get('/private')
    async def private():
        raise de.UnauthorizedError('')

    @app.get('/chained')
    async def chained():
        try:
            posts = {}
            posts['42']
        except KeyError as e:
            raise de.NotFoundError('post missing') from e

    @app.get('/duplicate')
    async def duplicate():
        raise de.ConflictError('dup', details={'obj': object()})

    @app.get('/http/{status_code}')
    async def http_error(status_code: int):
        raise HTTPException(status_code, 'nope', headers={'X-Reason': 'test'})

    @app.get('/boom')
    async def boom():
        raise Unregistered('x')

    return app


@pytest.fixture()
def client(translator):
    with TestClient(build_app(translator)) as c:
        yield c
