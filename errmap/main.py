from typing import Optional

from fastapi import FastAPI

from errmap.api.errors import register_exception_handlers
from errmap.infra.translator import get_translator
from errmap.services.translator import ErrorTranslator


def create_app(translator: Optional[ErrorTranslator] = None) -> FastAPI:
    app = FastAPI(title='errmap')
    # one translator per app, shared read-only by every request
    app.state.translator = translator or get_translator()
    register_exception_handlers(app, app.state.translator)

    @app.get('/', tags=['health'])
    async def healthcheck():
        return {'status': 'ok', 'handlers': len(app.state.translator.registry)}

    return app


app = create_app()
