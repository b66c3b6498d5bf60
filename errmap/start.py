import os

import uvicorn

from errmap.infra.logging_setup import configure_logging
from errmap.settings import settings

if __name__ == '__main__':
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        'errmap.main:app',
        host='0.0.0.0',
        port=int(os.getenv('PORT', '8000')),
        log_config=None,
    )
