from __future__ import annotations

import uvicorn
from prometheus_fastapi_instrumentator import Instrumentator

from placefinder.core.config import settings
from placefinder.core.logging import configure_logging
from . import app as relay_app

configure_logging(settings.LOG_LEVEL)
app = relay_app
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app)


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
