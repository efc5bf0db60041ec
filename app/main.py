from fastapi import FastAPI

from app.db import base as _models  # noqa: F401  registers every model before the first mapper use
from app.api.v1.auth.router import router as auth_router
from app.core.app_logger import setup_logging
from app.core.security_config import configure_http_security


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="My School Backend")

    # All requests are permitted; see app.core.security_config
    configure_http_security(app)

    # Routers
    app.include_router(auth_router)

    return app


app = create_app()
