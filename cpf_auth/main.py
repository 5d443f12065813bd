from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cpf_auth.context import AppContext
from cpf_auth.logging_config import configure_app_logging
from cpf_auth.routers import auth, health


def create_app(app_context: AppContext | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        ctx = app_context or AppContext()
        configure_app_logging(ctx.settings.log_level)

        logger = logging.getLogger(__name__)
        logger.info("App startup beginning")

        app.state.app_context = ctx

        yield
        # Shutdown
        ctx.close()
        logger.info("App shutdown complete")

    app = FastAPI(lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(auth.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cpf_auth.main:app", host="0.0.0.0", port=8000)
