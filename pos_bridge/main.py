# pos_bridge/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pos_bridge import models  # noqa: F401  registers all models
from pos_bridge.core.exceptions import ConfigurationError, InvalidInput, NotFound
from pos_bridge.core.logging_config import configure_logging
from pos_bridge.core.security import require_auth
from pos_bridge.dependencies import get_sync_log
from pos_bridge.routes import epos, health, webhooks
from pos_bridge.scheduler import start_scheduler, stop_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    sync_log = get_sync_log().open()
    await start_scheduler()
    try:
        yield  # This is where the app runs
    finally:
        await stop_scheduler()
        sync_log.close()


app = FastAPI(
    title="POS Bridge",
    description="Keeps the shop catalogue, stock and orders in sync with ePOS Now",
    lifespan=lifespan
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


app.include_router(health.router)
app.include_router(webhooks.router)  # Webhooks are verified by signature, not basic auth
app.include_router(epos.router, dependencies=[require_auth()])
