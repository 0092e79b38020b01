"""FastAPI application entry point.

Startup sequence: read settings → open the gateway client.
"""

from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse, Response

from voicevision.api.routes import router
from voicevision.core.config import Settings
from voicevision.core.errors import RelayError
from voicevision.core.gateway import GatewayClient

load_dotenv()

logger = structlog.get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("startup.begin")

    settings = Settings.from_env()
    app.state.settings = settings
    logger.info("startup.settings_loaded", model=settings.gateway_model,
                timeout=settings.gateway_timeout, max_image_bytes=settings.max_image_bytes)

    gateway = GatewayClient(settings)
    app.state.gateway = gateway
    logger.info("startup.gateway_initialized", healthy=gateway.is_healthy())

    logger.info("startup.complete")
    yield
    await app.state.gateway.aclose()
    logger.info("shutdown.complete")


app = FastAPI(
    title="Voice-Vision Relay",
    description="Image analysis and chat relay for the Voice-Vision Assistant",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    """Answer preflights directly and stamp CORS headers on every response."""
    # Not CORSMiddleware: it only short-circuits OPTIONS carrying Origin and
    # Access-Control-Request-Method, and answers with a body. Every OPTIONS here gets an empty 200.
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    """Render any RelayError as {"error": message} with its status."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log("request.failed", path=request.url.path, kind=exc.kind, status=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(router)
