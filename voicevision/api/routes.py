"""FastAPI endpoints for the relay service.

POST /detect-objects - analyze an image in objects, text or scene mode
POST /chat - stream a chat completion
GET /health - component health check
"""

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from voicevision.api.schemas import ErrorResponse
from voicevision.core.errors import InvalidRequest, RelayError
from voicevision.relay.chat import open_chat_stream
from voicevision.relay.vision import analyze_image

logger = structlog.get_logger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    402: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def _read_json(req: Request) -> object:
    try:
        return await req.json()
    except ValueError:
        raise InvalidRequest("Request body must be valid JSON.")


@router.post("/detect-objects", responses=_ERROR_RESPONSES)
async def detect_objects(req: Request):
    """Analyze a captured frame and return the mode's JSON shape."""
    try:
        payload = await _read_json(req)
        result = await analyze_image(req.app.state.gateway, req.app.state.settings, payload)
    except RelayError:
        raise
    except Exception as e:
        logger.error("analysis.failed", error=str(e))
        raise RelayError()

    return JSONResponse(content=result.model_dump())


@router.post("/chat", responses=_ERROR_RESPONSES)
async def chat(req: Request):
    """Relay a conversation to the gateway and stream the completion back verbatim."""
    try:
        payload = await _read_json(req)
        upstream = await open_chat_stream(req.app.state.gateway, req.app.state.settings, payload)
    except RelayError:
        raise
    except Exception as e:
        logger.error("chat.failed", error=str(e))
        raise RelayError()

    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="text/event-stream",
        background=BackgroundTask(upstream.aclose),
    )


@router.get("/health")
def health(req: Request):
    """Report whether the gateway credential is configured."""
    gateway = req.app.state.gateway
    components = {"gateway": "ok" if gateway.is_healthy() else "error"}
    status = "healthy" if all(v == "ok" for v in components.values()) else "degraded"
    return {"status": status, "components": components}


@router.get("/")
@router.head("/")
def root_health():
    """Basic root health check for deployment platforms."""
    return {"status": "ok", "service": "voicevision-relay"}
