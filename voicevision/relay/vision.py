"""Image analysis relay: validate, prompt, call the gateway once, normalize."""

import structlog

from voicevision.api.schemas import AnalysisResult
from voicevision.core.config import Settings
from voicevision.core.gateway import GatewayClient
from voicevision.core.validator import validate_analysis_request
from voicevision.relay.normalizer import normalize_reply
from voicevision.relay.prompts import build_analysis_messages, get_mode_spec

logger = structlog.get_logger(__name__)


async def analyze_image(gateway: GatewayClient, settings: Settings, payload: object) -> AnalysisResult:
    """Run one image analysis request end to end.

    Args:
        gateway: Shared gateway client.
        settings: Relay settings (size ceiling, temperature).
        payload: Decoded JSON request body.

    Returns:
        The normalized result for the requested mode.

    Raises:
        ValidationFailure subclasses before any upstream call;
        ConfigurationError, RateLimited, QuotaExceeded, UpstreamError from the gateway.
    """
    request = validate_analysis_request(payload, settings.max_image_bytes)
    spec = get_mode_spec(request.mode)

    logger.info("analysis.request", mode=request.mode.value,
                mime=request.image.mime_type, image_bytes=request.image.size)

    messages = build_analysis_messages(spec, request.image.to_data_uri())
    content = await gateway.complete(messages, temperature=settings.analysis_temperature)

    result = normalize_reply(request.mode, content)
    logger.info("analysis.normalized", mode=request.mode.value, result=result.model_dump())
    return result
