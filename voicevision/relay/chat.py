"""Chat relay: validate the conversation and open a streaming completion."""

import httpx
import structlog

from voicevision.core.config import Settings
from voicevision.core.gateway import GatewayClient
from voicevision.core.validator import validate_chat_request
from voicevision.relay.prompts import build_chat_messages

logger = structlog.get_logger(__name__)


async def open_chat_stream(gateway: GatewayClient, settings: Settings, payload: object) -> httpx.Response:
    """Validate a chat body and return the live upstream stream.

    The returned response is 2xx and unread; the caller pipes its bytes to the
    client and closes it.
    """
    messages = validate_chat_request(
        payload, settings.chat_max_messages, settings.chat_max_message_length
    )
    logger.info("chat.request", messages=len(messages))

    upstream = await gateway.stream(build_chat_messages(messages))
    logger.info("chat.stream_open", status=upstream.status_code)
    return upstream
