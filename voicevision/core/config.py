"""Runtime settings read from the process environment.

The gateway credential is not part of Settings; GatewayClient reads
GATEWAY_API_KEY on every call.
"""

import os
from dataclasses import dataclass

from voicevision.core.errors import ConfigurationError

API_KEY_ENV = "GATEWAY_API_KEY"

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_GATEWAY_MODEL = "google/gemini-2.5-flash"


def _env_number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Relay configuration.

    Attributes:
        gateway_url: Chat-completions endpoint of the hosted gateway.
        gateway_model: Model identifier sent with every request.
        gateway_timeout: Deadline in seconds for each upstream call.
        analysis_temperature: Sampling temperature for image analysis.
        max_image_bytes: Ceiling on the decoded image size.
        chat_max_messages: Maximum number of messages in a chat request.
        chat_max_message_length: Maximum characters per chat message.
    """
    gateway_url: str = DEFAULT_GATEWAY_URL
    gateway_model: str = DEFAULT_GATEWAY_MODEL
    gateway_timeout: float = 30.0
    analysis_temperature: float = 0.3
    max_image_bytes: int = 10 * 1024 * 1024
    chat_max_messages: int = 50
    chat_max_message_length: int = 4000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gateway_url=os.environ.get("GATEWAY_URL", DEFAULT_GATEWAY_URL),
            gateway_model=os.environ.get("GATEWAY_MODEL", DEFAULT_GATEWAY_MODEL),
            gateway_timeout=_env_number("GATEWAY_TIMEOUT", "30", float),
            analysis_temperature=_env_number("ANALYSIS_TEMPERATURE", "0.3", float),
            max_image_bytes=_env_number("MAX_IMAGE_BYTES", str(10 * 1024 * 1024), int),
            chat_max_messages=_env_number("CHAT_MAX_MESSAGES", "50", int),
            chat_max_message_length=_env_number("CHAT_MAX_MESSAGE_LENGTH", "4000", int),
        )
