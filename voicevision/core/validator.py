"""Request validation for both relays.

Checks run in a fixed order and the first failure wins, so a caller always sees
the same error for the same bad input. Nothing here touches the network.
"""

import base64
import binascii
import re
from dataclasses import dataclass

from voicevision.api.schemas import AnalysisMode, ChatMessage
from voicevision.core.errors import (
    InvalidImageFormat,
    InvalidMessage,
    InvalidMode,
    InvalidRequest,
    MessageTooLong,
    MissingInput,
    PayloadTooLarge,
    TooManyMessages,
)

ALLOWED_ROLES = frozenset({"user", "assistant", "system"})

# data:image/<type>;base64,<payload>
_DATA_URI = re.compile(
    r"^data:image/(?P<subtype>jpeg|jpg|png|gif|webp);base64,(?P<payload>.*)$",
    re.IGNORECASE | re.DOTALL,
)
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class DecodedImage:
    """Validated image bytes plus their MIME type.

    Attributes:
        mime_type: Canonical MIME type (image/jpg is folded into image/jpeg).
        data: Raw decoded bytes.
    """
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_uri(self) -> str:
        """Re-encode as the data URI forwarded to the gateway."""
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"


@dataclass(frozen=True)
class AnalysisRequest:
    image: DecodedImage
    mode: AnalysisMode


def validate_analysis_request(payload: object, max_image_bytes: int) -> AnalysisRequest:
    """Validate an image analysis body.

    Order: image present, mode recognized, image format, image size.

    Args:
        payload: Decoded JSON body.
        max_image_bytes: Ceiling on the decoded image size.

    Returns:
        AnalysisRequest with the decoded image and resolved mode.

    Raises:
        InvalidRequest: Body is not a JSON object.
        MissingInput, InvalidMode, InvalidImageFormat, PayloadTooLarge.
    """
    if not isinstance(payload, dict):
        raise InvalidRequest()

    image = payload.get("image")
    if image is None or image == "" or (isinstance(image, str) and not image.strip()):
        raise MissingInput()

    mode = _resolve_mode(payload.get("mode"))
    decoded = decode_data_uri(image, max_image_bytes)
    return AnalysisRequest(image=decoded, mode=mode)


def _resolve_mode(raw: object) -> AnalysisMode:
    if raw is None:
        return AnalysisMode.OBJECTS
    if not isinstance(raw, str):
        raise InvalidMode()
    try:
        return AnalysisMode(raw)
    except ValueError:
        raise InvalidMode(f"Invalid mode '{raw}'. Must be objects, text, or scene.")


def decode_data_uri(image: object, max_bytes: int) -> DecodedImage:
    """Decode a base64 image data URI, enforcing format and size.

    The decoded size is estimated from the base64 length first so an oversized
    payload is rejected without being decoded.
    """
    if not isinstance(image, str):
        raise InvalidImageFormat()

    match = _DATA_URI.match(image.strip())
    if not match:
        raise InvalidImageFormat()

    subtype = match.group("subtype").lower()
    if subtype == "jpg":
        subtype = "jpeg"
    encoded = _WHITESPACE.sub("", match.group("payload"))

    if _estimated_size(encoded) > max_bytes:
        raise PayloadTooLarge(_too_large_message(max_bytes))

    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidImageFormat("Image payload is not valid base64")

    if not data:
        raise InvalidImageFormat("Image payload is empty")
    if len(data) > max_bytes:
        raise PayloadTooLarge(_too_large_message(max_bytes))

    return DecodedImage(mime_type=f"image/{subtype}", data=data)


def _estimated_size(encoded: str) -> int:
    padding = len(encoded) - len(encoded.rstrip("="))
    return len(encoded) * 3 // 4 - padding


def _too_large_message(max_bytes: int) -> str:
    return f"Image too large. Maximum size is {max_bytes // (1024 * 1024)} MB."


def validate_chat_request(payload: object, max_messages: int, max_length: int) -> list[ChatMessage]:
    """Validate a chat body and return the typed message list.

    Order: non-empty list, count cap, then per message: structure, length, role.

    Raises:
        InvalidRequest, TooManyMessages, InvalidMessage, MessageTooLong.
    """
    messages = payload.get("messages") if isinstance(payload, dict) else None
    if not isinstance(messages, list) or not messages:
        raise InvalidRequest("Invalid messages format. Must be a non-empty array.")

    if len(messages) > max_messages:
        raise TooManyMessages(f"Too many messages. Maximum {max_messages} messages allowed.")

    validated: list[ChatMessage] = []
    for msg in messages:
        if (not isinstance(msg, dict)
                or not isinstance(msg.get("role"), str)
                or not isinstance(msg.get("content"), str)):
            raise InvalidMessage()
        if len(msg["content"]) > max_length:
            raise MessageTooLong(f"Message too long. Maximum {max_length} characters per message.")
        if msg["role"] not in ALLOWED_ROLES:
            raise InvalidMessage("Invalid message role. Must be user, assistant, or system.")
        validated.append(ChatMessage(role=msg["role"], content=msg["content"]))

    return validated
