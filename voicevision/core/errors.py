"""Exception hierarchy shared by both relays.

Every error carries the HTTP status it maps to and a message that is safe to
return to the caller. The app-level handler in main.py renders them as
{"error": message}.
"""


class RelayError(Exception):
    """Base class for errors surfaced to the caller as a JSON error body."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


# Validation errors: always client-caused, always raised before any upstream call.

class ValidationFailure(RelayError):
    status_code = 400
    default_message = "Invalid request"


class InvalidRequest(ValidationFailure):
    default_message = "Invalid request body. Expected a JSON object."


class MissingInput(ValidationFailure):
    default_message = "Image data is required"


class InvalidMode(ValidationFailure):
    default_message = "Invalid mode. Must be objects, text, or scene."


class InvalidImageFormat(ValidationFailure):
    default_message = "Invalid image format. Expected a base64 JPEG, PNG, GIF, or WebP data URI."


class PayloadTooLarge(ValidationFailure):
    default_message = "Image too large"


class TooManyMessages(ValidationFailure):
    default_message = "Too many messages"


class InvalidMessage(ValidationFailure):
    default_message = "Invalid message structure. Each message must have role and content strings."


class MessageTooLong(ValidationFailure):
    default_message = "Message too long"


# Upstream errors

class RateLimited(RelayError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class QuotaExceeded(RelayError):
    status_code = 402
    default_message = "Payment required. Please add credits to your workspace."


class UpstreamError(RelayError):
    """Gateway returned a non-success status, timed out, or sent an unusable envelope."""
    status_code = 500
    default_message = "AI gateway error"

    def __init__(self, upstream_status: int | None = None, message: str | None = None):
        self.upstream_status = upstream_status
        if message is None and upstream_status is not None:
            message = f"AI gateway error: {upstream_status}"
        super().__init__(message)


class ConfigurationError(RelayError):
    status_code = 500
    default_message = "Service is not configured"
