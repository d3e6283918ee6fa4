"""
Error messages and status codes.

Every failure a handler can report is listed here once, with the message
returned to browser clients as ``{"error": message}`` and its HTTP status.
"""
from typing import Tuple, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # Request Errors (400, 404)
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_ENDPOINT = "INVALID_ENDPOINT"

    # Generation Errors (500)
    NAME_GENERATION_FAILED = "NAME_GENERATION_FAILED"
    PROMPT_ENHANCEMENT_FAILED = "PROMPT_ENHANCEMENT_FAILED"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"
    INVALID_IMAGE_DATA = "INVALID_IMAGE_DATA"

    # Dual character pipeline stages (500)
    CHARACTER_SHEET_FAILED = "CHARACTER_SHEET_FAILED"
    PORTRAIT_PROMPT_FAILED = "PORTRAIT_PROMPT_FAILED"
    FULL_BODY_PROMPT_FAILED = "FULL_BODY_PROMPT_FAILED"
    PORTRAIT_IMAGE_FAILED = "PORTRAIT_IMAGE_FAILED"
    FULL_BODY_IMAGE_FAILED = "FULL_BODY_IMAGE_FAILED"

    # External API / configuration Errors (500)
    INFERENCE_ERROR = "INFERENCE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Generic Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES = {
    ErrorCode.INVALID_FORMAT: "Invalid request body.",
    ErrorCode.INVALID_ENDPOINT: "Invalid endpoint",

    ErrorCode.NAME_GENERATION_FAILED: "Failed to generate a name.",
    ErrorCode.PROMPT_ENHANCEMENT_FAILED: "Failed to generate enhanced prompt.",
    ErrorCode.IMAGE_GENERATION_FAILED: "AI model returned no data.",
    ErrorCode.INVALID_IMAGE_DATA: "AI model returned invalid image data.",

    ErrorCode.CHARACTER_SHEET_FAILED: "Failed to generate character details.",
    ErrorCode.PORTRAIT_PROMPT_FAILED: "Failed to generate portrait prompt.",
    ErrorCode.FULL_BODY_PROMPT_FAILED: "Failed to generate full-body prompt.",
    ErrorCode.PORTRAIT_IMAGE_FAILED: "Failed to generate portrait image.",
    ErrorCode.FULL_BODY_IMAGE_FAILED: "Failed to generate full-body image.",

    ErrorCode.INFERENCE_ERROR: "AI service request failed.",
    ErrorCode.CONFIGURATION_ERROR: "The AI service is not configured properly.",

    ErrorCode.UNKNOWN_ERROR: "Something unexpected happened. Please try again.",
}


ERROR_STATUS_CODES = {
    ErrorCode.INVALID_FORMAT: 400,
    ErrorCode.INVALID_ENDPOINT: 404,

    ErrorCode.NAME_GENERATION_FAILED: 500,
    ErrorCode.PROMPT_ENHANCEMENT_FAILED: 500,
    ErrorCode.IMAGE_GENERATION_FAILED: 500,
    ErrorCode.INVALID_IMAGE_DATA: 500,

    ErrorCode.CHARACTER_SHEET_FAILED: 500,
    ErrorCode.PORTRAIT_PROMPT_FAILED: 500,
    ErrorCode.FULL_BODY_PROMPT_FAILED: 500,
    ErrorCode.PORTRAIT_IMAGE_FAILED: 500,
    ErrorCode.FULL_BODY_IMAGE_FAILED: 500,

    ErrorCode.INFERENCE_ERROR: 500,
    ErrorCode.CONFIGURATION_ERROR: 500,

    ErrorCode.UNKNOWN_ERROR: 500,
}


def get_error_response(
    error_code: ErrorCode,
    custom_message: Optional[str] = None
) -> Tuple[str, int]:
    """
    Get error message and HTTP status code.

    Args:
        error_code: The error code enum
        custom_message: Optional message to append to the standard message

    Returns:
        Tuple of (error_message, status_code)
    """
    message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    status_code = ERROR_STATUS_CODES.get(error_code, 500)

    if custom_message:
        message = f"{message} {custom_message}"

    return message, status_code


class ServiceError(Exception):
    """A failure that should reach the client as ``{"error": message}``."""

    def __init__(self, error_code: ErrorCode, custom_message: Optional[str] = None):
        self.error_code = error_code
        self.message, self.status_code = get_error_response(error_code, custom_message)
        super().__init__(self.message)


class InferenceError(ServiceError):
    """The upstream inference service failed or could not be reached."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(ErrorCode.INFERENCE_ERROR, detail)
