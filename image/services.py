"""Image generation services - dimension policy, validation and encoding."""
import base64
from typing import Optional

from config import Config
from common.error_messages import ErrorCode, ServiceError
from common.inference import InferenceBackend
from common.models import ImageResponse
from image.models import DEFAULT_IMAGE_PROMPT
from utils.logger import get_logger
from utils.retry import retry_with_backoff

logger = get_logger("image.services")

MIN_DIMENSION = 512
MAX_DIMENSION = 1024
DIMENSION_STEP = 256
DEFAULT_DIMENSION = 1024

# (signature prefix, mime type)
IMAGE_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
)


def normalize_dimension(value: Optional[int]) -> int:
    """
    Clamp a width/height into [512, 1024] and round to the nearest multiple of 256.

    None means "use the default" (1024). Ties round up, so 640 becomes 768.
    """
    if value is None:
        return DEFAULT_DIMENSION
    clamped = min(max(int(value), MIN_DIMENSION), MAX_DIMENSION)
    return ((clamped + DIMENSION_STEP // 2) // DIMENSION_STEP) * DIMENSION_STEP


def detect_image_mime(data: bytes) -> Optional[str]:
    """Identify PNG / JPEG / WEBP payloads by magic bytes."""
    for signature, mime in IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def to_data_uri(data: bytes) -> str:
    """Encode image bytes as a data URI."""
    mime_type = detect_image_mime(data) or "image/png"
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def validate_image_payload(data: Optional[bytes], empty_code: ErrorCode = ErrorCode.IMAGE_GENERATION_FAILED) -> bytes:
    """Reject empty or non-image model output."""
    if not data:
        logger.error("AI model returned empty response.")
        raise ServiceError(empty_code)
    if detect_image_mime(data) is None:
        logger.error(f"AI model returned {len(data)} bytes without a known image signature")
        raise ServiceError(ErrorCode.INVALID_IMAGE_DATA)
    return data


def render_image_bytes(
    backend: InferenceBackend,
    prompt: str,
    width: int,
    height: int,
    empty_code: ErrorCode = ErrorCode.IMAGE_GENERATION_FAILED
) -> bytes:
    """
    Call the text-to-image model and return validated bytes.

    Retries follow IMAGE_MAX_RETRIES (0 by default, i.e. a single attempt).
    """
    def attempt() -> bytes:
        data = backend.generate_image(prompt, width, height, model=Config.IMAGE_GENERATION_MODEL)
        return validate_image_payload(data, empty_code)

    data = retry_with_backoff(
        attempt,
        attempts=Config.IMAGE_MAX_RETRIES + 1,
        delay=Config.RETRY_BACKOFF_SECONDS,
        exceptions=(ServiceError,),
    )
    logger.info(f"Response size: {len(data)} bytes ({width}x{height})")
    return data


def generate_image(
    backend: InferenceBackend,
    prompt: str = DEFAULT_IMAGE_PROMPT,
    width: Optional[int] = None,
    height: Optional[int] = None
) -> ImageResponse:
    """
    Generate one image and wrap it in the canonical data-URI envelope.

    Args:
        backend: Inference backend to call
        prompt: Image prompt (blank falls back to DEFAULT_IMAGE_PROMPT)
        width: Requested width, normalised by normalize_dimension
        height: Requested height, normalised by normalize_dimension

    Returns:
        ImageResponse with image_url, the prompt used and final dimensions
    """
    prompt = prompt.strip() or DEFAULT_IMAGE_PROMPT
    width = normalize_dimension(width)
    height = normalize_dimension(height)
    logger.info(f"Generating image with prompt: {prompt[:120]!r}")

    data = render_image_bytes(backend, prompt, width, height)
    return ImageResponse(image_url=to_data_uri(data), prompt=prompt, width=width, height=height)
