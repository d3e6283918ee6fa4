"""Service-level routes: welcome, health check and the unmatched-path fallback."""
from fastapi import APIRouter, Depends

from common.error_messages import ErrorCode, ServiceError
from common.inference import InferenceBackend, get_inference_backend
from common.models import HealthResponse, WelcomeResponse
from utils.logger import get_logger

logger = get_logger("routes")

WELCOME_MESSAGE = (
    "Welcome to the Army of Me AI Service! Use POST requests for name generation, "
    "prompt enhancement, or image generation."
)

# Registered first so /healthz wins over the GET catch-all
health_router = APIRouter(tags=["service"])

# Registered last: every GET is answered with the welcome message and
# every other unmatched path is an invalid endpoint
fallback_router = APIRouter(tags=["service"])


@health_router.get("/healthz", response_model=HealthResponse)
def health(backend: InferenceBackend = Depends(get_inference_backend)):
    """Health check endpoint."""
    logger.debug("Health check requested")
    return HealthResponse(status="ok", backend=backend.name)


@fallback_router.get("/{full_path:path}", response_model=WelcomeResponse)
def welcome(full_path: str):
    return WelcomeResponse(message=WELCOME_MESSAGE)


@fallback_router.api_route("/{full_path:path}", methods=["POST", "PUT", "PATCH", "DELETE"])
def invalid_endpoint(full_path: str):
    logger.warning(f"Invalid endpoint requested: /{full_path}")
    raise ServiceError(ErrorCode.INVALID_ENDPOINT)
