"""Image generation module."""
from image.models import (
    DEFAULT_IMAGE_PROMPT,
    GenerateImageRequest,
    EnhancedImageRequest,
    DualImageRequest
)
from image.services import generate_image, normalize_dimension, to_data_uri
from image.pipeline import run_enhanced_image, run_dual_pipeline

__all__ = [
    "DEFAULT_IMAGE_PROMPT",
    "GenerateImageRequest",
    "EnhancedImageRequest",
    "DualImageRequest",
    "generate_image",
    "normalize_dimension",
    "to_data_uri",
    "run_enhanced_image",
    "run_dual_pipeline"
]
