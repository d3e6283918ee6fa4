"""Image generation routes."""
from typing import Optional

from fastapi import APIRouter, Depends

from common.inference import InferenceBackend, get_inference_backend
from common.models import ImageResponse
from image.models import (
    DualImageRequest,
    DualImageResponse,
    EnhancedImageRequest,
    EnhancedImageResponse,
    GenerateImageRequest,
)
from image.pipeline import run_dual_pipeline, run_enhanced_image
from image.services import generate_image

router = APIRouter(tags=["image"])


@router.post("/generate-image", response_model=ImageResponse)
def generate_image_endpoint(
    req: Optional[GenerateImageRequest] = None,
    backend: InferenceBackend = Depends(get_inference_backend)
):
    """
    Generate an image from a prompt.

    Accepts:
      { prompt?, width?, height? }

    Returns the image as a data URI in `image_url`.
    """
    req = req or GenerateImageRequest()
    return generate_image(backend, prompt=req.prompt, width=req.width, height=req.height)


@router.post("/generate-enhanced-image", response_model=EnhancedImageResponse)
def generate_enhanced_image_endpoint(
    req: Optional[EnhancedImageRequest] = None,
    backend: InferenceBackend = Depends(get_inference_backend)
):
    """
    Enhance the prompt, then generate an image from it.

    Accepts:
      { prompt?, style?, mood?, details?, width?, height? }

    Falls back to the original prompt when enhancement yields nothing.
    """
    return run_enhanced_image(backend, req or EnhancedImageRequest())


@router.post("/generate-dual-image", response_model=DualImageResponse)
def generate_dual_image_endpoint(
    req: Optional[DualImageRequest] = None,
    backend: InferenceBackend = Depends(get_inference_backend)
):
    """
    Generate a matching portrait and full-body image of one character.

    Accepts:
      { prompt?, width?, height?, strength? }
    """
    req = req or DualImageRequest()
    return run_dual_pipeline(
        backend,
        prompt=req.prompt,
        width=req.width,
        height=req.height,
        strength=req.strength,
    )
