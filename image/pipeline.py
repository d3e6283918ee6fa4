"""
Multi-step image pipelines.

Enhanced image: prompt -> enhancer -> text-to-image. The request body is
parsed once and the same value feeds both steps.

Dual character:
    1. one text call writes a character detail sheet
    2. two concurrent text calls turn the sheet into a portrait prompt and a
       full-body prompt
    3. the portrait prompt drives text-to-image, and the portrait image seeds
       an image-to-image call with the full-body prompt

Any stage failure aborts the whole pipeline with a stage-specific error.
"""
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from config import Config
from common.error_messages import ErrorCode, ServiceError
from common.inference import InferenceBackend
from common.models import CompletionParams
from image.models import (
    DEFAULT_IMAGE_PROMPT,
    DualImageResponse,
    EnhancedImageRequest,
    EnhancedImageResponse,
)
from image.services import (
    generate_image,
    normalize_dimension,
    render_image_bytes,
    to_data_uri,
    validate_image_payload,
)
from prompts.services import enhance_prompt, ensure_quality_suffix, strip_boilerplate
from utils.logger import get_logger

logger = get_logger("image.pipeline")

T = TypeVar("T")

CHARACTER_SHEET_SYSTEM = (
    "You are a meticulous character designer for a fantasy RPG. "
    "From the user's description, write a character detail sheet that an illustrator can follow. "
    "Use exactly these labelled lines and nothing else:\n"
    "Face: <face shape, skin, eyes, expression, distinguishing marks>\n"
    "Hair: <color, length, style>\n"
    "Attire: <garments, armor, materials>\n"
    "Accessories: <weapons, jewelry, props>\n"
    "Color palette: <3-5 dominant colors>"
)

PORTRAIT_PROMPT_SYSTEM = (
    "You write prompts for an image diffusion model. Using the character detail sheet, "
    "write one prompt for a head-and-shoulders portrait of this character. "
    "Keep face, hair and palette exactly as described. "
    "Answer with the prompt only, one paragraph, no preamble."
)

FULL_BODY_PROMPT_SYSTEM = (
    "You write prompts for an image diffusion model. Using the character detail sheet, "
    "write one prompt for a full-body, head-to-toe view of this character standing in a neutral pose. "
    "Keep face, hair, attire, accessories and palette exactly as described. "
    "Answer with the prompt only, one paragraph, no preamble."
)

SHEET_PARAMS = CompletionParams(max_tokens=300, temperature=0.7)
PROMPT_PARAMS = CompletionParams(max_tokens=150, temperature=0.7)


def run_enhanced_image(backend: InferenceBackend, req: EnhancedImageRequest) -> EnhancedImageResponse:
    """Enhance the prompt, then generate an image from the enhanced prompt."""
    original_prompt = req.prompt.strip() or DEFAULT_IMAGE_PROMPT
    logger.info(f"Enhancing prompt before image generation: {original_prompt!r}")

    enhanced_prompt: Optional[str] = None
    try:
        enhanced = enhance_prompt(
            backend,
            prompt=original_prompt,
            style=req.style,
            mood=req.mood,
            custom_instructions=req.details.custom_instructions if req.details else None,
        )
        enhanced_prompt = enhanced.enhanced_prompt
    except ServiceError as e:
        logger.warning(f"Enhancement failed, using original prompt: {e.message}")

    final_prompt = enhanced_prompt or original_prompt
    logger.info(f"Final prompt used for image: {final_prompt[:120]!r}")

    image = generate_image(backend, prompt=final_prompt, width=req.width, height=req.height)
    return EnhancedImageResponse(
        **image.model_dump(),
        original_prompt=original_prompt,
        enhanced_prompt=enhanced_prompt,
    )


def _stage(error_code: ErrorCode, operation: Callable[[], T]) -> T:
    """Run one pipeline stage, reporting any failure under `error_code`."""
    try:
        return operation()
    except ServiceError as e:
        if e.error_code == error_code:
            raise
        logger.error(f"Stage {error_code.value} failed: {e.message}")
        raise ServiceError(error_code, e.message)


def _complete_text(backend: InferenceBackend, system: str, user: str, params: CompletionParams, error_code: ErrorCode) -> str:
    raw = backend.complete(system, user, params, model=Config.PROMPT_ENHANCER_MODEL)
    text = strip_boilerplate(raw or "")
    if not text:
        raise ServiceError(error_code)
    return text


def build_character_sheet(backend: InferenceBackend, prompt: str) -> str:
    return _stage(
        ErrorCode.CHARACTER_SHEET_FAILED,
        lambda: _complete_text(
            backend,
            CHARACTER_SHEET_SYSTEM,
            f"Character description: {prompt}",
            SHEET_PARAMS,
            ErrorCode.CHARACTER_SHEET_FAILED,
        ),
    )


def build_view_prompt(backend: InferenceBackend, sheet: str, system: str, error_code: ErrorCode) -> str:
    text = _stage(
        error_code,
        lambda: _complete_text(
            backend,
            system,
            f"Character detail sheet:\n{sheet}",
            PROMPT_PARAMS,
            error_code,
        ),
    )
    return ensure_quality_suffix(text)


def run_dual_pipeline(
    backend: InferenceBackend,
    prompt: str = DEFAULT_IMAGE_PROMPT,
    width: Optional[int] = None,
    height: Optional[int] = None,
    strength: Optional[float] = None
) -> DualImageResponse:
    """
    Produce a matching portrait and full-body image of one character.

    Args:
        backend: Inference backend to call
        prompt: Character description (blank falls back to the default prompt)
        width: Requested width, normalised by normalize_dimension
        height: Requested height, normalised by normalize_dimension
        strength: Image-to-image strength; missing or non-finite values use DUAL_IMAGE_STRENGTH, clamped to [0, 1]

    Returns:
        DualImageResponse with the intermediate prompts and both images

    Raises:
        ServiceError: with the code of the first stage that failed
    """
    prompt = prompt.strip() or DEFAULT_IMAGE_PROMPT
    width = normalize_dimension(width)
    height = normalize_dimension(height)
    if strength is None or not math.isfinite(strength):
        strength = Config.DUAL_IMAGE_STRENGTH
    strength = min(max(float(strength), 0.0), 1.0)

    logger.info(f"Dual pipeline: building character sheet for {prompt!r}")
    sheet = build_character_sheet(backend, prompt)

    logger.info("Dual pipeline: writing portrait and full-body prompts")
    with ThreadPoolExecutor(max_workers=2) as executor:
        portrait_future = executor.submit(
            build_view_prompt, backend, sheet, PORTRAIT_PROMPT_SYSTEM, ErrorCode.PORTRAIT_PROMPT_FAILED
        )
        full_body_future = executor.submit(
            build_view_prompt, backend, sheet, FULL_BODY_PROMPT_SYSTEM, ErrorCode.FULL_BODY_PROMPT_FAILED
        )
        portrait_prompt = portrait_future.result()
        full_body_prompt = full_body_future.result()

    logger.info("Dual pipeline: rendering portrait")
    portrait = _stage(
        ErrorCode.PORTRAIT_IMAGE_FAILED,
        lambda: render_image_bytes(backend, portrait_prompt, width, height, ErrorCode.PORTRAIT_IMAGE_FAILED),
    )

    logger.info(f"Dual pipeline: rendering full body from portrait (strength={strength})")
    full_body = _stage(
        ErrorCode.FULL_BODY_IMAGE_FAILED,
        lambda: validate_image_payload(
            backend.image_to_image(
                full_body_prompt, portrait, strength, width, height, model=Config.IMAGE_TO_IMAGE_MODEL
            ),
            ErrorCode.FULL_BODY_IMAGE_FAILED,
        ),
    )

    return DualImageResponse(
        character_sheet=sheet,
        portrait_prompt=portrait_prompt,
        full_body_prompt=full_body_prompt,
        portrait_image_url=to_data_uri(portrait),
        full_body_image_url=to_data_uri(full_body),
        width=width,
        height=height,
        strength=strength,
    )
