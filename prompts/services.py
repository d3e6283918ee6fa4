"""Prompt enhancement service."""
from typing import Optional

from config import Config
from common.error_messages import ErrorCode, ServiceError
from common.inference import InferenceBackend
from common.models import CompletionParams
from prompts.models import EnhanceResponse, DEFAULT_ENHANCER_PROMPT
from prompts.templates import (
    BOILERPLATE_PREFIXES,
    DEFAULT_MOOD,
    DEFAULT_STYLE,
    QUALITY_SUFFIX,
    WORKED_EXAMPLE,
    has_quality_keyword,
    resolve_mood,
    resolve_style,
)
from utils.logger import get_logger

logger = get_logger("prompts.services")

ENHANCER_PARAMS = CompletionParams(max_tokens=150, temperature=0.8)

_QUOTES = "\"'`“”‘’"


def build_system_instruction(style: str, mood: str, custom_instructions: Optional[str] = None) -> str:
    """Compose the enhancer system prompt from the style/mood tables."""
    lines = [
        "You are an expert in crafting highly detailed, visually stunning AI prompts for fantasy portraits.",
        "Enhance the given description while ensuring it includes:",
        "- Hyper-realistic, ultra-detailed features",
        f"- Artistic style: {resolve_style(style)}",
        f"- Lighting and mood: {resolve_mood(mood)}",
        "- Image quality: 8K UHD, trending on ArtStation, fantasy concept art",
        "- A **single character** in a **cohesive scene** without unnecessary backstory.",
        "Answer with the enhanced prompt only, as one paragraph, no preamble.",
    ]
    if custom_instructions and custom_instructions.strip():
        lines.append(f"Additional instructions: {custom_instructions.strip()}")
    lines.append("")
    lines.append("Example:")
    lines.append(WORKED_EXAMPLE)
    return "\n".join(lines)


def strip_boilerplate(text: str) -> str:
    """Remove wrapping quotes and leading 'Output:'-style labels."""
    cleaned = text.strip().strip(_QUOTES).strip()
    changed = True
    while changed and cleaned:
        changed = False
        lowered = cleaned.lower()
        for prefix in BOILERPLATE_PREFIXES:
            if lowered.startswith(prefix):
                cleaned = cleaned[len(prefix):].strip().strip(_QUOTES).strip()
                changed = True
                break
    return cleaned


def ensure_quality_suffix(text: str) -> str:
    """Append QUALITY_SUFFIX unless a quality keyword is already present."""
    if has_quality_keyword(text):
        return text
    return f"{text.rstrip()} {QUALITY_SUFFIX}"


def enhance_prompt(
    backend: InferenceBackend,
    prompt: str = DEFAULT_ENHANCER_PROMPT,
    style: str = DEFAULT_STYLE,
    mood: str = DEFAULT_MOOD,
    custom_instructions: Optional[str] = None
) -> EnhanceResponse:
    """
    Rewrite a terse prompt into a detailed image prompt with one model call.

    Args:
        backend: Inference backend to call
        prompt: User prompt (blank falls back to the default prompt)
        style: Style table key; unknown keys use the generic style descriptor
        mood: Mood table key; unknown keys use the generic mood descriptor
        custom_instructions: Optional extra steering for the model

    Returns:
        EnhanceResponse with the enhanced prompt and echoed metadata

    Raises:
        ServiceError: PROMPT_ENHANCEMENT_FAILED when the model output is empty
    """
    prompt = prompt.strip() or DEFAULT_ENHANCER_PROMPT
    style = style.strip() or DEFAULT_STYLE
    mood = mood.strip() or DEFAULT_MOOD
    logger.info(f"Enhancing prompt: {prompt!r} (style={style}, mood={mood})")

    raw = backend.complete(
        build_system_instruction(style, mood, custom_instructions),
        f'Enhance this prompt for AI image generation: "{prompt}"',
        ENHANCER_PARAMS,
        model=Config.PROMPT_ENHANCER_MODEL,
    )
    logger.debug(f"AI raw response: {raw!r}")

    enhanced = strip_boilerplate(raw or "")
    if not enhanced:
        logger.error("AI failed to enhance the prompt.")
        raise ServiceError(ErrorCode.PROMPT_ENHANCEMENT_FAILED)

    enhanced = ensure_quality_suffix(enhanced)
    logger.info(f"Enhanced prompt: {enhanced[:120]!r}...")

    return EnhanceResponse(
        enhanced_prompt=enhanced,
        original_prompt=prompt,
        style=style,
        mood=mood,
        word_count=len(enhanced.split()),
    )
