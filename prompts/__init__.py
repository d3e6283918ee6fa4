"""Prompt enhancement module."""
from prompts.models import EnhanceRequest, EnhanceResponse, EnhancementDetails
from prompts.services import enhance_prompt, build_system_instruction
from prompts.templates import (
    STYLE_TEMPLATES,
    MOOD_TEMPLATES,
    QUALITY_KEYWORDS,
    resolve_style,
    resolve_mood
)

__all__ = [
    "EnhanceRequest",
    "EnhanceResponse",
    "EnhancementDetails",
    "enhance_prompt",
    "build_system_instruction",
    "STYLE_TEMPLATES",
    "MOOD_TEMPLATES",
    "QUALITY_KEYWORDS",
    "resolve_style",
    "resolve_mood"
]
