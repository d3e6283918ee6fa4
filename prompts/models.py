"""Prompt enhancement Pydantic models."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from prompts.templates import DEFAULT_STYLE, DEFAULT_MOOD

DEFAULT_ENHANCER_PROMPT = "A mighty dwarf paladin"


class EnhancementDetails(BaseModel):
    """Optional extra steering sent by the client."""
    model_config = ConfigDict(populate_by_name=True)

    custom_instructions: Optional[str] = Field(
        None,
        alias="customInstructions",
        description="Free-text instructions appended to the system prompt"
    )


class EnhanceRequest(BaseModel):
    prompt: str = Field(DEFAULT_ENHANCER_PROMPT, description="Terse user prompt")
    style: str = Field(DEFAULT_STYLE, description="Key into the style table; unknown keys use a generic style")
    mood: str = Field(DEFAULT_MOOD, description="Key into the mood table; unknown keys use a generic mood")
    details: Optional[EnhancementDetails] = None


class EnhanceResponse(BaseModel):
    enhanced_prompt: str
    original_prompt: str
    style: str
    mood: str
    word_count: int
