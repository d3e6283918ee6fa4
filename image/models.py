"""Image generation Pydantic models."""
from typing import Optional
from pydantic import BaseModel, Field

from prompts.models import EnhancementDetails
from prompts.templates import DEFAULT_STYLE, DEFAULT_MOOD

DEFAULT_IMAGE_PROMPT = "A fantasy portrait of a human warrior"


class GenerateImageRequest(BaseModel):
    prompt: str = Field(DEFAULT_IMAGE_PROMPT, description="Blank prompts use the default portrait prompt")
    width: Optional[int] = Field(None, description="Clamped to [512, 1024], rounded to a multiple of 256")
    height: Optional[int] = Field(None, description="Clamped to [512, 1024], rounded to a multiple of 256")


class EnhancedImageRequest(GenerateImageRequest):
    style: str = DEFAULT_STYLE
    mood: str = DEFAULT_MOOD
    details: Optional[EnhancementDetails] = None


class EnhancedImageResponse(BaseModel):
    image_url: str
    prompt: str = Field(..., description="Prompt sent to the image model")
    width: int
    height: int
    original_prompt: str
    enhanced_prompt: Optional[str] = Field(None, description="None when enhancement failed and the original prompt was used")


class DualImageRequest(BaseModel):
    prompt: str = Field(DEFAULT_IMAGE_PROMPT, description="Character description")
    width: Optional[int] = None
    height: Optional[int] = None
    strength: Optional[float] = Field(None, allow_inf_nan=False, description="Image-to-image strength in [0, 1]")


class DualImageResponse(BaseModel):
    character_sheet: str
    portrait_prompt: str
    full_body_prompt: str
    portrait_image_url: str
    full_body_image_url: str
    width: int
    height: int
    strength: float
