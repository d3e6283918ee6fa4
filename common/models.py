"""Shared Pydantic models for inference calls and image responses."""
from typing import Optional
from pydantic import BaseModel, Field


class CompletionParams(BaseModel):
    """Sampling parameters for a text-completion call."""
    max_tokens: int = Field(256, description="Upper bound on generated tokens")
    temperature: float = Field(0.7, description="Sampling temperature")
    top_p: Optional[float] = Field(None, description="Nucleus sampling cutoff (omitted when None)")


class WelcomeResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    backend: str


class ImageResponse(BaseModel):
    """Canonical image payload: a data URI plus the parameters that produced it."""
    image_url: str = Field(..., description="data:<mime>;base64,<payload>")
    prompt: str = Field(..., description="Prompt sent to the image model")
    width: int
    height: int
