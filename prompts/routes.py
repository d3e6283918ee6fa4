"""Prompt enhancement routes."""
from typing import Optional

from fastapi import APIRouter, Depends

from common.inference import InferenceBackend, get_inference_backend
from prompts.models import EnhanceRequest, EnhanceResponse
from prompts.services import enhance_prompt

router = APIRouter(tags=["prompts"])


@router.post("/prompt-enhancer", response_model=EnhanceResponse)
def prompt_enhancer(
    req: Optional[EnhanceRequest] = None,
    backend: InferenceBackend = Depends(get_inference_backend)
):
    """
    Enhance a prompt for image generation.

    Accepts:
      { prompt?, style?, mood?, details?: { customInstructions? } }
    """
    req = req or EnhanceRequest()
    return enhance_prompt(
        backend,
        prompt=req.prompt,
        style=req.style,
        mood=req.mood,
        custom_instructions=req.details.custom_instructions if req.details else None,
    )
