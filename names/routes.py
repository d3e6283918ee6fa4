"""Name generation routes."""
from typing import Optional

from fastapi import APIRouter, Depends

from common.inference import InferenceBackend, get_inference_backend
from names.models import NameRequest, NameResponse
from names.services import generate_name

router = APIRouter(tags=["names"])


@router.post("/generate-name", response_model=NameResponse)
def generate_name_endpoint(
    req: Optional[NameRequest] = None,
    backend: InferenceBackend = Depends(get_inference_backend)
):
    """
    Generate a fantasy NPC name.

    Accepts:
      { race?: "human", gender?: "male" }
    """
    req = req or NameRequest()
    return NameResponse(name=generate_name(backend, race=req.race, gender=req.gender))
