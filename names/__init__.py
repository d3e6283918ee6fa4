"""Fantasy character name generation module."""
from names.models import NameRequest, NameResponse
from names.services import generate_name, clean_name

__all__ = [
    "NameRequest",
    "NameResponse",
    "generate_name",
    "clean_name"
]
