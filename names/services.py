"""Name generation service."""
from config import Config
from common.error_messages import ErrorCode, ServiceError
from common.inference import InferenceBackend
from common.models import CompletionParams
from utils.logger import get_logger

logger = get_logger("names.services")

NAME_SYSTEM_INSTRUCTION = (
    "You are an expert in fantasy RPG name generation. "
    "Generate **one unique** first and last name for an RPG character.\n"
    "- Do NOT provide explanations, alternative names, or extra words.\n"
    '- Output ONLY the name in the format: "Firstname Lastname".'
)

NAME_PARAMS = CompletionParams(max_tokens=12, temperature=1.2, top_p=0.75)

# Characters the model likes to wrap names in
_STRIP_CHARS = " \t\r\n\"'`*.,;:!"


def clean_name(raw: str) -> str:
    """Reduce model output to at most two whitespace-separated tokens."""
    parts = [part.strip(_STRIP_CHARS) for part in raw.split()]
    parts = [part for part in parts if part]
    return " ".join(parts[:2])


def generate_name(backend: InferenceBackend, race: str = "human", gender: str = "male") -> str:
    """
    Ask the text model for a "Firstname Lastname" fantasy name.

    Args:
        backend: Inference backend to call
        race: Character race (blank falls back to "human")
        gender: Character gender (blank falls back to "male")

    Returns:
        The cleaned name

    Raises:
        ServiceError: NAME_GENERATION_FAILED when the model returns nothing usable
    """
    race = race.strip() or "human"
    gender = gender.strip() or "male"
    logger.info(f"Generating name for a {gender} {race} NPC...")

    raw = backend.complete(
        NAME_SYSTEM_INSTRUCTION,
        f"Provide a full fantasy name (first and last) for a {gender} {race}.",
        NAME_PARAMS,
        model=Config.NAME_GENERATION_MODEL,
    )
    logger.debug(f"AI raw response: {raw!r}")

    name = clean_name(raw or "")
    if not name:
        logger.error("AI failed to generate a name.")
        raise ServiceError(ErrorCode.NAME_GENERATION_FAILED)

    logger.info(f"Generated name: {name!r}")
    return name
