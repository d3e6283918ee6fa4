"""
Configuration module - loads all settings from environment variables.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
try:
    load_dotenv()
except Exception as e:
    print(f"Warning: Failed to load .env file: {e}")
    print("Continuing with environment variables or defaults...")


BACKEND_WORKERS_AI = "workers-ai"
BACKEND_GEMINI = "gemini"


class Config:
    """Application configuration loaded from environment variables."""

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Safely parse integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid integer for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Safely parse float environment variable."""
        try:
            return float(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid float for {key}, using default {default}: {e}")
            return default

    # CORS
    ALLOWED_ORIGIN: str = os.getenv("ALLOWED_ORIGIN", "https://littlebigparty.duckdns.org")

    # Inference backend selection
    INFERENCE_BACKEND: str = os.getenv("INFERENCE_BACKEND", BACKEND_WORKERS_AI).lower()

    # Cloudflare Workers AI
    CLOUDFLARE_ACCOUNT_ID: str = os.getenv("CLOUDFLARE_ACCOUNT_ID", "")
    CLOUDFLARE_API_TOKEN: str = os.getenv("CLOUDFLARE_API_TOKEN", "")
    CLOUDFLARE_API_BASE: str = os.getenv("CLOUDFLARE_API_BASE", "https://api.cloudflare.com/client/v4")

    # Models (Workers AI identifiers)
    NAME_GENERATION_MODEL: str = os.getenv("NAME_GENERATION_MODEL", "@cf/mistral/mistral-7b-instruct-v0.1")
    PROMPT_ENHANCER_MODEL: str = os.getenv("PROMPT_ENHANCER_MODEL", "@cf/mistral/mistral-7b-instruct-v0.1")
    IMAGE_GENERATION_MODEL: str = os.getenv("IMAGE_GENERATION_MODEL", "@cf/stabilityai/stable-diffusion-xl-base-1.0")
    IMAGE_TO_IMAGE_MODEL: str = os.getenv("IMAGE_TO_IMAGE_MODEL", "@cf/runwayml/stable-diffusion-v1-5-img2img")

    # Gemini API (alternative backend)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_TEXT_MODEL: str = os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
    GEMINI_IMAGE_MODEL: str = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image-preview")

    # Upstream calls
    REQUEST_TIMEOUT_SECONDS: float = _get_float.__func__("REQUEST_TIMEOUT_SECONDS", 120.0)
    IMAGE_MAX_RETRIES: int = _get_int.__func__("IMAGE_MAX_RETRIES", 0)
    RETRY_BACKOFF_SECONDS: float = _get_float.__func__("RETRY_BACKOFF_SECONDS", 1.0)

    # Dual character pipeline
    DUAL_IMAGE_STRENGTH: float = _get_float.__func__("DUAL_IMAGE_STRENGTH", 0.6)

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _get_int.__func__("PORT", 8000)

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration for the selected backend."""
        if cls.INFERENCE_BACKEND == BACKEND_WORKERS_AI:
            if not cls.CLOUDFLARE_ACCOUNT_ID:
                raise ValueError("CLOUDFLARE_ACCOUNT_ID environment variable is required")
            if not cls.CLOUDFLARE_API_TOKEN:
                raise ValueError("CLOUDFLARE_API_TOKEN environment variable is required")
        elif cls.INFERENCE_BACKEND == BACKEND_GEMINI:
            if not cls.GEMINI_API_KEY:
                raise ValueError("GEMINI_API_KEY environment variable is required")
        else:
            raise ValueError(f"Unknown INFERENCE_BACKEND: {cls.INFERENCE_BACKEND}")

    @classmethod
    def get_cloudflare_token(cls) -> str:
        """Get CLOUDFLARE_API_TOKEN, raise error if not set."""
        if not cls.CLOUDFLARE_API_TOKEN:
            raise ValueError("CLOUDFLARE_API_TOKEN must be set in environment variables")
        return cls.CLOUDFLARE_API_TOKEN

    @classmethod
    def get_gemini_api_key(cls) -> str:
        """Get GEMINI_API_KEY, raise error if not set."""
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY must be set in environment variables")
        return cls.GEMINI_API_KEY
