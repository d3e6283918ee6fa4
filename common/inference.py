"""
Inference backends.

Handlers only need three operations from the hosted model platform:

- ``complete(system, user, params)`` -> generated text
- ``generate_image(prompt, width, height)`` -> raw image bytes
- ``image_to_image(prompt, seed_image, strength, width, height)`` -> raw image bytes

``WorkersAIBackend`` talks to the Cloudflare Workers AI REST API and is the
default. ``GeminiBackend`` implements the same contract on google-genai.
Routes receive the configured backend through ``Depends(get_inference_backend)``
so tests can swap in a stub.
"""
import base64
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional

import requests
from google import genai
from google.genai import types

from config import Config, BACKEND_GEMINI, BACKEND_WORKERS_AI
from common.error_messages import ErrorCode, InferenceError, ServiceError
from common.models import CompletionParams
from utils.logger import get_logger

logger = get_logger("inference")


class InferenceBackend(ABC):
    """Narrow interface over a hosted text + image model platform."""

    name = "base"

    @abstractmethod
    def complete(self, system: str, user: str, params: CompletionParams, model: Optional[str] = None) -> str:
        """Run a system+user chat completion and return the generated text ("" if none)."""

    @abstractmethod
    def generate_image(self, prompt: str, width: int, height: int, model: Optional[str] = None) -> bytes:
        """Run a text-to-image call and return the raw image bytes (b"" if none)."""

    @abstractmethod
    def image_to_image(
        self,
        prompt: str,
        seed_image: bytes,
        strength: float,
        width: int,
        height: int,
        model: Optional[str] = None
    ) -> bytes:
        """Perturb `seed_image` towards `prompt`; `strength` in [0, 1]."""


class WorkersAIBackend(InferenceBackend):
    """Cloudflare Workers AI over its REST endpoint ``/accounts/{id}/ai/run/{model}``."""

    name = BACKEND_WORKERS_AI

    def __init__(
        self,
        account_id: str,
        api_token: str,
        api_base: str = "https://api.cloudflare.com/client/v4",
        timeout: float = 120.0,
        session: Optional[requests.Session] = None
    ):
        self.account_id = account_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.headers = {"Authorization": f"Bearer {api_token}"}
        self._shared_session = session
        # One requests.Session per thread unless a session is injected
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The injected session, or one session per calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _run(self, model: str, payload: dict) -> requests.Response:
        url = f"{self.api_base}/accounts/{self.account_id}/ai/run/{model}"
        logger.debug(f"POST {url} ({', '.join(sorted(payload))})")
        try:
            response = self.session.post(url, json=payload, headers=self.headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.error(f"Workers AI timeout after {self.timeout}s for model {model}")
            raise InferenceError(f"Model {model} timed out.")
        except requests.exceptions.RequestException as e:
            logger.error(f"Workers AI request failed for model {model}: {e}")
            raise InferenceError(f"Could not reach model {model}.")

        if not response.ok:
            logger.error(f"Workers AI returned {response.status_code} for model {model}: {response.text[:500]}")
            raise InferenceError(f"Model {model} returned status {response.status_code}: {self._error_text(response)}")
        return response

    @staticmethod
    def _error_text(response: requests.Response) -> str:
        try:
            errors = response.json().get("errors") or []
            messages = [str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors]
            if messages:
                return "; ".join(messages)
        except ValueError:
            pass
        return response.reason or "unknown error"

    @staticmethod
    def _image_bytes(response: requests.Response) -> bytes:
        content_type = response.headers.get("Content-Type", "")
        if not content_type.startswith("application/json"):
            return response.content
        # Some models (e.g. flux) answer with {"result": {"image": "<base64>"}}
        result = response.json().get("result") or {}
        encoded = result.get("image") if isinstance(result, dict) else None
        if not encoded:
            return b""
        return base64.b64decode(encoded)

    def complete(self, system: str, user: str, params: CompletionParams, model: Optional[str] = None) -> str:
        model = model or Config.PROMPT_ENHANCER_MODEL
        payload = {
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            **params.model_dump(exclude_none=True),
        }
        response = self._run(model, payload)
        try:
            body = response.json()
        except ValueError:
            raise InferenceError(f"Model {model} returned a non-JSON response.")

        result = body.get("result") or {}
        text = result.get("response") if isinstance(result, dict) else None
        logger.debug(f"Raw completion from {model}: {text!r}")
        if text is None:
            return ""
        return text if isinstance(text, str) else str(text)

    def generate_image(self, prompt: str, width: int, height: int, model: Optional[str] = None) -> bytes:
        model = model or Config.IMAGE_GENERATION_MODEL
        response = self._run(model, {"prompt": prompt, "width": width, "height": height})
        return self._image_bytes(response)

    def image_to_image(
        self,
        prompt: str,
        seed_image: bytes,
        strength: float,
        width: int,
        height: int,
        model: Optional[str] = None
    ) -> bytes:
        model = model or Config.IMAGE_TO_IMAGE_MODEL
        payload = {
            "prompt": prompt,
            "image_b64": base64.b64encode(seed_image).decode("ascii"),
            "strength": strength,
            "width": width,
            "height": height,
        }
        response = self._run(model, payload)
        return self._image_bytes(response)


class GeminiBackend(InferenceBackend):
    """Google Gemini via google-genai. Image size and strength are advisory only."""

    name = BACKEND_GEMINI

    def __init__(self, api_key: str, text_model: str, image_model: str):
        self.client = genai.Client(api_key=api_key)
        self.text_model = text_model
        self.image_model = image_model

    def _call(self, model: str, contents, config):
        try:
            return self.client.models.generate_content(model=model, contents=contents, config=config)
        except Exception as e:
            logger.error(f"Gemini call to {model} failed: {e}")
            error_msg = str(e).lower()
            if "rate" in error_msg or "quota" in error_msg:
                raise InferenceError("AI service rate limit exceeded. Please try again in a few minutes.")
            if "timeout" in error_msg:
                raise InferenceError("AI service timeout.")
            raise InferenceError(str(e))

    def complete(self, system: str, user: str, params: CompletionParams, model: Optional[str] = None) -> str:
        model = model if model and not model.startswith("@cf/") else self.text_model
        config = types.GenerateContentConfig(
            system_instruction=system,
            max_output_tokens=params.max_tokens,
            temperature=params.temperature,
            top_p=params.top_p,
        )
        response = self._call(model, user, config)
        text = response.text or ""
        logger.debug(f"Raw completion from {model}: {text!r}")
        return text

    def _first_inline_image(self, response) -> bytes:
        for candidate in response.candidates or []:
            content = candidate.content
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline and getattr(inline, "data", None):
                    return inline.data
        return b""

    def generate_image(self, prompt: str, width: int, height: int, model: Optional[str] = None) -> bytes:
        logger.debug(f"Gemini ignores explicit size {width}x{height}")
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        response = self._call(self.image_model, prompt, config)
        return self._first_inline_image(response)

    def image_to_image(
        self,
        prompt: str,
        seed_image: bytes,
        strength: float,
        width: int,
        height: int,
        model: Optional[str] = None
    ) -> bytes:
        contents = [
            types.Part.from_bytes(data=seed_image, mime_type="image/png"),
            types.Part.from_text(text=f"Keep this character's identity and redraw them as follows: {prompt}"),
        ]
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        response = self._call(self.image_model, contents, config)
        return self._first_inline_image(response)


def build_backend(backend_name: str) -> InferenceBackend:
    """Construct the backend named `backend_name` from Config."""
    try:
        if backend_name == BACKEND_WORKERS_AI:
            if not Config.CLOUDFLARE_ACCOUNT_ID:
                raise ValueError("CLOUDFLARE_ACCOUNT_ID must be set in environment variables")
            return WorkersAIBackend(
                account_id=Config.CLOUDFLARE_ACCOUNT_ID,
                api_token=Config.get_cloudflare_token(),
                api_base=Config.CLOUDFLARE_API_BASE,
                timeout=Config.REQUEST_TIMEOUT_SECONDS,
            )
        if backend_name == BACKEND_GEMINI:
            return GeminiBackend(
                api_key=Config.get_gemini_api_key(),
                text_model=Config.GEMINI_TEXT_MODEL,
                image_model=Config.GEMINI_IMAGE_MODEL,
            )
    except ValueError as e:
        logger.error(f"Failed to initialize {backend_name} backend: {e}")
        raise ServiceError(ErrorCode.CONFIGURATION_ERROR, str(e))

    raise ServiceError(ErrorCode.CONFIGURATION_ERROR, f"Unknown backend '{backend_name}'.")


@lru_cache(maxsize=1)
def get_inference_backend() -> InferenceBackend:
    """FastAPI dependency: the process-wide backend selected by INFERENCE_BACKEND."""
    backend = build_backend(Config.INFERENCE_BACKEND)
    logger.info(f"Inference backend ready: {backend.name}")
    return backend
