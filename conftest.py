"""
Shared pytest fixtures.

Tests never reach a real inference platform: `client` swaps the backend
dependency for a StubBackend that records every call.
"""
import os
import threading
from typing import Callable, List, Optional, Union

# Configure before the application modules are imported
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("INFERENCE_BACKEND", "workers-ai")
os.environ.setdefault("CLOUDFLARE_ACCOUNT_ID", "test-account")
os.environ.setdefault("CLOUDFLARE_API_TOKEN", "test-token")

import pytest
from fastapi.testclient import TestClient

from app import app
from common.inference import InferenceBackend, get_inference_backend
from common.models import CompletionParams

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x01" * 24
SEED_PNG = b"\x89PNG\r\n\x1a\n" + b"portrait-seed" * 4

TextReply = Union[str, Exception, Callable[[str, str], str]]


class StubBackend(InferenceBackend):
    """In-memory backend returning canned text and image bytes."""

    name = "stub"

    def __init__(self, text: TextReply = "Aldric Stormwind", images: Optional[List[Union[bytes, Exception]]] = None):
        self.text = text
        self.images = list(images) if images is not None else []
        self.default_image = PNG_BYTES
        self.img2img_result: Union[bytes, Exception] = PNG_BYTES
        self.completions = []
        self.image_calls = []
        self.img2img_calls = []
        self._lock = threading.Lock()

    def complete(self, system: str, user: str, params: CompletionParams, model: Optional[str] = None) -> str:
        with self._lock:
            self.completions.append({"system": system, "user": user, "params": params, "model": model})
        if isinstance(self.text, Exception):
            raise self.text
        if callable(self.text):
            return self.text(system, user)
        return self.text

    def generate_image(self, prompt: str, width: int, height: int, model: Optional[str] = None) -> bytes:
        with self._lock:
            self.image_calls.append({"prompt": prompt, "width": width, "height": height, "model": model})
            result = self.images.pop(0) if self.images else self.default_image
        if isinstance(result, Exception):
            raise result
        return result

    def image_to_image(self, prompt, seed_image, strength, width, height, model=None) -> bytes:
        with self._lock:
            self.img2img_calls.append({
                "prompt": prompt,
                "seed_image": seed_image,
                "strength": strength,
                "width": width,
                "height": height,
                "model": model,
            })
        if isinstance(self.img2img_result, Exception):
            raise self.img2img_result
        return self.img2img_result


@pytest.fixture
def backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def client(backend: StubBackend):
    """TestClient wired to the stub backend."""
    app.dependency_overrides[get_inference_backend] = lambda: backend
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
