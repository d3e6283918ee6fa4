"""
Tests for image generation, the dimension policy and the enhanced-image chain.
"""
import base64

import pytest

from config import Config
from conftest import PNG_BYTES
from common.error_messages import InferenceError
from image.models import DEFAULT_IMAGE_PROMPT
from image.services import detect_image_mime, normalize_dimension, to_data_uri
from utils.retry import retry_with_backoff


def decode_data_uri(uri: str) -> bytes:
    header, payload = uri.split(",", 1)
    assert header.endswith(";base64")
    return base64.b64decode(payload)


# ---------- Dimension policy ----------
@pytest.mark.parametrize("requested, expected", [
    (2000, 1024),
    (100, 512),
    (600, 512),
    (640, 768),
    (700, 768),
    (768, 768),
    (900, 1024),
    (1024, 1024),
    (None, 1024),
])
def test_normalize_dimension(requested, expected):
    assert normalize_dimension(requested) == expected


def test_dimensions_are_normalized_before_calling_model(client, backend):
    response = client.post("/generate-image", json={"prompt": "a castle", "width": 2000, "height": 100})
    assert response.status_code == 200
    assert backend.image_calls[0]["width"] == 1024
    assert backend.image_calls[0]["height"] == 512
    assert response.json()["width"] == 1024
    assert response.json()["height"] == 512


# ---------- Encoding ----------
def test_detect_image_mime():
    assert detect_image_mime(PNG_BYTES) == "image/png"
    assert detect_image_mime(b"\xff\xd8\xff\xe0rest") == "image/jpeg"
    assert detect_image_mime(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
    assert detect_image_mime(b"<html>nope</html>") is None


def test_to_data_uri_uses_detected_mime():
    assert to_data_uri(PNG_BYTES).startswith("data:image/png;base64,")
    assert to_data_uri(b"\xff\xd8\xff\xe0").startswith("data:image/jpeg;base64,")


# ---------- /generate-image ----------
def test_blank_prompt_uses_default_placeholder(client, backend):
    response = client.post("/generate-image", json={"prompt": ""})
    assert response.status_code == 200
    data = response.json()
    assert data["prompt"] == DEFAULT_IMAGE_PROMPT
    assert backend.image_calls[0]["prompt"] == DEFAULT_IMAGE_PROMPT
    assert data["image_url"].startswith("data:image/png;base64,")
    assert decode_data_uri(data["image_url"]) == PNG_BYTES


def test_generate_image_without_body_uses_defaults(client, backend):
    response = client.post("/generate-image")
    assert response.status_code == 200
    assert backend.image_calls[0] == {
        "prompt": DEFAULT_IMAGE_PROMPT,
        "width": 1024,
        "height": 1024,
        "model": Config.IMAGE_GENERATION_MODEL,
    }


def test_empty_model_payload_fails(client, backend):
    backend.default_image = b""
    response = client.post("/generate-image", json={"prompt": "a castle"})
    assert response.status_code == 500
    assert response.json() == {"error": "AI model returned no data."}


def test_non_image_payload_fails(client, backend):
    backend.default_image = b'{"errors": ["bad"]}'
    response = client.post("/generate-image", json={"prompt": "a castle"})
    assert response.status_code == 500
    assert response.json() == {"error": "AI model returned invalid image data."}


def test_no_retry_by_default(client, backend):
    backend.images = [InferenceError("Model timed out."), PNG_BYTES]
    response = client.post("/generate-image", json={"prompt": "a castle"})
    assert response.status_code == 500
    assert len(backend.image_calls) == 1


def test_configured_retries_recover_from_transient_failure(client, backend, monkeypatch):
    monkeypatch.setattr(Config, "IMAGE_MAX_RETRIES", 2)
    monkeypatch.setattr(Config, "RETRY_BACKOFF_SECONDS", 0.0)
    backend.images = [b"", InferenceError("Model timed out."), PNG_BYTES]
    response = client.post("/generate-image", json={"prompt": "a castle"})
    assert response.status_code == 200
    assert len(backend.image_calls) == 3


# ---------- /generate-enhanced-image ----------
def test_enhanced_image_passes_enhancer_output_to_image_model(client, backend):
    backend.text = "Output: X reimagined as a glowing knight, 8k"
    response = client.post("/generate-enhanced-image", json={"prompt": "X"})
    assert response.status_code == 200
    data = response.json()

    assert '"X"' in backend.completions[0]["user"]
    assert data["enhanced_prompt"] == "X reimagined as a glowing knight, 8k"
    assert backend.image_calls[0]["prompt"] == data["enhanced_prompt"]
    assert data["prompt"] == data["enhanced_prompt"]
    assert data["original_prompt"] == "X"
    assert decode_data_uri(data["image_url"]) == PNG_BYTES


def test_enhanced_image_falls_back_to_original_prompt(client, backend):
    backend.text = ""
    response = client.post("/generate-enhanced-image", json={"prompt": "X"})
    assert response.status_code == 200
    data = response.json()
    assert data["enhanced_prompt"] is None
    assert backend.image_calls[0]["prompt"] == "X"
    assert data["prompt"] == "X"


def test_enhanced_image_forwards_style_and_size(client, backend):
    backend.text = "A ranger, masterpiece"
    response = client.post("/generate-enhanced-image", json={
        "prompt": "ranger",
        "style": "watercolor",
        "width": 600,
    })
    assert response.status_code == 200
    assert "watercolor" in backend.completions[0]["system"].lower()
    assert backend.image_calls[0]["width"] == 512
    assert backend.image_calls[0]["height"] == 1024


def test_enhanced_image_surfaces_image_failure(client, backend):
    backend.text = "A ranger, 8k"
    backend.default_image = b""
    response = client.post("/generate-enhanced-image", json={"prompt": "ranger"})
    assert response.status_code == 500
    assert response.json() == {"error": "AI model returned no data."}


# ---------- Retry policy ----------
def test_retry_with_backoff_single_attempt_by_default():
    calls = []

    def operation():
        calls.append(1)
        raise ValueError("nope")

    with pytest.raises(ValueError):
        retry_with_backoff(operation, sleep=lambda _: None)
    assert len(calls) == 1


def test_retry_with_backoff_grows_delay():
    delays = []
    outcomes = [ValueError("1"), ValueError("2"), "ok"]

    def operation():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    result = retry_with_backoff(operation, attempts=3, delay=0.5, backoff=2.0, sleep=delays.append)
    assert result == "ok"
    assert delays == [0.5, 1.0]


def test_retry_with_backoff_ignores_unlisted_exceptions():
    def operation():
        raise KeyError("not retried")

    with pytest.raises(KeyError):
        retry_with_backoff(operation, attempts=5, exceptions=(ValueError,), sleep=lambda _: None)
