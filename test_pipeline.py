"""
Tests for the dual character pipeline (/generate-dual-image).
"""
import threading

import pytest

from config import Config
from conftest import PNG_BYTES, SEED_PNG
from image.pipeline import (
    CHARACTER_SHEET_SYSTEM,
    FULL_BODY_PROMPT_SYSTEM,
    PORTRAIT_PROMPT_SYSTEM,
    run_dual_pipeline,
)

SHEET = (
    "Face: angular, scar over left brow, amber eyes\n"
    "Hair: long silver braid\n"
    "Attire: blackened plate with red tabard\n"
    "Accessories: bastard sword, wolf-pelt cloak\n"
    "Color palette: black, crimson, silver"
)
PORTRAIT = "Head-and-shoulders portrait of a scarred silver-haired knight, 8k"
FULL_BODY = "Full-body view of a scarred silver-haired knight in blackened plate, 8k"


def make_responder(sheet=SHEET, portrait=PORTRAIT, full_body=FULL_BODY, barrier=None):
    """Reply to each pipeline stage by recognising its system prompt."""
    def respond(system, user):
        if system == CHARACTER_SHEET_SYSTEM:
            return sheet
        if barrier is not None:
            barrier.wait()
        if system == PORTRAIT_PROMPT_SYSTEM:
            return portrait
        if system == FULL_BODY_PROMPT_SYSTEM:
            return full_body
        raise AssertionError(f"unexpected system prompt: {system[:40]}")
    return respond


@pytest.fixture
def dual_backend(backend):
    backend.text = make_responder()
    backend.default_image = SEED_PNG
    backend.img2img_result = PNG_BYTES
    return backend


def test_dual_pipeline_chains_all_stages(client, dual_backend):
    response = client.post("/generate-dual-image", json={"prompt": "a grim knight"})
    assert response.status_code == 200
    data = response.json()

    assert data["character_sheet"] == SHEET
    assert data["portrait_prompt"] == PORTRAIT
    assert data["full_body_prompt"] == FULL_BODY
    assert data["portrait_image_url"].startswith("data:image/png;base64,")
    assert data["full_body_image_url"].startswith("data:image/png;base64,")

    # one sheet call plus two prompt calls, both reading the sheet
    assert len(dual_backend.completions) == 3
    assert "a grim knight" in dual_backend.completions[0]["user"]
    for call in dual_backend.completions[1:]:
        assert SHEET in call["user"]

    # portrait prompt drives text-to-image, its image seeds image-to-image
    assert dual_backend.image_calls[0]["prompt"] == PORTRAIT
    img2img = dual_backend.img2img_calls[0]
    assert img2img["prompt"] == FULL_BODY
    assert img2img["seed_image"] == SEED_PNG
    assert img2img["strength"] == Config.DUAL_IMAGE_STRENGTH
    assert img2img["model"] == Config.IMAGE_TO_IMAGE_MODEL


def test_view_prompts_are_requested_concurrently(client, backend):
    # Both prompt calls must be in flight together to pass the barrier
    barrier = threading.Barrier(2, timeout=5)
    backend.text = make_responder(barrier=barrier)
    response = client.post("/generate-dual-image", json={"prompt": "a grim knight"})
    assert response.status_code == 200
    assert not barrier.broken


def test_dual_pipeline_strength_and_size(client, dual_backend):
    response = client.post("/generate-dual-image", json={
        "prompt": "a grim knight",
        "width": 600,
        "height": 2000,
        "strength": 1.5,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["strength"] == 1.0
    assert (data["width"], data["height"]) == (512, 1024)
    assert dual_backend.img2img_calls[0]["strength"] == 1.0
    assert dual_backend.img2img_calls[0]["width"] == 512


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_strength_is_rejected(client, dual_backend, literal):
    response = client.post(
        "/generate-dual-image",
        content='{"prompt": "a grim knight", "strength": %s}' % literal,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request body.")
    assert dual_backend.completions == []
    assert dual_backend.img2img_calls == []


def test_non_finite_strength_falls_back_to_default(dual_backend):
    result = run_dual_pipeline(dual_backend, "a grim knight", strength=float("nan"))
    assert result.strength == Config.DUAL_IMAGE_STRENGTH
    assert dual_backend.img2img_calls[0]["strength"] == Config.DUAL_IMAGE_STRENGTH


def test_character_sheet_failure_aborts(client, dual_backend):
    dual_backend.text = make_responder(sheet="")
    response = client.post("/generate-dual-image", json={"prompt": "a grim knight"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate character details."}
    assert len(dual_backend.completions) == 1
    assert dual_backend.image_calls == []


@pytest.mark.parametrize("responder, message", [
    (make_responder(portrait=""), "Failed to generate portrait prompt."),
    (make_responder(full_body="Output:"), "Failed to generate full-body prompt."),
])
def test_view_prompt_failure_aborts(client, dual_backend, responder, message):
    dual_backend.text = responder
    response = client.post("/generate-dual-image", json={"prompt": "a grim knight"})
    assert response.status_code == 500
    assert response.json() == {"error": message}
    assert dual_backend.image_calls == []
    assert dual_backend.img2img_calls == []


def test_portrait_image_failure_aborts(client, dual_backend):
    dual_backend.default_image = b""
    response = client.post("/generate-dual-image", json={"prompt": "a grim knight"})
    assert response.status_code == 500
    assert response.json()["error"].startswith("Failed to generate portrait image.")
    assert dual_backend.img2img_calls == []


def test_full_body_image_failure_aborts(client, dual_backend):
    dual_backend.img2img_result = b""
    response = client.post("/generate-dual-image", json={"prompt": "a grim knight"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate full-body image."}


def test_full_body_invalid_image_reports_stage(client, dual_backend):
    dual_backend.img2img_result = b"not an image"
    response = client.post("/generate-dual-image", json={"prompt": "a grim knight"})
    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to generate full-body image. AI model returned invalid image data."
    }
