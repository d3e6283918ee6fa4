"""
Prompt template tables for the enhancer.

All tables are immutable and built once at import. Lookups are total:
unknown keys degrade to the default descriptors instead of raising.
"""
from types import MappingProxyType
from typing import Optional


DEFAULT_STYLE = "fantasy"
DEFAULT_MOOD = "heroic"

STYLE_TEMPLATES = MappingProxyType({
    "fantasy": (
        "Epic high-fantasy concept art: digital painting, rich textures, "
        "ornate armor and fabrics, painterly brushwork with crisp focal detail"
    ),
    "realistic": (
        "Photorealistic portrait photography: 85mm prime lens, shallow depth of field, "
        "natural skin texture, accurate anatomy, true-to-life materials"
    ),
    "anime": (
        "High-quality anime illustration: clean line art, cel shading, expressive eyes, "
        "vibrant saturated palette, studio key-visual polish"
    ),
    "painterly": (
        "Classical oil painting: visible brush strokes, layered glazes, "
        "old-master composition, canvas texture"
    ),
    "dark_fantasy": (
        "Grim dark-fantasy illustration: gritty textures, weathered gear, "
        "desaturated palette with blood-red accents, gothic atmosphere"
    ),
    "cinematic": (
        "Cinematic film still: anamorphic framing, dramatic color grading, "
        "volumetric haze, movie-poster composition"
    ),
    "watercolor": (
        "Loose watercolor illustration: soft washes, bleeding pigments, "
        "paper grain, delicate ink outlines"
    ),
    "pixel_art": (
        "Detailed pixel art sprite portrait: limited palette, crisp pixel clusters, "
        "dithered shading, retro RPG aesthetic"
    ),
})

DEFAULT_STYLE_DESCRIPTOR = (
    "Detailed digital illustration: high contrast, soft shadows, "
    "fantasy concept-art finish"
)

MOOD_TEMPLATES = MappingProxyType({
    "heroic": "Heroic mood: golden-hour rim light, low camera angle, confident pose, warm highlights",
    "mysterious": "Mysterious mood: moonlit fog, deep shadows, cool blue tones, partially hidden features",
    "serene": "Serene mood: soft diffused daylight, pastel tones, calm expression, gentle breeze",
    "dramatic": "Dramatic mood: chiaroscuro lighting, stormy sky, strong directional key light",
    "menacing": "Menacing mood: harsh underlighting, smoldering embers, narrowed eyes, oppressive darkness",
    "whimsical": "Whimsical mood: sparkling motes of light, bright playful colors, lively expression",
    "melancholic": "Melancholic mood: overcast light, muted palette, rain-soaked surfaces, distant gaze",
})

DEFAULT_MOOD_DESCRIPTOR = "Cinematic lighting with depth and mood, balanced warm and cool tones"

QUALITY_KEYWORDS = frozenset({
    "8k",
    "ultra-detailed",
    "high resolution",
    "artstation",
    "masterpiece",
})

QUALITY_SUFFIX = (
    "Ultra-high resolution, digital painting, 8K quality, ArtStation trending, "
    "cinematic lighting, photorealistic textures."
)

BOILERPLATE_PREFIXES = (
    "enhanced prompt:",
    "output:",
    "result:",
    "prompt:",
)

WORKED_EXAMPLE = (
    'Input: "An elf ranger"\n'
    "Output: A lithe elven ranger with silver braided hair and emerald eyes, drawing a "
    "longbow in an ancient moss-covered forest, leather armor etched with leaf patterns, "
    "shafts of sunlight cutting through the canopy, hyper-detailed, 8K, fantasy concept art"
)


def _normalize_key(key: Optional[str]) -> str:
    return (key or "").strip().lower().replace("-", "_").replace(" ", "_")


def resolve_style(style: Optional[str]) -> str:
    """Return the descriptor for `style`, or DEFAULT_STYLE_DESCRIPTOR."""
    return STYLE_TEMPLATES.get(_normalize_key(style), DEFAULT_STYLE_DESCRIPTOR)


def resolve_mood(mood: Optional[str]) -> str:
    """Return the descriptor for `mood`, or DEFAULT_MOOD_DESCRIPTOR."""
    return MOOD_TEMPLATES.get(_normalize_key(mood), DEFAULT_MOOD_DESCRIPTOR)


def has_quality_keyword(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in QUALITY_KEYWORDS)
