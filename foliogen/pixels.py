"""
pixels.py — Local, deterministic analysis of reference images.

No network: each image is downsampled with Pillow, its pixels bucketed with
numpy, and the dominant colors classified for temperature, saturation and
brightness. A style guess comes from keywords in the filename (users tend to
name moodboard files "minimal-poster.jpg", "retro_type_02.png", ...).

Used by the fusion engine as the always-available visual signal; when the
vision call succeeds it contributes extra palette colors instead.
"""

from __future__ import annotations

import io
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageOps
from rich.console import Console

from .brief import Layout, Typography, VisualAnalysis, VisualDNA
from .profile import ReferenceImage

console = Console()

# ── Constants ────────────────────────────────────────────────────────────────

SAMPLE_SIZE = (150, 150)
SAMPLE_STEP = 3                 # every third pixel
MIN_BRIGHTNESS, MAX_BRIGHTNESS = 20, 235
BUCKET = 15                     # per-channel quantisation step
TOP_COLORS = 8
MAX_IMAGES = 4
MAX_COMBINED_PALETTE = 6
IMAGE_CONFIDENCE = 0.7
COMBINED_CONFIDENCE_CAP = 0.8

DEFAULT_PALETTE = ["#333333", "#666666", "#999999"]

# Filename keyword → visual style
STYLE_KEYWORDS: Dict[str, List[str]] = {
    "minimalist":   ["minimal", "clean", "simple", "whitespace", "geometric"],
    "vintage":      ["vintage", "retro", "classic", "aged", "worn"],
    "techStartup":  ["tech", "startup", "modern", "digital", "geometric"],
    "creative":     ["creative", "artistic", "experimental", "unique"],
    "professional": ["professional", "business", "corporate", "formal"],
}

STYLE_TYPOGRAPHY: Dict[str, str] = {
    "minimalist":   "sans-serif",
    "vintage":      "serif",
    "techStartup":  "sans-serif",
    "creative":     "display",
    "professional": "serif",
    "modern":       "sans-serif",
}


# ── Color math ────────────────────────────────────────────────────────────────

def rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#" + "".join(f"{int(round(max(0, min(255, c)))):02x}" for c in (r, g, b))


def hex_to_rgb(hex_str: str) -> Tuple[int, int, int]:
    h = hex_str.lstrip("#")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def luma(r: float, g: float, b: float) -> float:
    return 0.299 * r + 0.587 * g + 0.114 * b


def classify_temperature(palette: Sequence[str]) -> str:
    warm = cool = 0
    for hex_str in palette:
        r, g, b = hex_to_rgb(hex_str)
        warmness = (r * 0.6 + g * 0.3) - b * 0.8
        coolness = (b * 0.6 + g * 0.2) - r * 0.5
        if warmness > 10:
            warm += 1
        elif coolness > 10:
            cool += 1
    if warm > cool + 1:
        return "warm"
    if cool > warm + 1:
        return "cool"
    return "neutral"


def classify_saturation(palette: Sequence[str]) -> str:
    if not palette:
        return "medium"
    total = 0.0
    for hex_str in palette:
        rgb = hex_to_rgb(hex_str)
        hi, lo = max(rgb), min(rgb)
        total += 0.0 if hi == 0 else (hi - lo) / hi
    avg = total / len(palette)
    if avg > 0.7:
        return "high"
    if avg < 0.3:
        return "low"
    return "medium"


def classify_brightness(palette: Sequence[str]) -> str:
    if not palette:
        return "medium"
    avg = sum(luma(*hex_to_rgb(h)) for h in palette) / len(palette)
    if avg > 180:
        return "high"
    if avg < 80:
        return "low"
    return "medium"


def extract_palette(image: Image.Image) -> List[str]:
    """Dominant colors of an image, most frequent first."""
    small = ImageOps.fit(image.convert("RGB"), SAMPLE_SIZE)
    pixels = np.asarray(small, dtype=np.int32).reshape(-1, 3)[::SAMPLE_STEP]

    brightness = pixels @ np.array([0.299, 0.587, 0.114])
    pixels = pixels[(brightness >= MIN_BRIGHTNESS) & (brightness <= MAX_BRIGHTNESS)]
    if len(pixels) == 0:
        return list(DEFAULT_PALETTE)

    buckets = (pixels // BUCKET) * BUCKET
    colors, counts = np.unique(buckets, axis=0, return_counts=True)
    # stable sort so ties keep a deterministic (lexicographic) order
    order = np.argsort(-counts, kind="stable")[:TOP_COLORS]
    return [rgb_to_hex(*colors[i]) for i in order]


# ── Per-image reading ────────────────────────────────────────────────────────

@dataclass
class PixelReading:
    filename: str
    palette: List[str]
    temperature: str
    saturation: str
    brightness: str
    style: str = "modern"
    mood: str = "professional"
    confidence: float = IMAGE_CONFIDENCE
    size: Tuple[int, int] = (0, 0)


def guess_style(filename: str) -> Tuple[str, float]:
    """Style from filename keywords; the last matching style in table order wins."""
    name = filename.lower()
    style, confidence = "modern", 0.5
    for candidate, keywords in STYLE_KEYWORDS.items():
        matches = sum(1 for kw in keywords if kw in name)
        if matches:
            style = candidate
            confidence = min(0.8, 0.5 + matches * 0.15)
    return style, confidence


def mood_from_colors(temperature: str, saturation: str) -> str:
    if temperature == "warm" and saturation == "high":
        return "energetic"
    if temperature == "cool" and saturation == "low":
        return "sophisticated"
    if saturation == "low":
        return "minimal"
    if saturation == "high":
        return "creative"
    return "professional"


def read_image(ref: ReferenceImage) -> PixelReading:
    with Image.open(io.BytesIO(ref.data)) as img:
        img.load()
        palette = extract_palette(img)
        size = img.size
    temperature = classify_temperature(palette)
    saturation = classify_saturation(palette)
    style, _ = guess_style(ref.filename)
    return PixelReading(
        filename=ref.filename,
        palette=palette,
        temperature=temperature,
        saturation=saturation,
        brightness=classify_brightness(palette),
        style=style,
        mood=mood_from_colors(temperature, saturation),
        size=size,
    )


# ── Combined analysis ────────────────────────────────────────────────────────

def _most_common(values: List[str], default: str) -> str:
    if not values:
        return default
    # Counter.most_common keeps first-seen order among ties
    return Counter(values).most_common(1)[0][0]


@dataclass
class PixelAnalysis:
    readings: List[PixelReading] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def palette(self) -> List[str]:
        seen: List[str] = []
        for r in self.readings:
            for c in r.palette:
                if c not in seen:
                    seen.append(c)
        return seen

    def to_visual(self) -> Optional[VisualAnalysis]:
        if not self.readings:
            return None
        style = _most_common([r.style for r in self.readings], "modern")
        mood = _most_common([r.mood for r in self.readings], "professional")
        confidence = min(
            COMBINED_CONFIDENCE_CAP,
            sum(r.confidence for r in self.readings) / len(self.readings),
        )
        return VisualAnalysis(
            visual_dna=VisualDNA(category=style, mood=mood),
            color_palette=self.palette[:MAX_COMBINED_PALETTE],
            color_temperature=_most_common([r.temperature for r in self.readings], "neutral"),
            saturation=_most_common([r.saturation for r in self.readings], "medium"),
            brightness=_most_common([r.brightness for r in self.readings], "medium"),
            typography=Typography(category=STYLE_TYPOGRAPHY.get(style, "sans-serif")),
            layout=Layout(),
            design_elements=[style, mood],
            confidence=confidence,
            method="pixel",
        )


def analyze_images(images: Sequence[ReferenceImage], limit: int = MAX_IMAGES) -> PixelAnalysis:
    """Read up to `limit` images; unreadable ones are skipped, never raised."""
    result = PixelAnalysis()
    for ref in list(images)[:limit]:
        try:
            result.readings.append(read_image(ref))
        except Exception as e:
            console.print(f"  [yellow]⚠ Pixel analysis failed for {ref.filename}: {e}[/yellow]")
            result.skipped.append(ref.filename)
    if result.readings:
        console.print(
            f"  [dim]pixels: {len(result.readings)} image(s), "
            f"{len(result.palette)} color(s)[/dim]"
        )
    return result
