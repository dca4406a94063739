"""
vision.py — Best-effort aesthetic analysis of reference images via Gemini.

Sends up to four moodboard images in one request and asks for a structured
JSON read (style, mood, palette, typography, layout, confidence). Any
failure — no API key, timeout, quota, unparseable output — is raised as
AnalysisDegraded so the fusion engine can fall back to the pixel analyzer.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

import json_repair
from google.genai import types
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

from .brief import Layout, Typography, VisualAnalysis, VisualDNA
from .config import Settings, make_client
from .errors import AnalysisDegraded, UpstreamError
from .profile import ReferenceImage

console = Console()

HEX_RE = re.compile(r"#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b")


# ── Pydantic schema for structured Gemini output ─────────────────────────────

class VisionReport(BaseModel):
    style_category: str = Field(
        description="One of: minimalist, modern, vintage, techStartup, creative, professional, "
                    "editorial, brutalist, luxury, playful"
    )
    mood: str = Field(description="One or two words, e.g. 'sophisticated', 'energetic', 'calm'")
    colors: List[str] = Field(description="4–6 dominant hex colors, most important first, e.g. '#1A2B3C'")
    temperature: str = Field(description="warm, cool or neutral")
    saturation: str = Field(description="high, medium or low")
    typography: str = Field(description="sans-serif, serif, display, monospace or script")
    typography_weight: str = Field(default="regular", description="light, regular, bold or mixed")
    letter_spacing: str = Field(default="normal", description="tight, normal or generous")
    grid: str = Field(default="standard", description="e.g. 'asymmetric', 'masonry', 'standard', '12-column'")
    whitespace: str = Field(default="balanced", description="minimal, balanced or generous")
    flow: str = Field(default="top-to-bottom", description="e.g. 'top-to-bottom', 'z-pattern', 'editorial'")
    elements: List[str] = Field(default_factory=list, description="3–6 notable design elements")
    confidence: float = Field(description="0.1–1.0: how clearly the images share one aesthetic")
    implementation_notes: str = Field(default="", description="One or two sentences for a web designer")


VISION_PROMPT = """\
You are a senior web designer studying a client's moodboard before building their
portfolio website. Analyze the attached reference images together and describe the
single aesthetic they share.

Focus on what can be translated into a web page:
  - overall style category and emotional mood
  - the 4–6 dominant colors as hex codes (most important first)
  - color temperature and saturation
  - typography character visible in the images (or implied by them)
  - layout: grid, whitespace, reading flow
  - distinctive design elements worth echoing (textures, shapes, framing)

Set confidence low (0.3 or less) if the images disagree with each other or are
mostly photographs with no clear design language.
"""


def _mime(ref: ReferenceImage) -> str:
    return ref.mime_type if ref.mime_type.startswith("image/") else "image/jpeg"


def _strip_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("```")[1]
        if raw.startswith("json"):
            raw = raw[4:]
    return raw.strip()


def parse_report(raw: str) -> VisionReport:
    """Parse Gemini's JSON, repairing trailing commas / truncation where possible."""
    data = json_repair.loads(_strip_fences(raw))
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return VisionReport.model_validate(data)


def report_to_visual(report: VisionReport) -> VisualAnalysis:
    palette = [c for c in report.colors if HEX_RE.fullmatch(c.strip())]
    palette = list(dict.fromkeys(c.strip().lower() for c in palette))[:8]
    if not palette:
        raise ValueError("vision report contained no usable hex colors")
    return VisualAnalysis(
        visual_dna=VisualDNA(
            category=report.style_category.strip().lower() or "modern",
            mood=report.mood.strip().lower() or "professional",
        ),
        color_palette=palette,
        color_temperature=report.temperature.strip().lower() or "neutral",
        saturation=report.saturation.strip().lower() or "medium",
        typography=Typography(
            category=report.typography.strip().lower() or "sans-serif",
            weight=report.typography_weight,
            spacing=report.letter_spacing,
        ),
        layout=Layout(grid=report.grid, whitespace=report.whitespace, flow=report.flow),
        design_elements=report.elements[:6],
        confidence=max(0.1, min(1.0, report.confidence)),
        method="vision",
    )


class VisionAnalyzer:
    """Thin wrapper around one Gemini multimodal call."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = make_client(self.settings)
        return self._client

    def analyze(self, images: Sequence[ReferenceImage]) -> VisualAnalysis:
        if not images:
            raise AnalysisDegraded("vision", "no reference images")
        if self._client is None and not self.settings.has_api_key:
            raise AnalysisDegraded("vision", "GEMINI_API_KEY not set")

        batch = list(images)[: self.settings.max_reference_images]
        parts = [types.Part.from_text(text=VISION_PROMPT)]
        for i, ref in enumerate(batch, start=1):
            parts.append(types.Part.from_text(text=f"Reference image #{i} ({ref.filename}):"))
            parts.append(types.Part.from_bytes(data=ref.data, mime_type=_mime(ref)))

        console.print(f"  [dim]vision: analyzing {len(batch)} reference image(s)...[/dim]")
        try:
            response = self.client.models.generate_content(
                model=self.settings.vision_model,
                contents=parts,
                config=types.GenerateContentConfig(
                    temperature=self.settings.vision_temperature,
                    max_output_tokens=self.settings.vision_max_output_tokens,
                    response_mime_type="application/json",
                    response_schema=VisionReport,
                ),
            )
            # .text can raise on blocked or candidate-less responses
            raw = (response.text or "").strip()
        except Exception as e:
            err = UpstreamError.from_exception(e)
            raise AnalysisDegraded("vision", str(err)) from e

        if not raw:
            raise AnalysisDegraded("vision", "empty response")
        try:
            return report_to_visual(parse_report(raw))
        except (ValueError, ValidationError) as e:
            raise AnalysisDegraded("vision", f"unparseable response: {e}") from e


def analyze_or_none(analyzer: Optional[VisionAnalyzer], images: Sequence[ReferenceImage]):
    """(visual, reason) — visual is None when vision is unavailable."""
    if analyzer is None:
        return None, "vision disabled"
    try:
        return analyzer.analyze(images), ""
    except AnalysisDegraded as e:
        console.print(f"  [yellow]⚠ Vision analysis unavailable: {e.reason}[/yellow]")
        return None, e.reason
    except Exception as e:
        err = AnalysisDegraded("vision", f"unexpected failure: {e}")
        console.print(f"  [yellow]⚠ Vision analysis unavailable: {err.reason}[/yellow]")
        return None, err.reason
