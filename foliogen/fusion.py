"""
fusion.py — Intelligence Fusion Engine.

Combines every analysis signal available for a request into one DesignBrief:

  1. Visual    — Gemini vision (best-effort) + local pixel heuristics
  2. Content   — how much prose and imagery the user actually supplied
  3. Industry  — discipline detected from title, bio, skills and projects
  4. Directives — layout preset / free-text design request (overrides)

Each signal is computed independently; a failing signal is recorded in
`degraded_signals` and replaced by its default, never raised. If assembly
itself fails the predefined fallback brief is returned.
"""

from __future__ import annotations

from statistics import mean
from typing import List, Optional, Tuple

import logging
from rich.console import Console

from .brief import (
    ContentStrategy,
    DesignBrief,
    Directives,
    IndustryMatch,
    Layout,
    SystemStatus,
    Typography,
    VisualAnalysis,
    VisualDNA,
    status_for,
)
from .config import Settings, StatusThresholds
from .content import score_content
from .directives import build_directives
from .errors import AnalysisDegraded
from .industry import GENERAL_CONFIDENCE, GENERAL_SECTIONS, detect_industry
from .pixels import analyze_images
from .profile import PortfolioProfile
from .vision import VisionAnalyzer, analyze_or_none

console = Console()
logger = logging.getLogger(__name__)

EXTRA_PIXEL_COLORS = 4
MAX_FUSED_PALETTE = 6
FALLBACK_CONFIDENCE = 0.4

BASIC_VISUAL = VisualAnalysis(
    visual_dna=VisualDNA(category="modern", mood="professional"),
    color_palette=["#2563eb", "#64748b", "#f1f5f9", "#0f172a"],
    color_temperature="cool",
    saturation="medium",
    brightness="medium",
    typography=Typography(category="sans-serif", weight="regular", spacing="normal"),
    layout=Layout(grid="standard", whitespace="balanced", flow="top-to-bottom"),
    design_elements=["clean", "modern", "professional"],
    confidence=0.5,
    method="basic",
)

DEFAULT_CONTENT = ContentStrategy(type="minimal", strategy="design-focused", confidence=0.5)
DEFAULT_INDUSTRY = IndustryMatch(
    detected="general",
    confidence=GENERAL_CONFIDENCE,
    recommended_sections=list(GENERAL_SECTIONS),
)


def fallback_brief(reason: str = "", thresholds: StatusThresholds = StatusThresholds()) -> DesignBrief:
    """Predefined low-confidence brief used when fusion cannot complete."""
    # kept at or below the BASIC cutoff so the status stays FALLBACK
    confidence = min(FALLBACK_CONFIDENCE, thresholds.basic)
    return DesignBrief(
        visual_dna=BASIC_VISUAL.visual_dna,
        color_palette=list(BASIC_VISUAL.color_palette),
        typography=BASIC_VISUAL.typography,
        layout=BASIC_VISUAL.layout,
        content_strategy=DEFAULT_CONTENT,
        industry=DEFAULT_INDUSTRY,
        overall_confidence=confidence,
        system_status=status_for(confidence, thresholds),
        color_temperature=BASIC_VISUAL.color_temperature,
        saturation=BASIC_VISUAL.saturation,
        brightness=BASIC_VISUAL.brightness,
        design_elements=list(BASIC_VISUAL.design_elements),
        analysis_method="fallback",
        degraded_signals=[f"fusion: {reason}"] if reason else [],
    )


def splice_palette(primary: List[str], extra: List[str]) -> List[str]:
    """Primary colors first, then up to four unseen extras, six in total."""
    merged = list(dict.fromkeys(c.lower() for c in primary))
    for c in extra[:EXTRA_PIXEL_COLORS]:
        if c.lower() not in merged:
            merged.append(c.lower())
    return merged[:MAX_FUSED_PALETTE]


class FusionEngine:
    def __init__(self, settings: Settings, vision: Optional[VisionAnalyzer] = None):
        self.settings = settings
        self.vision = vision

    # ── Signals ──────────────────────────────────────────────────────────────

    def analyze_visual(self, profile: PortfolioProfile, degraded: List[str]) -> VisualAnalysis:
        images = profile.reference_images
        if not images:
            return BASIC_VISUAL

        pixels = analyze_images(images, limit=self.settings.max_reference_images)
        if pixels.skipped:
            degraded.append(f"pixels: unreadable {', '.join(pixels.skipped)}")
        pixel_visual = pixels.to_visual()

        vision, reason = analyze_or_none(self.vision, images)
        if vision is None:
            degraded.append(f"vision: {reason}")

        if vision is not None and vision.confidence > self.settings.vision_threshold:
            extra = pixel_visual.color_palette if pixel_visual else []
            return vision.model_copy(update={
                "color_palette": splice_palette(vision.color_palette, extra),
                "method": "vision+pixel" if extra else "vision",
            })
        if pixel_visual is not None:
            return pixel_visual
        if vision is not None:
            return vision
        return BASIC_VISUAL

    def _signal(self, name: str, fn, default, degraded: List[str]):
        try:
            return fn()
        except Exception as e:
            err = AnalysisDegraded(name, str(e))
            console.print(f"  [yellow]⚠ {err}[/yellow]")
            degraded.append(f"{name}: {e}")
            return default

    # ── Fusion ───────────────────────────────────────────────────────────────

    def combine(
        self,
        visual: VisualAnalysis,
        content: ContentStrategy,
        industry: IndustryMatch,
        strong_inputs: bool,
    ) -> Tuple[float, SystemStatus]:
        confidence = mean([visual.confidence, content.confidence, industry.confidence])
        if strong_inputs and confidence > 0.6:
            confidence = min(self.settings.confidence_cap, confidence + self.settings.confidence_boost)
        confidence = max(0.0, min(1.0, confidence))
        return confidence, status_for(confidence, self.settings.status_thresholds)

    def fuse(self, profile: PortfolioProfile) -> DesignBrief:
        """Build the DesignBrief for one request. Never raises."""
        console.print("\n[bold cyan]→ Fusing design intelligence...[/bold cyan]")
        degraded: List[str] = []
        try:
            visual = self._signal(
                "visual", lambda: self.analyze_visual(profile, degraded), BASIC_VISUAL, degraded
            )
            content = self._signal(
                "content", lambda: score_content(profile).to_strategy(), DEFAULT_CONTENT, degraded
            )
            industry = self._signal(
                "industry", lambda: detect_industry(profile), DEFAULT_INDUSTRY, degraded
            )
            directives = self._signal(
                "directives",
                lambda: build_directives(profile.layout_preset, profile.design_request),
                Directives(),
                degraded,
            )

            confidence, status = self.combine(
                visual, content, industry, profile.has_design_inputs
            )

            dna = visual.visual_dna
            typography = visual.typography
            if directives.preset_style is not None:
                dna = directives.preset_style
            if directives.design_request.primary_style:
                dna = dna.model_copy(update={"category": directives.design_request.primary_style})
            if directives.preset_typography:
                typography = typography.model_copy(update={"category": directives.preset_typography})

            brief = DesignBrief(
                visual_dna=dna,
                color_palette=list(visual.color_palette),
                typography=typography,
                layout=visual.layout,
                content_strategy=content,
                industry=industry,
                overall_confidence=confidence,
                system_status=status,
                color_temperature=visual.color_temperature,
                saturation=visual.saturation,
                brightness=visual.brightness,
                design_elements=list(visual.design_elements),
                analysis_method=visual.method,
                directives=directives,
                degraded_signals=degraded,
            )
        except Exception as e:
            logger.exception("Fusion failed — using fallback brief")
            console.print(f"  [yellow]⚠ Fusion failed ({e}) — using fallback brief[/yellow]")
            return fallback_brief(str(e), self.settings.status_thresholds)

        for signal in degraded:
            logger.warning(f"Degraded signal: {signal}")
        console.print(
            f"  [dim]brief: {brief.system_status.value} "
            f"({brief.overall_confidence:.0%}) · {brief.visual_dna.category}/{brief.visual_dna.mood} · "
            f"{brief.content_strategy.strategy} · {brief.industry.detected}[/dim]"
        )
        return brief
