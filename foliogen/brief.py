"""
brief.py — The Design Brief: a fused, confidence-scored summary of the
aesthetic, content and industry signals that guides HTML generation.

All models are frozen pydantic models. A DesignBrief is built once per
request by the fusion engine and never mutated afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import StatusThresholds


class SystemStatus(str, Enum):
    FALLBACK = "FALLBACK"
    BASIC = "BASIC"
    SMART = "SMART"
    ENHANCED = "ENHANCED"


def status_for(confidence: float, thresholds: StatusThresholds = StatusThresholds()) -> SystemStatus:
    """Pure, monotonic mapping from overall confidence to a status tier."""
    if confidence > thresholds.enhanced:
        return SystemStatus.ENHANCED
    if confidence > thresholds.smart:
        return SystemStatus.SMART
    if confidence > thresholds.basic:
        return SystemStatus.BASIC
    return SystemStatus.FALLBACK


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class VisualDNA(_Frozen):
    category: str = Field(description="Overall aesthetic, e.g. 'minimalist', 'vintage'")
    mood: str = Field(description="Emotional register, e.g. 'sophisticated', 'energetic'")


class Typography(_Frozen):
    category: str = "sans-serif"
    weight: str = "regular"
    spacing: str = "normal"


class Layout(_Frozen):
    grid: str = "standard"
    whitespace: str = "balanced"
    flow: str = "top-to-bottom"


class VisualAnalysis(_Frozen):
    """Aesthetic read of the reference images (vision, pixels, or defaults)."""
    visual_dna: VisualDNA
    color_palette: List[str] = Field(min_length=1, max_length=8)
    color_temperature: str = "neutral"
    saturation: str = "medium"
    brightness: str = "medium"
    typography: Typography = Field(default_factory=Typography)
    layout: Layout = Field(default_factory=Layout)
    design_elements: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    method: str = Field(description="'vision+pixel', 'vision', 'pixel' or 'basic'")


class ContentStrategy(_Frozen):
    type: str = Field(description="Short descriptor of what the profile is rich in")
    strategy: str = Field(description="showcase-heavy | visual-first | story-driven | design-focused")
    confidence: float = Field(ge=0.0, le=1.0)
    recommendations: List[str] = Field(default_factory=list)


class IndustryMatch(_Frozen):
    detected: str
    confidence: float = Field(ge=0.0, le=1.0)
    recommended_sections: List[str] = Field(default_factory=list)
    scores: dict = Field(default_factory=dict)


class DesignRequestAnalysis(_Frozen):
    styles: List[str] = Field(default_factory=list)
    primary_style: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class Directives(_Frozen):
    """Caller-selected layout preset plus the parsed free-text design request."""
    layout_preset: str = "none"
    preset_style: Optional[VisualDNA] = None
    preset_typography: Optional[str] = None
    design_request: DesignRequestAnalysis = Field(default_factory=DesignRequestAnalysis)


class DesignBrief(_Frozen):
    visual_dna: VisualDNA
    color_palette: List[str] = Field(min_length=1, max_length=8)
    typography: Typography
    layout: Layout
    content_strategy: ContentStrategy
    industry: IndustryMatch
    overall_confidence: float = Field(ge=0.0, le=1.0)
    system_status: SystemStatus

    # Optional detail
    color_temperature: str = "neutral"
    saturation: str = "medium"
    brightness: str = "medium"
    design_elements: List[str] = Field(default_factory=list)
    analysis_method: str = "basic"
    directives: Directives = Field(default_factory=Directives)
    degraded_signals: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _palette_tokens(self) -> "DesignBrief":
        if any(not c or not c.strip() for c in self.color_palette):
            raise ValueError("color_palette contains an empty token")
        return self

    def to_prompt_block(self) -> str:
        """Render the brief as the DESIGN BRIEF section of a generation prompt."""
        lines = [
            f"## DESIGN BRIEF (status: {self.system_status.value}, "
            f"confidence {self.overall_confidence:.2f})",
            f"Visual DNA: {self.visual_dna.category} / mood {self.visual_dna.mood}",
            f"Color palette: {', '.join(self.color_palette)}",
            f"Color character: {self.color_temperature} temperature, "
            f"{self.saturation} saturation, {self.brightness} brightness",
            f"Typography: {self.typography.category}, {self.typography.weight} weight, "
            f"{self.typography.spacing} spacing",
            f"Layout: {self.layout.grid} grid, {self.layout.whitespace} whitespace, "
            f"{self.layout.flow} flow",
            f"Content strategy: {self.content_strategy.strategy} ({self.content_strategy.type})",
            f"Industry: {self.industry.detected} — recommended sections: "
            + ", ".join(self.industry.recommended_sections),
        ]
        if self.content_strategy.recommendations:
            lines.append("Content guidance: " + "; ".join(self.content_strategy.recommendations))
        if self.design_elements:
            lines.append("Design elements: " + ", ".join(self.design_elements))
        if self.directives.layout_preset != "none":
            lines.append(f"Layout preset: {self.directives.layout_preset}")
        if self.directives.design_request.styles:
            lines.append("Requested styles: " + ", ".join(self.directives.design_request.styles))
        return "\n".join(lines)
