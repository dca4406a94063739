"""
directives.py — Explicit design choices made by the user.

Two optional inputs override what the analyzers infer:
  layout preset   — one of the skeletons the user can pick in the UI
  design request  — free text ("dark and moody, lots of whitespace")
"""

from __future__ import annotations

from typing import Dict, List

from .brief import DesignRequestAnalysis, Directives, VisualDNA

LAYOUT_PRESETS: Dict[str, Dict[str, str]] = {
    "creative-professional": {"category": "creative", "mood": "professional", "typography": "sans-serif"},
    "gallery-first":         {"category": "minimal", "mood": "sophisticated", "typography": "sans-serif"},
    "newspaper":             {"category": "vintage", "mood": "editorial", "typography": "serif"},
    "storyteller":           {"category": "cinematic", "mood": "narrative", "typography": "serif"},
}

STYLE_KEYWORDS: Dict[str, List[str]] = {
    "minimal":      ["minimal", "clean", "simple", "minimalist"],
    "bold":         ["bold", "bright", "vibrant", "strong"],
    "dark":         ["dark", "black", "moody", "noir"],
    "luxury":       ["luxury", "premium", "elegant", "sophisticated"],
    "creative":     ["creative", "artistic", "unique", "experimental"],
    "professional": ["professional", "corporate", "business", "formal"],
    "modern":       ["modern", "contemporary", "current", "trendy"],
    "vintage":      ["vintage", "retro", "classic", "traditional"],
}


def analyze_design_request(text: str) -> DesignRequestAnalysis:
    request = text.lower().strip()
    if not request:
        return DesignRequestAnalysis()

    detected = []
    for style, keywords in STYLE_KEYWORDS.items():
        matches = [kw for kw in keywords if kw in request]
        if matches:
            detected.append((style, len(matches), len(matches) / len(keywords)))

    # strongest first: match count plus coverage of that style's vocabulary
    detected.sort(key=lambda d: d[1] + d[2], reverse=True)
    confidence = min(0.9, sum(d[2] for d in detected) * 0.3 + 0.3)
    return DesignRequestAnalysis(
        styles=[d[0] for d in detected],
        primary_style=detected[0][0] if detected else None,
        confidence=confidence,
    )


def build_directives(layout_preset: str, design_request: str) -> Directives:
    preset = (layout_preset or "none").strip().lower()
    style = LAYOUT_PRESETS.get(preset)
    return Directives(
        layout_preset=preset,
        preset_style=VisualDNA(category=style["category"], mood=style["mood"]) if style else None,
        preset_typography=style["typography"] if style else None,
        design_request=analyze_design_request(design_request),
    )
