"""Tests for the intelligence fusion engine."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, PropertyMock

import pytest

from foliogen.brief import SystemStatus, status_for
from foliogen.config import StatusThresholds
from foliogen.fusion import FusionEngine, fallback_brief, splice_palette
from foliogen.vision import VisionAnalyzer

STATUS_ORDER = [SystemStatus.FALLBACK, SystemStatus.BASIC, SystemStatus.SMART, SystemStatus.ENHANCED]

VISION_JSON = json.dumps({
    "style_category": "Brutalist",
    "mood": "Raw",
    "colors": ["#111111", "#F2F2F2", "#FF3B00", "not-a-color"],
    "temperature": "warm",
    "saturation": "high",
    "typography": "monospace",
    "confidence": 0.9,
})


def test_status_is_monotonic_in_confidence():
    ranks = [STATUS_ORDER.index(status_for(i / 100)) for i in range(101)]
    assert ranks == sorted(ranks)
    assert status_for(0.0) == SystemStatus.FALLBACK
    assert status_for(0.4) == SystemStatus.FALLBACK
    assert status_for(0.41) == SystemStatus.BASIC
    assert status_for(0.61) == SystemStatus.SMART
    assert status_for(0.76) == SystemStatus.ENHANCED


def test_thresholds_must_descend():
    with pytest.raises(ValueError):
        StatusThresholds(enhanced=0.5, smart=0.6, basic=0.4)


def test_fallback_brief():
    brief = fallback_brief("boom")
    assert brief.system_status == SystemStatus.FALLBACK
    assert brief.overall_confidence == 0.4
    assert brief.analysis_method == "fallback"
    assert brief.degraded_signals == ["fusion: boom"]


def test_splice_palette_caps_and_dedupes():
    merged = splice_palette(["#AAAAAA", "#bbbbbb"], ["#aaaaaa", "#1", "#2", "#3", "#4", "#5"])
    assert merged == ["#aaaaaa", "#bbbbbb", "#1", "#2", "#3"]
    assert len(splice_palette([f"#{i}" for i in range(6)], ["#x", "#y"])) == 6


def test_text_only_profile(settings, profile):
    brief = FusionEngine(settings).fuse(profile)
    assert brief.analysis_method == "basic"
    assert brief.industry.detected == "graphic-designer"
    assert 0.0 <= brief.overall_confidence <= 1.0
    assert brief.system_status == status_for(brief.overall_confidence)
    assert brief.degraded_signals == []


def test_vision_is_primary_when_confident(settings, profile, red_image, make_client):
    profile.reference_images = [red_image]
    vision = VisionAnalyzer(settings, client=make_client([VISION_JSON]))
    brief = FusionEngine(settings, vision=vision).fuse(profile)

    assert brief.analysis_method == "vision+pixel"
    assert brief.visual_dna.category == "brutalist"
    assert brief.color_palette[:3] == ["#111111", "#f2f2f2", "#ff3b00"]
    assert "#ff0000" in brief.color_palette
    assert len(brief.color_palette) <= 6
    assert brief.typography.category == "monospace"


def test_vision_failure_falls_back_to_pixels(settings, profile, red_image, make_client):
    profile.reference_images = [red_image]
    vision = VisionAnalyzer(settings, client=make_client([TimeoutError("deadline exceeded")]))
    brief = FusionEngine(settings, vision=vision).fuse(profile)

    assert brief.analysis_method == "pixel"
    assert brief.color_palette == ["#ff0000"]
    assert any(s.startswith("vision:") for s in brief.degraded_signals)


def test_design_inputs_boost_confidence(settings, profile, red_image):
    plain = FusionEngine(settings).fuse(profile)
    profile.reference_images = [red_image]
    boosted = FusionEngine(settings).fuse(profile)
    assert boosted.overall_confidence <= settings.confidence_cap
    assert boosted.overall_confidence > plain.overall_confidence


def test_directives_override_visual_dna(settings, profile):
    profile.layout_preset = "newspaper"
    profile.design_request = "dark and moody please"
    brief = FusionEngine(settings).fuse(profile)
    assert brief.visual_dna.category == "dark"
    assert brief.visual_dna.mood == "editorial"
    assert brief.typography.category == "serif"
    assert brief.directives.layout_preset == "newspaper"


def test_failing_signal_is_degraded_not_raised(settings, profile, monkeypatch):
    def broken(_profile):
        raise RuntimeError("keyword table missing")

    monkeypatch.setattr("foliogen.fusion.detect_industry", broken)
    brief = FusionEngine(settings).fuse(profile)
    assert brief.industry.detected == "general"
    assert "industry: keyword table missing" in brief.degraded_signals


def test_assembly_failure_returns_fallback(settings, profile, monkeypatch):
    engine = FusionEngine(settings)

    def broken(*args, **kwargs):
        raise RuntimeError("bad weights")

    monkeypatch.setattr(engine, "combine", broken)
    brief = engine.fuse(profile)
    assert brief.system_status == SystemStatus.FALLBACK
    assert brief.analysis_method == "fallback"


def test_confidence_always_in_range(settings, empty_profile, profile):
    for p in (empty_profile, profile):
        brief = FusionEngine(settings).fuse(p)
        assert 0.0 <= brief.overall_confidence <= 1.0


def test_unreadable_vision_response_keeps_pixel_reading(settings, profile, red_image):
    profile.reference_images = [red_image]
    client = MagicMock()
    type(client.models.generate_content.return_value).text = PropertyMock(
        side_effect=ValueError("no candidates")
    )
    brief = FusionEngine(settings, vision=VisionAnalyzer(settings, client=client)).fuse(profile)

    assert brief.analysis_method == "pixel"
    assert brief.color_palette == ["#ff0000"]
    assert any(s.startswith("vision:") for s in brief.degraded_signals)
