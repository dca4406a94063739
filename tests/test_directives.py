"""Tests for layout presets and free-text design requests."""

from __future__ import annotations

import pytest

from foliogen.directives import LAYOUT_PRESETS, analyze_design_request, build_directives


def test_empty_request():
    analysis = analyze_design_request("   ")
    assert analysis.styles == []
    assert analysis.primary_style is None
    assert analysis.confidence == 0.0


def test_strongest_style_is_primary():
    analysis = analyze_design_request("Dark and moody, black backgrounds, but clean")
    assert analysis.primary_style == "dark"
    assert analysis.styles == ["dark", "minimal"]
    # coverage 3/4 + 1/4 → 1.0 * 0.3 + 0.3
    assert analysis.confidence == pytest.approx(0.6)


def test_confidence_is_capped():
    text = "minimal clean simple bold bright vibrant strong dark black moody noir"
    assert analyze_design_request(text).confidence == 0.9


@pytest.mark.parametrize("preset", sorted(LAYOUT_PRESETS))
def test_known_presets_carry_style(preset):
    directives = build_directives(preset, "")
    assert directives.layout_preset == preset
    assert directives.preset_style.category == LAYOUT_PRESETS[preset]["category"]
    assert directives.preset_typography == LAYOUT_PRESETS[preset]["typography"]


def test_unknown_or_missing_preset():
    assert build_directives("", "").preset_style is None
    assert build_directives("spaceship", "").preset_style is None
    assert build_directives(" Newspaper ", "").layout_preset == "newspaper"
