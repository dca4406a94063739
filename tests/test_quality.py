"""Tests for the quality validators, aggregation and auto-fix."""

from __future__ import annotations

import pytest

from foliogen.quality import (
    BaseValidator,
    QualityAnalyzer,
    ValidationContext,
    ValidatorResult,
    apply_fixes,
    default_validators,
    status_for_score,
)
from foliogen.quality.accessibility import AccessibilityValidator
from foliogen.quality.analyzer import suggestion_priority
from foliogen.quality.content import ContentValidator
from foliogen.quality.design import DesignValidator, css_colors
from foliogen.quality.technical import TechnicalValidator

GOOD_BODY = """<body>
<header><nav aria-label="Main"><a href="#projects">Work</a><a href="#contact">Contact</a></nav></header>
<main>
<section id="about">
  <h1>Ada Park</h1>
  <p>Brand designer</p>
  <p>I design visual identities and branding systems for small studios and cultural institutions.</p>
  <ul><li>branding</li><li>typography</li></ul>
</section>
<section id="projects">
  <h2>North Coffee</h2>
  <p>A complete visual identity for a specialty coffee roaster, including logo and packaging.</p>
  <img src="https://cdn.example.com/north/final-1.jpg" alt="North Coffee packaging">
  <img src="https://cdn.example.com/north/final-2.jpg" alt="North Coffee signage">
  <img src="https://cdn.example.com/north/sketch.jpg" alt="Logo sketches">
  <h2>Tide Festival</h2>
  <p>Poster series for a music festival.</p>
  <img src="https://cdn.example.com/tide/poster.jpg" alt="Tide Festival poster">
</section>
<section id="contact"><h2>Contact</h2><a href="mailto:ada@example.com">ada@example.com</a></section>
</main>
"""

BAD_HTML = """<html><head><style>body { color: red; }</style></head><body>
<div class="hero"><h2>Welcome</h2><p>Lorem ipsum dolor sit amet.</p>
<img src="https://picsum.photos/400"><img src="">
<a href="">More</a><span tabindex="3">x</span></div>
</body></html>"""


class FixedScore(BaseValidator):
    def __init__(self, name, score):
        self.name = name
        self.score = score

    def validate(self, html, context):
        return ValidatorResult(score=self.score, suggestions=[f"{self.name} tip"])


class Exploding(BaseValidator):
    name = "design"

    def validate(self, html, context):
        raise RuntimeError("css parser crashed")


@pytest.fixture
def context(profile) -> ValidationContext:
    return ValidationContext.for_profile(profile)


@pytest.fixture
def good_html(make_html) -> str:
    return make_html(GOOD_BODY)


# ── Aggregation ──────────────────────────────────────────────────────────────


def test_weighted_overall(context):
    analyzer = QualityAnalyzer([
        FixedScore("content", 100),
        FixedScore("design", 80),
        FixedScore("technical", 60),
        FixedScore("accessibility", 40),
    ])
    report = analyzer.analyze("<html></html>", context)
    # 30 + 20 + 15 + 8
    assert report.overall_score == 73
    assert report.status == "fair"
    assert list(report.per_validator) == ["content", "design", "technical", "accessibility"]
    priorities = {s["category"]: s["priority"] for s in report.suggestions}
    assert priorities == {"content": "low", "design": "low", "technical": "medium", "accessibility": "high"}


def test_failing_validator_gets_neutral_score(context):
    analyzer = QualityAnalyzer([
        FixedScore("content", 90),
        Exploding(),
        FixedScore("technical", 90),
        FixedScore("accessibility", 90),
    ])
    report = analyzer.analyze("<html></html>", context)
    design = report.per_validator["design"]
    assert design.score == 50
    assert design.issues[0].type == "validator_error"
    assert "css parser crashed" in design.issues[0].message
    assert report.overall_score == round(0.75 * 90 + 0.25 * 50)


def test_out_of_range_score_is_treated_as_failure(context):
    report = QualityAnalyzer([FixedScore("content", 140)]).analyze("", context)
    assert report.per_validator["content"].score == 50


@pytest.mark.parametrize(
    "score, status",
    [(100, "excellent"), (90, "excellent"), (85, "good"), (70, "fair"), (60, "poor"), (59, "critical")],
)
def test_status_bands(score, status):
    assert status_for_score(score) == status


def test_suggestion_priority():
    assert suggestion_priority(59) == "high"
    assert suggestion_priority(79) == "medium"
    assert suggestion_priority(80) == "low"


@pytest.mark.parametrize("html", ["", "<p>hi</p>", "<html", "<!DOCTYPE html><html><body></body></html>"])
def test_scores_always_in_range(context, html):
    report = QualityAnalyzer().analyze(html, context)
    assert 0 <= report.overall_score <= 100
    assert all(0 <= r.score <= 100 for r in report.per_validator.values())


# ── Individual validators ────────────────────────────────────────────────────


def test_good_page_scores_well(context, good_html):
    report = QualityAnalyzer().analyze(good_html, context)
    assert report.overall_score >= 85
    assert all(v.score >= 70 for v in report.per_validator.values())


def test_technical_findings(context):
    result = TechnicalValidator().validate(BAD_HTML, context)
    types = {i.type for i in result.issues}
    assert {"missing_doctype", "missing_lang", "missing_title", "missing_charset",
            "missing_viewport", "broken_image_src", "empty_links", "missing_h1"} <= types


def test_accessibility_findings(context):
    result = AccessibilityValidator().validate(BAD_HTML, context)
    types = {i.type for i in result.issues}
    assert {"missing_alt_text", "positive_tabindex", "missing_main_landmark", "missing_h1"} <= types


def test_content_findings(context):
    result = ContentValidator().validate(BAD_HTML, context)
    types = {i.type for i in result.issues}
    assert {"missing_name", "placeholder_text", "no_projects_section", "missing_contact"} <= types


def test_design_findings(context):
    result = DesignValidator().validate(BAD_HTML, context)
    types = {i.type for i in result.issues}
    assert {"limited_color_palette", "basic_typography", "no_client_images_used", "not_responsive"} <= types


def test_css_colors_normalise():
    assert css_colors("a { color: #FFF; background: #ffffff; border: rgb(0, 0, 0) }") == {
        "#ffffff", "rgb(0, 0, 0)",
    }


def test_default_validator_set():
    assert [v.name for v in default_validators()] == ["content", "design", "technical", "accessibility"]


# ── Auto-fix ─────────────────────────────────────────────────────────────────


def test_autofix_repairs_common_problems(context):
    analyzer = QualityAnalyzer()
    before = analyzer.analyze(BAD_HTML, context)
    fixed, fixes = apply_fixes(BAD_HTML, before, context)

    assert fixes
    assert 'name="viewport"' in fixed
    assert 'charset="UTF-8"' in fixed
    assert 'lang="en"' in fixed
    assert "<title>Ada Park - Portfolio</title>" in fixed
    assert "<main>" in fixed
    assert "<h1>" in fixed
    assert "Lorem ipsum" not in fixed
    assert 'tabindex="0"' in fixed
    assert "@media" in fixed
    assert "picsum" not in fixed
    assert "https://cdn.example.com/north/final-1.jpg" in fixed
    assert "<h1>Ada Park</h1>" in fixed

    after = analyzer.analyze(fixed, context)
    assert after.overall_score > before.overall_score


def test_autofix_skips_healthy_categories(context, good_html):
    report = QualityAnalyzer().analyze(good_html, context)
    fixed, fixes = apply_fixes(good_html, report, context)
    assert fixes == []
    assert fixed == good_html
