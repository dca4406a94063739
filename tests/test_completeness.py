"""Tests for the HTML completeness detector."""

from __future__ import annotations

import pytest

from foliogen.completeness import GenerationAttempt, assess, tag_imbalance


def test_complete_document(make_html):
    attempt = assess(make_html())
    assert attempt.is_complete
    assert attempt.estimated_completion == 1.0
    assert attempt.issues == ()
    assert not attempt.can_continue


def test_trailing_comment_is_allowed(make_html):
    assert assess(make_html() + "\n<!-- generated -->\n").is_complete


def test_missing_closing_root_is_continuable(make_html):
    text = make_html().rsplit("</body>", 1)[0]
    attempt = assess(text, attempt_number=1)
    assert not attempt.is_complete
    assert attempt.can_continue
    assert 0.0 < attempt.estimated_completion < 1.0
    assert any("</html>" in issue for issue in attempt.issues)


def test_cut_mid_tag(make_html):
    text = make_html()[:1500] + '<img src="project_1_fi'
    attempt = assess(text)
    assert "Incomplete HTML tag at end" in attempt.issues
    assert attempt.can_continue


def test_short_fragment_cannot_continue():
    attempt = assess("<!DOCTYPE html><html><head><title>x")
    assert not attempt.is_complete
    assert not attempt.can_continue


def test_text_without_root_cannot_continue():
    attempt = assess("Sure! Here is your portfolio. " * 20)
    assert not attempt.can_continue


def test_empty_text():
    attempt = assess("")
    assert attempt.estimated_completion == 0.0
    assert attempt.issues == ("No HTML content",)


def test_estimate_is_capped_below_one(make_html):
    # every closing marker present, but the body is badly unbalanced
    text = make_html().replace("</section>", "").replace("</main>", "")
    attempt = assess(text)
    assert not attempt.is_complete
    assert attempt.estimated_completion <= 0.95


def test_imbalance_ignores_script_and_comment_bodies():
    text = "<div><script>var s = '<div>';</script><!-- <section> --></div>"
    assert tag_imbalance(text) == {}
    assert tag_imbalance("<main><section>") == {"main": 1, "section": 1}


def test_small_imbalance_is_tolerated(make_html):
    text = make_html().replace("</section>", "", 1)
    assert assess(text).is_complete
    assert not assess(text, tolerance=0).is_complete


def test_attempt_validation():
    with pytest.raises(ValueError):
        GenerationAttempt("x", attempt_number=0, is_complete=False, estimated_completion=0.5)
    with pytest.raises(ValueError):
        GenerationAttempt("x", attempt_number=1, is_complete=False, estimated_completion=1.5)
