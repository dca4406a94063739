"""Tests for industry detection."""

from __future__ import annotations

import pytest

from foliogen.industry import GENERAL_SECTIONS, INDUSTRY_PROFILES, detect_industry, score_industries
from foliogen.profile import PersonalInfo, PortfolioProfile, ProjectData


def test_no_keywords_gives_general():
    match = detect_industry(PortfolioProfile(personal=PersonalInfo(name="Sam")))
    assert match.detected == "general"
    assert match.confidence == 0.3
    assert match.recommended_sections == GENERAL_SECTIONS


def test_title_weighs_most_and_gets_boost():
    profile = PortfolioProfile(personal=PersonalInfo(title="Photography studio"))
    match = detect_industry(profile)
    assert match.detected == "photographer"
    # 3 / 8 = 0.375, boosted by 0.2
    assert match.confidence == pytest.approx(0.575)
    assert match.recommended_sections == INDUSTRY_PROFILES["photographer"]["sections"]


def test_weak_signal_is_not_boosted():
    profile = PortfolioProfile(projects=[ProjectData("a", overview="Internal software tooling.")])
    match = detect_industry(profile)
    assert match.detected == "developer"
    assert match.confidence == pytest.approx(1 / 8)


def test_whole_word_matching():
    # "designer" must not count as "design", "apple" not as "app"
    scores = score_industries(PortfolioProfile(personal=PersonalInfo(title="designer", bio="apple")))
    assert all(score == 0 for score in scores.values())


def test_fixture_profile_is_graphic_designer(profile):
    match = detect_industry(profile)
    assert match.detected == "graphic-designer"
    assert match.confidence == pytest.approx(0.95)
    assert set(match.scores) == set(INDUSTRY_PROFILES)
