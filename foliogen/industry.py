"""
industry.py — Detect the user's discipline from their own words.

Every profile's keywords are counted (whole words, case-insensitive) in each
text source, weighted by how much that source says about the person:

  title 3 · bio 2 · skills 2 · project text 1

The best-scoring profile wins; its recommended sections steer the page
structure the generator is asked to build.
"""

from __future__ import annotations

import re
from typing import Dict, List

import logging

from .brief import IndustryMatch
from .profile import PortfolioProfile

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────────────────

SOURCE_WEIGHTS = {"title": 3, "bio": 2, "skills": 2, "projects": 1}

# One keyword seen in every source scores 8 → full confidence
SATURATION_SCORE = float(sum(SOURCE_WEIGHTS.values()))
BOOST_ABOVE = 0.3
BOOST = 0.2
BOOST_CAP = 0.95

GENERAL_CONFIDENCE = 0.3
GENERAL_SECTIONS = ["about", "projects", "contact"]

INDUSTRY_PROFILES: Dict[str, Dict[str, List[str]]] = {
    "graphic-designer": {
        "keywords": ["graphic", "design", "visual", "branding", "logo", "poster"],
        "sections": ["creative-process", "case-studies", "client-work"],
    },
    "photographer": {
        "keywords": ["photo", "photography", "camera", "portrait", "landscape"],
        "sections": ["portfolio-gallery", "about-story", "services"],
    },
    "ux-designer": {
        "keywords": ["ux", "ui", "user", "wireframe", "prototype", "research"],
        "sections": ["case-studies", "process", "research", "wireframes"],
    },
    "architect": {
        "keywords": ["architecture", "building", "space", "design", "blueprint"],
        "sections": ["project-evolution", "technical-drawings", "spatial-concepts"],
    },
    "developer": {
        "keywords": ["code", "development", "programming", "software", "app"],
        "sections": ["projects", "tech-stack", "code-samples"],
    },
    "web-designer": {
        "keywords": ["web", "website", "frontend", "html", "css", "responsive"],
        "sections": ["web-projects", "responsive-design", "user-experience"],
    },
}


def _sources(profile: PortfolioProfile) -> Dict[str, str]:
    info = profile.personal
    return {
        "title": info.title.lower(),
        "bio": info.bio.lower(),
        "skills": " ".join(info.skills).lower(),
        "projects": " ".join(p.text for p in profile.projects).lower(),
    }


def _count(keyword: str, text: str) -> int:
    return len(re.findall(rf"\b{re.escape(keyword)}\b", text))


def score_industries(profile: PortfolioProfile) -> Dict[str, float]:
    sources = _sources(profile)
    scores: Dict[str, float] = {}
    for industry, entry in INDUSTRY_PROFILES.items():
        scores[industry] = float(sum(
            SOURCE_WEIGHTS[src] * _count(kw, text)
            for kw in entry["keywords"]
            for src, text in sources.items()
        ))
    return scores


def detect_industry(profile: PortfolioProfile) -> IndustryMatch:
    scores = score_industries(profile)
    best = max(scores, key=scores.get)

    if scores[best] <= 0:
        logger.info("No industry keywords found — using general profile")
        return IndustryMatch(
            detected="general",
            confidence=GENERAL_CONFIDENCE,
            recommended_sections=list(GENERAL_SECTIONS),
            scores=scores,
        )

    confidence = min(1.0, scores[best] / SATURATION_SCORE)
    if confidence > BOOST_ABOVE:
        confidence = min(BOOST_CAP, confidence + BOOST)

    logger.info(f"Industry detected: {best} ({confidence:.0%}, score {scores[best]:.0f})")
    return IndustryMatch(
        detected=best,
        confidence=confidence,
        recommended_sections=list(INDUSTRY_PROFILES[best]["sections"]),
        scores=scores,
    )
