"""
content.py — Score how much real material a profile gives the generator.

Three sub-scores are computed independently:
  project text   — detailed (> 100 chars, or problem + solution) / moderate (> 30 chars)
  images         — total count and how evenly they spread across projects
  personal info  — name, title, bio, skills, social links

The strategy is chosen from the sub-scores, not the total, so a profile that
is all prose and one that is all pictures never end up with the same plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .brief import ContentStrategy
from .profile import PortfolioProfile

DETAILED_CHARS = 100
MODERATE_CHARS = 30


@dataclass
class ContentMetrics:
    total_projects: int = 0
    detailed_projects: int = 0
    moderate_projects: int = 0
    total_images: int = 0
    projects_with_images: int = 0

    project_score: float = 0.0
    image_score: float = 0.0
    distribution_score: float = 0.0
    personal_score: float = 0.0

    @property
    def total(self) -> float:
        return self.project_score + self.image_score + self.distribution_score + self.personal_score

    @property
    def has_detailed(self) -> bool:
        return self.detailed_projects > 0

    @property
    def has_moderate(self) -> bool:
        return self.moderate_projects > 0


@dataclass
class ContentReport:
    metrics: ContentMetrics
    content_type: str
    strategy: str
    confidence: float
    strengths: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_strategy(self) -> ContentStrategy:
        return ContentStrategy(
            type=self.content_type,
            strategy=self.strategy,
            confidence=self.confidence,
            recommendations=self.recommendations,
        )


def measure(profile: PortfolioProfile) -> ContentMetrics:
    projects = profile.projects
    m = ContentMetrics(total_projects=len(projects))

    for p in projects:
        longest = max(len(p.overview.strip()), len(p.description.strip()))
        if longest > DETAILED_CHARS or (p.problem.strip() and p.solution.strip()):
            m.detailed_projects += 1
        if longest > MODERATE_CHARS:
            m.moderate_projects += 1
        m.total_images += p.image_count
        if p.image_count:
            m.projects_with_images += 1

    m.project_score = 0.5 if m.has_detailed else (0.3 if m.has_moderate else 0.1)
    m.image_score = min(m.total_images / 12, 0.3)
    m.distribution_score = (
        min(m.projects_with_images / m.total_projects, 0.2) if m.total_projects else 0.0
    )

    info = profile.personal
    flags: Dict[str, bool] = {
        "name": len(info.name.strip()) > 2,
        "title": len(info.title.strip()) > 5,
        "bio": len(info.bio.strip()) > 50,
        "skills": len(info.skills) > 3,
        "social": len(info.social_links()) > 1,
    }
    weights = {"name": 0.05, "title": 0.05, "bio": 0.15, "skills": 0.1, "social": 0.05}
    m.personal_score = sum(weights[k] for k, ok in flags.items() if ok)
    return m


def score_content(profile: PortfolioProfile) -> ContentReport:
    m = measure(profile)
    evenly_spread = m.total_projects > 0 and m.projects_with_images >= m.total_projects * 0.7

    if m.total > 0.8 and m.has_detailed and m.total_images > 8:
        return ContentReport(
            m, "rich-content", "showcase-heavy", 0.9,
            strengths=["Detailed project descriptions", "Large image collection"],
            recommendations=["Build full case studies per project",
                             "Show process images alongside finals"],
        )
    if (m.total_images > 5 and evenly_spread) or (m.total_images >= 3 and not m.has_moderate):
        return ContentReport(
            m, "visual-heavy", "visual-first", 0.8,
            strengths=["Strong visual content"],
            recommendations=["Let images carry the story",
                             "Keep project copy short and scannable"],
        )
    if (m.has_detailed or m.has_moderate) and m.total_images < 4:
        return ContentReport(
            m, "content-rich" if m.has_detailed else "moderate", "story-driven",
            0.7 if m.has_detailed else 0.6,
            strengths=["Written project content"],
            recommendations=["Use a typography-led layout",
                             "Structure projects as problem, process, result"],
        )
    has_some = m.has_moderate or m.total_images > 2
    return ContentReport(
        m, "moderate" if has_some else "minimal", "design-focused",
        0.6 if has_some else 0.5,
        recommendations=["Lean on layout and visual design",
                         "Write concise, confident placeholder-free copy"],
    )
