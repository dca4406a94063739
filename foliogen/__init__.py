"""
foliogen — Gemini-driven portfolio site generation.
"""

from .config import Settings, make_client
from .pipeline import IncompleteResult, PipelineResult, PortfolioPipeline
from .profile import PersonalInfo, PortfolioProfile, ProjectData, ReferenceImage

__version__ = "0.1.0"

__all__ = [
    "IncompleteResult",
    "PersonalInfo",
    "PipelineResult",
    "PortfolioPipeline",
    "PortfolioProfile",
    "ProjectData",
    "ReferenceImage",
    "Settings",
    "make_client",
]
