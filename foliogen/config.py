"""
config.py — Runtime settings for the portfolio generation pipeline.

Everything tunable lives on one immutable Settings object that is built once
and passed down explicitly. Defaults match the values the pipeline was tuned
with; every field can be overridden from the environment (or a .env file):

  GEMINI_API_KEY                 → api_key
  FOLIOGEN_MODEL                 → generation_model
  FOLIOGEN_VISION_MODEL          → vision_model
  FOLIOGEN_MAX_OUTPUT_TOKENS     → max_output_tokens
  FOLIOGEN_TEMPERATURE           → temperature
  FOLIOGEN_TIMEOUT_SECONDS       → timeout_seconds
  FOLIOGEN_MAX_ATTEMPTS          → max_attempts
  FOLIOGEN_RETRY_DELAY_SECONDS   → retry_delay_seconds
  FOLIOGEN_AUTOFIX_THRESHOLD     → autofix_threshold
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv
from google import genai
from google.genai import types


@dataclass(frozen=True)
class StatusThresholds:
    """Lower bounds (exclusive) for each system status tier, highest first."""
    enhanced: float = 0.75
    smart: float = 0.6
    basic: float = 0.4

    def __post_init__(self) -> None:
        if not (1.0 >= self.enhanced >= self.smart >= self.basic >= 0.0):
            raise ValueError(
                f"Status thresholds must be descending within [0, 1]: "
                f"{self.enhanced}, {self.smart}, {self.basic}"
            )


@dataclass(frozen=True)
class Settings:
    api_key: str = ""

    # ── Models ───────────────────────────────────────────────────────────────
    generation_model: str = "gemini-2.5-flash"
    vision_model: str = "gemini-2.5-flash"
    max_output_tokens: int = 8000
    temperature: float = 0.7
    vision_temperature: float = 0.3
    vision_max_output_tokens: int = 2000
    timeout_seconds: float = 120.0

    # ── Continuation ─────────────────────────────────────────────────────────
    max_attempts: int = 2
    retry_delay_seconds: float = 1.0

    # ── Fusion ───────────────────────────────────────────────────────────────
    vision_threshold: float = 0.6
    confidence_boost: float = 0.15
    confidence_cap: float = 0.95
    status_thresholds: StatusThresholds = field(default_factory=StatusThresholds)
    max_reference_images: int = 4

    # ── Completeness ─────────────────────────────────────────────────────────
    expected_min_length: int = 1000
    min_continuable_length: int = 200
    tag_balance_tolerance: int = 2

    # ── Quality ──────────────────────────────────────────────────────────────
    autofix_threshold: int = 85
    neutral_validator_score: int = 50

    def __post_init__(self) -> None:
        if not 2 <= self.max_attempts <= 5:
            raise ValueError(f"max_attempts must be between 2 and 5, got {self.max_attempts}")

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """Build settings from the process environment, loading .env first."""
        load_dotenv(dotenv_path)
        env = os.environ
        base = cls()
        return cls(
            api_key=env.get("GEMINI_API_KEY", ""),
            generation_model=env.get("FOLIOGEN_MODEL", base.generation_model),
            vision_model=env.get("FOLIOGEN_VISION_MODEL", base.vision_model),
            max_output_tokens=int(env.get("FOLIOGEN_MAX_OUTPUT_TOKENS", base.max_output_tokens)),
            temperature=float(env.get("FOLIOGEN_TEMPERATURE", base.temperature)),
            timeout_seconds=float(env.get("FOLIOGEN_TIMEOUT_SECONDS", base.timeout_seconds)),
            max_attempts=int(env.get("FOLIOGEN_MAX_ATTEMPTS", base.max_attempts)),
            retry_delay_seconds=float(
                env.get("FOLIOGEN_RETRY_DELAY_SECONDS", base.retry_delay_seconds)
            ),
            autofix_threshold=int(env.get("FOLIOGEN_AUTOFIX_THRESHOLD", base.autofix_threshold)),
        )


def make_client(settings: Settings) -> genai.Client:
    """Gemini client with the request timeout applied to every call."""
    if not settings.has_api_key:
        raise RuntimeError("GEMINI_API_KEY not set")
    # HttpOptions.timeout is in milliseconds
    return genai.Client(
        api_key=settings.api_key,
        http_options=types.HttpOptions(timeout=int(settings.timeout_seconds * 1000)),
    )

