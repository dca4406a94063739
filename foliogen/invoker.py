"""
invoker.py — One generation request to Gemini, nothing more.

Builds the content parts (prompt text plus optional moodboard images),
issues a single generate_content call, and returns the cleaned text. Any
failure is raised as a classified UpstreamError; retrying and continuation
belong to the continuation controller.
"""

from __future__ import annotations

import re
from typing import List

from google.genai import types
from rich.console import Console

from .brief import DesignBrief
from .completeness import GenerationAttempt
from .config import Settings, make_client
from .errors import TRANSIENT, UpstreamError
from .profile import PortfolioProfile, ReferenceImage
from .prompts import SYSTEM_PROMPT, build_continuation_prompt, build_generation_prompt

console = Console()

DOC_START_RE = re.compile(r"<!doctype\s+html|<html\b", re.IGNORECASE)
MAX_PREAMBLE_CHARS = 300


def clean_response(raw: str) -> str:
    """Strip markdown fences and short chatty preambles around the document."""
    text = (raw or "").strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        # a truncated response may never reach the closing fence
        if "```" in text:
            text = text.rsplit("```", 1)[0]
    elif "```html" in text.lower():
        start = text.lower().index("```html")
        text = text[start + len("```html"):]
        if "```" in text:
            text = text.rsplit("```", 1)[0]

    m = DOC_START_RE.search(text)
    if m and 0 < m.start() <= MAX_PREAMBLE_CHARS:
        text = text[m.start():]
    return text.strip()


class GenerationInvoker:
    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    @property
    def client(self):
        if self._client is None:
            try:
                self._client = make_client(self.settings)
            except Exception as e:
                raise UpstreamError.from_exception(e) from e
        return self._client

    def _parts(self, prompt: str, images: List[ReferenceImage]):
        if not images:
            return prompt
        parts = [types.Part.from_text(text=prompt)]
        for i, ref in enumerate(images[: self.settings.max_reference_images], start=1):
            parts.append(types.Part.from_text(text=f"Moodboard reference #{i}:"))
            parts.append(types.Part.from_bytes(data=ref.data, mime_type=ref.mime_type))
        return parts

    def _call(self, contents) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.settings.generation_model,
                contents=contents,
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    temperature=self.settings.temperature,
                    max_output_tokens=self.settings.max_output_tokens,
                ),
            )
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError.from_exception(e) from e

        text = clean_response(getattr(response, "text", None) or "")
        if not text:
            raise UpstreamError(TRANSIENT, "Gemini returned no content")
        return text

    def generate(self, brief: DesignBrief, profile: PortfolioProfile) -> str:
        prompt = build_generation_prompt(brief, profile)
        console.print("  [dim]generate: requesting full document...[/dim]")
        return self._call(self._parts(prompt, profile.reference_images))

    def continue_from(
        self,
        partial: GenerationAttempt,
        brief: DesignBrief,
        profile: PortfolioProfile,
    ) -> str:
        prompt = build_continuation_prompt(partial, brief, profile)
        console.print(
            f"  [dim]generate: continuation after attempt {partial.attempt_number} "
            f"(~{partial.estimated_completion:.0%})...[/dim]"
        )
        # images were already seen; the partial carries the design forward
        return self._call(prompt)
