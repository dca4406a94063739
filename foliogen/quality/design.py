"""
design.py — Visual design checks: palette, type, imagery, responsiveness.

When a DesignBrief is available the page is also compared against it, so a
generic template that ignored the moodboard palette loses points.
"""

from __future__ import annotations

import re
from typing import Set

from bs4 import BeautifulSoup

from .base import BaseValidator, ValidationContext, _Checklist, style_text

HEX_COLOR_RE = re.compile(r"#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b")
FUNC_COLOR_RE = re.compile(r"\b(?:rgba?|hsla?)\([^)]*\)", re.IGNORECASE)
FONT_FAMILY_RE = re.compile(r"font-family\s*:", re.IGNORECASE)
CUSTOM_PROPERTY_RE = re.compile(r"--[\w-]+\s*:")
LAYOUT_RE = re.compile(r"display\s*:\s*(?:inline-)?(?:flex|grid)", re.IGNORECASE)
MEDIA_QUERY_RE = re.compile(r"@media\b", re.IGNORECASE)
TRANSITION_RE = re.compile(r"\b(?:transition|animation)\s*:", re.IGNORECASE)

MIN_COLORS = 2
MAX_COLORS = 12
UNDERUSED_RATIO = 0.5


def _normalize_hex(color: str) -> str:
    color = color.lower()
    if len(color) == 4:
        color = "#" + "".join(c * 2 for c in color[1:])
    return color


def css_colors(css: str) -> Set[str]:
    found = {_normalize_hex(c) for c in HEX_COLOR_RE.findall(css)}
    found |= {" ".join(c.lower().split()) for c in FUNC_COLOR_RE.findall(css)}
    return found


class DesignValidator(BaseValidator):
    name = "design"

    def check(self, soup: BeautifulSoup, html: str, context: ValidationContext, checks: _Checklist) -> None:
        css = style_text(soup)

        # ── Color ────────────────────────────────────────────────────────────
        colors = css_colors(css)
        if len(colors) < MIN_COLORS:
            checks.issue("limited_color_palette", f"Only {len(colors)} distinct color(s) in the stylesheet", "medium")
        elif len(colors) > MAX_COLORS:
            checks.issue("many_colors", f"{len(colors)} distinct colors; the palette feels unfocused", "low")
        else:
            checks.ok(f"Balanced palette ({len(colors)} colors)")

        if context.brief is not None:
            wanted = {_normalize_hex(c) for c in context.brief.color_palette if c.startswith("#")}
            if wanted and not wanted & colors:
                checks.issue(
                    "mood_not_reflected",
                    "None of the design brief's palette colors are used",
                    "medium",
                )
            elif wanted:
                checks.ok("Brief palette reflected in the stylesheet")

        # ── Typography ───────────────────────────────────────────────────────
        families = len(FONT_FAMILY_RE.findall(css))
        if families:
            checks.ok("Font families declared")
        else:
            checks.issue("basic_typography", "No font-family declared; browser defaults will show", "medium")

        # ── Imagery ──────────────────────────────────────────────────────────
        self._client_images(soup, context, checks)

        # ── Layout ───────────────────────────────────────────────────────────
        if MEDIA_QUERY_RE.search(css):
            checks.ok("Responsive breakpoints present")
        else:
            checks.issue("not_responsive", "No responsive rules (@media) in the stylesheet", "medium")
        if CUSTOM_PROPERTY_RE.search(css):
            checks.ok("CSS custom properties used")
        else:
            checks.issue("no_custom_properties", "No CSS custom properties for the design tokens", "low")
        if LAYOUT_RE.search(css):
            checks.ok("Flex/grid layout")
        else:
            checks.issue("no_modern_layout", "Layout uses neither flexbox nor grid", "low")
        if not TRANSITION_RE.search(css):
            checks.suggest("Add subtle transitions on hover states to increase visual interest")

    def _client_images(self, soup: BeautifulSoup, context: ValidationContext, checks: _Checklist) -> None:
        client_urls = set(context.catalog.urls)
        if not client_urls:
            return
        sources = {img.get("src", "") for img in soup.find_all("img")}
        css = style_text(soup)
        used = {u for u in client_urls if u in sources or u in css}
        if not used:
            checks.issue("no_client_images_used", "None of the uploaded project images appear", "high")
        elif len(used) < len(client_urls) * UNDERUSED_RATIO:
            checks.issue(
                "underused_client_images",
                f"Only {len(used)} of {len(client_urls)} project images are shown",
                "medium",
            )
        else:
            checks.ok(f"{len(used)}/{len(client_urls)} project images shown")
