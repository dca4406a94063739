"""
technical.py — Document structure and HTML hygiene checks.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from .base import BaseValidator, ValidationContext, _Checklist, style_text

DOCTYPE_RE = re.compile(r"^\s*<!doctype\s+html", re.IGNORECASE)
MEDIA_QUERY_RE = re.compile(r"@media\b", re.IGNORECASE)
MODERN_LAYOUT_RE = re.compile(r"display\s*:\s*(?:inline-)?(?:flex|grid)", re.IGNORECASE)
BROKEN_SRC = {"", "#", "undefined", "null", "none"}
MAX_INLINE_STYLES = 20
MAX_ELEMENTS = 1500


class TechnicalValidator(BaseValidator):
    name = "technical"

    def check(self, soup: BeautifulSoup, html: str, context: ValidationContext, checks: _Checklist) -> None:
        # ── Document skeleton ────────────────────────────────────────────────
        if DOCTYPE_RE.match(html):
            checks.ok("HTML5 doctype present")
        else:
            checks.issue("missing_doctype", "Document does not start with <!DOCTYPE html>", "high")

        root = soup.find("html")
        if root is None:
            checks.issue("missing_html_element", "No <html> element", "critical")
        else:
            checks.ok("<html> element present")
            if root.get("lang"):
                checks.ok("Language declared")
            else:
                checks.issue("missing_lang", "<html> has no lang attribute", "medium")

        head = soup.find("head")
        if head is None:
            checks.issue("missing_head", "No <head> section", "high")
        else:
            checks.ok("<head> present")
        if soup.find("body") is None:
            checks.issue("missing_body", "No <body> section", "critical")
        else:
            checks.ok("<body> present")

        # ── Head metadata ───────────────────────────────────────────────────
        title = soup.find("title")
        if title is not None and title.get_text(strip=True):
            checks.ok("Page title set")
        else:
            checks.issue("missing_title", "Missing or empty <title>", "medium")

        if soup.find("meta", charset=True) or soup.find(
            "meta", attrs={"http-equiv": re.compile("content-type", re.I)}
        ):
            checks.ok("Character encoding declared")
        else:
            checks.issue("missing_charset", "No <meta charset> declaration", "medium")

        if soup.find("meta", attrs={"name": "viewport"}):
            checks.ok("Viewport meta tag present")
        else:
            checks.issue("missing_viewport", "No viewport meta tag; page will not scale on mobile", "high")

        if soup.find("meta", attrs={"name": "description"}):
            checks.ok("Meta description present")
        else:
            checks.suggest("Add a <meta name=\"description\"> for search and link previews")

        # ── CSS ──────────────────────────────────────────────────────────────
        css = style_text(soup)
        if MEDIA_QUERY_RE.search(css):
            checks.ok("Media queries present")
        else:
            checks.issue("no_media_queries", "No @media rules found", "medium")
        if not MODERN_LAYOUT_RE.search(css):
            checks.suggest("Use flexbox or grid for layout")

        inline = soup.find_all(style=True)
        if len(inline) > MAX_INLINE_STYLES:
            checks.issue(
                "excessive_inline_styles",
                f"{len(inline)} elements use inline styles; move them into the stylesheet",
                "low",
            )
        else:
            checks.ok("Inline styles kept to a minimum")

        # ── Body content ─────────────────────────────────────────────────────
        broken = [img for img in soup.find_all("img") if (img.get("src") or "").strip().lower() in BROKEN_SRC]
        if broken:
            checks.issue("broken_image_src", f"{len(broken)} image(s) have an empty or invalid src", "high")
        elif soup.find("img"):
            checks.ok("All images have a source")

        empty_links = [a for a in soup.find_all("a") if not (a.get("href") or "").strip()]
        if empty_links:
            checks.issue("empty_links", f"{len(empty_links)} link(s) have no href", "medium")
        else:
            checks.ok("All links have a target")

        element_count = len(soup.find_all(True))
        if element_count > MAX_ELEMENTS:
            checks.issue("large_dom", f"DOM has {element_count} elements", "low")
        else:
            checks.ok("DOM size reasonable")

        h1_count = len(soup.find_all("h1"))
        if h1_count == 1:
            checks.ok("Exactly one <h1>")
        elif h1_count == 0:
            checks.issue("missing_h1", "No <h1> element", "medium")
        else:
            checks.issue("multiple_h1", f"{h1_count} <h1> elements", "low")
