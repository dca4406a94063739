"""
accessibility.py — WCAG-flavoured checks on the generated document.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from .base import BaseValidator, ValidationContext, _Checklist

GENERIC_LINK_TEXT = {"click here", "here", "read more", "more", "link", "learn more"}
GENERIC_ALT_TEXT = {"image", "img", "photo", "picture", "project image"}
HEADING_RE = re.compile(r"^h[1-6]$")


def _label_for(soup: BeautifulSoup, control) -> bool:
    if control.get("aria-label") or control.get("aria-labelledby") or control.get("title"):
        return True
    if control.find_parent("label") is not None:
        return True
    control_id = control.get("id")
    return bool(control_id and soup.find("label", attrs={"for": control_id}))


class AccessibilityValidator(BaseValidator):
    name = "accessibility"

    def check(self, soup: BeautifulSoup, html: str, context: ValidationContext, checks: _Checklist) -> None:
        self._images(soup, checks)
        self._headings(soup, checks)
        self._keyboard(soup, checks)
        self._landmarks(soup, checks)
        self._forms(soup, checks)
        self._links(soup, checks)

    def _images(self, soup, checks: _Checklist) -> None:
        images = soup.find_all("img")
        if not images:
            return
        missing = [img for img in images if not img.has_attr("alt")]
        # alt="" is fine on decorative images only
        empty = [
            img for img in images
            if img.has_attr("alt") and not img["alt"].strip()
            and img.get("role") != "presentation" and img.get("aria-hidden") != "true"
        ]
        generic = [img for img in images if (img.get("alt") or "").strip().lower() in GENERIC_ALT_TEXT]
        if missing:
            checks.issue("missing_alt_text", f"{len(missing)} image(s) without alt attribute", "high")
        else:
            checks.ok("Every image has an alt attribute")
        if empty:
            checks.issue("empty_alt_text", f"{len(empty)} non-decorative image(s) with empty alt", "medium")
        if generic:
            checks.suggest(f"Describe {len(generic)} image(s) more specifically than '{generic[0]['alt']}'")

    def _headings(self, soup, checks: _Checklist) -> None:
        h1_count = len(soup.find_all("h1"))
        if h1_count == 1:
            checks.ok("Single <h1> heading")
        elif h1_count == 0:
            checks.issue("missing_h1", "Page has no <h1> heading", "high")
        else:
            checks.issue("multiple_h1", f"Page has {h1_count} <h1> headings", "medium")

        levels = [int(h.name[1]) for h in soup.find_all(HEADING_RE)]
        skips = [(a, b) for a, b in zip(levels, levels[1:]) if b > a + 1]
        if skips:
            a, b = skips[0]
            checks.issue(
                "heading_hierarchy_skip",
                f"Heading levels skip from h{a} to h{b} ({len(skips)} skip(s))",
                "low",
            )
        elif levels:
            checks.ok("Heading hierarchy is sequential")

    def _keyboard(self, soup, checks: _Checklist) -> None:
        positive = []
        for tag in soup.find_all(attrs={"tabindex": True}):
            try:
                if int(tag["tabindex"]) > 0:
                    positive.append(tag)
            except (TypeError, ValueError):
                continue
        if positive:
            checks.issue("positive_tabindex", f"{len(positive)} element(s) use a positive tabindex", "medium")
        else:
            checks.ok("No positive tabindex values")

        unlabeled = [
            b for b in soup.find_all("button")
            if not b.get_text(strip=True) and not b.get("aria-label") and not b.get("title")
        ]
        if unlabeled:
            checks.issue("button_missing_label", f"{len(unlabeled)} button(s) without accessible label", "high")
        elif soup.find("button"):
            checks.ok("Buttons have labels")

    def _landmarks(self, soup, checks: _Checklist) -> None:
        navs = soup.find_all("nav")
        if len(navs) > 1 and any(not n.get("aria-label") for n in navs):
            checks.issue("nav_aria_label", "Multiple <nav> elements need distinguishing aria-labels", "low")
        elif navs:
            checks.ok("Navigation landmark present")

        if soup.find("main") or soup.find(attrs={"role": "main"}):
            checks.ok("Main landmark present")
        else:
            checks.issue("missing_main_landmark", "No <main> landmark", "medium")

    def _forms(self, soup, checks: _Checklist) -> None:
        controls = [
            c for c in soup.find_all(["input", "textarea", "select"])
            if c.get("type") not in ("hidden", "submit", "button", "reset")
        ]
        if not controls:
            return
        unlabeled = [c for c in controls if not _label_for(soup, c)]
        if unlabeled:
            checks.issue("input_missing_label", f"{len(unlabeled)} form control(s) without a label", "high")
        else:
            checks.ok("Form controls are labelled")

    def _links(self, soup, checks: _Checklist) -> None:
        links = soup.find_all("a")
        if not links:
            return
        empty = [a for a in links if not a.get_text(strip=True) and not a.get("aria-label") and not a.find("img")]
        if empty:
            checks.issue("empty_link", f"{len(empty)} link(s) have no text", "medium")
        else:
            checks.ok("Links have text")

        generic = [a for a in links if a.get_text(strip=True).lower() in GENERIC_LINK_TEXT]
        if generic:
            checks.issue("generic_link_text", f"{len(generic)} link(s) use vague text like 'click here'", "low")

        unsafe = [
            a for a in links
            if a.get("target") == "_blank" and "noopener" not in " ".join(a.get("rel") or [])
        ]
        if unsafe:
            checks.issue(
                "external_link_security",
                f"{len(unsafe)} link(s) open a new tab without rel=\"noopener\"",
                "low",
            )
        else:
            checks.ok("External links are safe")
