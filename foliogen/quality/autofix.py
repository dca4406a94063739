"""
autofix.py — Deterministic repairs for the most common validator findings.

Fixes are scoped by category score and applied once against a single parsed
document. Nothing here calls the model; anything a rule cannot repair is
left for the re-validation to report.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from bs4 import BeautifulSoup
from rich.console import Console

from ..assets import FALLBACK_IMAGE
from .analyzer import ValidationReport
from .base import ValidationContext
from .technical import BROKEN_SRC

console = Console()

ACCESSIBILITY_FLOOR = 80
TECHNICAL_FLOOR = 80
CONTENT_FLOOR = 80
DESIGN_FLOOR = 70

DEFAULT_ALT = "Portfolio image"
LOREM_RE = re.compile(r"lorem ipsum[^<.]*\.?", re.IGNORECASE)
PLACEHOLDER_SRC_RE = re.compile(r"placeholder|picsum|placehold\.|dummyimage|^data:image/svg", re.IGNORECASE)
LANDMARK_SIBLINGS = {"header", "nav", "footer", "script", "style", "noscript"}

RESPONSIVE_CSS = """
img { max-width: 100%; height: auto; }
@media (max-width: 768px) {
  body { font-size: 16px; }
  section, header, footer, main { padding-left: 1rem; padding-right: 1rem; }
  nav ul { flex-direction: column; gap: 0.5rem; }
  [class*="grid"] { grid-template-columns: 1fr !important; }
}
"""


def _ensure_head(soup: BeautifulSoup):
    if soup.head is not None:
        return soup.head
    head = soup.new_tag("head")
    if soup.html is not None:
        soup.html.insert(0, head)
    else:
        soup.insert(0, head)
    return head


# ── Category fixes ───────────────────────────────────────────────────────────

def fix_accessibility(soup: BeautifulSoup, context: ValidationContext) -> List[str]:
    fixes: List[str] = []

    missing_alt = [img for img in soup.find_all("img") if not img.has_attr("alt")]
    for img in missing_alt:
        img["alt"] = DEFAULT_ALT
    if missing_alt:
        fixes.append(f"Added alt text to {len(missing_alt)} image(s)")

    positive = [
        tag for tag in soup.find_all(attrs={"tabindex": True})
        if tag["tabindex"].strip().isdigit() and int(tag["tabindex"]) > 0
    ]
    for tag in positive:
        tag["tabindex"] = "0"
    if positive:
        fixes.append(f"Reset {len(positive)} positive tabindex value(s)")

    body = soup.body
    if body is not None and soup.find("main") is None and soup.find(attrs={"role": "main"}) is None:
        content = [
            child for child in list(body.children)
            if getattr(child, "name", None) and child.name not in LANDMARK_SIBLINGS
        ]
        if content:
            main = soup.new_tag("main")
            content[0].insert_before(main)
            for child in content:
                main.append(child.extract())
            fixes.append("Wrapped page content in a <main> landmark")

    if soup.find("h1") is None and body is not None:
        promoted = soup.find("h2")
        if promoted is not None:
            promoted.name = "h1"
        else:
            h1 = soup.new_tag("h1")
            h1.string = context.profile.personal.name or "Portfolio"
            body.insert(0, h1)
        fixes.append("Added a top-level <h1> heading")
    return fixes


def fix_technical(soup: BeautifulSoup, context: ValidationContext) -> List[str]:
    fixes: List[str] = []
    head = _ensure_head(soup)

    if soup.find("meta", charset=True) is None:
        head.insert(0, soup.new_tag("meta", attrs={"charset": "UTF-8"}))
        fixes.append("Added charset meta tag")
    if soup.find("meta", attrs={"name": "viewport"}) is None:
        head.append(soup.new_tag(
            "meta", attrs={"name": "viewport", "content": "width=device-width, initial-scale=1.0"}
        ))
        fixes.append("Added viewport meta tag")

    title = soup.find("title")
    if title is None or not title.get_text(strip=True):
        if title is None:
            title = soup.new_tag("title")
            head.append(title)
        title.string = f"{context.profile.personal.name or 'My'} - Portfolio"
        fixes.append("Added page title")

    if soup.html is not None and not soup.html.get("lang"):
        soup.html["lang"] = "en"
        fixes.append("Added lang attribute")

    broken = [img for img in soup.find_all("img") if (img.get("src") or "").strip().lower() in BROKEN_SRC]
    for img in broken:
        img["src"] = FALLBACK_IMAGE
    if broken:
        fixes.append(f"Replaced {len(broken)} broken image source(s)")

    empty = [a for a in soup.find_all("a") if not (a.get("href") or "").strip()]
    for a in empty:
        a["href"] = "#"
    if empty:
        fixes.append(f"Gave {len(empty)} empty link(s) a target")
    return fixes


def fix_content(soup: BeautifulSoup, context: ValidationContext) -> List[str]:
    fixes: List[str] = []
    personal = context.profile.personal
    page_text = (soup.body or soup).get_text(" ").lower()

    if personal.name and personal.name.lower() not in page_text:
        h1 = soup.find("h1")
        if h1 is not None:
            h1.string = personal.name
            fixes.append("Inserted name into main heading")

    if personal.title and personal.title.lower() not in page_text:
        anchor = soup.find("h1")
        if anchor is not None:
            p = soup.new_tag("p", attrs={"class": "professional-title"})
            p.string = personal.title
            anchor.insert_after(p)
            fixes.append("Inserted professional title")

    replacement = personal.bio.strip() or "Crafting thoughtful work for people and brands."
    lorem_nodes = [node for node in soup.find_all(string=LOREM_RE)]
    for node in lorem_nodes:
        node.replace_with(LOREM_RE.sub(replacement, str(node)))
    if lorem_nodes:
        fixes.append(f"Replaced placeholder text in {len(lorem_nodes)} place(s)")
    return fixes


def fix_design(soup: BeautifulSoup, context: ValidationContext) -> List[str]:
    fixes: List[str] = []
    css = "\n".join(s.get_text() for s in soup.find_all("style"))
    if "@media" not in css:
        style = soup.new_tag("style")
        style.string = RESPONSIVE_CSS
        _ensure_head(soup).append(style)
        fixes.append("Added responsive style rules")

    used = {img.get("src", "") for img in soup.find_all("img")}
    spare = [u for u in context.catalog.urls if u not in used]
    swapped = 0
    for img in soup.find_all("img"):
        if not spare:
            break
        if PLACEHOLDER_SRC_RE.search(img.get("src", "")):
            img["src"] = spare.pop(0)
            swapped += 1
    if swapped:
        fixes.append(f"Placed {swapped} project image(s) into placeholder slots")
    return fixes


def apply_fixes(html: str, report: ValidationReport, context: ValidationContext) -> Tuple[str, List[str]]:
    """Apply every category fix whose score is under its floor. Returns (html, fixes)."""
    soup = BeautifulSoup(html, "html.parser")
    fixes: List[str] = []
    plan = (
        ("accessibility", ACCESSIBILITY_FLOOR, fix_accessibility),
        ("technical", TECHNICAL_FLOOR, fix_technical),
        ("content", CONTENT_FLOOR, fix_content),
        ("design", DESIGN_FLOOR, fix_design),
    )
    for name, floor, fixer in plan:
        result = report.per_validator.get(name)
        if result is not None and result.score < floor:
            fixes += fixer(soup, context)

    if not fixes:
        return html, []
    console.print(f"  [dim]auto-fix: {len(fixes)} fix(es) applied[/dim]")
    return str(soup), fixes
