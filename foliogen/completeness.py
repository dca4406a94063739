"""
completeness.py — Decide whether generated HTML is structurally finished.

Large documents regularly hit the output-token ceiling and stop mid-tag.
`assess()` classifies a piece of generated text as

  complete                    → ready for asset resolution
  incomplete, can continue    → worth a continuation request
  incomplete, terminal        → too short / malformed to extend

It is a pure function: same text in, same GenerationAttempt out.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

ROOT_OPEN_RE = re.compile(r"<!doctype\s+html|<html\b", re.IGNORECASE)
ROOT_START_RE = re.compile(r"^\s*(?:<!doctype\s+html[^>]*>\s*)?<html\b", re.IGNORECASE)
ROOT_END_RE = re.compile(r"</html\s*>\s*(?:<!--.*?-->\s*)*\Z", re.IGNORECASE | re.DOTALL)
UNFINISHED_TAG_RE = re.compile(r"<[^>]*\Z")
COMMENT_RE = re.compile(r"<!--.*?(?:-->|\Z)", re.DOTALL)
# keep the script/style tags themselves, drop their bodies
RAW_TEXT_RE = re.compile(
    r"(<(script|style)\b[^>]*>).*?(</\2\s*>|\Z)", re.IGNORECASE | re.DOTALL
)

STRUCTURAL_TAGS = (
    "html", "head", "body", "main", "header", "footer", "nav", "section",
    "article", "div", "ul", "ol", "table", "script", "style",
)
CLOSING_MARKERS = ("</head>", "</body>", "</html>")


@dataclass(frozen=True)
class GenerationAttempt:
    raw_text: str
    attempt_number: int
    is_complete: bool
    estimated_completion: float
    issues: Tuple[str, ...] = ()
    can_continue: bool = False
    tag_imbalance: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.attempt_number < 1:
            raise ValueError("attempt_number must be >= 1")
        if not 0.0 <= self.estimated_completion <= 1.0:
            raise ValueError("estimated_completion must be within [0, 1]")


def _strip_opaque(text: str) -> str:
    return RAW_TEXT_RE.sub(r"\1\3", COMMENT_RE.sub("", text))


def tag_imbalance(text: str) -> Dict[str, int]:
    """opens − closes per structural tag, zero entries omitted."""
    body = _strip_opaque(text)
    result: Dict[str, int] = {}
    for tag in STRUCTURAL_TAGS:
        opens = len(re.findall(rf"<{tag}\b", body, re.IGNORECASE))
        closes = len(re.findall(rf"</{tag}\s*>", body, re.IGNORECASE))
        if opens != closes:
            result[tag] = opens - closes
    return result


def assess(
    text: str,
    attempt_number: int = 1,
    *,
    expected_min_length: int = 1000,
    min_continuable_length: int = 200,
    tolerance: int = 2,
) -> GenerationAttempt:
    cleaned = (text or "").strip()
    if not cleaned:
        return GenerationAttempt(
            raw_text=text or "",
            attempt_number=attempt_number,
            is_complete=False,
            estimated_completion=0.0,
            issues=("No HTML content",),
            can_continue=False,
        )

    lower = cleaned.lower()
    issues: List[str] = []

    starts_root = bool(ROOT_START_RE.match(cleaned))
    ends_root = bool(ROOT_END_RE.search(cleaned))
    has_head = "<head" in lower
    has_body = re.search(r"<body\b", lower) is not None
    closing_found = [m for m in CLOSING_MARKERS if m in lower]

    if not starts_root:
        issues.append("Document does not start with <!DOCTYPE html> / <html>")
    if not has_head:
        issues.append("Missing <head> section")
    if not has_body:
        issues.append("Missing opening <body> tag")
    for marker in CLOSING_MARKERS:
        if marker not in closing_found:
            issues.append(f"Missing closing {marker} tag")
    if not ends_root:
        issues.append("Content ends before the closing </html> tag")
    if UNFINISHED_TAG_RE.search(_strip_opaque(cleaned)):
        issues.append("Incomplete HTML tag at end")

    imbalance = tag_imbalance(cleaned)
    drift = sum(abs(v) for v in imbalance.values())
    if drift > tolerance:
        unclosed = ", ".join(f"<{t}>×{n}" for t, n in imbalance.items() if n > 0)
        issues.append(f"Unbalanced structural tags ({drift} off): {unclosed or 'extra closing tags'}")

    is_complete = not issues
    if is_complete:
        estimated = 1.0
    else:
        length_ratio = min(1.0, len(cleaned) / max(1, expected_min_length))
        estimated = 0.6 * len(closing_found) / len(CLOSING_MARKERS) + 0.4 * length_ratio
        estimated = min(0.95, estimated)

    can_continue = (
        not is_complete
        and ROOT_OPEN_RE.search(cleaned) is not None
        and len(cleaned) >= min_continuable_length
    )

    return GenerationAttempt(
        raw_text=text,
        attempt_number=attempt_number,
        is_complete=is_complete,
        estimated_completion=round(estimated, 3),
        issues=tuple(issues),
        can_continue=can_continue,
        tag_imbalance=imbalance,
    )
