"""
prompts.py — Prompt text for portfolio generation and continuation.

The generation prompt tells the model which placeholder tokens exist for
the user's images and project metadata. The asset resolver replaces those
tokens after generation, so the model never has to copy long CDN URLs.
"""

from __future__ import annotations

from typing import List, Sequence

from .brief import DesignBrief
from .completeness import GenerationAttempt
from .profile import PortfolioProfile

SYSTEM_PROMPT = """\
You are a senior web designer and front-end developer who builds bespoke,
single-file portfolio websites for creative professionals.

OUTPUT CONTRACT — follow exactly:
  • Return ONE complete HTML5 document, starting with <!DOCTYPE html> and ending with </html>.
  • All CSS lives in a single <style> block in <head>; any JavaScript in one <script> before </body>.
  • No markdown fences, no commentary before or after the document.
  • Mobile-first and responsive: include <meta name="viewport"> and at least one @media query.
  • Semantic structure: <header>, <nav>, <main>, <section>, <footer>; exactly one <h1>.
  • Every <img> has meaningful alt text. External links use rel="noopener".
  • Use the placeholder tokens listed in the prompt for every user image and project field.
    Write them exactly as given (e.g. src="project_1_final_1"); they are replaced after generation.
  • Never invent image URLs and never use stock-photo services.
  • Navigation links are in-page anchors only (#about, #projects, #contact).
  • No lorem ipsum. Where the user gave little text, write short, confident, specific copy.
"""


def asset_token_lines(profile: PortfolioProfile) -> List[str]:
    lines: List[str] = []
    for i, proj in enumerate(profile.projects, start=1):
        lines.append(f"Project {i} — {proj.title or 'Untitled'}:")
        lines.append(
            f"  text: [PROJECT_{i}_TITLE] [PROJECT_{i}_SUBTITLE] [PROJECT_{i}_OVERVIEW] "
            f"[PROJECT_{i}_CATEGORY] [PROJECT_{i}_TAGS]"
        )
        if proj.final_images:
            tokens = " ".join(f"project_{i}_final_{j}" for j in range(1, len(proj.final_images) + 1))
            lines.append(f"  final images: {tokens}")
        if proj.process_images:
            tokens = " ".join(
                f"project_{i}_process_{j}" for j in range(1, len(proj.process_images) + 1)
            )
            lines.append(f"  process images: {tokens}")
        if not proj.image_count:
            lines.append("  (no images — design this project as a text/typography card)")
    return lines


def build_generation_prompt(brief: DesignBrief, profile: PortfolioProfile) -> str:
    parts = [
        "Build the complete portfolio website described below.",
        "",
        brief.to_prompt_block(),
        "",
        profile.to_prompt_block(),
    ]
    token_lines = asset_token_lines(profile)
    if token_lines:
        parts += ["", "## PLACEHOLDER TOKENS (use exactly as written)"] + token_lines
    if profile.reference_images:
        parts += [
            "",
            f"## MOODBOARD ({len(profile.reference_images)} image(s) attached)",
            "Match the palette, typography and mood of the attached references.",
        ]
    parts += [
        "",
        "Structure the page around these sections, in order: "
        + ", ".join(["hero"] + brief.industry.recommended_sections + ["contact"]),
        "Return ONLY the HTML document.",
    ]
    return "\n".join(parts)


def build_continuation_prompt(
    partial: GenerationAttempt,
    brief: DesignBrief,
    profile: PortfolioProfile,
) -> str:
    """Ask for the complete document again, resuming where `partial` was cut off."""
    issues: Sequence[str] = partial.issues or ("Document is incomplete",)
    unclosed = [f"<{tag}> ×{n}" for tag, n in partial.tag_imbalance.items() if n > 0]
    lines = [
        "CONTINUE THE INCOMPLETE HTML PORTFOLIO BELOW.",
        "",
        "The previous response was cut off before the document was finished.",
        "Do NOT restart with a different design: keep every style, section and",
        "placeholder token already written, and resume exactly where it stopped.",
        "",
        "---START OF INCOMPLETE HTML---",
        partial.raw_text,
        "---END OF INCOMPLETE HTML---",
        "",
        f"COMPLETION STATUS: ~{partial.estimated_completion:.0%} complete",
        "WHAT IS MISSING:",
    ]
    lines += [f"- {issue}" for issue in issues]
    if unclosed:
        lines.append("- Unclosed elements: " + ", ".join(unclosed))
    lines += [
        "",
        "CONTEXT:",
        f"- Owner: {profile.personal.name or 'unknown'} — {profile.personal.title or 'creative professional'}",
        f"- Projects to include: {len(profile.projects)}",
        f"- Palette: {', '.join(brief.color_palette)}",
        "",
        "INSTRUCTIONS:",
        "1. Complete the HTML exactly where it was cut off.",
        "2. Finish every unfinished section and include all projects.",
        "3. Close every open element, then </body> and </html>.",
        "4. Return ONLY the COMPLETE HTML starting with <!DOCTYPE html> and ending with </html>.",
    ]
    return "\n".join(lines)
