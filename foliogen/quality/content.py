"""
content.py — Does the page actually show the user's own material?
"""

from __future__ import annotations

from bs4 import BeautifulSoup

from .base import BaseValidator, ValidationContext, _Checklist, visible_text

SHORT_BIO_WORDS = 30
PROJECT_SECTION_IDS = ["projects", "work", "works", "portfolio"]


def _contains(haystack: str, needle: str) -> bool:
    return bool(needle) and " ".join(needle.split()).lower() in haystack


class ContentValidator(BaseValidator):
    name = "content"

    def check(self, soup: BeautifulSoup, html: str, context: ValidationContext, checks: _Checklist) -> None:
        text = visible_text(soup).lower()
        personal = context.profile.personal

        if personal.name:
            if _contains(text, personal.name):
                checks.ok("Name displayed")
            else:
                checks.issue("missing_name", f"Name '{personal.name}' does not appear on the page", "high")
        if personal.title:
            if _contains(text, personal.title):
                checks.ok("Professional title displayed")
            else:
                checks.issue("missing_title", "Professional title does not appear on the page", "medium")

        if personal.bio:
            # generated copy may paraphrase the bio; its opening words should survive
            opening = " ".join(personal.bio.split()[:6])
            if _contains(text, opening):
                checks.ok("Bio included")
            else:
                checks.issue("missing_bio", "Bio text is not surfaced", "medium")
            if len(personal.bio.split()) < SHORT_BIO_WORDS:
                checks.suggest("The bio is short; a few more sentences about approach and clients would help")
        else:
            checks.suggest("Add a bio so the about section has real content")

        if "lorem ipsum" in text:
            checks.issue("placeholder_text", "Page still contains lorem ipsum filler", "high")

        self._projects(soup, text, context, checks)

        if personal.skills:
            shown = [s for s in personal.skills if _contains(text, s)]
            if shown:
                checks.ok(f"{len(shown)}/{len(personal.skills)} skills listed")
            else:
                checks.issue("missing_skills", "None of the listed skills appear", "low")

        contact_values = [personal.email, *personal.social_links().values()]
        contact_values = [v for v in contact_values if v]
        if contact_values:
            hrefs = " ".join(a.get("href", "") for a in soup.find_all("a")).lower()
            if any(v.lower() in text or v.lower() in hrefs for v in contact_values):
                checks.ok("Contact information present")
            else:
                checks.issue("missing_contact", "No contact details from the profile are shown", "medium")

    def _projects(self, soup: BeautifulSoup, text: str, context: ValidationContext, checks: _Checklist) -> None:
        projects = list(context.catalog)
        if not projects:
            return
        if soup.find(id=PROJECT_SECTION_IDS) or soup.find(class_=lambda c: bool(c) and "project" in c.lower()):
            checks.ok("Project section present")
        else:
            checks.issue("no_projects_section", "No project section found", "high")

        for proj in projects:
            label = proj.title or proj.project_id
            if proj.title and not _contains(text, proj.title):
                checks.issue("missing_project_title", f"Project '{label}' title not shown", "medium")
                continue
            if proj.overview and not _contains(text, " ".join(proj.overview.split()[:5])):
                checks.issue("missing_project_overview", f"Project '{label}' overview not shown", "low")
                continue
            checks.ok(f"Project '{label}' surfaced")
