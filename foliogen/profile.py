"""
profile.py — Structured user data for one portfolio generation request.

The caller hands over a plain mapping (as stored by the surrounding app):

    {
      "personal": {"name": ..., "title": ..., "bio": ..., "skills": [...],
                   "email": ..., "website": ..., "linkedin": ..., ...},
      "projects": [{"id": ..., "title": ..., "overview": ...,
                    "final_images": [url, ...], "process_images": [url, ...]}],
      "layout_preset": "gallery-first",
      "design_request": "dark, minimal, lots of whitespace",
    }

PortfolioProfile.from_dict() normalises that into dataclasses; reference
images are attached separately as raw bytes (the app owns uploads).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

SOCIAL_FIELDS = ("website", "linkedin", "instagram", "behance", "dribbble")


@dataclass
class PersonalInfo:
    name: str = ""
    title: str = ""
    bio: str = ""
    skills: List[str] = field(default_factory=list)
    location: str = ""
    email: str = ""
    website: str = ""
    linkedin: str = ""
    instagram: str = ""
    behance: str = ""
    dribbble: str = ""

    def social_links(self) -> Dict[str, str]:
        return {k: getattr(self, k) for k in SOCIAL_FIELDS if getattr(self, k)}


@dataclass
class ProjectData:
    project_id: str
    title: str = ""
    subtitle: str = ""
    overview: str = ""
    description: str = ""
    problem: str = ""
    solution: str = ""
    category: str = ""
    tags: List[str] = field(default_factory=list)
    final_images: List[str] = field(default_factory=list)     # public URLs
    process_images: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        """All free text of the project, for keyword scoring."""
        return " ".join(
            t for t in (self.title, self.subtitle, self.overview, self.description,
                        self.problem, self.solution, self.category, " ".join(self.tags))
            if t
        )

    @property
    def image_count(self) -> int:
        return len(self.final_images) + len(self.process_images)


@dataclass
class ReferenceImage:
    filename: str
    data: bytes
    mime_type: str = "image/png"

    @classmethod
    def from_path(cls, path: Path) -> "ReferenceImage":
        ext = path.suffix.lower().lstrip(".")
        mime = f"image/{'jpeg' if ext in ('jpg', 'jpeg') else ext or 'png'}"
        return cls(filename=path.name, data=path.read_bytes(), mime_type=mime)


@dataclass
class PortfolioProfile:
    personal: PersonalInfo = field(default_factory=PersonalInfo)
    projects: List[ProjectData] = field(default_factory=list)
    reference_images: List[ReferenceImage] = field(default_factory=list)
    layout_preset: str = "none"
    design_request: str = ""

    @property
    def has_design_inputs(self) -> bool:
        return bool(
            self.reference_images
            or (self.layout_preset and self.layout_preset != "none")
            or self.design_request.strip()
        )

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        reference_images: Optional[List[ReferenceImage]] = None,
    ) -> "PortfolioProfile":
        personal_raw = data.get("personal") or {}
        skills = personal_raw.get("skills") or []
        if isinstance(skills, str):
            skills = [s.strip() for s in skills.split(",") if s.strip()]
        personal = PersonalInfo(
            skills=list(skills),
            **{
                k: str(personal_raw.get(k) or "")
                for k in ("name", "title", "bio", "location", "email") + SOCIAL_FIELDS
            },
        )

        projects: List[ProjectData] = []
        for i, raw in enumerate(data.get("projects") or [], start=1):
            tags = raw.get("tags") or []
            if isinstance(tags, str):
                tags = [t.strip() for t in tags.split(",") if t.strip()]
            projects.append(ProjectData(
                project_id=str(raw.get("id") or raw.get("project_id") or f"project_{i}"),
                title=raw.get("title") or "",
                subtitle=raw.get("subtitle") or "",
                overview=raw.get("overview") or "",
                description=raw.get("description") or "",
                problem=raw.get("problem") or "",
                solution=raw.get("solution") or "",
                category=raw.get("category") or "",
                tags=list(tags),
                final_images=[u for u in (raw.get("final_images") or []) if u],
                process_images=[u for u in (raw.get("process_images") or []) if u],
            ))

        return cls(
            personal=personal,
            projects=projects,
            reference_images=list(reference_images or []),
            layout_preset=data.get("layout_preset") or "none",
            design_request=data.get("design_request") or "",
        )

    def to_prompt_block(self) -> str:
        """Format the user's data for the generation model's user message."""
        p = self.personal
        parts: List[str] = ["## PERSONAL INFO", f"Name: {p.name or '(not provided)'}"]
        if p.title:
            parts.append(f"Professional title: {p.title}")
        if p.location:
            parts.append(f"Location: {p.location}")
        if p.bio:
            parts += ["", "Bio:", p.bio.strip()]
        if p.skills:
            parts += ["", "Skills: " + ", ".join(p.skills)]

        contact = {"email": p.email, **p.social_links()}
        contact = {k: v for k, v in contact.items() if v}
        if contact:
            parts += ["", "## CONTACT"]
            parts += [f"- {k}: {v}" for k, v in contact.items()]

        if self.projects:
            parts += ["", f"## PROJECTS ({len(self.projects)})"]
            for i, proj in enumerate(self.projects, start=1):
                parts += ["", f"### Project {i}: {proj.title or 'Untitled'} (id: {proj.project_id})"]
                if proj.subtitle:
                    parts.append(f"Subtitle: {proj.subtitle}")
                if proj.category:
                    parts.append(f"Category: {proj.category}")
                if proj.tags:
                    parts.append("Tags: " + ", ".join(proj.tags))
                for label, value in (("Overview", proj.overview), ("Description", proj.description),
                                     ("Problem", proj.problem), ("Solution", proj.solution)):
                    if value:
                        parts.append(f"{label}: {value.strip()}")
                parts.append(
                    f"Images: {len(proj.final_images)} final, {len(proj.process_images)} process"
                )

        if self.design_request.strip():
            parts += ["", "## DESIGN REQUEST (from the user, follow closely)", self.design_request.strip()]

        return "\n".join(parts)
