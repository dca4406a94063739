"""
assets.py — Resolve placeholder tokens in generated HTML into real assets.

The model writes short symbolic tokens (`project_1_final_1`,
`[PROJECT_2_OVERVIEW]`, ...) instead of long CDN URLs. This module

  1. builds a read-only AssetCatalog from the user's project data,
  2. derives a ReplacementMap (token → URL or text) before touching the text,
  3. applies it in ONE regex pass; URLs already in the text are matched and
     skipped, so a resolved URL is never rewritten again,
  4. runs a safety pass for leftover placeholders, local upload paths and
     nested-URL corruption,
  5. neutralises navigation that would escape the preview iframe.

Running the resolver on its own output is a no-op.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import logging

from .errors import AssetResolutionMismatch
from .profile import PortfolioProfile

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────────────────

FALLBACK_IMAGE = (
    "data:image/svg+xml,%3Csvg%20xmlns=%27http://www.w3.org/2000/svg%27%20width=%27400%27"
    "%20height=%27300%27%20viewBox=%270%200%20400%20300%27%3E%3Crect%20fill=%27%23f0f0f0%27"
    "%20width=%27400%27%20height=%27300%27/%3E%3Ctext%20fill=%27%23999%27%20x=%2750%25%27"
    "%20y=%2750%25%27%20text-anchor=%27middle%27%20dy=%27.3em%27%3EProject%20Image"
    "%3C/text%3E%3C/svg%3E"
)
DEFAULT_OVERVIEW = "This project showcases creative work and innovative solutions."
DEFAULT_CATEGORY = "Creative Work"
DEFAULT_TAGS = ("design", "creative")
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "gif")
IMAGE_KINDS = ("final", "process")

URL_CHARS = r"[^\s\"'<>()]+"
URL_RUN_RE = re.compile(rf"(?:https?://|data:){URL_CHARS}")
SCHEME_RE = re.compile(r"https?://")
PATH_PREFIX = r"(?<![\w./:-])(?P<prefix>(?:\.{0,2}/)?(?:[\w-]+/)*)"
# models like to tack a file extension onto slot tokens
EXT_SUFFIX = rf"(?:\.(?i:{'|'.join(IMAGE_EXTENSIONS)}))?"

LEFTOVER_IMAGE_RE = re.compile(
    rf"(?P<url>(?:https?://|data:){URL_CHARS})"
    rf"|{PATH_PREFIX}(?P<path>"
    r"project_?\d+_(?:final|process)_?\d+"
    r"|(?:final|process)_\d+_\d+"
    rf"|(?:final|process)_\d+\.(?:{'|'.join(IMAGE_EXTENSIONS)})"
    r"|placeholder_(?:final|process)_\d+"
    r"|(?:FINAL|PROCESS)_IMAGE_\d+"
    rf"){EXT_SUFFIX}(?![\w-])"
    r"|(?P<bracket>\[(?:PROJECT_\d+_)?(?:FINAL|PROCESS)(?:_IMAGE)?_\d+\])"
)
LEFTOVER_TEXT_RE = re.compile(r"\[PROJECT_\d+_(?P<field>TITLE|SUBTITLE|OVERVIEW|CATEGORY|TAGS)\]")
LEFTOVER_TEXT_DEFAULTS = {
    "TITLE": "Selected Work",
    "SUBTITLE": "",
    "OVERVIEW": DEFAULT_OVERVIEW,
    "CATEGORY": DEFAULT_CATEGORY,
    "TAGS": "",
}
LOCAL_SRC_RE = re.compile(r"""src=(["'])(?:\.{0,2}/)?(?:uploads|temp)/[^"']*\1""", re.IGNORECASE)
GENERIC_ALT = 'alt="Project Image"'
GENERIC_ALT_FIX = 'alt="Creative project showcase"'

NAV_HREFS = {
    "/dashboard": "#projects",
    "/works": "#projects",
    "/projects": "#projects",
    "/portfolio": "#projects",
    "/about": "#about",
    "/contact": "#contact",
    "#dashboard": "#projects",
    "#works": "#projects",
}
NAV_HREF_RE = re.compile(
    r"""href=(["'])(%s)/?\1""" % "|".join(re.escape(h) for h in NAV_HREFS)
)
NAV_SCRIPT_RE = re.compile(
    r"\b(?:window\.location(?:\.href)?|location\.href)\s*=(?!=)[^;\n<]*;?"
)
# navigation is only rewritten where it can run: script bodies and on* handlers
SCRIPT_BLOCK_RE = re.compile(r"(<script\b[^>]*>)(.*?)(</script\s*>)", re.IGNORECASE | re.DOTALL)
START_TAG_RE = re.compile(r"""<[a-zA-Z][\w:-]*(?:"[^"]*"|'[^']*'|[^'">])*>""")
HANDLER_ATTR_RE = re.compile(r"""(\son[a-z]+\s*=\s*)(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE)
HEAD_OPEN_RE = re.compile(r"<head\b[^>]*>", re.IGNORECASE)
BASE_TAG = '<base target="_parent">'


# ── Catalog ──────────────────────────────────────────────────────────────────

def clean_url(url: str) -> str:
    """Trim surrounding whitespace. The URL itself is the caller's and is kept as given."""
    return (url or "").strip()


@dataclass(frozen=True)
class CatalogImage:
    url: str
    index: int          # 1-based slot within its kind


@dataclass(frozen=True)
class CatalogProject:
    project_id: str
    position: int       # 1-based order in the catalog
    title: str = ""
    subtitle: str = ""
    overview: str = ""
    category: str = ""
    tags: Tuple[str, ...] = ()
    final_images: Tuple[CatalogImage, ...] = ()
    process_images: Tuple[CatalogImage, ...] = ()

    def images(self, kind: str) -> Tuple[CatalogImage, ...]:
        return self.final_images if kind == "final" else self.process_images


class AssetCatalog:
    """Ordered, read-only index of a user's projects and their image URLs."""

    def __init__(self, projects: Sequence[CatalogProject]):
        self._projects: Tuple[CatalogProject, ...] = tuple(projects)
        self._by_id: Mapping[str, CatalogProject] = MappingProxyType(
            {p.project_id: p for p in self._projects}
        )

    @classmethod
    def from_profile(cls, profile: PortfolioProfile) -> "AssetCatalog":
        projects = []
        for pos, proj in enumerate(profile.projects, start=1):
            def images(urls: Sequence[str]) -> Tuple[CatalogImage, ...]:
                cleaned = [clean_url(u) for u in urls]
                return tuple(
                    CatalogImage(url=u, index=i)
                    for i, u in enumerate((u for u in cleaned if u), start=1)
                )

            projects.append(CatalogProject(
                project_id=proj.project_id,
                position=pos,
                title=proj.title,
                subtitle=proj.subtitle,
                overview=proj.overview or proj.description,
                category=proj.category,
                tags=tuple(proj.tags),
                final_images=images(proj.final_images),
                process_images=images(proj.process_images),
            ))
        return cls(projects)

    def __iter__(self) -> Iterator[CatalogProject]:
        return iter(self._projects)

    def __len__(self) -> int:
        return len(self._projects)

    def get(self, project_id: str) -> Optional[CatalogProject]:
        return self._by_id.get(project_id)

    @property
    def urls(self) -> List[str]:
        return [
            img.url
            for p in self._projects
            for kind in IMAGE_KINDS
            for img in p.images(kind)
        ]

    @property
    def image_count(self) -> int:
        return len(self.urls)


# ── Replacement map ──────────────────────────────────────────────────────────

def _specific_image_tokens(p: CatalogProject, kind: str, j: int) -> List[str]:
    i, K = p.position, kind.upper()
    return [
        f"project_{i}_{kind}_{j}",
        f"{kind}_{i}_{j}",
        f"project{i}_{kind}{j}",
        f"[PROJECT_{i}_{K}_IMAGE_{j}]",
    ]


def _id_image_tokens(p: CatalogProject, kind: str, j: int) -> List[str]:
    if not re.fullmatch(r"[A-Za-z0-9][\w-]*", p.project_id):
        return []
    return [f"{p.project_id}_{kind}_{j}"]


def _generic_image_tokens(kind: str, j: int) -> List[str]:
    K = kind.upper()
    return (
        [f"{kind}_{j}.{ext}" for ext in IMAGE_EXTENSIONS]
        + [f"placeholder_{kind}_{j}", f"{K}_IMAGE_{j}", f"[{K}_{j}]"]
    )


def _text_tokens(p: CatalogProject) -> Dict[str, str]:
    i = p.position
    tags = p.tags or DEFAULT_TAGS
    return {
        f"[PROJECT_{i}_TITLE]": html.escape(p.title or f"Project {i}"),
        f"[PROJECT_{i}_SUBTITLE]": html.escape(p.subtitle),
        f"[PROJECT_{i}_OVERVIEW]": html.escape(p.overview or DEFAULT_OVERVIEW),
        f"[PROJECT_{i}_CATEGORY]": html.escape(p.category or DEFAULT_CATEGORY),
        f"[PROJECT_{i}_TAGS]": "".join(f'<span class="tag">{html.escape(t)}</span>' for t in tags),
    }


class ReplacementMap:
    """token → value, fixed before any substitution; one value per token."""

    def __init__(self, catalog: AssetCatalog):
        values: Dict[str, str] = {}

        # Priority tiers: index-based beats id-based beats slot-only.
        for p in catalog:
            for kind in IMAGE_KINDS:
                for img in p.images(kind):
                    for tok in _specific_image_tokens(p, kind, img.index):
                        values.setdefault(tok, img.url)
            for tok, text in _text_tokens(p).items():
                values.setdefault(tok, text)
        for p in catalog:
            for kind in IMAGE_KINDS:
                for img in p.images(kind):
                    for tok in _id_image_tokens(p, kind, img.index):
                        values.setdefault(tok, img.url)
        for p in catalog:
            for kind in IMAGE_KINDS:
                for img in p.images(kind):
                    for tok in _generic_image_tokens(kind, img.index):
                        values.setdefault(tok, img.url)

        self._values: Mapping[str, str] = MappingProxyType(values)
        self.pattern = self._compile(values)

    @staticmethod
    def _compile(values: Mapping[str, str]) -> Optional[re.Pattern]:
        if not values:
            return None
        # longest first so project_1_final_10 wins over project_1_final_1
        ordered = sorted(values, key=len, reverse=True)
        path = [re.escape(t) for t in ordered if not t.startswith("[")]
        bracket = [re.escape(t) for t in ordered if t.startswith("[")]
        branches = [rf"(?P<url>(?:https?://|data:){URL_CHARS})"]
        if path:
            branches.append(rf"{PATH_PREFIX}(?P<path>{'|'.join(path)}){EXT_SUFFIX}(?![\w-])")
        if bracket:
            branches.append(rf"(?P<bracket>{'|'.join(bracket)})")
        return re.compile("|".join(branches))

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, token: str) -> bool:
        return token in self._values

    def __getitem__(self, token: str) -> str:
        return self._values[token]

    @property
    def tokens(self) -> List[str]:
        return list(self._values)

    def apply(self, text: str) -> Tuple[str, int]:
        if self.pattern is None:
            return text, 0
        count = 0

        def _sub(m: re.Match) -> str:
            nonlocal count
            if m.group("url") is not None:
                return m.group(0)
            groups = m.groupdict()
            token = groups.get("path") or groups.get("bracket")
            count += 1
            return self._values[token]

        return self.pattern.sub(_sub, text), count


# ── Safety pass ──────────────────────────────────────────────────────────────

def _nested_head(run: str, known: Sequence[str], known_set: frozenset) -> Optional[str]:
    """The catalog URL a corrupted run starts with, or None for an intact URL.

    A run is corrupted only when a known asset URL is immediately followed by
    another scheme. Query strings and proxy paths that merely contain a second
    scheme (share links, fetch CDNs) are left alone.
    """
    if run in known_set:
        return None
    for url in known:
        if run.startswith(url) and SCHEME_RE.match(run, len(url)):
            return url
    return None


def _known_urls(known_urls: Sequence[str]) -> Tuple[List[str], frozenset]:
    known_set = frozenset(u for u in known_urls if u)
    return sorted(known_set, key=len, reverse=True), known_set


def find_nested_urls(text: str, known_urls: Sequence[str]) -> List[str]:
    """URL runs where a catalog URL has another URL glued onto its end."""
    known, known_set = _known_urls(known_urls)
    return [
        m.group(0)
        for m in URL_RUN_RE.finditer(text)
        if _nested_head(m.group(0), known, known_set) is not None
    ]


def repair_nested_urls(text: str, known_urls: Sequence[str]) -> Tuple[str, List[str]]:
    known, known_set = _known_urls(known_urls)
    repaired: List[str] = []

    def _fix(m: re.Match) -> str:
        run = m.group(0)
        head = _nested_head(run, known, known_set)
        if head is None:
            return run
        repaired.append(run)
        return head

    return URL_RUN_RE.sub(_fix, text), repaired


def replace_leftovers(text: str) -> Tuple[str, List[str]]:
    leftovers: List[str] = []

    def _image(m: re.Match) -> str:
        if m.group("url") is not None:
            return m.group(0)
        leftovers.append(m.group("path") or m.group("bracket"))
        return FALLBACK_IMAGE

    def _text(m: re.Match) -> str:
        leftovers.append(m.group(0))
        return LEFTOVER_TEXT_DEFAULTS[m.group("field")]

    text = LEFTOVER_IMAGE_RE.sub(_image, text)
    text = LEFTOVER_TEXT_RE.sub(_text, text)

    def _local(m: re.Match) -> str:
        leftovers.append(m.group(0))
        return f"src={m.group(1)}{FALLBACK_IMAGE}{m.group(1)}"

    text = LOCAL_SRC_RE.sub(_local, text)
    return text.replace(GENERIC_ALT, GENERIC_ALT_FIX), leftovers


def _disable_navigation(code: str) -> str:
    return NAV_SCRIPT_RE.sub("/* navigation disabled */", code)


def _neutralize_handlers(tag: re.Match) -> str:
    def _attr(m: re.Match) -> str:
        if m.group(2) is not None:
            return f'{m.group(1)}"{_disable_navigation(m.group(2))}"'
        return f"{m.group(1)}'{_disable_navigation(m.group(3))}'"

    return HANDLER_ATTR_RE.sub(_attr, tag.group(0))


def neutralize_navigation(text: str) -> str:
    text = NAV_HREF_RE.sub(lambda m: f'href={m.group(1)}{NAV_HREFS[m.group(2)]}{m.group(1)}', text)
    text = SCRIPT_BLOCK_RE.sub(
        lambda m: m.group(1) + _disable_navigation(m.group(2)) + m.group(3), text
    )
    text = START_TAG_RE.sub(_neutralize_handlers, text)
    if "<base " not in text.lower():
        text = HEAD_OPEN_RE.sub(lambda m: m.group(0) + BASE_TAG, text, count=1)
    return text


# ── Resolver ─────────────────────────────────────────────────────────────────

@dataclass
class ResolutionResult:
    text: str
    replacements: int = 0
    unresolved: List[str] = field(default_factory=list)
    nested_urls_repaired: List[str] = field(default_factory=list)
    missing_overviews: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.replacements or self.unresolved or self.nested_urls_repaired)


class AssetResolver:
    """Stateless between calls; the catalog and map are read-only."""

    def __init__(self, catalog: AssetCatalog, neutralize_nav: bool = True):
        self.catalog = catalog
        self.replacements = ReplacementMap(catalog)
        self.neutralize_nav = neutralize_nav

    def resolve(self, text: str) -> ResolutionResult:
        resolved, count = self.replacements.apply(text)
        resolved, leftovers = replace_leftovers(resolved)
        resolved, nested = repair_nested_urls(resolved, self.catalog.urls)
        if self.neutralize_nav:
            resolved = neutralize_navigation(resolved)

        for token in leftovers:
            logger.warning(str(AssetResolutionMismatch(token)))
        for run in nested:
            logger.error(f"Nested URL corruption repaired: {run[:100]}...")

        missing = [
            p.title or p.project_id
            for p in self.catalog
            if p.overview and html.escape(p.overview[:50]) not in resolved
            and p.overview[:50] not in resolved
        ]
        logger.info(
            f"Resolved {count} placeholder(s), {len(leftovers)} fallback(s), "
            f"{len(nested)} nested URL repair(s)"
        )
        return ResolutionResult(
            text=resolved,
            replacements=count,
            unresolved=leftovers,
            nested_urls_repaired=nested,
            missing_overviews=missing,
        )
