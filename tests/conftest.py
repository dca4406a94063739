"""Shared pytest fixtures for foliogen tests."""

from __future__ import annotations

import io
from types import SimpleNamespace
from typing import Iterable
from unittest.mock import MagicMock

import pytest
from PIL import Image

from foliogen.config import Settings
from foliogen.profile import PortfolioProfile, ReferenceImage

# ============================================================================
# HTML snippets
# ============================================================================

HEAD = (
    '<!DOCTYPE html>\n<html lang="en">\n<head>\n<meta charset="UTF-8">\n'
    '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
    "<title>Ada Park - Portfolio</title>\n"
    "<style>:root { --ink: #111111; } body { font-family: Inter, sans-serif; color: #111111; "
    "background: #fafafa; display: grid; } @media (max-width: 768px) { body { display: block; } }</style>\n"
    "</head>\n"
)
BODY = (
    "<body>\n<header><nav><a href=\"#projects\">Work</a></nav></header>\n<main>\n"
    + "<section id=\"about\"><h1>Ada Park</h1><p>Brand designer</p></section>\n"
    + "<section id=\"projects\">" + "<p>Selected work for clients across the world.</p>" * 40
    + "</section>\n</main>\n"
)
TAIL = "<footer><p>Contact</p></footer>\n</body>\n</html>"


def html_document(body: str = BODY) -> str:
    return HEAD + body + TAIL


# ============================================================================
# Settings / client
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", retry_delay_seconds=0.0)


def fake_response(text: str) -> SimpleNamespace:
    return SimpleNamespace(text=text)


def mock_client(responses: Iterable) -> MagicMock:
    """A stand-in genai.Client whose generate_content yields `responses` in order.

    Exceptions in the sequence are raised instead of returned.
    """
    client = MagicMock()
    client.models.generate_content.side_effect = [
        r if isinstance(r, BaseException) else fake_response(r) for r in responses
    ]
    return client


# ============================================================================
# Images
# ============================================================================


def png_bytes(color=(200, 40, 40), size=(64, 64)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def red_image() -> ReferenceImage:
    return ReferenceImage(filename="bold-red.png", data=png_bytes((255, 0, 0)))


@pytest.fixture
def minimal_image() -> ReferenceImage:
    return ReferenceImage(filename="minimal_clean_poster.png", data=png_bytes((230, 230, 225)))


# ============================================================================
# Profiles
# ============================================================================


@pytest.fixture
def profile_data() -> dict:
    return {
        "personal": {
            "name": "Ada Park",
            "title": "Brand designer",
            "bio": "I design visual identities and branding systems for small studios "
                   "and cultural institutions, from logo to poster campaigns.",
            "skills": ["branding", "logo design", "typography", "art direction"],
            "email": "ada@example.com",
            "website": "https://ada.example.com",
            "instagram": "https://instagram.com/ada",
        },
        "projects": [
            {
                "id": "p-north",
                "title": "North Coffee",
                "overview": "A complete visual identity for a specialty coffee roaster, "
                            "including logo, packaging and signage across three locations.",
                "category": "Branding",
                "tags": ["identity", "packaging"],
                "final_images": ["https://cdn.example.com/north/final-1.jpg",
                                 "https://cdn.example.com/north/final-2.jpg"],
                "process_images": ["https://cdn.example.com/north/sketch.jpg"],
            },
            {
                "id": "p-tide",
                "title": "Tide Festival",
                "overview": "Poster series for a music festival.",
                "final_images": ["https://cdn.example.com/tide/poster.jpg"],
            },
        ],
    }


@pytest.fixture
def profile(profile_data) -> PortfolioProfile:
    return PortfolioProfile.from_dict(profile_data)


@pytest.fixture
def empty_profile() -> PortfolioProfile:
    return PortfolioProfile()


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def make_client():
    return mock_client


@pytest.fixture
def make_html():
    return html_document


@pytest.fixture
def make_png():
    return png_bytes
