"""Tests for profile parsing and prompt formatting."""

from __future__ import annotations

from foliogen.profile import PortfolioProfile, ReferenceImage


def test_from_dict(profile):
    assert profile.personal.name == "Ada Park"
    assert profile.personal.skills[0] == "branding"
    assert profile.personal.social_links() == {
        "website": "https://ada.example.com",
        "instagram": "https://instagram.com/ada",
    }
    north, tide = profile.projects
    assert north.project_id == "p-north"
    assert north.image_count == 3
    assert tide.category == ""
    assert profile.layout_preset == "none"
    assert not profile.has_design_inputs


def test_comma_separated_fields_and_default_ids():
    profile = PortfolioProfile.from_dict({
        "personal": {"name": "Kim", "skills": "ux, research , ,ui"},
        "projects": [
            {"title": "A", "tags": "app, fintech", "final_images": ["", "https://x.example/a.png"]},
            {"project_id": "custom", "title": "B"},
        ],
    })
    assert profile.personal.skills == ["ux", "research", "ui"]
    assert profile.projects[0].project_id == "project_1"
    assert profile.projects[0].tags == ["app", "fintech"]
    assert profile.projects[0].final_images == ["https://x.example/a.png"]
    assert profile.projects[1].project_id == "custom"


def test_empty_mapping():
    profile = PortfolioProfile.from_dict({})
    assert profile.personal.name == ""
    assert profile.projects == []


def test_design_inputs():
    assert PortfolioProfile.from_dict({"layout_preset": "gallery-first"}).has_design_inputs
    assert PortfolioProfile.from_dict({"design_request": "dark and minimal"}).has_design_inputs
    assert not PortfolioProfile.from_dict({"design_request": "   "}).has_design_inputs


def test_prompt_block(profile_data):
    profile_data["design_request"] = "Dark background, big type"
    block = PortfolioProfile.from_dict(profile_data).to_prompt_block()

    assert "Name: Ada Park" in block
    assert "Professional title: Brand designer" in block
    assert "- email: ada@example.com" in block
    assert "## PROJECTS (2)" in block
    assert "### Project 1: North Coffee (id: p-north)" in block
    assert "Images: 2 final, 1 process" in block
    assert block.rstrip().endswith("Dark background, big type")


def test_prompt_block_without_data(empty_profile):
    block = empty_profile.to_prompt_block()
    assert "Name: (not provided)" in block
    assert "## PROJECTS" not in block


def test_reference_image_from_path(tmp_path, make_png):
    path = tmp_path / "mood.JPG"
    path.write_bytes(make_png())
    ref = ReferenceImage.from_path(path)
    assert ref.filename == "mood.JPG"
    assert ref.mime_type == "image/jpeg"
    assert ref.data == path.read_bytes()

    webp = tmp_path / "board.webp"
    webp.write_bytes(b"RIFF")
    assert ReferenceImage.from_path(webp).mime_type == "image/webp"
