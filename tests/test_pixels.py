"""Tests for the local pixel heuristics."""

from __future__ import annotations

from PIL import Image

from foliogen.pixels import (
    DEFAULT_PALETTE,
    analyze_images,
    classify_brightness,
    classify_saturation,
    classify_temperature,
    extract_palette,
    guess_style,
    hex_to_rgb,
    mood_from_colors,
    rgb_to_hex,
)
from foliogen.profile import ReferenceImage


def test_hex_round_trip_handles_short_form():
    assert hex_to_rgb("#abc") == (0xAA, 0xBB, 0xCC)
    assert rgb_to_hex(255, 0, 16) == "#ff0010"
    assert rgb_to_hex(300, -5, 0) == "#ff0000"


def test_solid_color_palette_is_single_bucket():
    img = Image.new("RGB", (40, 40), (255, 0, 0))
    assert extract_palette(img) == ["#ff0000"]


def test_near_black_image_falls_back_to_default_palette():
    img = Image.new("RGB", (40, 40), (5, 5, 5))
    assert extract_palette(img) == DEFAULT_PALETTE


def test_palette_is_ordered_by_frequency():
    img = Image.new("RGB", (90, 90), (0, 0, 255))
    img.paste((255, 255, 0), (0, 0, 90, 20))     # small yellow band
    palette = extract_palette(img)
    assert palette[:2] == ["#0000ff", "#ffff00"]


def test_classifiers():
    assert classify_temperature(["#ff3300", "#ff6600", "#cc3300"]) == "warm"
    assert classify_temperature(["#0033ff", "#0066cc", "#003399"]) == "cool"
    assert classify_saturation(["#ff0000"]) == "high"
    assert classify_saturation(["#808080"]) == "low"
    assert classify_brightness(["#ffffff"]) == "high"
    assert classify_brightness(["#101010"]) == "low"
    assert classify_brightness([]) == "medium"


def test_guess_style_from_filename():
    assert guess_style("IMG_0042.jpg") == ("modern", 0.5)
    style, confidence = guess_style("minimal_clean_poster.png")
    assert style == "minimalist"
    assert confidence == 0.8
    style, _ = guess_style("retro-flyer.png")
    assert style == "vintage"


def test_mood_from_colors():
    assert mood_from_colors("warm", "high") == "energetic"
    assert mood_from_colors("cool", "low") == "sophisticated"
    assert mood_from_colors("neutral", "medium") == "professional"


def test_analyze_images_reads_and_combines(red_image, minimal_image):
    result = analyze_images([red_image, minimal_image])
    assert len(result.readings) == 2
    assert result.skipped == []
    visual = result.to_visual()
    assert visual.method == "pixel"
    assert 0 < visual.confidence <= 0.8
    assert 1 <= len(visual.color_palette) <= 6
    assert "#ff0000" in visual.color_palette


def test_unreadable_image_is_skipped_not_raised(red_image):
    broken = ReferenceImage(filename="broken.png", data=b"not an image")
    result = analyze_images([broken, red_image])
    assert result.skipped == ["broken.png"]
    assert len(result.readings) == 1


def test_no_readable_images_gives_no_visual():
    result = analyze_images([ReferenceImage(filename="x.png", data=b"")])
    assert result.to_visual() is None


def test_limit_caps_images_read(make_png):
    images = [ReferenceImage(filename=f"{i}.png", data=make_png()) for i in range(6)]
    assert len(analyze_images(images, limit=4).readings) == 4
