"""Tests for the metadata inspector."""

import io

import numpy as np
import pytest
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from pixelsleuth.config import MetadataConfig
from pixelsleuth.metadata import _decode_text, analyze_metadata, extract_tags


def _image(w: int, h: int) -> Image.Image:
    return Image.fromarray(np.full((h, w, 3), 90, dtype=np.uint8))


def _png(w: int = 100, h: int = 60, text: dict = None) -> bytes:
    info = None
    if text:
        info = PngInfo()
        for key, value in text.items():
            info.add_text(key, value)
    buf = io.BytesIO()
    _image(w, h).save(buf, format="PNG", pnginfo=info)
    return buf.getvalue()


def _jpeg_with_software(software: str, w: int = 100, h: int = 60) -> bytes:
    exif = Image.Exif()
    exif[0x0131] = software
    buf = io.BytesIO()
    _image(w, h).save(buf, format="JPEG", exif=exif.tobytes())
    return buf.getvalue()


class TestExtractTags:
    def test_plain_png_has_no_tags(self):
        assert extract_tags(_png()) == {}

    def test_png_text_chunks(self):
        tags = extract_tags(_png(text={"parameters": "seed: 1", "Software": "Foo"}))
        assert tags["parameters"] == "seed: 1"
        assert tags["Software"] == "Foo"

    def test_exif_software(self):
        tags = extract_tags(_jpeg_with_software("GIMP 2.10"))
        assert tags["Software"] == "GIMP 2.10"

    def test_garbage_returns_empty(self):
        assert extract_tags(b"not an image at all") == {}

    def test_user_comment_charset_prefix(self):
        assert _decode_text(b"ASCII\x00\x00\x00steps: 20") == "steps: 20"
        assert _decode_text("plain") == "plain"

    def test_nul_terminated_ascii_is_not_utf16(self):
        assert _decode_text(b"seed: 123\x00") == "seed: 123"
        assert _decode_text(b"ab\x00\x00", "comment") == "ab"

    def test_xp_tags_are_utf16(self):
        raw = "steps: 20".encode("utf-16-le") + b"\x00\x00"
        assert _decode_text(raw, "XPComment") == "steps: 20"
        assert _decode_text(tuple(raw), "XPComment") == "steps: 20"


class TestAnalyzeMetadata:
    def test_no_metadata_penalty(self):
        result = analyze_metadata(_png(), 100, 60)
        assert result.score == pytest.approx(0.3)
        assert result.diagnostics["exif_present"] == 0.0
        assert "No EXIF metadata found." in result.notes
        assert result.visualization is None

    def test_generation_seed_adds_exactly_point_eight(self):
        result = analyze_metadata(_png(text={"parameters": "seed: 12345"}), 100, 60)
        assert result.score == pytest.approx(0.8)
        assert result.diagnostics["generation_parameters"] == 1.0

    def test_jpeg_comment_markers(self):
        buf = io.BytesIO()
        _image(100, 60).save(buf, format="JPEG", comment=b"Steps: 30, cfg: 7")
        result = analyze_metadata(buf.getvalue(), 100, 60)
        # "Steps:" does not match case-sensitively, "cfg:" does
        assert result.score == pytest.approx(0.8)

    def test_nul_terminated_jpeg_comment(self):
        buf = io.BytesIO()
        _image(100, 60).save(buf, format="JPEG", comment=b"seed: 123\x00")
        result = analyze_metadata(buf.getvalue(), 100, 60)
        assert result.diagnostics["generation_parameters"] == 1.0
        assert "Generation parameters found in comment." in result.notes
        assert result.score == pytest.approx(0.8)

    def test_tags_without_software_are_not_penalized(self):
        result = analyze_metadata(_png(text={"Title": "holiday"}), 100, 60)
        assert result.score == 0.0
        assert "No Software tag found." in result.notes

    @pytest.mark.parametrize("software", ["GIMP 2.10", "Adobe Photoshop 25.0", "Stable Diffusion XL"])
    def test_suspicious_software(self, software):
        result = analyze_metadata(_jpeg_with_software(software), 100, 60)
        assert result.score == pytest.approx(0.4)
        assert f"Software detected: {software}" in result.notes

    def test_software_match_is_case_sensitive(self):
        result = analyze_metadata(_jpeg_with_software("gimp"), 100, 60)
        assert result.score == 0.0

    def test_benign_software(self):
        result = analyze_metadata(_jpeg_with_software("Camera Firmware 1.2"), 100, 60)
        assert result.score == 0.0

    def test_generator_resolution_and_square(self):
        result = analyze_metadata(b"", 512, 512, tags={})
        # no metadata + exact generator resolution + square
        assert result.score == pytest.approx(0.6)
        assert result.diagnostics["suspicious_resolution"] == 1.0

    def test_doubled_generator_resolution(self):
        result = analyze_metadata(b"", 1024, 1536, tags={})
        assert result.score == pytest.approx(0.5)

    def test_small_square_not_penalized(self):
        result = analyze_metadata(b"", 256, 256, tags={})
        assert result.score == pytest.approx(0.3)

    def test_clamped_at_one(self):
        tags = {"Software": "Midjourney v6", "UserComment": "steps: 50, seed: 1"}
        result = analyze_metadata(b"", 1024, 1024, tags=tags)
        assert result.score == 1.0

    def test_unreadable_bytes_treated_as_no_metadata(self):
        result = analyze_metadata(b"\x00\x01garbage", 100, 60)
        assert result.score == pytest.approx(0.3)

    def test_custom_config(self):
        config = MetadataConfig(no_metadata_penalty=0.0)
        assert analyze_metadata(b"", 100, 60, config=config, tags={}).score == 0.0
