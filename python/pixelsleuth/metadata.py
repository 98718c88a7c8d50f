"""Metadata inspection: EXIF tags, container comments and image dimensions.

Real camera photos almost always carry some EXIF data. Images straight
out of a generator usually carry none, or carry the generation
parameters in a comment field.
"""
import io
import logging
from typing import Dict, List, Optional, Tuple

from PIL import ExifTags, Image

from .config import MetadataConfig
from .imaging import clamp_score
from .types import ModuleResult

logger = logging.getLogger(__name__)

EXIF_IFD_POINTER = 0x8769

COMMENT_TAGS = ("UserComment", "ImageDescription", "XPComment")
COMMENT_TEXT_KEYS = ("parameters", "Comment", "comment", "Description")

# Pillow info entries that hold binary payloads rather than text tags
_BINARY_INFO_KEYS = frozenset({
    "exif", "icc_profile", "xmp", "XML:com.adobe.xmp", "transparency", "photoshop",
})

# EXIF UserComment charset prefixes (8 bytes)
_CHARSET_PREFIXES = {
    b"ASCII\x00\x00\x00": "ascii",
    b"UNICODE\x00": "utf-16",
    b"JIS\x00\x00\x00\x00\x00": "shift_jis",
    b"\x00" * 8: "utf-8",
}


def _decode_text(value, name: str = "") -> str:
    """Best-effort conversion of a tag value to text.

    Windows ``XP*`` tags hold UTF-16LE; every other byte payload is read
    as UTF-8 with NUL padding stripped.
    """
    if name.startswith("XP") and isinstance(value, tuple):
        value = bytes(value)
    if isinstance(value, bytes):
        prefix = value[:8]
        if prefix in _CHARSET_PREFIXES:
            return value[8:].decode(_CHARSET_PREFIXES[prefix], errors="ignore").strip("\x00")
        if name.startswith("XP"):
            return value.decode("utf-16-le", errors="ignore").strip("\x00")
        return value.decode("utf-8", errors="ignore").strip("\x00")
    return str(value)


def extract_tags(data: bytes) -> Dict[str, str]:
    """Collect named tags from EXIF and container text chunks.

    Returns an empty mapping when the container carries nothing or
    cannot be parsed.
    """
    tags: Dict[str, str] = {}
    try:
        with Image.open(io.BytesIO(data)) as img:
            exif = img.getexif()
            for tag_id, value in exif.items():
                if tag_id == EXIF_IFD_POINTER:
                    continue
                name = ExifTags.TAGS.get(tag_id, str(tag_id))
                tags[name] = _decode_text(value, name)
            for tag_id, value in exif.get_ifd(EXIF_IFD_POINTER).items():
                name = ExifTags.TAGS.get(tag_id, str(tag_id))
                tags[name] = _decode_text(value, name)

            for key, value in img.info.items():
                if isinstance(value, (str, bytes)) and key not in _BINARY_INFO_KEYS:
                    tags.setdefault(key, _decode_text(value, key))
    except Exception as e:
        logger.debug(f"Tag extraction failed, treating as no metadata: {e}")
        return {}
    return tags


def _comment_text(tags: Dict[str, str]) -> str:
    parts = [tags[k] for k in COMMENT_TAGS + COMMENT_TEXT_KEYS if k in tags]
    return "\n".join(parts)


def _is_ai_resolution(width: int, height: int, resolutions: Tuple[Tuple[int, int], ...]) -> bool:
    return any(
        (width == w and height == h) or (width == w * 2 and height == h * 2)
        for w, h in resolutions
    )


def analyze_metadata(
    data: bytes,
    width: int,
    height: int,
    config: Optional[MetadataConfig] = None,
    tags: Optional[Dict[str, str]] = None,
) -> ModuleResult:
    """Score the file's embedded metadata.

    Args:
        data: Original file bytes.
        width: Decoded image width.
        height: Decoded image height.
        config: Thresholds; defaults to :class:`MetadataConfig`.
        tags: Pre-parsed tag map, skips extraction from ``data`` when given.

    Returns:
        ModuleResult without a visualization.
    """
    config = config or MetadataConfig()
    if tags is None:
        tags = extract_tags(data)

    score = 0.0
    notes: List[str] = []
    software = ""
    has_generation_params = False

    if tags:
        software = tags.get("Software", "")
        if software:
            notes.append(f"Software detected: {software}")
            if any(s in software for s in config.suspicious_software):
                score += config.software_penalty
                notes.append("Suspicious software signature found.")
        else:
            notes.append("No Software tag found.")

        comment = _comment_text(tags)
        if any(marker in comment for marker in config.generation_markers):
            has_generation_params = True
            score += config.generation_penalty
            notes.append("Generation parameters found in comment.")
    else:
        notes.append("No EXIF metadata found.")
        score += config.no_metadata_penalty

    suspicious_res = _is_ai_resolution(width, height, config.ai_resolutions)
    if suspicious_res:
        score += config.resolution_penalty
        notes.append(f"Suspicious resolution detected ({width}x{height}).")

    if width == height and width > config.square_min_side:
        score += config.square_penalty
        notes.append("Square aspect ratio (common in AI).")

    logger.debug("Metadata: %d tags, software=%r, raw score %.2f", len(tags), software, score)

    return ModuleResult(
        name="metadata",
        score=clamp_score(score),
        diagnostics={
            "exif_present": float(bool(tags)),
            "tag_count": float(len(tags)),
            "generation_parameters": float(has_generation_params),
            "suspicious_resolution": float(suspicious_res),
        },
        visualization=None,
        notes=notes,
    )
