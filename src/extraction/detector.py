"""Media type detection for locally stored objects."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Optional

import filetype

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"

_SIGNATURES = {
    b"%PDF": "application/pdf",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"\xff\xd8\xff": "image/jpeg",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
    b"II*\x00": "image/tiff",
    b"MM\x00*": "image/tiff",
    b"BM": "image/bmp",
}


def _sniff(header: bytes) -> Optional[str]:
    for signature, mime in _SIGNATURES.items():
        if header.startswith(signature):
            return mime
    if header.startswith(b"RIFF") and header[8:12] == b"WEBP":
        return "image/webp"
    return None


def detect_media_type(data: bytes, name: str = "") -> str:
    """Detect a media type from magic bytes, falling back to the file name."""

    if data:
        try:
            kind = filetype.guess(data)
            if kind and kind.mime:
                return kind.mime.lower()
        except Exception as exc:  # pragma: no cover - defensive
            logger.debug("filetype.guess failed for %s: %s", name or "<bytes>", exc)

    sniffed = _sniff(data[:16])
    if sniffed:
        return sniffed

    if name:
        guessed, _ = mimetypes.guess_type(Path(name).name)
        if guessed:
            return guessed.lower()

    return DEFAULT_MEDIA_TYPE


__all__ = ["DEFAULT_MEDIA_TYPE", "detect_media_type"]
