"""Geometric heuristic separating logos from scanned pages."""

from __future__ import annotations

from dataclasses import dataclass

from .models import ImageClassification


@dataclass(frozen=True)
class ClassifierThresholds:
    """Pixel and aspect-ratio cut-offs used by :func:`classify_image`.

    The defaults were tuned empirically on invoices and forms; changing them
    changes which PDFs are sent as page images.
    """

    small_pixels: int = 100_000
    large_pixels: int = 300_000
    fallback_pixels: int = 200_000
    squareish_min_ratio: float = 0.5
    squareish_max_ratio: float = 2.0
    rectangular_wide_ratio: float = 1.2
    rectangular_tall_ratio: float = 0.8


DEFAULT_THRESHOLDS = ClassifierThresholds()


def classify_image(
    width: int,
    height: int,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> ImageClassification:
    """Classify an image as a logo or a scanned document from its size alone."""

    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    pixels = width * height
    ratio = width / height

    is_small = pixels < thresholds.small_pixels
    is_squareish = thresholds.squareish_min_ratio < ratio < thresholds.squareish_max_ratio
    is_large = pixels > thresholds.large_pixels
    is_rectangular = ratio > thresholds.rectangular_wide_ratio or ratio < thresholds.rectangular_tall_ratio

    if is_small and is_squareish:
        return ImageClassification.LOGO
    if is_large and is_rectangular:
        return ImageClassification.SCANNED_DOCUMENT
    if pixels < thresholds.fallback_pixels:
        return ImageClassification.LOGO
    return ImageClassification.SCANNED_DOCUMENT


__all__ = ["ClassifierThresholds", "DEFAULT_THRESHOLDS", "classify_image"]
