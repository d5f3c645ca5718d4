"""Taxonomy structure detection from an image.

There is no computer-vision backend: any accepted image yields the built-in
taxonomy. The stage names are reported so callers can show what a real
pipeline would have done; nothing waits or runs in the background.
"""

import logging

from dikelab.models.taxonomy import DetectionResult
from dikelab.taxonomy.accessors import summarize
from dikelab.taxonomy.defaults import default_taxonomy

logger = logging.getLogger(__name__)

DETECTION_STAGES: tuple[str, ...] = (
    "Analyzing image",
    "Detecting nodes and connections",
    "Performing OCR on text elements",
    "Building mind map structure",
    "Calculating combinations",
)


def detect_structure(image_bytes: bytes, content_type: str) -> DetectionResult:
    """Return the detected taxonomy for an uploaded image.

    Raises:
        ValueError: If the upload is empty or not an image.
    """
    if not content_type.lower().startswith("image/"):
        msg = "Please select an image file (JPG, PNG, etc.)"
        raise ValueError(msg)
    if not image_bytes:
        msg = "Image content must not be empty."
        raise ValueError(msg)

    structure = default_taxonomy()
    summary = summarize(structure)
    logger.info(
        "Detected taxonomy with %d combinations from %d-byte image",
        summary.total_combinations,
        len(image_bytes),
    )
    return DetectionResult(
        structure=structure,
        summary=summary,
        stages=list(DETECTION_STAGES),
    )
