"""Image normalisation helpers.

All algorithms work on RGB images. Inputs may be ``uint8`` or ``uint16``
arrays, either ``H x W x 3`` or single-channel ``H x W``. Colour costs are
always evaluated in the 16-bit channel range, so 8-bit values are widened
the same way an 8-bit colour is promoted to 16 bits (``c * 257``).
"""

import cv2
import numpy as np


def image_size(image: np.ndarray) -> tuple[int, int]:
    """Return ``(width, height)`` of an image array."""
    return int(image.shape[1]), int(image.shape[0])


def to_rgb16(image: np.ndarray) -> np.ndarray:
    """Return an ``H x W x 3`` ``uint16`` copy of the image.

    Args:
        image: RGB or grayscale image, ``uint8`` or ``uint16``

    Returns:
        Image with channel intensities in ``[0, 65535]``

    Raises:
        ValueError: If the array shape or dtype is unsupported
    """
    image = np.asarray(image)

    if image.ndim == 2:
        image = np.repeat(image[:, :, np.newaxis], 3, axis=2)
    elif image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported image shape: {image.shape}")

    # Drop alpha
    image = image[:, :, :3]

    if image.dtype == np.uint8:
        return image.astype(np.uint16) * 257
    if image.dtype == np.uint16:
        return image.copy()
    raise ValueError(f"Unsupported image dtype: {image.dtype}")


def rgb16_to_rgb8(rgb16: np.ndarray) -> np.ndarray:
    """Drop the low byte of each 16-bit channel."""
    return (np.asarray(rgb16, dtype=np.uint16) >> 8).astype(np.uint8)


def to_gray8(image: np.ndarray) -> np.ndarray:
    """Convert any supported image to 8-bit grayscale for OpenCV."""
    rgb8 = rgb16_to_rgb8(to_rgb16(image))
    return cv2.cvtColor(rgb8, cv2.COLOR_RGB2GRAY)
