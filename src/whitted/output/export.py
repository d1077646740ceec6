"""Image file input and output.

Rendered images are written as 8-bit RGB PNG files via Pillow. The same
library reads environment textures, in any format Pillow understands, as
(height, width, 3) uint8 arrays.

Example:
    >>> from whitted.core.integrator import render_image
    >>> from whitted.output.export import save_png
    >>>
    >>> image = render_image()
    >>> save_png(image, "out.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage
from PIL import UnidentifiedImageError


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an RGB image as a PNG file.

    Args:
        image: Image array of shape (H, W, 3) and dtype uint8. Row 0 is the
            top of the image.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Image must have dtype uint8, got {image.dtype}")

    pil_image = PILImage.fromarray(np.ascontiguousarray(image), mode="RGB")
    pil_image.save(str(filepath), format="PNG")


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load a PNG file written by save_png() as an (H, W, 3) uint8 array."""
    with PILImage.open(str(filepath)) as img:
        return np.asarray(img.convert("RGB"), dtype=np.uint8)


def load_environment_map(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load an equirectangular environment texture.

    Args:
        filepath: Path to the image file.

    Returns:
        The texture as an (H, W, 3) uint8 array, converted to RGB if necessary.

    Raises:
        FileNotFoundError: If the image file doesn't exist.
        ValueError: If the file is not a readable image.
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Environment map not found: {path}")

    try:
        with PILImage.open(path) as img:
            if img.mode != "RGB":
                img = img.convert("RGB")
            return np.array(img, dtype=np.uint8)
    except UnidentifiedImageError as e:
        raise ValueError(f"Unsupported environment map format: {path}") from e


def compute_rmse(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value in 8-bit units (0.0 for identical images).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
