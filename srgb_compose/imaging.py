"""
Pillow helpers built on the vectorized compositor.

These are for looking at the formula rather than checking it:

- compose_planes() composes three single-channel images pixel by pixel,
  the same job the decoder does for one channel of a row.
- render_ramp() draws the whole (alpha, background) plane for one
  foreground value, which makes clamped areas easy to spot.
"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .compositor import compose_array
from .constants import SAMPLE_MIN, SAMPLE_MAX, RAMP_FOREGROUND


def _plane(img: Image.Image, name: str) -> np.ndarray:
    if img.mode != "L":
        raise ValueError(f"{name} must be a single-channel 'L' image, got mode {img.mode!r}")
    return np.asarray(img, dtype=np.uint8)


def compose_planes(
    foreground: Image.Image,
    alpha: Image.Image,
    background: Image.Image
) -> Image.Image:
    """
    Compose three same-sized 8-bit single-channel images.

    Args:
        foreground: Premultiplied foreground samples ('L' mode)
        alpha: Alpha samples ('L' mode)
        background: Background samples ('L' mode)

    Returns:
        New 'L' image with the composed samples

    Raises:
        ValueError: If a plane is not 'L' mode or the sizes differ
    """
    if not foreground.size == alpha.size == background.size:
        raise ValueError(
            f"Plane sizes differ: foreground {foreground.size}, "
            f"alpha {alpha.size}, background {background.size}"
        )

    out = compose_array(
        _plane(foreground, "foreground"),
        _plane(alpha, "alpha"),
        _plane(background, "background")
    )
    return Image.fromarray(out)


def render_ramp(foreground: int = RAMP_FOREGROUND) -> Image.Image:
    """
    Render compose(foreground, alpha, background) for every alpha and background.

    Row y is alpha = y, column x is background = x, so the image is
    256x256. Row 0 reproduces the background ramp and row 255 is flat at
    `foreground`. For large foregrounds the low-alpha rows saturate to
    white where the clamp kicks in.

    Args:
        foreground: Foreground sample to hold fixed (0-255)

    Returns:
        256x256 'L' image
    """
    if isinstance(foreground, bool) or not isinstance(foreground, (int, np.integer)):
        raise TypeError(f"foreground must be an integer sample, got {foreground!r}")
    if not SAMPLE_MIN <= foreground <= SAMPLE_MAX:
        raise ValueError(f"foreground must be in [{SAMPLE_MIN}, {SAMPLE_MAX}], got {foreground}")

    alphas = np.arange(SAMPLE_MIN, SAMPLE_MAX + 1, dtype=np.int32).reshape(-1, 1)
    backgrounds = np.arange(SAMPLE_MIN, SAMPLE_MAX + 1, dtype=np.int32).reshape(1, -1)
    out = compose_array(foreground, alphas, backgrounds)
    return Image.fromarray(out)


def save_ramp(path: Union[str, Path], foreground: int = RAMP_FOREGROUND) -> str:
    """
    Render the ramp and save it as PNG.

    Returns:
        The path written, as a string
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    render_ramp(foreground).save(path, format="PNG")
    return str(path)
