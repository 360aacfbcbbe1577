"""
sRGB-space alpha composition for palette images with transparency.

This is the blend a PNG decoder performs when a palette image carries a tRNS
chunk and gamma correction, and the caller asked for the result composed
onto a background in sRGB space (not linear space).

The foreground comes from the gamma-corrected palette and is premultiplied
against black, so the background only has to be scaled by the remaining
coverage and added on:

    result = foreground + ((255 - alpha) * background + 127) / 255

Well-formed palettes keep foreground <= alpha and the sum stays in range.
Malformed files break that invariant, so the sum is clamped to 255 after
the blend. Without the clamp the 8-bit store wraps around.
"""

import operator
from typing import Any

import numpy as np

from .constants import (
    SAMPLE_MIN,
    SAMPLE_MAX,
    ALPHA_TRANSPARENT,
    ALPHA_OPAQUE,
    ROUNDING_BIAS,
)


def _check_sample(value: Any, name: str) -> int:
    """
    Validate a single 8-bit sample.

    Args:
        value: Candidate sample (any integer type, including numpy integers)
        name: Argument name used in error messages

    Returns:
        The sample as a plain int

    Raises:
        TypeError: If value is not an integer (bools are rejected too)
        ValueError: If value is outside [0, 255]
    """
    # Plain ints are the hot path in the property sweeps
    if type(value) is int:
        sample = value
    else:
        if isinstance(value, (bool, np.bool_)):
            raise TypeError(f"{name} must be an integer sample, got {value!r}")
        try:
            sample = operator.index(value)
        except TypeError:
            raise TypeError(f"{name} must be an integer sample, got {value!r}") from None

    if not SAMPLE_MIN <= sample <= SAMPLE_MAX:
        raise ValueError(
            f"{name} must be in [{SAMPLE_MIN}, {SAMPLE_MAX}], got {sample}"
        )
    return sample


def compose(foreground: int, alpha: int, background: int) -> int:
    """
    Compose one foreground sample onto one background sample.

    Args:
        foreground: Gamma-corrected foreground, premultiplied against black
        alpha: Coverage of the foreground (0 = transparent, 255 = opaque)
        background: Background sample already in the output buffer

    Returns:
        The displayed sample, always in [0, 255]

    Raises:
        TypeError: If any argument is not an integer
        ValueError: If any argument is outside [0, 255]

    Example:
        >>> compose(128, 128, 128)
        192
        >>> compose(254, 1, 254)   # 254 + 253 saturates
        255
    """
    foreground = _check_sample(foreground, "foreground")
    alpha = _check_sample(alpha, "alpha")
    background = _check_sample(background, "background")

    if alpha == ALPHA_TRANSPARENT:
        return background
    if alpha == ALPHA_OPAQUE:
        return foreground

    result = foreground + (
        (SAMPLE_MAX - alpha) * background + ROUNDING_BIAS
    ) // SAMPLE_MAX
    if result > SAMPLE_MAX:
        result = SAMPLE_MAX
    return result


def _as_sample_array(values: Any, name: str) -> np.ndarray:
    """Convert to an int32 array, rejecting non-integer dtypes and out-of-range values."""
    arr = np.asarray(values)
    if arr.dtype == np.bool_ or not np.issubdtype(arr.dtype, np.integer):
        raise TypeError(f"{name} must be an integer array, got dtype {arr.dtype}")
    if arr.size and (arr.min() < SAMPLE_MIN or arr.max() > SAMPLE_MAX):
        raise ValueError(
            f"{name} values must be in [{SAMPLE_MIN}, {SAMPLE_MAX}], "
            f"got range [{arr.min()}, {arr.max()}]"
        )
    return arr.astype(np.int32)


def compose_array(
    foreground: Any,
    alpha: Any,
    background: Any,
    dtype: Any = np.uint8
) -> np.ndarray:
    """
    Vectorized compose() over broadcastable integer arrays.

    Same arithmetic as compose(), element by element. The decoder composes a
    whole row at a time, and this is the numpy equivalent of that loop.
    Arithmetic runs in int32 and is cast to `dtype` at the end. Pass
    dtype=np.int32 to see the value before the 8-bit store.

    Args:
        foreground: Foreground samples
        alpha: Alpha samples
        background: Background samples
        dtype: Output dtype (default: uint8)

    Returns:
        Array of composed samples with the broadcast shape of the inputs

    Raises:
        TypeError: If any input has a non-integer dtype
        ValueError: If any element is outside [0, 255]
    """
    fg = _as_sample_array(foreground, "foreground")
    a = _as_sample_array(alpha, "alpha")
    bg = _as_sample_array(background, "background")
    fg, a, bg = np.broadcast_arrays(fg, a, bg)

    blended = fg + ((SAMPLE_MAX - a) * bg + ROUNDING_BIAS) // SAMPLE_MAX
    np.minimum(blended, SAMPLE_MAX, out=blended)

    result = np.where(
        a == ALPHA_TRANSPARENT,
        bg,
        np.where(a == ALPHA_OPAQUE, fg, blended)
    )
    return result.astype(dtype)
