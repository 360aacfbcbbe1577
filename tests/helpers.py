"""
Test helper utilities shared across the test modules.

Provides known-bad compositors (so tests can prove the harness catches
them), an event recorder for the verifier callback, and small image and
file helpers.
"""

import os
from typing import List, Tuple

import numpy as np
from PIL import Image


# =============================================================================
# Known-bad compositors
# =============================================================================

def unclamped_compose(foreground: int, alpha: int, background: int) -> int:
    """The blend without the final clamp: can return values above 255."""
    if alpha == 0:
        return background
    if alpha == 255:
        return foreground
    return foreground + ((255 - alpha) * background + 127) // 255


def wrapping_compose(foreground: int, alpha: int, background: int) -> int:
    """
    The pre-fix behaviour: the unclamped sum stored into an 8-bit byte.

    Always in range, but wraps to small values where it should saturate,
    which breaks background monotonicity.
    """
    return unclamped_compose(foreground, alpha, background) & 0xFF


def truncating_compose(foreground: int, alpha: int, background: int) -> int:
    """The blend with the background term rounded down instead of to nearest."""
    if alpha == 0:
        return background
    if alpha == 255:
        return foreground
    return min(foreground + (255 - alpha) * background // 255, 255)


def swapped_endpoints_compose(foreground: int, alpha: int, background: int) -> int:
    """Treats alpha = 0 as opaque and alpha = 255 as transparent."""
    if alpha == 0:
        return foreground
    if alpha == 255:
        return background
    return min(foreground + ((255 - alpha) * background + 127) // 255, 255)


def unclamped_compose_array(foreground, alpha, background, dtype=np.uint8) -> np.ndarray:
    """Vectorized unclamped_compose()."""
    fg, a, bg = np.broadcast_arrays(
        np.asarray(foreground, dtype=np.int32),
        np.asarray(alpha, dtype=np.int32),
        np.asarray(background, dtype=np.int32)
    )
    blended = fg + ((255 - a) * bg + 127) // 255
    return np.where(a == 0, bg, np.where(a == 255, fg, blended)).astype(dtype)


def wrapping_compose_array(foreground, alpha, background, dtype=np.uint8) -> np.ndarray:
    """Vectorized wrapping_compose()."""
    return (unclamped_compose_array(foreground, alpha, background, dtype=np.int32) & 0xFF).astype(dtype)


def swapped_endpoints_compose_array(foreground, alpha, background, dtype=np.uint8) -> np.ndarray:
    """Vectorized swapped_endpoints_compose()."""
    fg, a, bg = np.broadcast_arrays(
        np.asarray(foreground, dtype=np.int32),
        np.asarray(alpha, dtype=np.int32),
        np.asarray(background, dtype=np.int32)
    )
    blended = np.minimum(fg + ((255 - a) * bg + 127) // 255, 255)
    return np.where(a == 0, fg, np.where(a == 255, bg, blended)).astype(dtype)


# =============================================================================
# Verifier callback recorder
# =============================================================================

class EventRecorder:
    """Collects (event, message) pairs from the verifier callback."""

    def __init__(self):
        self.events: List[Tuple[str, str]] = []

    def __call__(self, event: str, message: str) -> None:
        self.events.append((event, message))

    def messages(self, event: str = None) -> List[str]:
        return [m for e, m in self.events if event is None or e == event]


# =============================================================================
# Images and files
# =============================================================================

def create_plane(width: int, height: int, value: int) -> Image.Image:
    """Create a solid single-channel 'L' image."""
    return Image.new("L", (width, height), value)


def create_plane_from_rows(rows: List[List[int]]) -> Image.Image:
    """Create an 'L' image from a list of rows of samples."""
    return Image.fromarray(np.array(rows, dtype=np.uint8))


def cleanup_test_file(filepath: str) -> None:
    """
    Remove a test file if it exists.

    Args:
        filepath: Path to file to remove
    """
    if filepath and os.path.exists(filepath):
        os.remove(filepath)
