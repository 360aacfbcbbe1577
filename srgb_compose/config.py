"""
Configuration dataclass for the composition verifier.

This module defines VerifierConfig, which holds the sampling grids and
reporting switches for a verification run. Defaults reproduce the original
harness exactly; the CLI only overrides what the user asks for.
"""

from dataclasses import dataclass
from typing import Optional
from .constants import (
    SAMPLE_MAX,
    TRANSPARENCY_STRIDE,
    OPACITY_STRIDE,
    RANGE_BACKGROUND_STRIDE,
    MONOTONIC_STRIDE,
)


@dataclass
class VerifierConfig:
    """
    Configuration for a verification run.

    Attributes:
        transparency_stride: Foreground/background stride for P1 (alpha = 0)
        opacity_stride: Foreground/background stride for P2 (alpha = 255)
        range_background_stride: Background stride for P3 (foreground and
            alpha are always exhaustive)
        monotonic_stride: Foreground/alpha stride for P4 (background is
            always exhaustive)
        exhaustive: If True, also sweep P1-P4 over the full domain with the
            vectorized compositor and cross-check it against compose()
        show_passes: If False, PASS lines for individual vectors are not
            reported (failures always are)
        max_violation_lines: Cap on violation lines reported per property.
            None means report every one. Violations past the cap are still
            counted.
    """

    transparency_stride: int = TRANSPARENCY_STRIDE
    opacity_stride: int = OPACITY_STRIDE
    range_background_stride: int = RANGE_BACKGROUND_STRIDE
    monotonic_stride: int = MONOTONIC_STRIDE
    exhaustive: bool = False
    show_passes: bool = True
    max_violation_lines: Optional[int] = None

    def __post_init__(self):
        """Validate configuration parameters."""
        strides = {
            "transparency_stride": self.transparency_stride,
            "opacity_stride": self.opacity_stride,
            "range_background_stride": self.range_background_stride,
            "monotonic_stride": self.monotonic_stride,
        }
        for name, value in strides.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not 1 <= value <= SAMPLE_MAX:
                raise ValueError(f"{name} must be in [1, {SAMPLE_MAX}], got {value}")

        if self.max_violation_lines is not None and self.max_violation_lines < 0:
            raise ValueError(
                f"max_violation_lines must be non-negative, got {self.max_violation_lines}"
            )
