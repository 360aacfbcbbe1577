"""
Reference vectors for the sRGB composition formula.

Each vector is a literal (foreground, alpha, background) triple with the
expected output worked out by hand. The malformed cases come from the PoC
file palette-4-1.8-tRNS.png, whose palette entries have foreground > alpha
after gamma correction. Those entries overflowed the old linear-space path.
"""

from dataclasses import dataclass
from typing import Tuple

from .constants import BUFFER_INIT_SAMPLE


@dataclass(frozen=True)
class ReferenceVector:
    """
    One literal composition case.

    Attributes:
        foreground: Foreground sample (palette entry after gamma)
        alpha: Alpha sample (from tRNS)
        background: Background sample (from the output buffer)
        expected: Expected composed sample
        description: Human-readable label shown in PASS/FAIL lines
    """

    foreground: int
    alpha: int
    background: int
    expected: int
    description: str

    @property
    def inputs(self) -> Tuple[int, int, int]:
        return (self.foreground, self.alpha, self.background)


REFERENCE_VECTORS: Tuple[ReferenceVector, ...] = (
    # Fully transparent: background passes through
    ReferenceVector(0, 0, 255, 255, "transparent black on white: background only"),
    ReferenceVector(255, 0, 0, 0, "transparent white on black: background only"),
    ReferenceVector(100, 0, 200, 200, "transparent on gray: background only"),
    ReferenceVector(123, 0, 45, 45, "transparent: foreground ignored"),

    # Fully opaque: foreground passes through
    ReferenceVector(255, 255, 0, 255, "opaque white on black: foreground only"),
    ReferenceVector(0, 255, 255, 0, "opaque black on white: foreground only"),
    ReferenceVector(100, 255, 200, 100, "opaque on gray: foreground only"),

    # Mid-alpha blends
    ReferenceVector(128, 128, 128, 192, "50% gray on gray: 128 + (127*128+127)/255 = 192"),
    ReferenceVector(0, 128, 255, 127, "50% black on white: 0 + (127*255+127)/255 = 127"),
    ReferenceVector(255, 128, 0, 255, "50% white on black: 255 + 0 = 255"),
    ReferenceVector(100, 128, 200, 200, "50% blend: 100 + (127*200+127)/255 = 200"),

    # PoC palette entries with foreground > alpha
    ReferenceVector(134, 118, 73, 173, "PoC case 1: fg > alpha"),
    ReferenceVector(194, 140, 73, 227, "PoC case 2: fg > alpha"),
    ReferenceVector(249, 242, 73, 253, "PoC case 3: fg > alpha"),

    # Raw sum exceeds 255 and must saturate
    ReferenceVector(255, 1, 255, 255, "near-transparent white on white: clamp"),
    ReferenceVector(200, 50, 200, 255, "overflow case: 200 + 161 = 361 -> 255"),
    ReferenceVector(250, 10, 250, 255, "high values low alpha: clamp"),

    # Rounding of the background term
    ReferenceVector(0, 254, 255, 1, "nearly opaque: (1*255+127)/255 = 1"),
    ReferenceVector(0, 253, 255, 2, "nearly opaque: (2*255+127)/255 = 2"),
    ReferenceVector(0, 1, 1, 1, "nearly transparent low bg: (254*1+127)/255 = 1"),

    # Default buffer contents (BUFFER_INIT8)
    ReferenceVector(50, 0, BUFFER_INIT_SAMPLE, BUFFER_INIT_SAMPLE,
                    "fully transparent on default buffer: buffer unchanged"),
    ReferenceVector(0, 128, BUFFER_INIT_SAMPLE, 36, "half-covered black on default buffer"),
    ReferenceVector(128, 64, BUFFER_INIT_SAMPLE, 183, "partial on default buffer"),

    # Largest possible blend inputs
    ReferenceVector(254, 1, 254, 255, "max non-overflow: 254 + 253 = 507 -> 255"),
    ReferenceVector(1, 254, 1, 1, "min result with alpha: 1 + 0 = 1"),
)
