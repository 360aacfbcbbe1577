"""
Constants for the sRGB composition formula and its verifier.

Every magic number used by the compositor and the verification sweeps lives
here. The blend formula itself is fixed by the decoder it was taken from, so
only the sweep defaults are really meant to be tuned.
"""

__version__ = "1.0.0"

# ============================================================================
# Sample Range
# ============================================================================

# An 8-bit sample: foreground, alpha and background all share this range
SAMPLE_MIN = 0
SAMPLE_MAX = 255

# Alpha endpoints - these bypass the blend arithmetic entirely
ALPHA_TRANSPARENT = 0
ALPHA_OPAQUE = 255

# ============================================================================
# Blend Arithmetic
# ============================================================================

# Added to the background numerator before dividing by 255 so the background
# contribution rounds to nearest instead of rounding down
ROUNDING_BIAS = 127

# Value the decoder fills its output buffer with before composing
# (BUFFER_INIT8). A transparent pixel leaves this value behind.
BUFFER_INIT_SAMPLE = 73

# ============================================================================
# Property Sweep Defaults
# ============================================================================

# P1: stride over foreground and background with alpha = 0
TRANSPARENCY_STRIDE = 51

# P2: stride over foreground and background with alpha = 255
OPACITY_STRIDE = 51

# P3: foreground and alpha are swept exhaustively, background is sampled
# at this stride to keep the scalar run around one million calls
RANGE_BACKGROUND_STRIDE = 17

# P4: stride over foreground and over alpha in [1, 254]; background is
# always swept exhaustively since monotonicity is a neighbour relation
MONOTONIC_STRIDE = 51

# ============================================================================
# Diagnostics
# ============================================================================

# Foreground sample used for the diagnostic ramp image when none is given
RAMP_FOREGROUND = 128

# ============================================================================
# Failure Records
# ============================================================================

# The exhaustive sweeps can find millions of violations against a broken
# compositor. Only this many per property are kept as Failure records; the
# rest are still counted.
EXHAUSTIVE_FAILURE_RECORDS = 1000
