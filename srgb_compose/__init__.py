"""
sRGB Composition Verifier Package

The sRGB-space alpha composition formula used when decoding palette images
with transparency and gamma correction, plus the harness that checks its
rounding, clamping and boundary behaviour over the whole 8-bit domain.
"""

from .constants import __version__

# Make the CLI main function easily accessible
from .cli import main

# The formula itself
from .compositor import compose, compose_array

# Verification
from .config import VerifierConfig
from .vectors import ReferenceVector, REFERENCE_VECTORS
from .verifier import Failure, VerificationResult, run_verification

__all__ = [
    "__version__",
    "main",
    "compose",
    "compose_array",
    "VerifierConfig",
    "ReferenceVector",
    "REFERENCE_VECTORS",
    "Failure",
    "VerificationResult",
    "run_verification",
]
