#!/usr/bin/env python3
"""
Simple wrapper script to run the sRGB composition verifier.

This lets users run the checks from a source checkout without needing
to worry about Python module paths.
"""

import sys
from pathlib import Path

# Add the parent directory to the path so we can import srgb_compose
sys.path.insert(0, str(Path(__file__).parent))

from srgb_compose import main

if __name__ == "__main__":
    main()
