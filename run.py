#!/usr/bin/env python3
"""Run the CaloriTrack API server."""

import sys
import os

# Add caloritrack to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from caloritrack.main import run

if __name__ == "__main__":
    run()
