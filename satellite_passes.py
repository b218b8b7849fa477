#!/usr/bin/env python3
"""
Satellite Pass Lookup - Main Script
Next ISS fly-overs for wherever this machine is.

This is the main script - just run: python satellite_passes.py
"""

import sys
import os

# Add current directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from satellite_passes_report import main

if __name__ == "__main__":
    print("🛰️  Satellite Pass Lookup")
    print("=" * 50)
    sys.exit(main())
