#!/usr/bin/env python3
"""
gitpark - Main Entry Point

Parks the VCS metadata of nested repositories in a sidecar archive
and restores it later.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from gitpark.cli import main

if __name__ == "__main__":
    main()
