#!/usr/bin/env python3
"""
gitsemver - Main Entry Point

Computes the next semantic version of the git repository in the
current directory from its tags and conventional commit history.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from gitsemver.cli import main

if __name__ == "__main__":
    main()
