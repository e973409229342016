#!/usr/bin/env python3
"""
Teller Entry Point

Starts the interactive banking menu. Pass ``serve`` to run the HTTP API
instead.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from teller.cli import cli


if __name__ == "__main__":
    if len(sys.argv) == 1:
        sys.argv.append("run")
    cli()
