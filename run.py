#!/usr/bin/env python3
"""
adsb2loki startup script
Runs the forwarder without installing the package
"""

import sys
from pathlib import Path

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from adsb2loki.cli import main


if __name__ == "__main__":
    main()
