#!/usr/bin/env python3
"""
Subtitle Dispatcher - Main Application Entry Point
==================================================

Identifies the format of subtitle files and extracts their timed entries.
The file extension is only a hint: when the hinted parser rejects the
content, the other registered parsers are tried in turn.

Usage:
    python subdispatch.py parse movie.srt
    python subdispatch.py parse movie.sub --encoding cp1252 --json
    cat movie.vtt | python subdispatch.py parse -
    python subdispatch.py detect movie.srt episode.sub
    python subdispatch.py formats

    # Help
    python subdispatch.py --help
    python subdispatch.py <command> --help
"""

import sys
from pathlib import Path

# Add the current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from ui.cli import main


if __name__ == '__main__':
    sys.exit(main())
