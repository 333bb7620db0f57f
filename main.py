#!/usr/bin/env python3
"""bfstep Command Line Interface.

Run tape-language programs in batch or debug them interactively.

Usage:
    python main.py "++++++++[>++++++++<-]>+."
    python main.py --file programs/hello.bf --mode debug
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from bfstep.cli import main


if __name__ == "__main__":
    sys.exit(main())
