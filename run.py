#!/usr/bin/env python
"""
Development launcher for crexplorer (no install needed).

Usage:
    python run.py tree.json [--filter-a all_cre] [--no-show-all] [-v]

Same options as `python -m crexplorer_app`; see --help.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))


if __name__ == "__main__":
    # The entry point installs the crash-log hook itself
    from crexplorer_app.__main__ import main
    sys.exit(main(sys.argv[1:]))
