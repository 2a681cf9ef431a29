"""Run the lifecycle command-line tool: ``python -m proclifecycle``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
