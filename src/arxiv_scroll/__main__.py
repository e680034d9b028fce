"""Allow running as ``python -m arxiv_scroll``."""

import sys

from arxiv_scroll.cli import main

if __name__ == "__main__":
    sys.exit(main())
