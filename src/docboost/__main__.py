"""Allow ``python -m docboost``."""

import sys

from docboost.cli import main

if __name__ == "__main__":
    sys.exit(main())
