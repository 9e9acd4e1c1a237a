"""Entry point: python -m vibesh"""

import sys

from vibesh.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
