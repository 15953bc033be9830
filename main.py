"""Build topic object models from a documentation enlistment."""

import logging
import sys

from topicsdk.run_tool import main

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    sys.exit(main())
