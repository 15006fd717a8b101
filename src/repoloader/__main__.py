"""Allow ``python -m repoloader``."""

import sys

from repoloader.cli import main

if __name__ == "__main__":
	sys.exit(main())
