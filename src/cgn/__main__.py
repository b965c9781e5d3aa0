"""Entry point for ``python -m cgn``."""

import sys

from cgn.cli import main

sys.exit(main())
