"""Allow ``python -m alfa_firefly``."""

import sys

from .runner.main import main

sys.exit(main())
