"""Allow ``python -m xml_pathfinder.cli``."""

import sys

from .main import main

sys.exit(main())
