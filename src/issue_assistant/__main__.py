"""Allow running the assistant with ``python -m src.issue_assistant``."""

import sys

from .main import main

sys.exit(main())
