"""Allow ``python -m bigcommerce_client``."""

import sys

from .cli import main

sys.exit(main())
