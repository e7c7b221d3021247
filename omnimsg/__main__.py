"""Allow running the messenger with ``python -m omnimsg``."""

import sys

from omnimsg.client.main import main

sys.exit(main())
