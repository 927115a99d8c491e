import sys

from xpq.cli import main

sys.exit(main())
