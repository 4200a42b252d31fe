import sys

from quake_tracker.main import main

sys.exit(main())
