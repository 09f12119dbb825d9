import sys

from discovery_filter.cli import main

sys.exit(main())
