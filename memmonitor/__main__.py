import sys

from memmonitor.monitor import main

sys.exit(main())
