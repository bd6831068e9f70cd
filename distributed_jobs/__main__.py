import sys

from distributed_jobs.cli import main

sys.exit(main())
