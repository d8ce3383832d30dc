import sys

from gradebridge.cli import main

sys.exit(main())
