import sys

from cbshell.framework import main

sys.exit(main())
