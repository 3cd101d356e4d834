import sys

from remoteaccessd.daemon import main

sys.exit(main())
