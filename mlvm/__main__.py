import sys

from mlvm.main import main

sys.exit(main())
