import sys

from jwt_revocation.cli import main

sys.exit(main())
