import sys

from bitbucket_enforcer.cli import main

sys.exit(main())
