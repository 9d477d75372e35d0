import sys

from myinvois_compliance.main import main

sys.exit(main())
