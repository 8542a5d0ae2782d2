import sys

from gifascii.cli import main

sys.exit(main())
