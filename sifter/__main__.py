import sys

from sifter.cli import main

sys.exit(main())
