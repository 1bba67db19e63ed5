"""Run the CLI with ``python -m instant_ink``."""
import sys

from instant_ink.main import main

sys.exit(main())
