"""Allow ``python -m acommit``."""

from acommit.cli.main import run

run()
