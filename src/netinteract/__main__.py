"""Allow ``python -m netinteract``."""

from netinteract.cli.app import app

app()
