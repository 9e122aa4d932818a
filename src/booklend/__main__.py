"""Allow ``python -m booklend``."""

from .cli import app

app()
