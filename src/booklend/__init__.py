"""booklend - track books lent to others and remind owners when they are due."""

__version__ = "0.1.0"
