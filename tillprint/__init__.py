"""tillprint: receipt printer discovery, connection and printing."""

__version__ = "1.0.0"
