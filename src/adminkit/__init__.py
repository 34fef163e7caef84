"""adminkit - admin panel backend with queued CSV imports."""

__version__ = "0.1.0"
