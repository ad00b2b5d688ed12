"""TempShare: expiring, password-gated file sharing backend."""

__version__ = "1.0.0"
