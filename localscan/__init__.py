"""Local network host discovery."""

__version__ = "0.1.0"
