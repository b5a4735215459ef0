"""Exceptions raised by localscan."""


class LocalScanError(Exception):
    """Base class for all localscan errors."""


class ConfigurationError(LocalScanError):
    """Invalid scan settings. Fatal, reported before scanning starts."""


class InterfaceNotFoundError(LocalScanError):
    """No usable IPv4 interface could be found."""


class HistoryError(LocalScanError):
    """The previous scan could not be read."""
