"""Exception taxonomy for bundle collection."""


class BundleError(Exception):
    """Base class for all support bundle errors."""


class ConfigurationError(BundleError):
    """Raised for invalid settings or options, e.g. a call that requests nothing."""


class SourceError(BundleError):
    """Raised when a single log source fails; absorbed into diagnostics."""


class JournalNotAvailableError(SourceError):
    """Raised when the system journal or the application's unit does not exist on this host."""


class AssemblyError(BundleError):
    """Raised when the bundle archive cannot be written."""
