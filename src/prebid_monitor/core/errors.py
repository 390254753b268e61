# ABOUTME: Exception taxonomy shared by sourcing, execution, and persistence layers
# ABOUTME: Most of these are logged and absorbed; only setup failures abort a run


class ScanError(Exception):
    """Base exception for scan pipeline errors."""

    pass


class SourceError(ScanError):
    """Raised when a URL source cannot be read (missing file, unreachable repository, bad reference)."""

    pass


class VisitError(ScanError):
    """Raised when visiting or inspecting a single page fails."""

    pass


class InspectionError(VisitError):
    """Raised by a page inspector when the browser reports a failed crawl."""

    pass


class PersistenceError(ScanError):
    """Raised when writing results or error logs to disk fails."""

    pass


class ConfigurationError(ScanError):
    """Raised when a run has no usable URL source."""

    pass


class ExecutionSetupError(ScanError):
    """Raised when the browser context for a batch cannot be created."""

    pass
