class S3LogAggregatorError(Exception):
    """Base class for all errors raised by the aggregator."""


class InvalidConfiguration(S3LogAggregatorError, ValueError):
    """Raised before any I/O when range parameters, templates, or required options are unusable."""


class CacheDirectoryMissing(S3LogAggregatorError, FileNotFoundError):
    """Raised when the rendered cache root of a bucket does not exist; it is never created automatically."""


class DownloadFailed(S3LogAggregatorError):
    """Raised when the object store could not deliver an object after all attempts."""
