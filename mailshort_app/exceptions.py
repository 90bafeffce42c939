"""
Errors raised by the rewrite pipeline.

Validation errors are reported before any work is done. JobCreationError is
fatal to the request. Per-URL allocation failures are not exceptions: they
come back as values in the rewrite result.
"""


class RewriteError(Exception):
    """Base class for rewrite pipeline errors"""


class EmptyDocumentError(RewriteError):
    """The submitted document is empty or whitespace only"""

    def __init__(self, message: str = "No HTML provided"):
        super().__init__(message)
        self.message = message


class DocumentTooLargeError(RewriteError):
    """The submitted document exceeds the configured upload cap"""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        self.message = f"Upload too large. Max {limit // (1024 * 1024)} MiB."
        super().__init__(self.message)


class RetryTargetRejectedError(RewriteError):
    """A retry was requested for a URL that is not eligible for shortening"""

    def __init__(self, url: str):
        self.url = url
        self.message = f"URL is not eligible for shortening: {url}"
        super().__init__(self.message)


class JobCreationError(RewriteError):
    """The store could not record the job; the rewrite cannot proceed"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
