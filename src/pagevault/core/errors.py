"""
Error Taxonomy

Exceptions raised by the capture component and the index builder.
"""


class PageVaultError(Exception):
    """Base class for all pagevault errors."""


class InvalidInputError(PageVaultError, ValueError):
    """The capture target is not an absolute http(s) URL.

    Raised before any browser or filesystem activity takes place.
    """


class CaptureError(PageVaultError):
    """The browser could not be launched, or navigation did not yield a usable response.

    The archive is left untouched when this is raised.
    """


class NonFatalWarning(UserWarning):
    """Category for conditions that are logged while a capture carries on."""


class SkippedRecord(PageVaultError):
    """An archive directory that cannot take part in the latest view."""

    def __init__(self, location: str, reason: str):
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason
