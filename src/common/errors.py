"""Error taxonomy for JDK acquisition.

Every failure in the acquisition path is an ``AcquisitionError``. The
orchestrator enriches errors with the descriptor that was being resolved so
the final message can point the user at the setting that is most likely
wrong.
"""
from __future__ import annotations

from typing import Optional

from constants import Constants


class AcquisitionError(Exception):
    """Base class for all acquisition failures."""

    def __init__(
        self,
        message: str,
        *,
        distribution: Optional[str] = None,
        version: Optional[str] = None,
        java_version: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.distribution = distribution
        self.version = version
        self.java_version = java_version

    def add_context(self, descriptor) -> "AcquisitionError":
        """Attach descriptor details without overwriting what is already known."""
        if self.distribution is None:
            self.distribution = descriptor.distribution.value
        if self.version is None:
            self.version = descriptor.version
        if self.java_version is None:
            self.java_version = descriptor.java_version
        return self

    def hint(self) -> str:
        """Human-readable suggestion appended to the message."""
        return ""

    def __str__(self) -> str:
        hint = self.hint()
        return f"{self.message} {hint}" if hint else self.message


class InvalidVersionFormat(AcquisitionError):
    """The version string has no recognizable numeric prefix."""

    def hint(self) -> str:
        return Constants.ERROR_HINT


class VersionNotFound(AcquisitionError):
    """No release matches the requested version."""


class AmbiguousVersion(AcquisitionError):
    """More than one candidate artifact matched the request."""

    def hint(self) -> str:
        return Constants.ERROR_HINT


class UpstreamUnavailable(AcquisitionError):
    """An upstream API was unreachable or returned unusable data."""


class AuthRejected(AcquisitionError):
    """The download service rejected the provided credentials (HTTP 401)."""

    def __init__(self, message: str, *, request_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.request_id = request_id


class NotFound(AcquisitionError):
    """The artifact download returned HTTP 404."""

    def __init__(self, file_name: str, **kwargs):
        super().__init__(f"Failed to download {file_name}.", **kwargs)
        self.file_name = file_name

    def hint(self) -> str:
        if self.version is None:
            return ""
        if self.java_version:
            return (
                f"Are you sure version: '{self.version}' and "
                f"java-version: '{self.java_version}' are correct?"
            )
        return f"Are you sure java-version: '{self.version}' is correct?"


class ChecksumMismatch(AcquisitionError):
    """The downloaded file does not match the published SHA-256."""

    def __init__(self, expected: str, actual: str, **kwargs):
        super().__init__(
            f'Checksum does not match (expected: "{expected}", got: "{actual}")', **kwargs
        )
        self.expected = expected
        self.actual = actual


class DownloadFailed(AcquisitionError):
    """The download failed for a reason other than 401/404, after retries."""

    def __init__(self, message: str, *, status: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status


class UnsupportedArchiveFormat(AcquisitionError):
    """The archive format is neither tar.gz nor zip."""


class UnexpectedArchiveLayout(AcquisitionError):
    """The extracted archive does not contain exactly one top-level entry."""

    def hint(self) -> str:
        return Constants.ERROR_REQUEST
