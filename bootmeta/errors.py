"""Errors raised while fetching instance metadata.

Every failure surfaces as a single MetadataError subclass. Absent keys are
not errors: they come back as None from the fetch primitives.
"""

from __future__ import annotations


class MetadataError(Exception):
    """Base class for all metadata fetch failures."""


class TransportExhausted(MetadataError):
    """All retry attempts against a metadata URL failed.

    Attributes:
        url: The URL that was being fetched.
        attempts: Number of attempts made.
        cause: The last underlying exception (network error or 5xx).
    """

    def __init__(self, url: str, attempts: int, cause: BaseException | None) -> None:
        self.url = url
        self.attempts = attempts
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"GET {self.url} failed after {self.attempts} attempts: {self.cause}"


class UnexpectedStatus(MetadataError):
    """The metadata service answered with a status that is neither
    present (2xx), absent (404) nor transient (5xx)."""

    def __init__(self, url: str, status: int) -> None:
        self.url = url
        self.status = status
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"GET {self.url} returned unexpected status {self.status}"


class ParseError(MetadataError):
    """A fetched value could not be interpreted.

    Attributes:
        what: What the value was expected to be ("IPv4 address", ...).
        value: The raw value that failed to parse.
        key: The metadata key the value came from, when known.
    """

    def __init__(self, what: str, value: object, key: str | None = None) -> None:
        self.what = what
        self.value = value
        self.key = key
        super().__init__(str(self))

    def __str__(self) -> str:
        msg = f"could not parse {self.value!r} as {self.what}"
        if self.key is not None:
            msg += f" (key {self.key!r})"
        return msg

    def with_key(self, key: str) -> ParseError:
        return ParseError(self.what, self.value, key=key)


class UnknownProviderError(MetadataError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"unknown provider {self.name!r}"
