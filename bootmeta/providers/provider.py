from typing import Protocol, Self, runtime_checkable

from bootmeta.types import Metadata


@runtime_checkable
class MetadataProvider(Protocol):
    """Fetches and normalizes one cloud's instance metadata.

    Implementations hold only immutable configuration and a Retry Client.
    They may be reused for sequential fetches, but not from several threads
    at once.
    """

    def fetch_metadata(self) -> Metadata:
        """Fetch every key the provider knows and assemble a Metadata record.

        Absent keys are omitted from the record. Any other failure aborts
        the whole fetch; no partial record is ever returned.

        Returns
        -------
        Metadata
            Fully populated, immutable metadata record.

        Raises
        ------
        TransportExhausted
            The metadata service stayed unreachable or kept failing.
        ParseError
            A value could not be interpreted.
        """
        ...

    def close(self) -> None:
        """Release the HTTP session."""
        ...

    def __enter__(self) -> Self: ...

    def __exit__(self, *_: object) -> None: ...
