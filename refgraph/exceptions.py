"""
Custom exceptions for the refgraph engines.
"""


class RefgraphError(Exception):
    """Base exception for refgraph errors."""

    pass


class MetadataFetchError(RefgraphError):
    """Raised when metadata for a candidate publication cannot be loaded."""

    pass


class MetadataNotFoundError(MetadataFetchError):
    """Raised when a metadata source has no record for a DOI."""

    pass


class ConceptLimitError(RefgraphError, ValueError):
    """Raised when a formal context has too many attributes to enumerate."""

    pass
