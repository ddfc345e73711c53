"""Model exports shared by the engines."""

from refgraph.models.authors import AuthorAggregate
from refgraph.models.concepts import FormalConcept, RankedConcept
from refgraph.models.config import (
    AuthorConfig,
    ConceptConfig,
    EngineSettings,
    LoggingConfig,
    PaginationConfig,
    ScoringConfig,
    SuggestionConfig,
)
from refgraph.models.publications import PublicationMetadata, PublicationRecord, normalize_doi

__all__ = [
    "AuthorAggregate",
    "AuthorConfig",
    "ConceptConfig",
    "EngineSettings",
    "FormalConcept",
    "LoggingConfig",
    "PaginationConfig",
    "PublicationMetadata",
    "PublicationRecord",
    "RankedConcept",
    "ScoringConfig",
    "SuggestionConfig",
    "normalize_doi",
]
