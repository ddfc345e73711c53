"""Configuration models loaded from YAML."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

FIRST_AUTHOR_BOOST = 2
NEW_PUBLICATION_BOOST = 2
LOAD_MORE_INCREMENT = 100
INITIAL_SUGGESTIONS_COUNT = 100


class ScoringConfig(BaseModel):
    first_author_boost: float = Field(gt=0, default=FIRST_AUTHOR_BOOST)
    new_publication_boost: float = Field(gt=0, default=NEW_PUBLICATION_BOOST)


class PaginationConfig(BaseModel):
    load_more_increment: int = Field(ge=0, default=LOAD_MORE_INCREMENT)
    initial_suggestions_count: int = Field(ge=0, default=INITIAL_SUGGESTIONS_COUNT)


class SuggestionConfig(BaseModel):
    shuffle_seed: int = 0
    fetch_concurrency: int = Field(ge=1, le=500, default=100, description="Upper bound on metadata fetches in flight.")
    fetch_attempts: int = Field(ge=1, le=10, default=2, description="Attempts per candidate before the fetch is reported as failed.")
    retry_wait_seconds: float = Field(ge=0.0, default=0.5)


class AuthorConfig(BaseModel):
    score_enabled: bool = True
    first_author_boost_enabled: bool = True
    new_boost_enabled: bool = True
    merge_eszett_variants: bool = True
    merge_abbreviated_names: bool = Field(
        default=False,
        description="Merge 'Last, F.' into a unique 'Last, First...' identity. Off by default: prone to false positives.",
    )


class ConceptConfig(BaseModel):
    include_citation_attributes: bool = True
    max_citation_attributes: int = Field(ge=0, default=10)
    max_attributes: int = Field(
        ge=1,
        le=30,
        default=20,
        description="Hard bound on context attributes; enumeration visits 2^k attribute subsets.",
    )


class LoggingConfig(BaseModel):
    level: Literal["minimal", "normal", "detailed", "full"] = "normal"
    log_to_file: bool = False
    log_file: str = "logs/refgraph.log"


class EngineSettings(BaseModel):
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    authors: AuthorConfig = Field(default_factory=AuthorConfig)
    concepts: ConceptConfig = Field(default_factory=ConceptConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
