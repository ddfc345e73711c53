"""Formal concept models."""

from __future__ import annotations

import json
from typing import List

from pydantic import BaseModel, Field


def is_citation_attribute(attribute: str) -> bool:
    return attribute.startswith("10.")


class FormalConcept(BaseModel):
    """A closed (extent, intent) pair of the publication/attribute context."""

    extent: List[str] = Field(default_factory=list)
    intent: List[str] = Field(default_factory=list)

    @property
    def importance(self) -> int:
        return len(self.extent) * len(self.intent)

    @property
    def keywords(self) -> List[str]:
        return [attr for attr in self.intent if not is_citation_attribute(attr)]

    @property
    def citations(self) -> List[str]:
        return [attr for attr in self.intent if is_citation_attribute(attr)]

    def key(self) -> str:
        """Canonical serialization used for de-duplication and tie-breaking."""
        return json.dumps({"extent": sorted(self.extent), "intent": sorted(self.intent)})


class RankedConcept(FormalConcept):
    """A concept placed in the importance ranking, with its display name."""

    remaining_importance: int = 0
    name: str = ""
