"""Boost keyword parsing and title matching.

A keyword group is a set of alternatives joined by "|", e.g. "VIS|GRAPH".
Alternatives of three characters or fewer only match whole words ("VIS"
must not match "VISUAL"); longer alternatives match as substrings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional

SHORT_KEYWORD_MAX_LENGTH = 3


@dataclass(frozen=True)
class KeywordMatch:
    keyword: str  # the group that matched
    position: int
    length: int
    text: str  # the alternative that matched

    @property
    def end(self) -> int:
        return self.position + self.length

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and end > self.position


def normalize_boost_keyword_string(boost_keyword_string: str) -> str:
    value = re.sub(r"\s*,\s*", ", ", boost_keyword_string)
    value = re.sub(r"\s*\|\s*", "|", value)
    return value.upper()


def parse_boost_keywords(boost_keyword_string: Optional[str]) -> list[str]:
    """Split a comma-separated keyword string into unique upper-case groups."""
    if not boost_keyword_string:
        return []
    groups: list[str] = []
    for raw in normalize_boost_keyword_string(boost_keyword_string).split(","):
        group = raw.strip()
        if group and group not in groups:
            groups.append(group)
    return groups


@lru_cache(maxsize=1024)
def _alternative_pattern(alternative: str) -> re.Pattern[str]:
    escaped = re.escape(alternative)
    if len(alternative) <= SHORT_KEYWORD_MAX_LENGTH:
        return re.compile(rf"(?<!\w){escaped}(?!\w)", re.IGNORECASE)
    return re.compile(escaped, re.IGNORECASE)


def find_keyword_matches(title: Optional[str], keyword_groups: Iterable[str]) -> list[KeywordMatch]:
    """Return at most one match per group, never overlapping an earlier match.

    Groups are processed in order; within a group alternatives are tried in
    order and the first occurrence that does not overlap an existing match
    wins. The result is sorted by position in the original title.
    """
    if not title:
        return []

    matches: list[KeywordMatch] = []
    for group in keyword_groups:
        if not group:
            continue
        for alternative in group.split("|"):
            alternative = alternative.strip()
            if not alternative:
                continue
            found = None
            for m in _alternative_pattern(alternative).finditer(title):
                if not any(existing.overlaps(m.start(), m.end()) for existing in matches):
                    found = m
                    break
            if found is not None:
                matches.append(
                    KeywordMatch(
                        keyword=group,
                        position=found.start(),
                        length=found.end() - found.start(),
                        text=alternative,
                    )
                )
                break

    return sorted(matches, key=lambda match: match.position)


def matched_keyword_groups(title: Optional[str], keyword_groups: Iterable[str]) -> set[str]:
    return {match.keyword for match in find_keyword_matches(title, keyword_groups)}
