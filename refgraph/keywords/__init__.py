from refgraph.keywords.matcher import (
    KeywordMatch,
    find_keyword_matches,
    matched_keyword_groups,
    normalize_boost_keyword_string,
    parse_boost_keywords,
)

__all__ = [
    "KeywordMatch",
    "find_keyword_matches",
    "matched_keyword_groups",
    "normalize_boost_keyword_string",
    "parse_boost_keywords",
]
