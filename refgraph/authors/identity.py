"""Author name folding, ORCID extraction and transcription variants."""

from __future__ import annotations

import re
import unicodedata
from typing import List, Optional

ORCID_PATTERN = re.compile(r"\d{4}-\d{4}-\d{4}-\d{3}[0-9Xx]")
_ORCID_SUFFIX = re.compile(r",?\s*\d{4}-\d{4}-\d{4}-\d{3}[0-9Xx]")
_WHITESPACE = re.compile(r"\s+")

# Distinct base letters that NFD decomposition leaves untouched.
_LETTER_FOLDS = {
    "ø": "o",
    "Ø": "o",
    "å": "a",
    "Å": "a",
    "æ": "ae",
    "Æ": "ae",
    "ð": "d",
    "Ð": "d",
    "þ": "th",
    "Þ": "th",
    "ß": "ss",
    "ẞ": "ss",
}
_FOLD_TABLE = str.maketrans(_LETTER_FOLDS)

_ABBREVIATED_ID = re.compile(r"^(\w+,\s\w)\.?(\s\w\.?)?$")


def name_to_id(name: str) -> str:
    """Fold an author name to its merge key.

    "Weiß, Hans" and "Weiss, Hans" both become "weiss, hans"; "Øster, Åse"
    becomes "oster, ase".
    """
    decomposed = unicodedata.normalize("NFD", name)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    folded = stripped.translate(_FOLD_TABLE).lower()
    return _WHITESPACE.sub(" ", folded).strip()


def extract_orcid(author_string: str) -> Optional[str]:
    match = ORCID_PATTERN.search(author_string)
    return match.group(0).upper() if match else None


def strip_orcid(author_string: str) -> str:
    """Remove embedded ORCID tokens (and their leading comma) from a display name."""
    return _ORCID_SUFFIX.sub("", author_string).strip()


def split_author_field(raw: Optional[str]) -> List[str]:
    """Split a "Last, First; Last2, First2" field into trimmed, non-empty entries."""
    if not raw:
        return []
    return [entry.strip() for entry in raw.split(";") if entry.strip()]


def split_name_id(name_id: str) -> tuple[str, str]:
    """Split a name id into surname and the remainder (starting at the first comma)."""
    surname, comma, rest = name_id.partition(",")
    return surname.strip(), comma + rest


def eszett_variants(name_id: str) -> set[str]:
    """Surname spellings an Eszett may have been transcribed to.

    "weiss, hans" yields {"weiss, hans", "weis, hans"}; "weis, hans" yields
    {"weis, hans", "weiss, hans"}. Given names are never rewritten, so two ids
    can only share a variant when their given-name parts are equal.
    """
    surname, rest = split_name_id(name_id)
    variants = {name_id}
    if "ss" in surname:
        variants.add(surname.replace("ss", "s") + rest)
    elif len(surname) > 3 and surname.count("s") == 1:
        variants.add(surname.replace("s", "ss") + rest)
    return variants


def is_abbreviated_id(name_id: str) -> bool:
    """True for ids shaped like "last, f." or "last, f. m."."""
    return _ABBREVIATED_ID.match(name_id) is not None


def abbreviation_prefix(name_id: str) -> str:
    """Reduce "last, f. m." to "last, f"; other ids are returned unchanged."""
    return _ABBREVIATED_ID.sub(r"\1", name_id)


def initials_of(name: str) -> str:
    return "".join(word[0] for word in name.split(" ") if word)
