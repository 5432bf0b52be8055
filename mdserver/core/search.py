"""
Loose substring search.

Text is compared after folding: compatibility decomposition (so full width
and ligature forms match their plain counterparts), removal of combining
marks (diacritics) and case folding. "cafe" therefore matches "Café" and
"CAFÉ".
"""
import logging
import unicodedata
from pathlib import Path

from .errors import ClientInputError

logger = logging.getLogger(__name__)

MIN_TERM_LENGTH = 3
SEARCH_READ_LIMIT = 1 << 20  # 1 MiB


def fold(text: str) -> str:
    decomposed = unicodedata.normalize('NFKD', text)
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


class SearchPattern:
    """A compiled search term. Immutable, safe to share."""

    __slots__ = ('term', '_folded')

    def __init__(self, term: str):
        self.term = term
        self._folded = fold(term)

    def matches(self, text: str) -> bool:
        # A term of combining marks only folds to nothing and matches no line
        if not self._folded:
            return False
        return self._folded in fold(text)

    def __repr__(self):
        return f"SearchPattern({self.term!r})"


def compile_pattern(term: str) -> SearchPattern:
    """Compile a search term; terms shorter than MIN_TERM_LENGTH characters are rejected."""
    if len(term) < MIN_TERM_LENGTH:
        raise ClientInputError("Search term is too short")
    return SearchPattern(term)


def match_file(pattern: SearchPattern, path: Path, limit: int = SEARCH_READ_LIMIT) -> bool:
    """
    Report whether any line within the first `limit` bytes of the file matches.
    Matches never span lines. Read errors count as no match.
    """
    try:
        with open(path, 'rb') as f:
            data = f.read(limit)
    except OSError as e:
        logger.debug(f"Search skipped unreadable file {path}: {e}")
        return False
    for line in data.splitlines():
        if pattern.matches(line.decode('utf-8', errors='replace')):
            return True
    return False
