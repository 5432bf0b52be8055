import logging
import os
from pathlib import Path
from typing import List, NamedTuple, Optional

from .errors import EnumerationError
from .search import SearchPattern, match_file
from .titles import MD_SUFFIX, file_title, name_to_title

logger = logging.getLogger(__name__)


class IndexRecord(NamedTuple):
    title: str
    file: str  # base name, safe to use as a relative link


def list_documents(root: Path) -> List[str]:
    """
    Names of the markdown files directly inside root, sorted by name.
    Raises EnumerationError when the directory cannot be listed.
    """
    try:
        with os.scandir(root) as entries:
            names = [
                entry.name for entry in entries
                if entry.name.endswith(MD_SUFFIX) and entry.is_file()
            ]
    except OSError as e:
        logger.error(f"Failed to list documents in {root}: {e}")
        raise EnumerationError(root, e) from e
    names.sort()
    return names


def dir_index(root: Path, pattern: Optional[SearchPattern] = None) -> List[IndexRecord]:
    """
    Build the index of documents in root.
    With a pattern, only documents with a matching line are listed.
    """
    root = Path(root)
    index = []
    for name in list_documents(root):
        path = root / name
        if pattern is not None and not match_file(pattern, path):
            continue
        title = file_title(path) or name_to_title(name) or name
        index.append(IndexRecord(title=title, file=name))
    logger.debug(f"Index of {root}: {len(index)} documents (pattern={pattern!r})")
    return index
