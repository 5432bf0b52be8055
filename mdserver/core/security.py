import base64
import hashlib
import posixpath
import re
from pathlib import Path

from .errors import ClientInputError

# Both separators count: a cleaned URL path may still carry Windows style ones
_SEGMENT_SPLIT = re.compile(r'[/\\]+')


def clean_path(path: str) -> str:
    """
    Lexically normalize a slash separated path.
    Resolves '.' and '..' segments and duplicate separators without touching
    the filesystem. An empty path becomes '.'.
    """
    cleaned = posixpath.normpath(path)
    # normpath keeps a leading '//' as POSIX allows it
    if cleaned.startswith('//'):
        cleaned = '/' + cleaned.lstrip('/')
    return cleaned


def contains_dotdot(path: str) -> bool:
    """Report whether any '/' or '\\' separated segment of path is '..'."""
    if '..' not in path:
        return False
    return any(segment == '..' for segment in _SEGMENT_SPLIT.split(path))


def safe_document_path(root: Path, request_path: str) -> Path:
    """
    Map a URL path onto a file below root.

    Raises ClientInputError when a parent directory segment survives lexical
    cleaning. The result is always joined onto root.
    """
    cleaned = clean_path(request_path)
    if contains_dotdot(cleaned):
        raise ClientInputError("invalid URL path")
    return Path(root) / cleaned.lstrip('/')


def content_hash(text: str) -> str:
    """Return a CSP source hash ('sha256-<base64>') of text encoded as UTF-8."""
    digest = hashlib.sha256(text.encode('utf-8')).digest()
    return 'sha256-' + base64.b64encode(digest).decode('ascii')


def build_csp(style_hash: str, script_hash: str) -> str:
    """
    Content-Security-Policy for rendered documents.
    Inline script and style are pinned by hash, remote images and media stay allowed.
    """
    return (
        "default-src 'self';"
        "img-src http: https: data:;media-src https:;"
        f"script-src '{script_hash}';"
        f"style-src '{style_hash}';"
    )
