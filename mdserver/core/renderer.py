from typing import List, Optional
import logging

import markdown
import nh3

from .config import RenderConfig
from .links import GithubWikiLinks, LinkRewriteExtension, LinkTransform, NoopLinks

logger = logging.getLogger(__name__)

# Markdown -> HTML with a fixed extension set.
# Math (pymdownx.arithmatex) is left out on purpose: its output needs a script
# the Content-Security-Policy does not allow.
EXTENSIONS = [
    'tables',
    'fenced_code',
    'def_list',
    'abbr',
    'footnotes',
    'attr_list',
    'toc',                      # heading ids for the table of contents
    'smarty',                   # smart quotes and dashes
    'pymdownx.tilde',           # ~~strikethrough~~
    'pymdownx.magiclink',       # bare URLs become links
    'pymdownx.smartsymbols',    # (c), -->, 1/2 ...
]

EXTENSION_CONFIGS = {
    'pymdownx.tilde': {'subscript': False},
}

# User generated content safelist, plus the attributes headings need for the
# table of contents script
SANITIZE_ATTRIBUTES = {tag: set(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()}
SANITIZE_ATTRIBUTES['*'] = {'id', 'lang', 'title', 'dir'}


def link_transform_for(config: RenderConfig) -> LinkTransform:
    if config.github_wiki:
        return GithubWikiLinks()
    return NoopLinks()


def build_markdown(link_transform: Optional[LinkTransform] = None) -> markdown.Markdown:
    """
    Create a Markdown instance for one render.
    Instances keep per-document state and must not be shared between requests.
    """
    extensions: List = list(EXTENSIONS)
    if link_transform is not None:
        extensions.append(LinkRewriteExtension(link_transform))
    return markdown.Markdown(extensions=extensions, extension_configs=EXTENSION_CONFIGS)


def sanitize_html(html: str) -> str:
    """Strip scripts, event handlers and anything else outside the safelist."""
    return nh3.clean(html, attributes=SANITIZE_ATTRIBUTES)


def render_markdown(data: bytes, link_transform: Optional[LinkTransform] = None) -> str:
    """
    Render raw markdown bytes to a sanitized HTML fragment.
    Sanitizing always runs, whatever the link transform.
    """
    text = data.decode('utf-8', errors='replace')
    logger.debug(f"Render markdown: {len(data)} bytes input")
    html_output = build_markdown(link_transform).convert(text)
    return sanitize_html(html_output)
