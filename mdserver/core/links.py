import logging
import posixpath
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote_plus, unquote, urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

logger = logging.getLogger(__name__)

GITHUB_HOST = 'github.com'


def url_dir(path: str) -> str:
    """Parent of a URL path: everything up to the last slash, cleaned."""
    return posixpath.normpath(path[:path.rfind('/') + 1] or '.')


def url_base(path: str) -> str:
    """Last element of a URL path, ignoring trailing slashes."""
    stripped = path.rstrip('/')
    if not stripped:
        return '/' if path else '.'
    return stripped[stripped.rfind('/') + 1:]


class LinkTransform(ABC):
    """
    Rewrites link destinations while a document is rendered.
    Called once per link; returning None keeps the destination unchanged.
    """

    @abstractmethod
    def rewrite(self, destination: str) -> Optional[str]:
        pass


class NoopLinks(LinkTransform):
    def rewrite(self, destination: str) -> Optional[str]:
        return None


class GithubWikiLinks(LinkTransform):
    """
    Turns links to GitHub wiki pages into links to local documents.

    A link to "https://github.com/user/project/wiki/Page#part" becomes
    "Page.md#part", so a cloned wiki stays navigable offline.
    """

    def rewrite(self, destination: str) -> Optional[str]:
        try:
            url = urlsplit(destination)
        except ValueError:
            return None
        if url.netloc != GITHUB_HOST:
            return None
        path = unquote(url.path)
        if not url_dir(path).endswith('/wiki'):
            return None
        target = quote_plus(url_base(path) + '.md')
        if url.fragment:
            target += '#' + quote_plus(unquote(url.fragment))
        logger.debug(f"Rewrote wiki link {destination} -> {target}")
        return target


class LinkRewriteProcessor(Treeprocessor):
    def __init__(self, md, transform: LinkTransform):
        super().__init__(md)
        self.transform = transform

    def run(self, root):
        for link in root.iter('a'):
            href = link.get('href')
            if href is None:
                continue
            target = self.transform.rewrite(href)
            if target is not None:
                link.set('href', target)


class LinkRewriteExtension(Extension):
    """Applies a LinkTransform to every <a> element before the HTML is serialized."""

    def __init__(self, transform: LinkTransform, **kwargs):
        self.transform = transform
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        # After inline patterns (20) and unescaping (0) have finished the <a> elements
        md.treeprocessors.register(LinkRewriteProcessor(md, self.transform), 'link_rewrite', -5)
