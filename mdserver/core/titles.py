"""
Document titles.

A document's title is the text of its first level 1 heading. Headings are
looked up in the element tree python-markdown builds, so code spans, code
blocks and block quotes are skipped structurally rather than by pattern
matching on the source text.
"""
import html
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, List
from xml.etree import ElementTree as etree

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markdown.util import HTML_PLACEHOLDER_RE

logger = logging.getLogger(__name__)

MD_SUFFIX = '.md'
TITLE_READ_LIMIT = 1 << 17  # 128 KiB

# Subtrees never searched for headings
SKIPPED_TAGS = {'code', 'pre', 'blockquote'}


class WalkStatus(Enum):
    CONTINUE = auto()
    SKIP_CHILDREN = auto()
    STOP = auto()


def walk(node: etree.Element, visitor: Callable[[etree.Element], WalkStatus]) -> WalkStatus:
    """
    Depth-first pre-order traversal of node.
    The visitor decides per element whether to descend, skip the element's
    children, or stop the whole walk. Returns STOP if the walk was stopped.
    """
    status = visitor(node)
    if status is WalkStatus.STOP:
        return WalkStatus.STOP
    if status is WalkStatus.CONTINUE:
        for child in node:
            if walk(child, visitor) is WalkStatus.STOP:
                return WalkStatus.STOP
    return WalkStatus.CONTINUE


@dataclass
class DocumentTree:
    """Parsed markdown document: the element tree plus python-markdown's raw HTML stash."""
    root: etree.Element
    stash: List[str] = field(default_factory=list)

    def text_of(self, element: etree.Element) -> str:
        """Concatenate all text below element, restoring stashed entities."""
        return HTML_PLACEHOLDER_RE.sub(self._unstash, ''.join(element.itertext()))

    def _unstash(self, match) -> str:
        index = int(match.group(1))
        if index >= len(self.stash):
            return ''
        raw = str(self.stash[index])
        # Inline tags carry no text of their own, entities do
        if raw.startswith('<'):
            return ''
        return html.unescape(raw)


class TreeCaptureProcessor(Treeprocessor):
    """Keeps a reference to the finished element tree."""

    def __init__(self, md=None):
        super().__init__(md)
        self.tree = None

    def run(self, root):
        self.tree = root


class TreeCaptureExtension(Extension):
    def extendMarkdown(self, md):
        self.processor = TreeCaptureProcessor(md)
        # After inline patterns (20) and unescaping (0)
        md.treeprocessors.register(self.processor, 'tree_capture', -10)


def parse_document(text: str) -> DocumentTree:
    """Parse markdown text into a DocumentTree."""
    capture = TreeCaptureExtension()
    md = markdown.Markdown(extensions=['fenced_code', capture])
    md.convert(text)
    # convert() returns early for blank input without building a tree
    root = capture.processor.tree
    if root is None:
        return DocumentTree(root=etree.Element('div'))
    return DocumentTree(root=root, stash=list(md.htmlStash.rawHtmlBlocks))


def document_title(doc: DocumentTree) -> str:
    """
    Return the text of the first level 1 heading, or '' when there is none.
    Code spans, code blocks and block quotes are not searched.
    """
    found = []

    def visit(element):
        if element.tag == 'h1':
            found.append(doc.text_of(element))
            return WalkStatus.STOP
        if element.tag in SKIPPED_TAGS:
            return WalkStatus.SKIP_CHILDREN
        return WalkStatus.CONTINUE

    walk(doc.root, visit)
    return found[0] if found else ''


def file_title(path: Path, limit: int = TITLE_READ_LIMIT) -> str:
    """Extract the title from the first `limit` bytes of a file; '' on any read error."""
    try:
        with open(path, 'rb') as f:
            data = f.read(limit)
    except OSError as e:
        logger.debug(f"Cannot read title of {path}: {e}")
        return ''
    return document_title(parse_document(data.decode('utf-8', errors='replace')))


def name_to_title(name: str) -> str:
    """
    Derive a display title from a file name.
    The .md suffix is dropped; names without spaces get hyphens turned into spaces.
    """
    title = name[:-len(MD_SUFFIX)] if name.endswith(MD_SUFFIX) else name
    if ' ' in name:
        return title
    return title.replace('-', ' ')
