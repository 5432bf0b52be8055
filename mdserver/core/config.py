import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .assets import DEFAULT_STYLE
from .security import content_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderConfig:
    """
    Process wide settings, built once at startup and shared read-only by all
    request handlers. style_hash is derived from style and cannot be passed in.
    """
    root: Path
    github_wiki: bool = False
    search: bool = False
    root_index: bool = False
    style: str = DEFAULT_STYLE
    style_hash: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'root', Path(self.root))
        object.__setattr__(self, 'style_hash', content_hash(self.style))

    @classmethod
    def create(cls, root, github_wiki: bool = False, search: bool = False,
               root_index: bool = False, css_path: Optional[Path] = None) -> "RenderConfig":
        """Build the configuration, loading a custom style sheet when css_path is set."""
        style = DEFAULT_STYLE
        if css_path:
            # A missing or unreadable style sheet is a startup error
            style = Path(css_path).read_text(encoding='utf-8')
            logger.info(f"Using custom style sheet: {css_path}")
        return cls(
            root=Path(root),
            github_wiki=github_wiki,
            search=search,
            root_index=root_index,
            style=style,
        )
