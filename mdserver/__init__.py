"""
mdserver - serve a directory of Markdown files as rendered HTML pages.
"""

__version__ = "1.0.0"
