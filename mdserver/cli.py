#!/usr/bin/env python
"""
Command-line interface for mdserver.

Serves a directory of markdown (.md) files as HTML pages, e.g. a local clone
of a GitHub wiki. The generated index is available at /?index; start with
--rootindex to show it at / as well (otherwise / serves index.html if the
directory has one).
"""

import argparse
import logging
import sys
import webbrowser
from pathlib import Path
from threading import Timer

from mdserver import __version__

logger = logging.getLogger(__name__)

DEFAULT_ADDR = 'localhost:8080'


def parse_addr(addr: str):
    """Split 'host:port' into (host, port); raises ValueError on malformed input."""
    host, sep, port = addr.rpartition(':')
    if not sep:
        raise ValueError(f"address {addr!r} has no port")
    return host or 'localhost', int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mdserver',
        description=f'mdserver v{__version__}: serve a directory of markdown files as HTML',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mdserver --dir wiki                      Serve ./wiki on localhost:8080
  mdserver --dir wiki --github --search    Rewrite wiki links, enable search
  mdserver --addr 0.0.0.0:9000 --rootindex Show the index at /
        """
    )
    parser.add_argument('--version', '-v', action='store_true', help='Show version information')
    parser.add_argument('--dir', default='.', help='directory with markdown (.md) files')
    parser.add_argument('--addr', default=DEFAULT_ADDR, help=f'address to listen (default: {DEFAULT_ADDR})')
    parser.add_argument('--open', action='store_true', help='open index page in default browser on start')
    parser.add_argument('--github', action='store_true', help='rewrite github wiki links to local when rendering')
    parser.add_argument('--search', action='store_true', help='enable substring search')
    parser.add_argument('--rootindex', action='store_true',
                        help='render autogenerated index at / in addition to /?index')
    parser.add_argument('--css', help='path to custom CSS file')
    parser.add_argument('--debug', '-d', action='store_true', help='Run in debug mode')
    parser.add_argument('--log-dir', help='also write logs to mdserver.log in this directory')
    return parser


def open_browser(addr: str):
    url = f"http://{addr}/?index"
    logger.info(f"Opening {url}")
    webbrowser.open(url)


def start_server(args):
    """Build the configuration and run the threaded development server."""
    from mdserver.app import create_app
    from mdserver.core.config import RenderConfig
    from mdserver.core.logging_config import setup_logging

    setup_logging(Path(args.log_dir) if args.log_dir else None, args.debug)
    host, port = parse_addr(args.addr)
    config = RenderConfig.create(
        args.dir,
        github_wiki=args.github,
        search=args.search,
        root_index=args.rootindex,
        css_path=Path(args.css) if args.css else None,
    )
    app = create_app(config)

    if args.open:
        Timer(0.1, open_browser, args=(args.addr,)).start()

    logger.info(f"Starting mdserver v{__version__} on http://{args.addr}/?index")
    app.run(host=host, port=port, debug=args.debug, use_reloader=False, threaded=True)


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"mdserver v{__version__}")
        return 0

    try:
        start_server(args)
        return 0
    except KeyboardInterrupt:
        return 0
    except (OSError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
