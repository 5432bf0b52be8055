"""
mdserver web application.

A single catch-all view classifies each request and either renders the
document index, renders a markdown document or hands the path over to the
static file server.
"""

import gzip
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, abort, current_app, redirect, render_template, request, send_from_directory
from werkzeug.exceptions import InternalServerError
from werkzeug.security import safe_join

from mdserver.core.assets import TOC_SCRIPT
from mdserver.core.config import RenderConfig
from mdserver.core.errors import ClientInputError, EnumerationError
from mdserver.core.index import dir_index
from mdserver.core.renderer import link_transform_for, render_markdown
from mdserver.core.search import SearchPattern, compile_pattern
from mdserver.core.security import build_csp, content_hash, safe_document_path
from mdserver.core.titles import MD_SUFFIX, name_to_title

logger = logging.getLogger(__name__)

TOC_SCRIPT_HASH = content_hash(TOC_SCRIPT)

# Responses smaller than this are sent uncompressed
GZIP_MIN_SIZE = 256
COMPRESSIBLE_TYPES = ('text/', 'application/json', 'application/javascript', 'image/svg+xml')

PLAIN_TEXT = {'Content-Type': 'text/plain; charset=utf-8'}


def create_app(config: RenderConfig) -> Flask:
    """Create the Flask application serving config.root."""
    # The served directory is the static root, Flask's own static route is not used
    app = Flask(__name__, static_folder=None)
    app.config['RENDER_CONFIG'] = config

    app.add_url_rule('/', 'dispatch', dispatch, defaults={'path': ''})
    app.add_url_rule('/<path:path>', 'dispatch', dispatch)

    app.register_error_handler(ClientInputError, client_error)
    app.register_error_handler(EnumerationError, enumeration_error)
    app.register_error_handler(InternalServerError, internal_error)

    app.after_request(compress_response)
    app.after_request(deny_framing)

    logger.info(f"Serving {config.root} (github={config.github_wiki}, "
                f"search={config.search}, rootindex={config.root_index})")
    return app


def get_config() -> RenderConfig:
    return current_app.config['RENDER_CONFIG']


def dispatch(path: str):
    """Route a request to search, index, document or static handling, in that order."""
    config = get_config()
    query = request.query_string
    if request.path == '/':
        if config.search and query.startswith(b'q='):
            term = request.args.get('q', '')
            pattern = compile_pattern(term)
            return index_page(config, f'Search results for "{term}"', pattern)
        if config.root_index or query == b'index':
            return index_page(config, 'Index')
    if request.path.endswith(MD_SUFFIX):
        return document_page(config, request.path)
    return static_file(config, path)


def index_page(config: RenderConfig, title: str, pattern: Optional[SearchPattern] = None):
    index = dir_index(config.root, pattern)
    logger.info(f"Index route ({title}): {len(index)} documents")
    return render_template(
        'index.html',
        title=title,
        style=config.style,
        index=index,
        with_search=config.search,
    )


def read_document(path: Path) -> bytes:
    return path.read_bytes()


def document_page(config: RenderConfig, url_path: str):
    """Render one markdown document. The path is checked before any file access."""
    file_path = safe_document_path(config.root, url_path)
    try:
        data = read_document(file_path)
    except (FileNotFoundError, NotADirectoryError):
        abort(404)
    except OSError as e:
        logger.error(f"read {str(file_path)!r}: {e}")
        abort(500)

    body = render_markdown(data, link_transform_for(config))
    response = current_app.make_response(render_template(
        'page.html',
        title=name_to_title(file_path.name),
        style=config.style,
        toc_script=TOC_SCRIPT,
        body=body,
    ))
    response.headers['Content-Security-Policy'] = build_csp(config.style_hash, TOC_SCRIPT_HASH)
    return response


def static_file(config: RenderConfig, path: str):
    # Directories are served through their index.html, at a URL ending in a slash
    if path and not path.endswith('/'):
        full_path = safe_join(str(config.root), path)
        if full_path is not None and Path(full_path).is_dir():
            location = request.path + '/'
            if request.query_string:
                location += '?' + request.query_string.decode('latin-1')
            return redirect(location, code=301)
    if not path or path.endswith('/'):
        path += 'index.html'
    return send_from_directory(config.root, path)


def client_error(error: ClientInputError):
    return str(error), 400, PLAIN_TEXT


def enumeration_error(error: EnumerationError):
    # Already logged where the listing failed
    return 'Internal Server Error', 500, PLAIN_TEXT


def internal_error(error):
    return 'Internal Server Error', 500, PLAIN_TEXT


def deny_framing(response):
    response.headers['X-Frame-Options'] = 'SAMEORIGIN'
    return response


def compress_response(response):
    """gzip text responses for clients that accept it."""
    if response.direct_passthrough or 'Content-Encoding' in response.headers:
        return response
    if 'gzip' not in request.headers.get('Accept-Encoding', ''):
        return response
    if not (response.mimetype or '').startswith(COMPRESSIBLE_TYPES):
        return response
    data = response.get_data()
    if len(data) <= GZIP_MIN_SIZE:
        return response
    response.set_data(gzip.compress(data, compresslevel=4))
    response.headers['Content-Encoding'] = 'gzip'
    response.vary.add('Accept-Encoding')
    return response
