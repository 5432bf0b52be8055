import gzip
import unittest
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

from bs4 import BeautifulSoup

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from mdserver.app import TOC_SCRIPT_HASH, create_app
from mdserver.core.config import RenderConfig
from mdserver.core.security import content_hash


class AppTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        (self.dir / 'Home.md').write_text(
            '# Welcome\n\nSee [setup](https://github.com/user/project/wiki/Setup#install).\n',
            encoding='utf-8')
        (self.dir / 'Setup.md').write_text('Install with pip.\n', encoding='utf-8')
        (self.dir / 'notes.txt').write_text('plain notes', encoding='utf-8')

    def tearDown(self):
        self.tmp.cleanup()

    def client(self, **options):
        self.config = RenderConfig(root=self.dir, **options)
        app = create_app(self.config)
        app.testing = True
        return app.test_client()

    def index_links(self, response):
        soup = BeautifulSoup(response.get_data(as_text=True), 'html.parser')
        return [(a.get_text(), a['href']) for a in soup.select('ul a')]


class TestIndex(AppTestCase):
    def test_explicit_index(self):
        response = self.client().get('/?index')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.index_links(response), [('Welcome', 'Home.md'), ('Setup', 'Setup.md')])
        self.assertEqual(response.headers['X-Frame-Options'], 'SAMEORIGIN')

    def test_index_page_title_and_style(self):
        response = self.client().get('/?index')
        soup = BeautifulSoup(response.get_data(as_text=True), 'html.parser')
        self.assertEqual(soup.title.string, 'Index')
        self.assertEqual(soup.style.string, self.config.style)
        self.assertIsNone(soup.form)

    def test_root_without_rootindex_is_static(self):
        client = self.client()
        self.assertEqual(client.get('/').status_code, 404)
        (self.dir / 'index.html').write_text('<p>home page</p>', encoding='utf-8')
        response = client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'home page', response.data)

    def test_rootindex(self):
        response = self.client(root_index=True).get('/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(self.index_links(response)), 2)

    def test_unlistable_directory(self):
        self.dir = self.dir / 'missing'
        response = self.client().get('/?index')
        self.assertEqual(response.status_code, 500)
        self.assertNotIn(str(self.dir).encode(), response.data)
        self.assertEqual(response.headers['X-Frame-Options'], 'SAMEORIGIN')


class TestSearch(AppTestCase):
    def test_search_filters_index(self):
        response = self.client(search=True).get('/?q=WELCOME')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.index_links(response), [('Welcome', 'Home.md')])
        soup = BeautifulSoup(response.get_data(as_text=True), 'html.parser')
        self.assertEqual(soup.title.string, 'Search results for "WELCOME"')
        self.assertIsNotNone(soup.form)

    def test_short_term(self):
        response = self.client(search=True).get('/?q=ab')
        self.assertEqual(response.status_code, 400)
        self.assertIn(b'Search term is too short', response.data)
        self.assertTrue(response.content_type.startswith('text/plain'))
        self.assertEqual(response.headers['X-Frame-Options'], 'SAMEORIGIN')

    def test_term_length_counts_characters(self):
        response = self.client(search=True).get('/?q=%C3%A9%C3%A9')
        self.assertEqual(response.status_code, 400)

    def test_search_disabled(self):
        response = self.client().get('/?q=welcome')
        self.assertEqual(response.status_code, 404)

    def test_search_takes_priority_over_rootindex(self):
        response = self.client(search=True, root_index=True).get('/?q=pip')
        self.assertEqual(self.index_links(response), [('Setup', 'Setup.md')])


class TestDocument(AppTestCase):
    def test_render_document(self):
        response = self.client().get('/Home.md')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers['X-Frame-Options'], 'SAMEORIGIN')
        soup = BeautifulSoup(response.get_data(as_text=True), 'html.parser')
        self.assertEqual(soup.title.string, 'Home')
        self.assertEqual(soup.article.h1.get_text(), 'Welcome')
        self.assertEqual(soup.article.h1['id'], 'welcome')
        link = soup.article.find('a')
        self.assertEqual(link['href'], 'https://github.com/user/project/wiki/Setup#install')

    def test_csp_matches_embedded_style_and_script(self):
        response = self.client(style='body { color: #222 }').get('/Home.md')
        csp = response.headers['Content-Security-Policy']
        soup = BeautifulSoup(response.get_data(as_text=True), 'html.parser')
        self.assertEqual(soup.style.string, 'body { color: #222 }')
        self.assertIn(f"style-src '{content_hash(soup.style.string)}';", csp)
        self.assertIn(f"script-src '{content_hash(soup.script.string)}';", csp)
        self.assertIn(f"script-src '{TOC_SCRIPT_HASH}';", csp)
        self.assertIn("default-src 'self';", csp)

    def test_github_links_rewritten(self):
        response = self.client(github_wiki=True).get('/Home.md')
        soup = BeautifulSoup(response.get_data(as_text=True), 'html.parser')
        self.assertEqual(soup.article.find('a')['href'], 'Setup.md#install')

    def test_page_title_from_name(self):
        (self.dir / 'Getting-Started.md').write_text('text\n', encoding='utf-8')
        (self.dir / 'Release notes-2.md').write_text('text\n', encoding='utf-8')
        client = self.client()
        soup = BeautifulSoup(client.get('/Getting-Started.md').get_data(as_text=True), 'html.parser')
        self.assertEqual(soup.title.string, 'Getting Started')
        soup = BeautifulSoup(client.get('/Release%20notes-2.md').get_data(as_text=True), 'html.parser')
        self.assertEqual(soup.title.string, 'Release notes-2')

    def test_injected_script_is_removed(self):
        (self.dir / 'Evil.md').write_text('# Evil\n\n<script>alert(1)</script>\n', encoding='utf-8')
        response = self.client().get('/Evil.md')
        soup = BeautifulSoup(response.get_data(as_text=True), 'html.parser')
        self.assertEqual(len(soup.find_all('script')), 1)
        self.assertIsNone(soup.article.find('script'))

    def test_missing_document(self):
        response = self.client().get('/Missing.md')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.headers['X-Frame-Options'], 'SAMEORIGIN')
        self.assertNotIn('Content-Security-Policy', response.headers)

    def test_traversal_is_rejected_without_reading(self):
        client = self.client()
        with patch('mdserver.app.read_document') as read_document:
            response = client.get('/..%5Csecret.md')
        self.assertEqual(response.status_code, 400)
        self.assertIn(b'invalid URL path', response.data)
        read_document.assert_not_called()

    def test_read_failure(self):
        client = self.client()
        with patch('mdserver.app.read_document', side_effect=PermissionError('denied')):
            with self.assertLogs('mdserver.app', level='ERROR') as logs:
                response = client.get('/Home.md')
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, b'Internal Server Error')
        self.assertIn('Home.md', logs.output[0])


class TestStatic(AppTestCase):
    def test_static_file(self):
        response = self.client().get('/notes.txt')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, b'plain notes')
        self.assertEqual(response.headers['X-Frame-Options'], 'SAMEORIGIN')
        self.assertNotIn('Content-Security-Policy', response.headers)
        response.close()

    def test_directory_without_slash_redirects(self):
        (self.dir / 'sub').mkdir()
        (self.dir / 'sub' / 'index.html').write_text('<p>sub page</p>', encoding='utf-8')
        client = self.client()
        response = client.get('/sub?x=1')
        self.assertEqual(response.status_code, 301)
        self.assertTrue(response.headers['Location'].endswith('/sub/?x=1'))
        self.assertEqual(response.headers['X-Frame-Options'], 'SAMEORIGIN')
        response = client.get('/sub/')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'sub page', response.data)
        response.close()

    def test_missing_static_file(self):
        self.assertEqual(self.client().get('/nothing.png').status_code, 404)


class TestCompression(AppTestCase):
    def test_gzip_when_accepted(self):
        (self.dir / 'Long.md').write_text('# Long\n\n' + 'word ' * 500 + '\n', encoding='utf-8')
        response = self.client().get('/Long.md', headers={'Accept-Encoding': 'gzip'})
        self.assertEqual(response.headers['Content-Encoding'], 'gzip')
        self.assertIn('Accept-Encoding', response.headers['Vary'])
        self.assertIn(b'<article>', gzip.decompress(response.data))

    def test_plain_without_accept_encoding(self):
        response = self.client().get('/Home.md')
        self.assertNotIn('Content-Encoding', response.headers)
        self.assertIn(b'<article>', response.data)


if __name__ == '__main__':
    unittest.main()
