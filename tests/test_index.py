import unittest
import sys
import tempfile
from pathlib import Path

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from mdserver.core.errors import EnumerationError
from mdserver.core.index import IndexRecord, dir_index, list_documents
from mdserver.core.search import compile_pattern


class TestDirIndex(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        (self.dir / 'Home.md').write_text('# Welcome\n\nStart here.\n', encoding='utf-8')
        (self.dir / 'Setup.md').write_text('No heading, just install it.\n', encoding='utf-8')

    def tearDown(self):
        self.tmp.cleanup()

    def test_titles_and_fallback(self):
        self.assertEqual(dir_index(self.dir), [
            IndexRecord(title='Welcome', file='Home.md'),
            IndexRecord(title='Setup', file='Setup.md'),
        ])

    def test_hyphenated_name_fallback(self):
        (self.dir / 'Getting-Started.md').write_text('text\n', encoding='utf-8')
        records = {r.file: r.title for r in dir_index(self.dir)}
        self.assertEqual(records['Getting-Started.md'], 'Getting Started')

    def test_only_markdown_files_directly_in_root(self):
        (self.dir / 'notes.txt').write_text('# Notes\n', encoding='utf-8')
        (self.dir / 'folder.md').mkdir()
        sub = self.dir / 'sub'
        sub.mkdir()
        (sub / 'Nested.md').write_text('# Nested\n', encoding='utf-8')
        self.assertEqual(list_documents(self.dir), ['Home.md', 'Setup.md'])

    def test_records_are_base_names(self):
        for record in dir_index(self.dir):
            self.assertEqual(Path(record.file).name, record.file)
            self.assertTrue(record.title)

    def test_search_filters_records(self):
        records = dir_index(self.dir, compile_pattern('INSTALL'))
        self.assertEqual(records, [IndexRecord(title='Setup', file='Setup.md')])

    def test_search_without_matches(self):
        self.assertEqual(dir_index(self.dir, compile_pattern('nothing here')), [])

    def test_empty_directory(self):
        with tempfile.TemporaryDirectory() as empty:
            self.assertEqual(dir_index(Path(empty)), [])

    def test_missing_directory_is_an_error(self):
        with self.assertRaises(EnumerationError) as ctx:
            dir_index(self.dir / 'missing')
        self.assertIsInstance(ctx.exception.cause, OSError)


if __name__ == '__main__':
    unittest.main()
