# ========================
# tests/test_storage.py
# ========================

import unittest
import tempfile
import os
import sys
from pathlib import Path

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.table import Table
from src.pipeline.storage import DataSaver, write_csv
from src.pipeline.ingestion import load_table
from src.pipeline.display import format_table


class TestStorage(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.table = Table.from_records([
            {'city': 'Boston', 'note': 'cold, snowy', 'rel_index': 2.0},
            {'city': 'Miami', 'note': None, 'rel_index': 1.25},
        ])

    def tearDown(self):
        self.tmp.cleanup()

    def test_write_csv_quotes_delimiters(self):
        """Fields with commas are quoted; missing values use na_rep."""
        path = Path(self.tmp.name) / 'out.csv'
        write_csv(self.table, path, na_rep='NA')

        with open(path, newline='', encoding='utf-8') as f:
            content = f.read()
        self.assertEqual(
            content,
            'city,note,rel_index\r\nBoston,"cold, snowy",2.0\r\nMiami,NA,1.25\r\n'
        )

    def test_written_file_loads_back(self):
        path = Path(self.tmp.name) / 'out.csv'
        self.table.to_csv(path)
        self.assertEqual(load_table(path), self.table)

    def test_na_token_text_is_reported(self):
        """Text equal to an NA token reads back as missing, so writing warns about it."""
        table = Table.from_records([
            {'state': 'NA', 'city': 'Springfield'},
            {'state': 'MA', 'city': 'null'},
        ])
        path = Path(self.tmp.name) / 'out.csv'

        with self.assertLogs('src.pipeline.storage', level='WARNING') as logs:
            write_csv(table, path)

        self.assertIn("'state': 1", logs.output[0])
        self.assertIn("'city': 1", logs.output[0])
        self.assertEqual(load_table(path).column('state'), [None, 'MA'])
        # Reading with the tokens the file was written for keeps the text
        self.assertEqual(load_table(path, na_values=[]).records(), table.records())

    def test_no_warning_when_tokens_excluded(self):
        table = Table.from_records([{'state': 'NA'}])
        path = Path(self.tmp.name) / 'out.csv'

        with self.assertLogs('src.pipeline.storage', level='INFO') as logs:
            table.to_csv(path, na_values=[])

        self.assertFalse([line for line in logs.output if line.startswith('WARNING')])
        self.assertEqual(load_table(path, na_values=[]).column('state'), ['NA'])

    def test_write_to_missing_directory_fails(self):
        with self.assertRaises(OSError):
            write_csv(self.table, Path(self.tmp.name) / 'no' / 'such' / 'out.csv')

    def test_data_saver(self):
        saver = DataSaver(Path(self.tmp.name) / 'processed')
        saved = saver.save_all({'tidy': self.table, 'cities': self.table.select('city')})

        self.assertEqual(set(saved), {'tidy', 'cities'})
        self.assertTrue(saved['cities'].endswith('cities.csv'))
        self.assertEqual(load_table(saved['cities']).column('city'), ['Boston', 'Miami'])


class TestDisplay(unittest.TestCase):

    def test_format_table(self):
        table = Table.from_records([
            {'city': 'Boston', 'year': 2000, 'rel_index': 2.0},
            {'city': 'Denver', 'year': 2001, 'rel_index': None},
            {'city': 'Miami', 'year': 2002, 'rel_index': 1.5},
        ])
        lines = format_table(table, n=2).splitlines()

        self.assertEqual(lines[0], '# Table: 3 rows x 3 columns')
        self.assertEqual(lines[1].split(), ['city', 'year', 'rel_index'])
        self.assertEqual(lines[2].split(), ['<chr>', '<int>', '<dbl>'])
        self.assertEqual(lines[3].split(), ['Boston', '2000', '2'])
        self.assertEqual(lines[4].split(), ['Denver', '2001', 'NA'])
        self.assertEqual(lines[5], '# ... with 1 more rows')

    def test_show_whole_table(self):
        table = Table.from_records([{'a': 1}])
        self.assertNotIn('more rows', table.show())
        self.assertEqual(str(table), format_table(table))


if __name__ == '__main__':
    unittest.main()
