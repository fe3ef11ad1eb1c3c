# ========================
# tests/test_reshape.py
# ========================

import re
import unittest
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.table import Table
from src.pipeline.reshape import reshape_long, split_column
from src.pipeline.exceptions import ColumnNotFoundError, DuplicateColumnError, ShapeMismatchError


class TestReshapeLong(unittest.TestCase):

    def setUp(self):
        self.wide = Table.from_records([
            {'Date': 'Jan 2000', 'National.US': 100.0, 'A_x': 1.5, 'B_y': 2.5},
        ])

    def test_wide_to_long(self):
        """One wide row becomes one row per value column."""
        result = reshape_long(self.wide, ['Date', 'National.US'], ['A_x', 'B_y'],
                              names_to='location', values_to='local_index')

        self.assertEqual(result.columns, ['Date', 'National.US', 'location', 'local_index'])
        self.assertEqual(result.records(), [
            {'Date': 'Jan 2000', 'National.US': 100.0, 'location': 'A_x', 'local_index': 1.5},
            {'Date': 'Jan 2000', 'National.US': 100.0, 'location': 'B_y', 'local_index': 2.5},
        ])

    def test_value_columns_default_to_the_rest(self):
        explicit = reshape_long(self.wide, ['Date', 'National.US'], ['A_x', 'B_y'])
        implicit = reshape_long(self.wide, ['Date', 'National.US'])
        self.assertEqual(explicit, implicit)
        self.assertEqual(implicit.columns, ['Date', 'National.US', 'key', 'value'])

    def test_row_count_multiplies(self):
        wide = Table.from_records([
            {'id': i, 'a': i, 'b': i * 10, 'c': None} for i in range(4)
        ])
        result = reshape_long(wide, 'id')
        self.assertEqual(result.num_rows, 12)
        self.assertEqual(result.column('key')[:3], ['a', 'b', 'c'])

        dropped = reshape_long(wide, 'id', drop_missing=True)
        self.assertEqual(dropped.num_rows, 8)

    def test_columns_not_reshaped_are_repeated(self):
        """Columns outside both lists are carried along like id columns."""
        result = reshape_long(self.wide, ['Date'], ['A_x', 'B_y'])
        self.assertEqual(result.columns, ['Date', 'National.US', 'key', 'value'])
        self.assertEqual(result.column('National.US'), [100.0, 100.0])

    def test_errors(self):
        with self.assertRaises(ColumnNotFoundError):
            reshape_long(self.wide, ['Date'], ['C_z'])
        with self.assertRaises(ValueError):
            reshape_long(self.wide, ['Date', 'A_x'], ['A_x'])
        with self.assertRaises(DuplicateColumnError):
            reshape_long(self.wide, ['Date', 'National.US'], names_to='Date')


class TestSplitColumn(unittest.TestCase):

    def setUp(self):
        self.table = Table.from_records([
            {'id': 1, 'location': 'MA_Boston'},
            {'id': 2, 'location': 'NY_New_York'},
            {'id': 3, 'location': None},
        ])

    def test_split_in_place(self):
        """New columns take the source column's position."""
        result = split_column(self.table, 'location', ['state', 'city'], '_')
        self.assertEqual(result.columns, ['id', 'state', 'city'])
        self.assertEqual(result.row(0), {'id': 1, 'state': 'MA', 'city': 'Boston'})

    def test_extra_merge(self):
        """Surplus fragments are merged, separators included, into the last column."""
        result = split_column(self.table, 'location', ['state', 'city'], '_', extra='merge')
        self.assertEqual(result.row(1)['city'], 'New_York')

    def test_extra_drop(self):
        result = split_column(self.table, 'location', ['state', 'city'], '_', extra='drop')
        self.assertEqual(result.row(1)['city'], 'New')

    def test_extra_error(self):
        with self.assertRaises(ShapeMismatchError) as ctx:
            split_column(self.table, 'location', ['state', 'city'], '_', extra='error')
        self.assertEqual(ctx.exception.row_index, 1)

    def test_missing_source_gives_missing_parts(self):
        result = split_column(self.table, 'location', ['state', 'city'], '_')
        self.assertEqual(result.row(2), {'id': 3, 'state': None, 'city': None})

    def test_fill_policies(self):
        """Too few fragments raise by default, or pad on the chosen side."""
        table = Table.from_records([{'Date': 'Jan 2000'}, {'Date': '2001'}])

        with self.assertRaises(ShapeMismatchError):
            split_column(table, 'Date', ['month', 'year'], ' ')

        right = split_column(table, 'Date', ['month', 'year'], ' ', fill='right')
        left = split_column(table, 'Date', ['month', 'year'], ' ', fill='left')
        self.assertEqual(right.row(1), {'month': '2001', 'year': None})
        self.assertEqual(left.row(1), {'month': None, 'year': '2001'})

    def test_keep_source_and_convert(self):
        table = Table.from_records([{'Date': 'Jan 2000'}, {'Date': 'Aug 2001'}])
        result = split_column(table, 'Date', ['month', 'year'], ' ', remove=False, convert=True)
        self.assertEqual(result.columns, ['month', 'year', 'Date'])
        self.assertEqual(result.column('year'), [2000, 2001])
        self.assertEqual(result.column('Date'), ['Jan 2000', 'Aug 2001'])

    def test_regex_separator(self):
        table = Table.from_records([{'code': 'CA-San Francisco'}, {'code': 'WA.Seattle'}])
        result = split_column(table, 'code', ['state', 'city'], re.compile(r'[-.]'))
        self.assertEqual(result.column('city'), ['San Francisco', 'Seattle'])

    def test_invalid_arguments(self):
        with self.assertRaises(ColumnNotFoundError):
            split_column(self.table, 'region', ['a', 'b'], '_')
        with self.assertRaises(ValueError):
            split_column(self.table, 'location', ['a', 'b'], '_', extra='keep')
        with self.assertRaises(ValueError):
            split_column(self.table, 'location', ['a', 'b'], '')
        with self.assertRaises(DuplicateColumnError):
            split_column(self.table, 'location', ['id', 'city'], '_')


if __name__ == '__main__':
    unittest.main()
