# ========================
# tests/test_table.py
# ========================

import unittest
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.table import Table, coerce_values, infer_column_type, parse_scalar
from src.pipeline.exceptions import ColumnNotFoundError, DuplicateColumnError, ShapeMismatchError


class TestTable(unittest.TestCase):

    def setUp(self):
        self.records = [
            {'city': 'Boston', 'year': 2000, 'local_index': 100.5},
            {'city': 'Denver', 'year': 2001, 'local_index': None},
        ]
        self.table = Table.from_records(self.records)

    def test_from_records_keeps_first_record_column_order(self):
        """Column order comes from the first record."""
        self.assertEqual(self.table.columns, ['city', 'year', 'local_index'])
        self.assertEqual(self.table.shape, (2, 3))
        self.assertEqual(len(self.table), 2)

    def test_rectangular_invariant(self):
        """Every record must have exactly the table's columns."""
        with self.assertRaises(ShapeMismatchError) as ctx:
            Table(['a', 'b'], [{'a': 1, 'b': 2}, {'a': 3}])
        self.assertEqual(ctx.exception.row_index, 1)

        with self.assertRaises(ShapeMismatchError):
            Table(['a'], [{'a': 1, 'extra': 2}])

    def test_duplicate_columns_rejected(self):
        """A column name may only appear once."""
        with self.assertRaises(DuplicateColumnError):
            Table(['a', 'a'], [])

    def test_from_columns(self):
        """Column-wise construction checks equal lengths."""
        table = Table.from_columns({'a': [1, 2], 'b': ['x', 'y']})
        self.assertEqual(table.records(), [{'a': 1, 'b': 'x'}, {'a': 2, 'b': 'y'}])

        with self.assertRaises(ShapeMismatchError):
            Table.from_columns({'a': [1, 2], 'b': ['x']})

    def test_empty_table(self):
        """Empty tables keep their columns."""
        table = Table.empty(['a', 'b'])
        self.assertEqual(table.columns, ['a', 'b'])
        self.assertEqual(table.num_rows, 0)
        self.assertEqual(Table.from_records([]).columns, [])

    def test_source_records_are_copied(self):
        """Changing the input list or returned records does not change the table."""
        self.records[0]['city'] = 'Changed'
        self.assertEqual(self.table.row(0)['city'], 'Boston')

        returned = self.table.records()
        returned[1]['city'] = 'Changed'
        for record in self.table:
            record['year'] = 0
        self.assertEqual(self.table.column('city'), ['Boston', 'Denver'])
        self.assertEqual(self.table.column('year'), [2000, 2001])

    def test_row_views_are_read_only(self):
        """Row views handed to expressions cannot be written to."""
        view = next(self.table._views())
        with self.assertRaises(TypeError):
            view['city'] = 'Changed'

    def test_column_not_found(self):
        """Unknown column access raises ColumnNotFoundError with the available names."""
        with self.assertRaises(ColumnNotFoundError) as ctx:
            self.table.column('state')
        self.assertEqual(ctx.exception.column, 'state')
        self.assertEqual(ctx.exception.available, ['city', 'year', 'local_index'])
        self.assertIn('state', str(ctx.exception))

    def test_schema(self):
        """Type categories are inferred from the values."""
        table = Table.from_records([
            {'n': 1, 'x': 1.5, 's': 'Boston', 'd': 'Jan 2000', 'm': None, 'mixed': 1},
            {'n': 2, 'x': 2, 's': 'Denver', 'd': 'Feb 2000', 'm': None, 'mixed': 'a'},
        ])
        self.assertEqual(table.schema(), {
            'n': 'integer', 'x': 'float', 's': 'text', 'd': 'date', 'm': 'missing', 'mixed': 'text',
        })

    def test_equality(self):
        """Tables are equal when columns and records match."""
        same = Table.from_records([dict(r) for r in self.records])
        self.assertEqual(self.table, same)
        reordered = Table(['year', 'city', 'local_index'], self.records)
        self.assertNotEqual(self.table, reordered)

    def test_pipe(self):
        """pipe passes the table as the first argument."""
        def add_constant(table, name, value):
            return table.derive(name, value)

        result = self.table.pipe(add_constant, 'source', 'index')
        self.assertEqual(result.column('source'), ['index', 'index'])


class TestValueParsing(unittest.TestCase):

    def test_parse_scalar(self):
        """Numeric-looking text becomes int or float."""
        self.assertEqual(parse_scalar('42'), 42)
        self.assertEqual(parse_scalar('-3.5'), -3.5)
        self.assertEqual(parse_scalar('1e3'), 1000.0)
        self.assertEqual(parse_scalar('1_000'), '1_000')
        self.assertEqual(parse_scalar('Boston'), 'Boston')

    def test_coerce_values_is_column_wide(self):
        """A column is only converted when every present value is numeric."""
        self.assertEqual(coerce_values(['1', None, '3']), [1, None, 3])
        self.assertEqual(coerce_values(['1', '2.5']), [1.0, 2.5])
        self.assertEqual(coerce_values(['1', 'x']), ['1', 'x'])
        self.assertEqual(coerce_values([None, None]), [None, None])

    def test_infer_column_type(self):
        self.assertEqual(infer_column_type([1, 2, None]), 'integer')
        self.assertEqual(infer_column_type([1, 2.0]), 'float')
        self.assertEqual(infer_column_type(['2000-01-31', '2000-02']), 'date')
        self.assertEqual(infer_column_type(['January 2000']), 'date')
        self.assertEqual(infer_column_type(['Boston']), 'text')
        self.assertEqual(infer_column_type([]), 'missing')


if __name__ == '__main__':
    unittest.main()
