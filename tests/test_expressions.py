# ========================
# tests/test_expressions.py
# ========================

import unittest
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.expressions import col, lit
from src.pipeline.exceptions import ColumnNotFoundError


class TestExpressions(unittest.TestCase):

    def setUp(self):
        self.row = {'city': 'Boston', 'local_index': 100, 'national_index': 50, 'missing': None}

    def test_column_and_literal(self):
        self.assertEqual(col('city').evaluate(self.row), 'Boston')
        self.assertEqual(lit(3).evaluate(self.row), 3)

    def test_arithmetic(self):
        """Arithmetic works with columns and literals on either side."""
        self.assertEqual((col('local_index') / col('national_index')).evaluate(self.row), 2.0)
        self.assertEqual((col('local_index') + 1).evaluate(self.row), 101)
        self.assertEqual((200 - col('local_index')).evaluate(self.row), 100)
        self.assertEqual((2 * col('national_index')).evaluate(self.row), 100)
        self.assertEqual((-col('national_index')).evaluate(self.row), -50)

    def test_missing_propagates(self):
        """Any arithmetic or comparison with a missing operand is missing."""
        self.assertIsNone((col('missing') + 1).evaluate(self.row))
        self.assertIsNone((col('missing') == 1).evaluate(self.row))
        self.assertIsNone((col('missing') > 1).evaluate(self.row))

    def test_division_by_zero_is_missing(self):
        self.assertIsNone((col('local_index') / 0).evaluate(self.row))

    def test_comparisons(self):
        self.assertTrue((col('city') == 'Boston').evaluate(self.row))
        self.assertTrue((col('city') != 'Denver').evaluate(self.row))
        self.assertTrue((col('local_index') >= 100).evaluate(self.row))
        self.assertFalse((col('local_index') < col('national_index')).evaluate(self.row))

    def test_kleene_logic(self):
        """AND/OR/NOT follow three-valued logic."""
        true = col('city') == 'Boston'
        false = col('city') == 'Denver'
        unknown = col('missing') == 1

        self.assertIs((true & unknown).evaluate(self.row), None)
        self.assertIs((false & unknown).evaluate(self.row), False)
        self.assertIs((true | unknown).evaluate(self.row), True)
        self.assertIs((false | unknown).evaluate(self.row), None)
        self.assertIs((~unknown).evaluate(self.row), None)
        self.assertIs((~false).evaluate(self.row), True)

    def test_missing_tests(self):
        """is_missing and not_missing always give a definite answer."""
        self.assertIs(col('missing').is_missing().evaluate(self.row), True)
        self.assertIs(col('missing').not_missing().evaluate(self.row), False)
        self.assertIs(col('city').is_missing().evaluate(self.row), False)
        self.assertIs((~col('city').is_missing()).evaluate(self.row), True)

    def test_helpers(self):
        self.assertTrue(col('city').isin(['Boston', 'Denver']).evaluate(self.row))
        self.assertIsNone(col('missing').isin([1]).evaluate(self.row))
        self.assertTrue(col('local_index').between(100, 120).evaluate(self.row))
        self.assertFalse(col('local_index').between(101, 120).evaluate(self.row))
        self.assertTrue(col('city').str_contains('ost').evaluate(self.row))

    def test_columns_lists_references(self):
        expr = ((col('a') + col('b')) > col('a')) & col('c').is_missing()
        self.assertEqual(expr.columns(), ['a', 'b', 'c'])
        self.assertEqual(lit(1).columns(), [])

    def test_unknown_column(self):
        with self.assertRaises(ColumnNotFoundError):
            col('state').evaluate(self.row)

    def test_no_truth_value(self):
        """Using 'and'/'or' on expressions is an error rather than a silent bug."""
        with self.assertRaises(TypeError):
            bool(col('city') == 'Boston')


if __name__ == '__main__':
    unittest.main()
