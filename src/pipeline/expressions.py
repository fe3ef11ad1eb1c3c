# ========================
# src/pipeline/expressions.py
# ========================

"""
Column Expressions

A small expression language for per-row computations used by ``derive`` and
``filter``. Expressions are built lazily with ``col()`` and ``lit()`` and
evaluated one record at a time.

Missing values (``None``) follow three-valued logic: any comparison or
arithmetic with a missing operand is missing, ``&`` and ``|`` use Kleene
semantics, and only ``is_missing()`` / ``not_missing()`` turn a missing
value into a definite answer.
"""

import operator
from typing import Any, Callable, Iterable, List, Mapping

from .exceptions import ColumnNotFoundError


def _wrap(value: Any) -> "Expr":
    """Turn a plain Python value into a literal expression."""
    if isinstance(value, Expr):
        return value
    return Literal(value)


class Expr:
    """Base class of every column expression."""

    def evaluate(self, row: Mapping[str, Any]) -> Any:
        raise NotImplementedError

    def columns(self) -> List[str]:
        """Names of the columns this expression reads, in first-use order."""
        return []

    def __bool__(self):
        raise TypeError(
            "Column expressions have no truth value; combine conditions with "
            "'&', '|' and '~' instead of 'and', 'or' and 'not'"
        )

    # Comparisons
    def __eq__(self, other):  # type: ignore[override]
        return Compare(operator.eq, "==", self, _wrap(other))

    def __ne__(self, other):  # type: ignore[override]
        return Compare(operator.ne, "!=", self, _wrap(other))

    def __lt__(self, other):
        return Compare(operator.lt, "<", self, _wrap(other))

    def __le__(self, other):
        return Compare(operator.le, "<=", self, _wrap(other))

    def __gt__(self, other):
        return Compare(operator.gt, ">", self, _wrap(other))

    def __ge__(self, other):
        return Compare(operator.ge, ">=", self, _wrap(other))

    __hash__ = None  # type: ignore[assignment]

    # Arithmetic
    def __add__(self, other):
        return Arithmetic(operator.add, "+", self, _wrap(other))

    def __radd__(self, other):
        return Arithmetic(operator.add, "+", _wrap(other), self)

    def __sub__(self, other):
        return Arithmetic(operator.sub, "-", self, _wrap(other))

    def __rsub__(self, other):
        return Arithmetic(operator.sub, "-", _wrap(other), self)

    def __mul__(self, other):
        return Arithmetic(operator.mul, "*", self, _wrap(other))

    def __rmul__(self, other):
        return Arithmetic(operator.mul, "*", _wrap(other), self)

    def __truediv__(self, other):
        return Arithmetic(operator.truediv, "/", self, _wrap(other))

    def __rtruediv__(self, other):
        return Arithmetic(operator.truediv, "/", _wrap(other), self)

    def __neg__(self):
        return Arithmetic(operator.sub, "-", Literal(0), self)

    # Boolean logic
    def __and__(self, other):
        return And(self, _wrap(other))

    def __rand__(self, other):
        return And(_wrap(other), self)

    def __or__(self, other):
        return Or(self, _wrap(other))

    def __ror__(self, other):
        return Or(_wrap(other), self)

    def __invert__(self):
        return Not(self)

    # Missing-value tests and helpers
    def is_missing(self) -> "Expr":
        return IsMissing(self)

    def not_missing(self) -> "Expr":
        return Not(IsMissing(self))

    def isin(self, values: Iterable[Any]) -> "Expr":
        return IsIn(self, values)

    def between(self, low: Any, high: Any) -> "Expr":
        """Inclusive range test, equivalent to ``(self >= low) & (self <= high)``."""
        return And(self >= low, self <= high)

    def str_contains(self, text: str) -> "Expr":
        return Contains(self, text)


class Column(Expr):
    """Reference to a column of the current row."""

    def __init__(self, name: str):
        self.name = name

    def evaluate(self, row):
        try:
            return row[self.name]
        except KeyError:
            raise ColumnNotFoundError(self.name, row.keys()) from None

    def columns(self):
        return [self.name]

    def __repr__(self):
        return f"col({self.name!r})"


class Literal(Expr):
    """A constant value."""

    def __init__(self, value: Any):
        self.value = value

    def evaluate(self, row):
        return self.value

    def __repr__(self):
        return f"lit({self.value!r})"


class _Binary(Expr):
    symbol = "?"

    def __init__(self, left: Expr, right: Expr):
        self.left = left
        self.right = right

    def columns(self):
        names = list(self.left.columns())
        for name in self.right.columns():
            if name not in names:
                names.append(name)
        return names

    def __repr__(self):
        return f"({self.left!r} {self.symbol} {self.right!r})"


class Compare(_Binary):
    def __init__(self, op: Callable[[Any, Any], bool], symbol: str, left: Expr, right: Expr):
        super().__init__(left, right)
        self.op = op
        self.symbol = symbol

    def evaluate(self, row):
        left = self.left.evaluate(row)
        right = self.right.evaluate(row)
        if left is None or right is None:
            return None
        return self.op(left, right)


class Arithmetic(_Binary):
    def __init__(self, op: Callable[[Any, Any], Any], symbol: str, left: Expr, right: Expr):
        super().__init__(left, right)
        self.op = op
        self.symbol = symbol

    def evaluate(self, row):
        left = self.left.evaluate(row)
        right = self.right.evaluate(row)
        if left is None or right is None:
            return None
        try:
            return self.op(left, right)
        except ZeroDivisionError:
            return None


def _truth(value: Any):
    """Collapse a value to True, False or None (unknown)."""
    if value is None:
        return None
    return bool(value)


class And(_Binary):
    symbol = "&"

    def evaluate(self, row):
        left = _truth(self.left.evaluate(row))
        if left is False:
            return False
        right = _truth(self.right.evaluate(row))
        if right is False:
            return False
        if left is None or right is None:
            return None
        return True


class Or(_Binary):
    symbol = "|"

    def evaluate(self, row):
        left = _truth(self.left.evaluate(row))
        if left is True:
            return True
        right = _truth(self.right.evaluate(row))
        if right is True:
            return True
        if left is None or right is None:
            return None
        return False


class Not(Expr):
    def __init__(self, operand: Expr):
        self.operand = operand

    def evaluate(self, row):
        value = _truth(self.operand.evaluate(row))
        if value is None:
            return None
        return not value

    def columns(self):
        return self.operand.columns()

    def __repr__(self):
        return f"~{self.operand!r}"


class IsMissing(Expr):
    def __init__(self, operand: Expr):
        self.operand = operand

    def evaluate(self, row):
        return self.operand.evaluate(row) is None

    def columns(self):
        return self.operand.columns()

    def __repr__(self):
        return f"{self.operand!r}.is_missing()"


class IsIn(Expr):
    def __init__(self, operand: Expr, values: Iterable[Any]):
        self.operand = operand
        self.values = list(values)

    def evaluate(self, row):
        value = self.operand.evaluate(row)
        if value is None:
            return None
        return value in self.values

    def columns(self):
        return self.operand.columns()

    def __repr__(self):
        return f"{self.operand!r}.isin({self.values!r})"


class Contains(Expr):
    def __init__(self, operand: Expr, text: str):
        self.operand = operand
        self.text = text

    def evaluate(self, row):
        value = self.operand.evaluate(row)
        if value is None:
            return None
        return self.text in str(value)

    def columns(self):
        return self.operand.columns()

    def __repr__(self):
        return f"{self.operand!r}.str_contains({self.text!r})"


def col(name: str) -> Column:
    """Reference a column by name."""
    return Column(name)


def lit(value: Any) -> Literal:
    """Wrap a constant so it can start an expression."""
    return Literal(value)
