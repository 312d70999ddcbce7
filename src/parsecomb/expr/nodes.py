"""
Expression tree nodes for a small prefix math language.

```
(+ (* 10 2 2) (/ 20    4))
```

Each node type provides its own parser. (See `ParserProviding`.)
"""

from __future__ import annotations
from typing import Callable

from dataclasses import dataclass
from functools import reduce
import enum
import operator

from parsecomb.main import (
    Parser,
    between,
    character,
    choice,
    either,
    integer,
    provided,
    whitespace,
)

class Operator(enum.Enum):
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    def apply(self, left: float, right: float) -> float:
        return _FUNCTIONS[self](left, right)

    @classmethod
    def parser(cls) -> Parser[Operator]:
        return choice(*(character(op.value).map_constant(op) for op in cls)).named("operator")

_FUNCTIONS: dict[Operator, Callable[[float, float], float]] = {
    Operator.PLUS: operator.add,
    Operator.MINUS: operator.sub,
    Operator.MULTIPLY: operator.mul,
    Operator.DIVIDE: operator.truediv,
}


class Expr:
    """Base class of the nodes."""

    @classmethod
    def parser(cls) -> Parser[Expr]:
        """A number, or an operation in parentheses."""
        return either(Number.parser(), Operation.parser()).map(lambda e: e.value).named("expr")

@dataclass(frozen=True)
class Number(Expr):
    value: int

    @classmethod
    def parser(cls) -> Parser[Number]:
        return integer().map(cls).named("number")

@dataclass(frozen=True)
class Operation(Expr):
    operator: Operator
    operands: tuple[Expr, ...]

    @classmethod
    def parser(cls) -> Parser[Operation]:
        """
        `(` operator, at least one whitespace, whitespace separated operands, `)`

        Operands refer back to `Expr`, so nested operations are parsed lazily.
        """
        operands = provided(Expr).separated_by(whitespace())
        content = Operator.parser().skipping_at_least_one_whitespace().followed_by(operands)
        return between("(", content, ")").map(lambda pair: cls(pair[0], tuple(pair[1]))).named("operation")


def evaluate(expr: Expr) -> float:
    """
    Evaluates the tree, folding the operands of each operation from left to right.

    Raises `ValueError` for an operation with fewer than two operands. Division by zero raises `ZeroDivisionError`.
    """
    if isinstance(expr, Number):
        return float(expr.value)
    if isinstance(expr, Operation):
        if len(expr.operands) < 2:
            raise ValueError(f"`{expr.operator.value}` needs at least two operands, got {len(expr.operands)}.")
        return reduce(expr.operator.apply, (evaluate(operand) for operand in expr.operands))
    raise TypeError(f"Not an expression node: {expr!r}")
