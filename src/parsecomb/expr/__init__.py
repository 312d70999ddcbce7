"""
An expression tree that plugs into parsecomb by providing its own parsers.
"""

from parsecomb.expr.nodes import (
    Operator,
    Expr,
    Number,
    Operation,
    evaluate,
)
