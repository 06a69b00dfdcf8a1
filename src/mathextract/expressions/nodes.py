"""Syntax tree node types.

The tree is strict: every node owns its children and nodes are immutable
once the parser hands them out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from mathextract.expressions.functions import FunctionId


class UnaryOperator(str, Enum):
    NEGATE = "-"
    PLUS = "+"


class BinaryOperator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"


@dataclass(frozen=True)
class Literal:
    value: float


@dataclass(frozen=True)
class UnaryOp:
    op: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class BinaryOp:
    op: BinaryOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Call:
    function: FunctionId
    args: tuple[Expression, ...]


Expression = Union[Literal, UnaryOp, BinaryOp, Call]


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` offsets into the scanned text."""

    start: int
    end: int

    def text_of(self, source: str) -> str:
        return source[self.start:self.end]


@dataclass(frozen=True)
class ParsedExpression:
    """A completed tree root plus the span it was parsed from."""

    root: Expression
    span: Span


def to_source(node: Expression) -> str:
    """Render *node* back to fully parenthesised expression text."""
    if isinstance(node, Literal):
        return repr(node.value)
    if isinstance(node, UnaryOp):
        return f"({node.op.value}{to_source(node.operand)})"
    if isinstance(node, BinaryOp):
        spine = []
        while isinstance(node, BinaryOp):
            spine.append(node)
            node = node.left
        text = to_source(node)
        for link in reversed(spine):
            text = f"({text} {link.op.value} {to_source(link.right)})"
        return text
    args = ", ".join(to_source(a) for a in node.args)
    return f"{node.function.value}({args})"
