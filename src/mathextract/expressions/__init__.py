"""Arithmetic expression lexing, parsing and evaluation.

Public API::

    from mathextract.expressions import tokenize, parse, evaluate
"""

from mathextract.expressions.errors import (
    ArityMismatchError,
    DivisionByZeroError,
    DomainError,
    EvaluationError,
    LexError,
    MathExtractError,
    NestingTooDeepError,
    NumericOverflowError,
    ParseError,
    UnexpectedTokenError,
    UnknownFunctionError,
)
from mathextract.expressions.evaluator import (
    EvaluationResult,
    evaluate,
    evaluate_expression,
)
from mathextract.expressions.functions import (
    FunctionId,
    FunctionSpec,
    lookup_function,
    supported_functions,
)
from mathextract.expressions.grammar import (
    Token,
    TokenKind,
    scan_candidates,
    tokenize,
)
from mathextract.expressions.nodes import (
    BinaryOp,
    BinaryOperator,
    Call,
    Literal,
    ParsedExpression,
    Span,
    UnaryOp,
    UnaryOperator,
    to_source,
)
from mathextract.expressions.parser import parse, parse_expression

__all__ = [
    "ArityMismatchError",
    "BinaryOp",
    "BinaryOperator",
    "Call",
    "DivisionByZeroError",
    "DomainError",
    "EvaluationError",
    "EvaluationResult",
    "FunctionId",
    "FunctionSpec",
    "LexError",
    "Literal",
    "MathExtractError",
    "NestingTooDeepError",
    "NumericOverflowError",
    "ParseError",
    "ParsedExpression",
    "Span",
    "Token",
    "TokenKind",
    "UnaryOp",
    "UnaryOperator",
    "UnexpectedTokenError",
    "UnknownFunctionError",
    "evaluate",
    "evaluate_expression",
    "lookup_function",
    "parse",
    "parse_expression",
    "scan_candidates",
    "supported_functions",
    "to_source",
]
