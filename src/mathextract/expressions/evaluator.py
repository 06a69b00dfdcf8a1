"""Tree-walking evaluator for parsed expressions.

Evaluation is pure: the same tree always yields the same value or raises
the same error.  Children are evaluated left before right, so when both
sides of an operator fail, the left-hand error is the one reported.
"""

from __future__ import annotations

from dataclasses import dataclass

from mathextract.expressions.errors import (
    DivisionByZeroError,
    DomainError,
    EvaluationError,
    NumericOverflowError,
)
from mathextract.expressions.functions import get_function, power
from mathextract.expressions.nodes import (
    BinaryOp,
    BinaryOperator,
    Call,
    Expression,
    Literal,
    ParsedExpression,
    UnaryOp,
    UnaryOperator,
)


@dataclass(frozen=True)
class EvaluationResult:
    """Either a numeric value or the error that prevented one."""

    value: float | None = None
    error: EvaluationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def evaluate_expression(parsed: ParsedExpression) -> EvaluationResult:
    """Evaluate a parsed expression, capturing evaluation failures.

    Args:
        parsed: Output of ``parse()`` or ``parse_expression()``.

    Returns:
        An ``EvaluationResult`` holding the value or the error.
    """
    try:
        return EvaluationResult(value=evaluate(parsed.root))
    except EvaluationError as exc:
        return EvaluationResult(error=exc)


def evaluate(node: Expression) -> float:
    """Reduce a tree to a single float.

    Raises:
        DivisionByZeroError: Divisor evaluated to exactly zero.
        DomainError: Operation undefined over the reals.
        NumericOverflowError: Result too large for a double.
    """
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, UnaryOp):
        operand = evaluate(node.operand)
        if node.op is UnaryOperator.NEGATE:
            return -operand
        return operand

    if isinstance(node, BinaryOp):
        return _eval_binary(node)

    if isinstance(node, Call):
        return _eval_call(node)

    raise EvaluationError(f"Unknown node type: {type(node).__name__}")


def _eval_binary(node: BinaryOp) -> float:
    # Walk the left spine with a loop so long chains like 1+1+...+1 do not
    # recurse once per term.
    spine: list[BinaryOp] = []
    current: Expression = node
    while isinstance(current, BinaryOp):
        spine.append(current)
        current = current.left

    value = evaluate(current)
    for link in reversed(spine):
        value = _apply(link.op, value, evaluate(link.right))
    return value


def _apply(op: BinaryOperator, left: float, right: float) -> float:
    if op is BinaryOperator.ADD:
        return left + right
    if op is BinaryOperator.SUB:
        return left - right
    if op is BinaryOperator.MUL:
        return left * right
    if op is BinaryOperator.DIV:
        if right == 0.0:
            raise DivisionByZeroError()
        return left / right
    return power(left, right)


def _eval_call(node: Call) -> float:
    """Evaluate arguments left to right, then apply the function."""
    spec = get_function(node.function)
    args = [evaluate(arg) for arg in node.args]
    try:
        return spec.impl(*args)
    except OverflowError:
        raise NumericOverflowError(spec.name) from None
    except ValueError:
        # math raises ValueError for e.g. sin(inf)
        raise DomainError(spec.name, args[0] if len(args) == 1 else tuple(args)) from None
