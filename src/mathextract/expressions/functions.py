"""Supported named functions: a closed enum plus one lookup table.

Adding a function means adding a ``FunctionId`` member and a row in
``_FUNC_TABLE``.  Implementations receive already-evaluated float arguments
and raise ``EvaluationError`` subclasses for inputs outside their domain.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from mathextract.expressions.errors import (
    DivisionByZeroError,
    DomainError,
    NumericOverflowError,
)


class FunctionId(str, Enum):
    sin = "sin"
    cos = "cos"
    tan = "tan"
    asin = "asin"
    acos = "acos"
    atan = "atan"
    exp = "exp"
    ln = "ln"
    log10 = "log10"
    sqrt = "sqrt"
    abs = "abs"
    pow = "pow"
    log = "log"
    root = "root"


@dataclass(frozen=True)
class FunctionSpec:
    """Arity and numeric semantics of one function."""

    id: FunctionId
    arity: int
    impl: Callable[..., float]
    summary: str = ""

    @property
    def name(self) -> str:
        return self.id.value


# ---------------------------------------------------------------------------
# Shared power rule (used by both ``^`` and ``pow``)
# ---------------------------------------------------------------------------


def power(base: float, exponent: float, name: str = "^") -> float:
    """Real exponentiation.

    Raises:
        DomainError: Negative base with a non-integer exponent.
        DivisionByZeroError: Zero base with a negative exponent.
        NumericOverflowError: Result exceeds the double range.
    """
    if base < 0 and not float(exponent).is_integer():
        raise DomainError(name, (base, exponent))
    if base == 0 and exponent < 0:
        raise DivisionByZeroError(f"{name}: zero raised to a negative power")
    try:
        return math.pow(base, exponent)
    except OverflowError:
        raise NumericOverflowError(name) from None


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------


def _fn_asin(x: float) -> float:
    if not -1.0 <= x <= 1.0:
        raise DomainError("asin", x)
    return math.asin(x)


def _fn_acos(x: float) -> float:
    if not -1.0 <= x <= 1.0:
        raise DomainError("acos", x)
    return math.acos(x)


def _fn_exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        raise NumericOverflowError("exp") from None


def _fn_ln(x: float) -> float:
    if x <= 0:
        raise DomainError("ln", x)
    return math.log(x)


def _fn_log10(x: float) -> float:
    if x <= 0:
        raise DomainError("log10", x)
    return math.log10(x)


def _fn_sqrt(x: float) -> float:
    if x < 0:
        raise DomainError("sqrt", x)
    return math.sqrt(x)


def _fn_pow(base: float, exponent: float) -> float:
    return power(base, exponent, name="pow")


def _fn_log(value: float, base: float) -> float:
    """log(value, base): logarithm of *value* in an arbitrary *base*."""
    if value <= 0 or base <= 0 or base == 1:
        raise DomainError("log", (value, base))
    return math.log(value) / math.log(base)


def _fn_root(value: float, degree: float) -> float:
    """root(value, degree): real *degree*-th root.

    Odd integer roots of negative values are real (``root(-27, 3) == -3``).
    """
    if degree == 0:
        raise DomainError("root", (value, degree))
    if value < 0:
        if not (float(degree).is_integer() and int(degree) % 2 == 1):
            raise DomainError("root", (value, degree))
        return -power(-value, 1.0 / degree, name="root")
    return power(value, 1.0 / degree, name="root")


_FUNC_TABLE: dict[FunctionId, FunctionSpec] = {
    spec.id: spec
    for spec in (
        FunctionSpec(FunctionId.sin, 1, math.sin, "sine (radians)"),
        FunctionSpec(FunctionId.cos, 1, math.cos, "cosine (radians)"),
        FunctionSpec(FunctionId.tan, 1, math.tan, "tangent (radians)"),
        FunctionSpec(FunctionId.asin, 1, _fn_asin, "inverse sine"),
        FunctionSpec(FunctionId.acos, 1, _fn_acos, "inverse cosine"),
        FunctionSpec(FunctionId.atan, 1, math.atan, "inverse tangent"),
        FunctionSpec(FunctionId.exp, 1, _fn_exp, "e raised to x"),
        FunctionSpec(FunctionId.ln, 1, _fn_ln, "natural logarithm"),
        FunctionSpec(FunctionId.log10, 1, _fn_log10, "base-10 logarithm"),
        FunctionSpec(FunctionId.sqrt, 1, _fn_sqrt, "square root"),
        FunctionSpec(FunctionId.abs, 1, math.fabs, "absolute value"),
        FunctionSpec(FunctionId.pow, 2, _fn_pow, "base raised to exponent"),
        FunctionSpec(FunctionId.log, 2, _fn_log, "logarithm of value in base"),
        FunctionSpec(FunctionId.root, 2, _fn_root, "degree-th root of value"),
    )
}


def lookup_function(name: str) -> FunctionSpec | None:
    """Return the table entry for *name* (case-insensitive), or None."""
    try:
        return _FUNC_TABLE[FunctionId(name.lower())]
    except ValueError:
        return None


def get_function(function: FunctionId) -> FunctionSpec:
    """Return the table entry for a known ``FunctionId``."""
    return _FUNC_TABLE[function]


def supported_functions() -> list[FunctionSpec]:
    """All supported functions, in declaration order."""
    return [_FUNC_TABLE[fid] for fid in FunctionId]
