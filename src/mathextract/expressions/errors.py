"""Error types for expression lexing, parsing and evaluation."""

from __future__ import annotations

from typing import Iterable


class MathExtractError(Exception):
    """Base class for all expression-related errors.

    Attributes:
        code: Stable machine-readable error code.
        position: Absolute offset in the scanned text, when known.
    """

    code = "error"

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        self.message = message
        full = message
        if position is not None:
            full += f" (at position {position})"
        super().__init__(full)


# ---------------------------------------------------------------------------
# Parse-time errors
# ---------------------------------------------------------------------------


class ParseError(MathExtractError):
    """Any failure turning a candidate span into a syntax tree."""

    code = "parse_error"


class LexError(ParseError):
    """A character that cannot start or continue a token.

    Attributes:
        character: The offending character.
    """

    code = "lex_error"

    def __init__(self, character: str, position: int) -> None:
        self.character = character
        super().__init__(f"Invalid character {character!r}", position=position)


class UnexpectedTokenError(ParseError):
    """Grammar violation.

    Attributes:
        expected: Sorted token kinds that would have been accepted.
        found: Text of the token that was found, or ``"end of input"``.
    """

    code = "unexpected_token"

    def __init__(
        self, expected: Iterable[str], found: str, position: int | None = None
    ) -> None:
        self.expected = sorted(set(expected))
        self.found = found
        msg = f"Unexpected {found!r}"
        if self.expected:
            msg += f", expected one of {self.expected}"
        super().__init__(msg, position=position)


class UnknownFunctionError(ParseError):
    """Identifier used as a call target is not a supported function."""

    code = "unknown_function"

    def __init__(self, name: str, position: int | None = None) -> None:
        self.name = name
        super().__init__(f"Unknown function: {name!r}", position=position)


class ArityMismatchError(ParseError):
    """Function called with the wrong number of arguments."""

    code = "arity_mismatch"

    def __init__(
        self, function: str, expected: int, got: int, position: int | None = None
    ) -> None:
        self.function = function
        self.expected = expected
        self.got = got
        super().__init__(
            f"{function} expects {expected} argument(s), got {got}",
            position=position,
        )


class NestingTooDeepError(ParseError):
    """Expression tree deeper than the builder will recurse."""

    code = "nesting_too_deep"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Expression nested more than {limit} levels deep")


# ---------------------------------------------------------------------------
# Evaluation-time errors
# ---------------------------------------------------------------------------


class EvaluationError(MathExtractError):
    """Any failure reducing a syntax tree to a number."""

    code = "evaluation_error"


class DivisionByZeroError(EvaluationError):
    """Divisor evaluated to exactly zero."""

    code = "division_by_zero"

    def __init__(self, message: str = "Division by zero") -> None:
        super().__init__(message)


class DomainError(EvaluationError):
    """Operation has no real-valued result at the given inputs.

    Attributes:
        function: Name of the function or operator (``"^"``).
        argument: The offending argument value(s).
    """

    code = "domain_error"

    def __init__(self, function: str, argument: float | tuple[float, ...]) -> None:
        self.function = function
        self.argument = argument
        super().__init__(f"{function} is undefined for argument {argument!r}")


class NumericOverflowError(EvaluationError):
    """Result is too large to represent as a double."""

    code = "numeric_overflow"

    def __init__(self, function: str) -> None:
        self.function = function
        super().__init__(f"Numeric overflow in {function}")
