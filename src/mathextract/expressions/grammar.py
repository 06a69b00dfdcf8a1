"""Lark grammar for arithmetic expressions, tokenizer and candidate scanner.

Supports:
- Decimal numbers with optional fraction and exponent: ``3``, ``2.5``, ``1e-3``
- Binary ``+ - * /`` (left-associative) and ``^`` (right-associative)
- Unary ``-`` and ``+``
- Function calls: ``sin(x)``, ``log(8, 2)``
- Parenthesised sub-expressions
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from mathextract.expressions.errors import LexError
from mathextract.expressions.nodes import Span

# LALR(1) grammar.
# Operator precedence (lowest to highest):
#   1. Addition/subtraction: + -
#   2. Multiplication/division: * /
#   3. Unary plus/minus: + -
#   4. Exponentiation: ^ (right-associative, exponent may be signed)
#   5. Atoms: number, function call, parenthesised expr
GRAMMAR = r"""
?start: expr

?expr: term
    | expr _PLUS term   -> add
    | expr _MINUS term  -> sub

?term: unary
    | term _STAR unary   -> mul
    | term _SLASH unary  -> div

?unary: power
    | _MINUS unary  -> neg
    | _PLUS unary   -> pos

?power: atom
    | atom _CARET unary  -> pow

?atom: NUMBER                   -> number
    | NAME _LPAR args _RPAR     -> call
    | _LPAR expr _RPAR

args: expr (_COMMA expr)*
    |

_PLUS: "+"
_MINUS: "-"
_STAR: "*"
_SLASH: "/"
_CARET: "^"
_LPAR: "("
_RPAR: ")"
_COMMA: ","

NUMBER: /[0-9]+(\.[0-9]+)?([eE][+-]?[0-9]+)?/
NAME: /[A-Za-z][A-Za-z0-9]*/

// Same class as the scanner's gap check (Python \s, Unicode-aware).
WS: /\s+/
%ignore WS
"""

lark_parser = Lark(GRAMMAR, parser="lalr", lexer="basic", start="start")


class TokenKind(str, Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    LPAREN = "lparen"
    RPAREN = "rparen"
    COMMA = "comma"


# Lark terminal name <-> token kind.
_TERMINAL_KINDS: dict[str, TokenKind] = {
    "NUMBER": TokenKind.NUMBER,
    "NAME": TokenKind.IDENTIFIER,
    "_PLUS": TokenKind.OPERATOR,
    "_MINUS": TokenKind.OPERATOR,
    "_STAR": TokenKind.OPERATOR,
    "_SLASH": TokenKind.OPERATOR,
    "_CARET": TokenKind.OPERATOR,
    "_LPAR": TokenKind.LPAREN,
    "_RPAR": TokenKind.RPAREN,
    "_COMMA": TokenKind.COMMA,
}

_OPERATOR_TERMINALS = {
    "+": "_PLUS",
    "-": "_MINUS",
    "*": "_STAR",
    "/": "_SLASH",
    "^": "_CARET",
}

_KIND_TERMINALS = {
    TokenKind.NUMBER: "NUMBER",
    TokenKind.IDENTIFIER: "NAME",
    TokenKind.LPAREN: "_LPAR",
    TokenKind.RPAREN: "_RPAR",
    TokenKind.COMMA: "_COMMA",
}

# Human-readable names for error messages.
TERMINAL_DESCRIPTIONS = {
    "NUMBER": "number",
    "NAME": "identifier",
    "_PLUS": "'+'",
    "_MINUS": "'-'",
    "_STAR": "'*'",
    "_SLASH": "'/'",
    "_CARET": "'^'",
    "_LPAR": "'('",
    "_RPAR": "')'",
    "_COMMA": "','",
    "$END": "end of input",
}


@dataclass(frozen=True)
class Token:
    """One lexical unit.

    Attributes:
        kind: Token category.
        text: Raw source text of the token.
        position: Absolute offset of the first character.
        value: Decimal value, for ``NUMBER`` tokens only.
    """

    kind: TokenKind
    text: str
    position: int
    value: float | None = None

    @property
    def end(self) -> int:
        return self.position + len(self.text)

    @property
    def terminal(self) -> str:
        """Grammar terminal name this token is fed to the parser as."""
        if self.kind is TokenKind.OPERATOR:
            return _OPERATOR_TERMINALS[self.text]
        return _KIND_TERMINALS[self.kind]


def tokenize(text: str, offset: int = 0) -> list[Token]:
    """Split *text* into tokens, skipping whitespace.

    Args:
        text: The expression text, e.g. ``"2 + sin(0)"``.
        offset: Added to every token position, so positions can refer to
            the enclosing document rather than the slice.

    Returns:
        Tokens in source order.

    Raises:
        LexError: On a character that cannot start a token.
    """
    tokens: list[Token] = []
    try:
        for raw in lark_parser.lex(text):
            kind = _TERMINAL_KINDS[raw.type]
            value = float(raw.value) if kind is TokenKind.NUMBER else None
            tokens.append(Token(kind, str(raw.value), raw.start_pos + offset, value))
    except UnexpectedCharacters as exc:
        pos = exc.pos_in_stream
        raise LexError(text[pos], position=pos + offset) from None
    return tokens


# ---------------------------------------------------------------------------
# Candidate scanning
# ---------------------------------------------------------------------------

# Expression pieces inside prose.  Numbers glued to letters (``3rd``, ``x2``)
# and dotted version strings are prose, not numbers.
_PIECE_RE = re.compile(
    r"""
      (?P<number>(?<![\w.])[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?(?!\w|\.[0-9]))
    | (?P<call>(?<!\w)[A-Za-z][A-Za-z0-9]*(?=\())
    | (?P<op>[-+*/^])
    | (?P<lpar>\()
    | (?P<rpar>\))
    | (?P<comma>,)
    """,
    re.VERBOSE,
)

_OPERAND_START = frozenset({"number", "call", "lpar"})
_OPERAND_END = frozenset({"number", "rpar"})

# Whitespace between pieces; the grammar's ignored WS terminal is the same class.
_GAP_RE = re.compile(r"\s*")


def _opens_run(kind: str, text: str) -> bool:
    return kind in _OPERAND_START or (kind == "op" and text in "+-")


def scan_candidates(text: str, start: int = 0) -> Iterator[Span]:
    """Yield candidate expression spans in *text*, left to right.

    A candidate is a maximal run of expression pieces separated only by
    whitespace.  A run ends at prose, at a comma or ``)`` outside any open
    parenthesis, or where one operand directly follows another (``3 4``).
    A run is kept if it holds a number, or a call whose parentheses all
    close (``sin()``); anything else is dropped.  Malformed runs such as
    ``(1+`` are still yielded so the caller can report them.

    Args:
        text: Arbitrary text.
        start: Offset to resume scanning from.
    """
    run_start: int | None = None
    run_end = 0
    depth = 0
    has_number = False
    has_call = False
    prev = ""

    for m in _PIECE_RE.finditer(text, start):
        kind = m.lastgroup or ""
        if run_start is not None:
            joins = (
                _GAP_RE.fullmatch(text, run_end, m.start()) is not None
                and not (prev in _OPERAND_END and kind in _OPERAND_START)
                and not (kind in ("rpar", "comma") and depth == 0)
            )
            if joins:
                run_end = m.end()
                prev = kind
                has_number = has_number or kind == "number"
                has_call = has_call or kind == "call"
                if kind in ("lpar", "rpar"):
                    depth += 1 if kind == "lpar" else -1
                continue
            if has_number or (has_call and depth == 0):
                yield Span(run_start, run_end)
            run_start = None

        if _opens_run(kind, m.group()):
            run_start, run_end = m.start(), m.end()
            depth = 1 if kind == "lpar" else 0
            has_number = kind == "number"
            has_call = kind == "call"
            prev = kind

    if run_start is not None and (has_number or (has_call and depth == 0)):
        yield Span(run_start, run_end)
