"""Build syntax trees from token sequences.

Tokens are fed one by one into Lark's interactive LALR parser, which
enforces precedence and associativity and rejects malformed input.  The
resulting Lark tree is then converted into the immutable node types of
``mathextract.expressions.nodes``, checking function names and arities on
the way.
"""

from __future__ import annotations

from typing import Sequence

from lark import Token as LarkToken
from lark import Tree
from lark.exceptions import UnexpectedToken

from mathextract.expressions.errors import (
    ArityMismatchError,
    NestingTooDeepError,
    UnexpectedTokenError,
    UnknownFunctionError,
)
from mathextract.expressions.functions import lookup_function
from mathextract.expressions.grammar import (
    TERMINAL_DESCRIPTIONS,
    Token,
    lark_parser,
    tokenize,
)
from mathextract.expressions.nodes import (
    BinaryOp,
    BinaryOperator,
    Call,
    Expression,
    Literal,
    ParsedExpression,
    Span,
    UnaryOp,
    UnaryOperator,
)

# Deepest nesting (signs, call arguments, right operands) the builder and
# evaluator will recurse into.  Left-associative chains such as
# ``1+1+...+1`` are walked with a loop and do not count.
MAX_DEPTH = 250

_BINARY_RULES = {
    "add": BinaryOperator.ADD,
    "sub": BinaryOperator.SUB,
    "mul": BinaryOperator.MUL,
    "div": BinaryOperator.DIV,
    "pow": BinaryOperator.POW,
}

_UNARY_RULES = {
    "neg": UnaryOperator.NEGATE,
    "pos": UnaryOperator.PLUS,
}


def parse(tokens: Sequence[Token], span: Span | None = None) -> ParsedExpression:
    """Parse a complete token sequence into a single expression tree.

    Every token must be consumed; leftover tokens are a syntax error.

    Args:
        tokens: Output of ``tokenize()``.
        span: Source span the tokens came from.  Defaults to the range
            covered by the tokens.

    Returns:
        The parsed expression.

    Raises:
        UnexpectedTokenError: Grammar violation or premature end of input.
        UnknownFunctionError: Call to a name not in the function table.
        ArityMismatchError: Call with the wrong number of arguments.
        NestingTooDeepError: Tree deeper than ``MAX_DEPTH``.
    """
    tokens = list(tokens)
    if span is None:
        span = Span(tokens[0].position, tokens[-1].end) if tokens else Span(0, 0)

    interactive = lark_parser.parse_interactive("")
    try:
        for tok in tokens:
            interactive.feed_token(_to_lark_token(tok))
        end_pos = tokens[-1].end if tokens else span.start
        tree = interactive.feed_token(
            LarkToken("$END", "", start_pos=end_pos, line=1, column=end_pos + 1)
        )
    except UnexpectedToken as exc:
        raise _unexpected(exc) from None

    return ParsedExpression(root=_build(tree, 0), span=span)


def parse_expression(text: str, offset: int = 0) -> ParsedExpression:
    """Tokenize and parse an expression string.

    Args:
        text: The expression, e.g. ``"(2 + 3) * 4"``.
        offset: Absolute offset of *text* in its enclosing document.

    Raises:
        ParseError: Any lexing or parsing failure.
    """
    tokens = tokenize(text, offset=offset)
    return parse(tokens, Span(offset, offset + len(text)))


def _to_lark_token(tok: Token) -> LarkToken:
    return LarkToken(
        tok.terminal,
        tok.text,
        start_pos=tok.position,
        line=1,
        column=tok.position + 1,
        end_pos=tok.end,
    )


def _unexpected(exc: UnexpectedToken) -> UnexpectedTokenError:
    """Translate a Lark ``UnexpectedToken`` into our error type."""
    token = exc.token
    if token.type == "$END":
        found = TERMINAL_DESCRIPTIONS["$END"]
    else:
        found = str(token)
    expected = [TERMINAL_DESCRIPTIONS.get(name, name) for name in exc.expected]
    return UnexpectedTokenError(expected, found, position=token.start_pos)


def _build(node: Tree | LarkToken, depth: int) -> Expression:
    """Recursively convert a Lark tree into expression nodes."""
    if depth > MAX_DEPTH:
        raise NestingTooDeepError(MAX_DEPTH)

    if isinstance(node, LarkToken):
        # ``?start`` may inline a bare token; only numbers can appear here.
        return Literal(float(node))

    rule = node.data

    if rule == "number":
        return Literal(float(node.children[0]))

    if rule in _BINARY_RULES:
        return _build_chain(node, depth)

    if rule in _UNARY_RULES:
        return UnaryOp(_UNARY_RULES[rule], _build(node.children[0], depth + 1))

    if rule == "call":
        return _build_call(node, depth)

    raise UnexpectedTokenError([], str(rule))


def _build_chain(node: Tree, depth: int) -> Expression:
    """Build a run of binary operators by walking its left spine with a loop.

    Only right operands are built one level deeper, so a flat sum of any
    length stays within ``MAX_DEPTH``.  Operands are still built left to
    right.
    """
    links: list[tuple[BinaryOperator, Tree | LarkToken]] = []
    while isinstance(node, Tree) and node.data in _BINARY_RULES:
        left, right = node.children
        links.append((_BINARY_RULES[node.data], right))
        node = left

    result = _build(node, depth + 1)
    for op, right in reversed(links):
        result = BinaryOp(op, result, _build(right, depth + 1))
    return result


def _build_call(node: Tree, depth: int) -> Call:
    """Resolve the function name, check arity and build the arguments."""
    name_token, args_node = node.children
    name = str(name_token)
    position = name_token.start_pos

    spec = lookup_function(name)
    if spec is None:
        raise UnknownFunctionError(name, position=position)

    raw_args = args_node.children if args_node.children else []
    if len(raw_args) != spec.arity:
        raise ArityMismatchError(spec.name, spec.arity, len(raw_args), position=position)

    return Call(spec.id, tuple(_build(arg, depth + 1) for arg in raw_args))
