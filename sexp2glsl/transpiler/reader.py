"""
S-expression reader for shader forms.

This module turns s-expression text such as ``(set! (.xyz color) (* a b))``
into expression tree nodes, and loads shader program files built from them.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from sexp2glsl.transpiler.errors import ReaderError, TranspilerError
from sexp2glsl.transpiler.forms import (
    EMPTY,
    Call,
    Keyword,
    Literal,
    Node,
    Symbol,
    Vector,
)
from sexp2glsl.transpiler.models import ShaderProgram

_TOKEN_RE = re.compile(
    r"""
    (?P<space>[\s,]+)
  | (?P<comment>;[^\n]*)
  | (?P<open>[(\[])
  | (?P<close>[)\]])
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<atom>[^\s,;()\[\]"]+)
    """,
    re.VERBOSE,
)

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?")

_CLOSERS = {"(": ")", "[": "]"}
_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


@dataclass
class _Token:
    kind: str
    text: str
    line: int
    column: int


def _tokenize(text: str) -> Iterator[_Token]:
    line, line_start, pos = 1, 0, 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            column = pos - line_start + 1
            raise ReaderError(f"Unexpected character {text[pos]!r}", line, column)
        kind = match.lastgroup
        token_text = match.group()
        if kind not in ("space", "comment"):
            yield _Token(kind, token_text, line, pos - line_start + 1)
        newlines = token_text.count("\n")
        if newlines:
            line += newlines
            line_start = pos + token_text.rindex("\n") + 1
        pos = match.end()


def _unescape(token: _Token) -> str:
    body = token.text[1:-1]
    result: list[str] = []
    chars = iter(body)
    for char in chars:
        if char == "\\":
            escaped = next(chars)
            if escaped not in _ESCAPES:
                raise ReaderError(
                    f"Unknown escape '\\{escaped}'", token.line, token.column
                )
            result.append(_ESCAPES[escaped])
        else:
            result.append(char)
    return "".join(result)


def _read_atom(token: _Token) -> Node:
    text = token.text
    if text == "true":
        return Literal(True)
    if text == "false":
        return Literal(False)
    if _INT_RE.fullmatch(text):
        return Literal(int(text))
    if _FLOAT_RE.fullmatch(text):
        return Literal(float(text))
    if text.startswith(":"):
        if len(text) == 1:
            raise ReaderError("Empty keyword", token.line, token.column)
        return Keyword(text[1:])
    return Symbol(text)


def _read_sequence(open_token: _Token, tokens: Iterator[_Token]) -> Node:
    closer = _CLOSERS[open_token.text]
    items: list[Node] = []
    for token in tokens:
        if token.kind == "close":
            if token.text != closer:
                raise ReaderError(
                    f"Expected '{closer}' but found '{token.text}'",
                    token.line,
                    token.column,
                )
            break
        items.append(_read_token(token, tokens))
    else:
        raise ReaderError(
            f"Unclosed '{open_token.text}'", open_token.line, open_token.column
        )

    if open_token.text == "[":
        return Vector(tuple(items))
    if not items:
        return EMPTY
    head = items[0]
    if not isinstance(head, Symbol):
        raise ReaderError(
            "Form operator must be a symbol", open_token.line, open_token.column
        )
    return Call(head, tuple(items[1:]))


def _read_token(token: _Token, tokens: Iterator[_Token]) -> Node:
    match token.kind:
        case "open":
            return _read_sequence(token, tokens)
        case "close":
            raise ReaderError(f"Unexpected '{token.text}'", token.line, token.column)
        case "string":
            return Literal(_unescape(token))
    return _read_atom(token)


def read(text: str) -> list[Node]:
    """Read every top-level form from s-expression text.

    Args:
        text: Source text containing zero or more forms

    Returns:
        List of expression tree nodes in source order

    Raises:
        ReaderError: If the text is not well-formed
    """
    tokens = _tokenize(text)
    forms = [_read_token(token, tokens) for token in tokens]
    logger.debug(f"Read {len(forms)} top-level forms")
    return forms


def read_one(text: str) -> Node:
    """Read exactly one form from s-expression text."""
    forms = read(text)
    if len(forms) != 1:
        raise TranspilerError(f"Expected exactly one form, found {len(forms)}")
    return forms[0]


def load_program(path: str | Path) -> ShaderProgram:
    """Load a shader program file.

    A program file holds the top-level forms ``(extensions "...")``,
    ``(declarations entry ...)``, ``(vertex form ...)`` and
    ``(fragment form ...)``. Each may appear at most once.

    Args:
        path: Path to the program file

    Returns:
        The parsed shader program

    Raises:
        TranspilerError: If the file contains an unknown or repeated section
    """
    path = Path(path)
    logger.debug(f"Loading shader program from {path}")
    program = ShaderProgram()
    seen: set[str] = set()

    for form in read(path.read_text()):
        if not isinstance(form, Call):
            raise TranspilerError("Expected a program section", form)
        if form.name in seen:
            raise TranspilerError(f"Duplicate '{form.name}' section", form)
        seen.add(form.name)

        match form.name:
            case "declarations":
                program.declarations = list(form.args)
            case "vertex":
                program.vertex = list(form.args)
            case "fragment":
                program.fragment = list(form.args)
            case "extensions":
                texts = []
                for arg in form.args:
                    if not (isinstance(arg, Literal) and isinstance(arg.value, str)):
                        raise TranspilerError("Extensions must be strings", form)
                    texts.append(arg.value)
                program.extensions = "\n".join(texts)
            case _:
                raise TranspilerError(f"Unknown program section '{form.name}'", form)

    return program
