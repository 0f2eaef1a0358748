"""Tokenizer for tag expressions.

Turns the inner text of a tag (``user.name | upper``) into a flat token list
for the recursive-descent evaluator in `tagsplice.evaluator.core`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from tagsplice.environment.exceptions import ErrorCode, TemplateRuntimeError


class TokenKind(Enum):
    NAME = "name"
    NUMBER = "number"
    STRING = "string"
    OP = "op"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    value: str
    pos: int


# Longest operators first so "<=" wins over "<".
_OPERATORS = (
    "==", "!=", "<=", ">=", "//",
    "<", ">", "+", "-", "*", "/", "%", "~", "|", ".", ",", ":", "=",
    "(", ")", "[", "]", "{", "}",
)

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"'}


def _error(message: str, source: str) -> TemplateRuntimeError:
    return TemplateRuntimeError(message, expression=source, code=ErrorCode.INVALID_EXPRESSION)


def _read_string(source: str, start: int) -> tuple[str, int]:
    quote = source[start]
    chars: list[str] = []
    i = start + 1
    length = len(source)
    while i < length:
        ch = source[i]
        if ch == "\\" and i + 1 < length:
            nxt = source[i + 1]
            chars.append(_ESCAPES.get(nxt, "\\" + nxt))
            i += 2
            continue
        if ch == quote:
            return "".join(chars), i + 1
        chars.append(ch)
        i += 1
    raise _error(f"Unterminated string literal starting at column {start}", source)


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression string.

    Raises:
        TemplateRuntimeError: On an unterminated string or an unknown character
            (code ``INVALID_EXPRESSION``).
    """
    tokens: list[Token] = []
    i = 0
    length = len(source)
    while i < length:
        ch = source[i]
        if ch.isspace():
            i += 1
            continue
        if ch in "\"'":
            value, i_next = _read_string(source, i)
            tokens.append(Token(TokenKind.STRING, value, i))
            i = i_next
            continue
        if ch.isdigit():
            m = _NUMBER_RE.match(source, i)
            assert m is not None
            tokens.append(Token(TokenKind.NUMBER, m.group(), i))
            i = m.end()
            continue
        m = _NAME_RE.match(source, i)
        if m:
            tokens.append(Token(TokenKind.NAME, m.group(), i))
            i = m.end()
            continue
        for op in _OPERATORS:
            if source.startswith(op, i):
                tokens.append(Token(TokenKind.OP, op, i))
                i += len(op)
                break
        else:
            raise _error(f"Unexpected character {ch!r} at column {i}", source)
    tokens.append(Token(TokenKind.EOF, "", length))
    return tokens
