"""Expression evaluation for tag contents."""

from tagsplice.evaluator.core import Evaluator
from tagsplice.evaluator.lexer import Token, TokenKind, tokenize

__all__ = ["Evaluator", "Token", "TokenKind", "tokenize"]
