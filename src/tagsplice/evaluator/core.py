"""Expression evaluator for tagsplice tags.

Expressions are parsed once into a tree of closures, each taking the
current `Scope` and returning a value. The compiled closure is cached per
Evaluator, so an expression re-evaluated on every loop iteration is only
tokenized once. Names, filters and tests are resolved at call time, so
registrations made after compilation are honored.

Grammar (lowest to highest precedence):
    conditional := or ["if" or ["else" conditional]]
    or          := and ("or" and)*
    and         := not ("and" not)*
    not         := "not" not | compare
    compare     := add (("=="|"!="|"<"|"<="|">"|">="|"in"|"not" "in") add
                      | "is" ["not"] NAME [call_args])*
    add         := mul (("+"|"-"|"~") mul)*
    mul         := unary (("*"|"/"|"//"|"%") unary)*
    unary       := ("-"|"+") unary | postfix
    postfix     := primary ("." NAME | "[" subscript "]" | call_args
                            | "|" NAME [call_args])*
    primary     := NUMBER | STRING | NAME | "(" conditional ")"
                 | "[" [items] "]" | "{" [pairs] "}"

Undefined names evaluate to ``UNDEFINED`` (rendered as ``""``) unless the
Environment is strict, in which case `UndefinedError` is raised. The
subject of an ``is`` test and the input of ``default`` stay tolerant even
then, so ``{{ x is defined }}`` and ``{{ x | default("") }}`` still work.

"""

from __future__ import annotations

import operator
from collections.abc import Callable
from difflib import get_close_matches
from typing import TYPE_CHECKING, Any

from tagsplice.environment.exceptions import (
    ErrorCode,
    TemplateError,
    TemplateRuntimeError,
    UndefinedError,
)
from tagsplice.evaluator.lexer import Token, TokenKind, tokenize
from tagsplice.template.helpers import (
    UNDEFINED,
    _Undefined,
    coerce_numeric,
    is_truthy,
    safe_getattr,
    safe_getitem,
    to_output,
)

if TYPE_CHECKING:
    from tagsplice.environment.core import Environment
    from tagsplice.scope import Scope

Compiled = Callable[["Scope"], Any]

_KEYWORDS = frozenset({"and", "or", "not", "in", "is", "if", "else"})
_CONSTANTS: dict[str, Any] = {
    "true": True,
    "True": True,
    "false": False,
    "False": False,
    "null": None,
    "none": None,
    "None": None,
}
_COMPARE_OPS = frozenset({"==", "!=", "<", "<=", ">", ">="})
_ORDERING: dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

# Filters that receive UNDEFINED instead of raising in strict mode.
_UNDEFINED_TOLERANT_FILTERS = frozenset({"default", "d"})

# Bound on cached compiled expressions per Evaluator.
_CACHE_SIZE = 1024


def _contains(container: Any, item: Any) -> bool:
    if container is None or isinstance(container, _Undefined):
        return False
    try:
        return item in container
    except TypeError:
        return False


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return bool(left == right)
    if op == "!=":
        return bool(left != right)
    if op == "in":
        return _contains(right, left)
    if op == "not in":
        return not _contains(right, left)
    try:
        return bool(_ORDERING[op](left, right))
    except TypeError:
        return bool(_ORDERING[op](coerce_numeric(left), coerce_numeric(right)))


def _arith(op: str, left: Any, right: Any) -> Any:
    if op == "~":
        return to_output(left) + to_output(right)
    if op == "+":
        if isinstance(left, str) or isinstance(right, str):
            return to_output(left) + to_output(right)
        if isinstance(left, list) and isinstance(right, list):
            return left + right
        return coerce_numeric(left) + coerce_numeric(right)
    if (
        op == "*"
        and isinstance(left, str)
        and isinstance(right, int)
        and not isinstance(right, bool)
    ):
        return left * right
    a = coerce_numeric(left)
    b = coerce_numeric(right)
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if op == "/":
        return a / b
    if op == "//":
        return a // b
    return a % b


class _Parser:
    """Single-use recursive-descent parser producing a compiled closure."""

    __slots__ = ("_env", "_pos", "_source", "_tokens")

    def __init__(self, source: str, env: Environment):
        self._source = source
        self._env = env
        self._tokens = tokenize(source)
        self._pos = 0

    # ─────────────────────────────────────────────────────────────────────
    # Token navigation
    # ─────────────────────────────────────────────────────────────────────

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 1) -> Token:
        idx = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[idx]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.kind is not TokenKind.EOF:
            self._pos += 1
        return token

    def _at_op(self, *ops: str) -> bool:
        token = self._current
        return token.kind is TokenKind.OP and token.value in ops

    def _at_name(self, *names: str) -> bool:
        token = self._current
        return token.kind is TokenKind.NAME and token.value in names

    def _expect_op(self, op: str) -> Token:
        if not self._at_op(op):
            raise self._error(f"Expected '{op}'")
        return self._advance()

    def _expect_name(self) -> str:
        token = self._current
        if token.kind is not TokenKind.NAME:
            raise self._error("Expected a name")
        self._advance()
        return token.value

    def _error(self, message: str) -> TemplateRuntimeError:
        token = self._current
        found = "end of expression" if token.kind is TokenKind.EOF else repr(token.value)
        return TemplateRuntimeError(
            f"{message}, found {found} at column {token.pos}",
            expression=self._source,
            code=ErrorCode.INVALID_EXPRESSION,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Grammar
    # ─────────────────────────────────────────────────────────────────────

    def parse(self) -> Compiled:
        if self._current.kind is TokenKind.EOF:
            raise self._error("Empty expression")
        node = self._parse_conditional()
        if self._current.kind is not TokenKind.EOF:
            raise self._error("Unexpected token")
        return node

    def _parse_conditional(self) -> Compiled:
        body = self._parse_or()
        if not self._at_name("if"):
            return body
        self._advance()
        test = self._parse_or()
        if self._at_name("else"):
            self._advance()
            orelse = self._parse_conditional()
        else:
            orelse = lambda scope: UNDEFINED  # noqa: E731

        def conditional(scope: Scope) -> Any:
            return body(scope) if is_truthy(test(scope)) else orelse(scope)

        return conditional

    def _parse_or(self) -> Compiled:
        operands = [self._parse_and()]
        while self._at_name("or"):
            self._advance()
            operands.append(self._parse_and())
        if len(operands) == 1:
            return operands[0]
        return lambda scope: any(is_truthy(op(scope)) for op in operands)

    def _parse_and(self) -> Compiled:
        operands = [self._parse_not()]
        while self._at_name("and"):
            self._advance()
            operands.append(self._parse_not())
        if len(operands) == 1:
            return operands[0]
        return lambda scope: all(is_truthy(op(scope)) for op in operands)

    def _parse_not(self) -> Compiled:
        if self._at_name("not"):
            self._advance()
            operand = self._parse_not()
            return lambda scope: not is_truthy(operand(scope))
        return self._parse_compare()

    def _parse_compare(self) -> Compiled:
        left = self._parse_add()
        chain: list[tuple[str, Any, Any]] = []
        while True:
            token = self._current
            if token.kind is TokenKind.OP and token.value in _COMPARE_OPS:
                self._advance()
                chain.append((token.value, self._parse_add(), None))
            elif self._at_name("in"):
                self._advance()
                chain.append(("in", self._parse_add(), None))
            elif self._at_name("not") and self._peek().value == "in":
                self._advance()
                self._advance()
                chain.append(("not in", self._parse_add(), None))
            elif self._at_name("is"):
                self._advance()
                negate = False
                if self._at_name("not"):
                    self._advance()
                    negate = True
                test_name = self._expect_name()
                args: tuple[list[Compiled], dict[str, Compiled]] = ([], {})
                if self._at_op("("):
                    args = self._parse_call_args()
                chain.append(("is", test_name, (args, negate)))
            else:
                break

        if not chain:
            return left

        run_test = self._run_test

        tests_first = chain[0][0] == "is"

        def compare(scope: Scope) -> bool:
            try:
                value = left(scope)
            except UndefinedError:
                # `is defined` and friends must see missing names in strict mode.
                if not tests_first:
                    raise
                value = UNDEFINED
            for op, operand, extra in chain:
                if op == "is":
                    (arg_fns, kwarg_fns), negate = extra
                    passed = run_test(
                        operand,
                        value,
                        [fn(scope) for fn in arg_fns],
                        {k: fn(scope) for k, fn in kwarg_fns.items()},
                    )
                    if passed == negate:
                        return False
                    continue
                right = operand(scope)
                if not _compare(op, value, right):
                    return False
                value = right
            return True

        return compare

    def _parse_binary(self, ops: tuple[str, ...], operand: Callable[[], Compiled]) -> Compiled:
        node = operand()
        while self._at_op(*ops):
            op = self._advance().value
            node = self._binary(op, node, operand())
        return node

    @staticmethod
    def _binary(op: str, left: Compiled, right: Compiled) -> Compiled:
        return lambda scope: _arith(op, left(scope), right(scope))

    def _parse_add(self) -> Compiled:
        return self._parse_binary(("+", "-", "~"), self._parse_mul)

    def _parse_mul(self) -> Compiled:
        return self._parse_binary(("*", "/", "//", "%"), self._parse_unary)

    def _parse_unary(self) -> Compiled:
        if self._at_op("-"):
            self._advance()
            operand = self._parse_unary()
            return lambda scope: -coerce_numeric(operand(scope))
        if self._at_op("+"):
            self._advance()
            operand = self._parse_unary()
            return lambda scope: coerce_numeric(operand(scope))
        return self._parse_postfix()

    def _parse_postfix(self) -> Compiled:
        node = self._parse_primary()
        while True:
            if self._at_op("."):
                self._advance()
                token = self._advance()
                if token.kind is TokenKind.NAME:
                    node = self._attribute(node, token.value)
                elif token.kind is TokenKind.NUMBER and token.value.isdigit():
                    node = self._item(node, lambda scope, k=int(token.value): k)
                else:
                    self._pos -= 1
                    raise self._error("Expected an attribute name after '.'")
            elif self._at_op("["):
                self._advance()
                node = self._parse_subscript(node)
                self._expect_op("]")
            elif self._at_op("("):
                node = self._call(node, *self._parse_call_args())
            elif self._at_op("|"):
                self._advance()
                name = self._expect_name()
                args: tuple[list[Compiled], dict[str, Compiled]] = ([], {})
                if self._at_op("("):
                    args = self._parse_call_args()
                node = self._filter(node, name, *args)
            else:
                return node

    def _parse_subscript(self, target: Compiled) -> Compiled:
        start: Compiled | None = None
        if not self._at_op(":"):
            start = self._parse_conditional()
            if not self._at_op(":"):
                return self._item(target, start)
        self._advance()  # consume ':'
        stop: Compiled | None = None
        if not self._at_op("]"):
            stop = self._parse_conditional()

        def slice_(scope: Scope) -> Any:
            value = target(scope)
            lower = start(scope) if start else None
            upper = stop(scope) if stop else None
            try:
                return value[lower:upper]
            except TypeError:
                return UNDEFINED

        return slice_

    def _parse_call_args(self) -> tuple[list[Compiled], dict[str, Compiled]]:
        self._expect_op("(")
        args: list[Compiled] = []
        kwargs: dict[str, Compiled] = {}
        while not self._at_op(")"):
            token = self._current
            if token.kind is TokenKind.NAME and self._peek().kind is TokenKind.OP and self._peek().value == "=":
                self._advance()
                self._advance()
                kwargs[token.value] = self._parse_conditional()
            else:
                if kwargs:
                    raise self._error("Positional argument after keyword argument")
                args.append(self._parse_conditional())
            if not self._at_op(","):
                break
            self._advance()
        self._expect_op(")")
        return args, kwargs

    def _parse_primary(self) -> Compiled:
        token = self._current

        if token.kind is TokenKind.NUMBER:
            self._advance()
            text = token.value
            value: Any = float(text) if ("." in text or "e" in text or "E" in text) else int(text)
            return lambda scope: value

        if token.kind is TokenKind.STRING:
            self._advance()
            text = token.value
            return lambda scope: text

        if token.kind is TokenKind.NAME:
            if token.value in _CONSTANTS:
                self._advance()
                constant = _CONSTANTS[token.value]
                return lambda scope: constant
            if token.value in _KEYWORDS:
                raise self._error("Unexpected keyword")
            self._advance()
            return self._lookup(token.value)

        if self._at_op("("):
            self._advance()
            node = self._parse_conditional()
            self._expect_op(")")
            return node

        if self._at_op("["):
            self._advance()
            items: list[Compiled] = []
            while not self._at_op("]"):
                items.append(self._parse_conditional())
                if not self._at_op(","):
                    break
                self._advance()
            self._expect_op("]")
            return lambda scope: [item(scope) for item in items]

        if self._at_op("{"):
            self._advance()
            pairs: list[tuple[Compiled, Compiled]] = []
            while not self._at_op("}"):
                key = self._parse_conditional()
                self._expect_op(":")
                pairs.append((key, self._parse_conditional()))
                if not self._at_op(","):
                    break
                self._advance()
            self._expect_op("}")
            return lambda scope: {k(scope): v(scope) for k, v in pairs}

        raise self._error("Unexpected token")

    # ─────────────────────────────────────────────────────────────────────
    # Node builders
    # ─────────────────────────────────────────────────────────────────────

    def _lookup(self, name: str) -> Compiled:
        env = self._env

        def lookup(scope: Scope) -> Any:
            if name in scope:
                return scope[name]
            env_globals = env.globals
            if name in env_globals:
                return env_globals[name]
            if env.strict:
                raise UndefinedError(
                    name, available_names=scope.names() | frozenset(env_globals.keys())
                )
            return UNDEFINED

        return lookup

    @staticmethod
    def _attribute(target: Compiled, name: str) -> Compiled:
        return lambda scope: safe_getattr(target(scope), name)

    @staticmethod
    def _item(target: Compiled, key: Compiled) -> Compiled:
        return lambda scope: safe_getitem(target(scope), key(scope))

    def _call(
        self, target: Compiled, args: list[Compiled], kwargs: dict[str, Compiled]
    ) -> Compiled:
        env = self._env
        source = self._source

        def call(scope: Scope) -> Any:
            func = target(scope)
            if not callable(func):
                if isinstance(func, _Undefined) and not env.strict:
                    return UNDEFINED
                raise TemplateRuntimeError(
                    f"{type(func).__name__} value is not callable",
                    expression=source,
                    code=ErrorCode.NOT_CALLABLE,
                )
            return func(*[a(scope) for a in args], **{k: v(scope) for k, v in kwargs.items()})

        return call

    def _filter(
        self,
        target: Compiled,
        name: str,
        args: list[Compiled],
        kwargs: dict[str, Compiled],
    ) -> Compiled:
        env = self._env
        source = self._source

        def apply(scope: Scope) -> Any:
            func = env.filters.get(name)
            if func is None:
                matches = get_close_matches(name, list(env.filters.keys()), n=1, cutoff=0.6)
                raise TemplateRuntimeError(
                    f"Unknown filter '{name}'",
                    expression=source,
                    suggestion=f"Did you mean '{matches[0]}'?" if matches else None,
                    code=ErrorCode.UNKNOWN_FILTER,
                )
            try:
                value = target(scope)
            except UndefinedError:
                if name not in _UNDEFINED_TOLERANT_FILTERS:
                    raise
                value = UNDEFINED
            return func(
                value,
                *[a(scope) for a in args],
                **{k: v(scope) for k, v in kwargs.items()},
            )

        return apply

    def _run_test(self, name: str, value: Any, args: list[Any], kwargs: dict[str, Any]) -> bool:
        func = self._env.tests.get(name)
        if func is None:
            matches = get_close_matches(name, list(self._env.tests.keys()), n=1, cutoff=0.6)
            raise TemplateRuntimeError(
                f"Unknown test '{name}'",
                expression=self._source,
                suggestion=f"Did you mean '{matches[0]}'?" if matches else None,
                code=ErrorCode.UNKNOWN_TEST,
            )
        return bool(func(value, *args, **kwargs))


class Evaluator:
    """Evaluate expression strings against a `Scope`.

    Example:
        >>> from tagsplice import Environment
        >>> from tagsplice.scope import Scope
        >>> ev = Evaluator(Environment())
        >>> ev.evaluate("user.name | upper", Scope({"user": {"name": "ada"}}))
        'ADA'

    Errors:
        Malformed expressions, unknown filters/tests and failing callables
        raise `TemplateRuntimeError`; strict environments raise
        `UndefinedError` for unknown names. Any other exception raised by a
        filter, test or callable is wrapped in `TemplateRuntimeError`.
    """

    __slots__ = ("_cache", "_env")

    def __init__(self, env: Environment):
        self._env = env
        self._cache: dict[str, Compiled] = {}

    def compile(self, expression: str) -> Compiled:
        """Parse ``expression`` into a reusable closure."""
        compiled = self._cache.get(expression)
        if compiled is None:
            compiled = _Parser(expression, self._env).parse()
            if len(self._cache) >= _CACHE_SIZE:
                self._cache.pop(next(iter(self._cache)))
            self._cache[expression] = compiled
        return compiled

    def evaluate(self, expression: str, scope: Scope) -> Any:
        """Evaluate ``expression`` and return its value."""
        compiled = self.compile(expression)
        try:
            return compiled(scope)
        except TemplateError:
            raise
        except Exception as e:
            raise TemplateRuntimeError(
                f"{type(e).__name__}: {e}",
                expression=expression,
            ) from e
