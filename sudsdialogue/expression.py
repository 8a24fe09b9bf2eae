"""Parsing and evaluation of dialogue expressions (shunting-yard to RPN)."""

from __future__ import annotations

import logging
import operator
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Union

from .value import (
    RANDOM_ITEM_SELECT_INDEX_VAR,
    TextGender,
    Value,
    ValueType,
    name_value,
    text_value,
    variable_value,
)

log = logging.getLogger(__name__)

_GLOBAL_PREFIX = "global."


class ExpressionItemType(Enum):
    """Operators that may appear in an expression."""

    NOT = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    MODULO = auto()
    ADD = auto()
    SUBTRACT = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()
    AND = auto()
    OR = auto()
    LPARENS = auto()
    RPARENS = auto()

    @property
    def precedence(self) -> int:
        """Lower binds tighter."""
        return _PRECEDENCE[self]

    @property
    def is_binary(self) -> bool:
        return self not in (
            ExpressionItemType.NOT,
            ExpressionItemType.LPARENS,
            ExpressionItemType.RPARENS,
        )


_T = ExpressionItemType
_PRECEDENCE = {
    _T.NOT: 1,
    _T.MULTIPLY: 2,
    _T.DIVIDE: 2,
    _T.MODULO: 2,
    _T.ADD: 3,
    _T.SUBTRACT: 3,
    _T.LESS: 4,
    _T.LESS_EQUAL: 4,
    _T.GREATER: 4,
    _T.GREATER_EQUAL: 4,
    _T.EQUAL: 5,
    _T.NOT_EQUAL: 5,
    _T.AND: 6,
    _T.OR: 7,
    _T.LPARENS: 99,
    _T.RPARENS: 99,
}

_OPERATOR_TOKENS = {
    "+": _T.ADD,
    "-": _T.SUBTRACT,
    "*": _T.MULTIPLY,
    "/": _T.DIVIDE,
    "%": _T.MODULO,
    "and": _T.AND,
    "&&": _T.AND,
    "or": _T.OR,
    "||": _T.OR,
    "not": _T.NOT,
    "!": _T.NOT,
    "==": _T.EQUAL,
    "=": _T.EQUAL,
    ">=": _T.GREATER_EQUAL,
    ">": _T.GREATER,
    "<=": _T.LESS_EQUAL,
    "<": _T.LESS,
    "<>": _T.NOT_EQUAL,
    "!=": _T.NOT_EQUAL,
    "(": _T.LPARENS,
    ")": _T.RPARENS,
}

_TOKEN_RE = re.compile(
    r"(\{[\w\.]+\}|-?\d+(?:\.\d*)?|[-+*/%()]|and|&&|\|\||or|not|<>|!=|!|<=?|>=?|==?"
    r"|[mM]asculine|[fF]eminine|[nN]euter|[tT]rue|[fF]alse"
    r'|"(?:[^"\\]|\\.)*"|`([^`]*)`)'
)
_TEXT_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"$')
_NAME_RE = re.compile(r"^`([^`]*)`$")
_VARIABLE_RE = re.compile(r"^\{([^}]*)\}$")

_GENDERS = {g.value.lower(): g for g in TextGender}

ExpressionItem = Union[ExpressionItemType, Value]


class ExpressionParseError(ValueError):
    """Raised when an expression string cannot be parsed."""


def split_global_name(name: str) -> tuple[bool, str]:
    """Return whether ``name`` has the ``global.`` prefix, and the name without it."""
    if name.lower().startswith(_GLOBAL_PREFIX):
        return True, name[len(_GLOBAL_PREFIX):]
    return False, name


def _parse_operand(token: str) -> Value | None:
    lowered = token.lower()
    if lowered == "true":
        return Value(ValueType.BOOLEAN, True)
    if lowered == "false":
        return Value(ValueType.BOOLEAN, False)
    if lowered in _GENDERS:
        return Value(ValueType.GENDER, _GENDERS[lowered])
    if match := _TEXT_RE.match(token):
        return text_value(match.group(1).replace('\\"', '"'))
    if match := _NAME_RE.match(token):
        return name_value(match.group(1))
    if match := _VARIABLE_RE.match(token):
        return variable_value(match.group(1))
    try:
        return Value(ValueType.INT, int(token))
    except ValueError:
        pass
    try:
        return Value(ValueType.FLOAT, float(token))
    except ValueError:
        return None


def _is_valid_queue(queue: list[ExpressionItem]) -> bool:
    if not queue:
        return True
    depth = 0
    for item in queue:
        if isinstance(item, ExpressionItemType):
            needed = 2 if item.is_binary else 1
            if depth < needed:
                return False
            depth -= needed - 1
        else:
            depth += 1
    return depth == 1


def parse_expression(source: str) -> Expression:
    """Parse ``source`` into an expression, raising ExpressionParseError on failure."""
    queue: list[ExpressionItem] = []
    stack: list[ExpressionItemType] = []
    parsed_something = False
    error: str | None = None

    for match in _TOKEN_RE.finditer(source):
        token = match.group(1)
        op = _OPERATOR_TOKENS.get(token)
        if op is None:
            operand = _parse_operand(token)
            if operand is None:
                error = f"Unrecognised token {token}"
            else:
                parsed_something = True
                queue.append(operand)
            continue

        parsed_something = True
        if op is _T.LPARENS:
            stack.append(op)
        elif op is _T.RPARENS:
            while stack and stack[-1] is not _T.LPARENS:
                queue.append(stack.pop())
            if not stack:
                error = "Mismatched parentheses"
                break
            stack.pop()
        else:
            left_assoc = op is not _T.NOT
            while stack and (
                stack[-1].precedence < op.precedence
                or (stack[-1].precedence == op.precedence and left_assoc)
            ):
                queue.append(stack.pop())
            stack.append(op)

    while stack:
        if stack[-1] in (_T.LPARENS, _T.RPARENS):
            error = "Mismatched parentheses"
            break
        queue.append(stack.pop())

    if not _is_valid_queue(queue) or (source and not queue):
        error = f"Bad expression '{source}'"

    if error is not None:
        raise ExpressionParseError(error)
    if not parsed_something:
        raise ExpressionParseError("Empty expression")

    names: list[str] = []
    for item in queue:
        if isinstance(item, Value) and item.is_variable() and item.data not in names:
            names.append(item.data)

    return Expression(source, tuple(queue), tuple(names))


def _number(value: Value) -> int | float | None:
    if value.type in (ValueType.INT, ValueType.FLOAT):
        return value.data
    if value.type in (ValueType.VARIABLE, ValueType.EMPTY):
        # Unset variables act as their default
        return 0
    return None


def _is_unset(value: Value) -> bool:
    return value.type in (ValueType.VARIABLE, ValueType.EMPTY)


def _equal(a: Value, b: Value) -> bool:
    numeric = (ValueType.INT, ValueType.FLOAT)
    if a.type in numeric and b.type in numeric:
        return a.data == b.data
    if _is_unset(a) or _is_unset(b):
        other = b if _is_unset(a) else a
        return _is_unset(other) or other == Value(other.type)
    return a.type is b.type and a.data == b.data


_COMPARISONS = {
    _T.LESS: operator.lt,
    _T.LESS_EQUAL: operator.le,
    _T.GREATER: operator.gt,
    _T.GREATER_EQUAL: operator.ge,
}


def _arithmetic(op: ExpressionItemType, x: int | float, y: int | float) -> Value:
    both_int = isinstance(x, int) and isinstance(y, int)
    if op in (_T.DIVIDE, _T.MODULO) and y == 0:
        raise ZeroDivisionError("division by zero in dialogue expression")
    if op is _T.ADD:
        result = x + y
    elif op is _T.SUBTRACT:
        result = x - y
    elif op is _T.MULTIPLY:
        result = x * y
    elif op is _T.DIVIDE:
        if both_int:
            quotient = abs(x) // abs(y)
            result = quotient if (x < 0) == (y < 0) else -quotient
        else:
            result = x / y
    else:
        if both_int:
            remainder = abs(x) % abs(y)
            result = -remainder if x < 0 else remainder
        else:
            import math

            result = math.fmod(x, y)
    if both_int:
        return Value(ValueType.INT, result)
    return Value(ValueType.FLOAT, float(result))


def _apply(op: ExpressionItemType, a: Value, b: Value) -> Value:
    if op is _T.NOT:
        return Value(ValueType.BOOLEAN, not a.as_bool())
    if op is _T.AND:
        return Value(ValueType.BOOLEAN, a.as_bool() and b.as_bool())
    if op is _T.OR:
        return Value(ValueType.BOOLEAN, a.as_bool() or b.as_bool())
    if op is _T.EQUAL:
        return Value(ValueType.BOOLEAN, _equal(a, b))
    if op is _T.NOT_EQUAL:
        return Value(ValueType.BOOLEAN, not _equal(a, b))
    x, y = _number(a), _number(b)
    if op in _COMPARISONS:
        if x is None or y is None:
            return Value(ValueType.BOOLEAN, False)
        return Value(ValueType.BOOLEAN, _COMPARISONS[op](x, y))
    if x is None or y is None:
        return Value()
    return _arithmetic(op, x, y)


@dataclass(frozen=True)
class Expression:
    """A parsed expression in reverse Polish order; empty means ``true``."""

    source: str = ""
    queue: tuple[ExpressionItem, ...] = ()
    variable_names: tuple[str, ...] = ()

    @staticmethod
    def _resolve(
        operand: Value,
        variables: Mapping[str, Value],
        global_variables: Mapping[str, Value],
    ) -> Value:
        if operand.is_variable():
            is_global, global_name = split_global_name(operand.data)
            if is_global and global_name in global_variables:
                return global_variables[global_name]
            if operand.data in variables:
                return variables[operand.data]
        return operand

    def evaluate(
        self,
        variables: Mapping[str, Value] | None = None,
        global_variables: Mapping[str, Value] | None = None,
    ) -> Value:
        """Evaluate against the given local and global variables."""
        variables = variables or {}
        global_variables = global_variables or {}
        if not self.queue:
            return Value(ValueType.BOOLEAN, True)

        stack: list[Value] = []
        try:
            for item in self.queue:
                if isinstance(item, ExpressionItemType):
                    rhs = stack.pop() if item.is_binary else Value()
                    lhs = stack.pop()
                    stack.append(
                        _apply(
                            item,
                            self._resolve(lhs, variables, global_variables),
                            self._resolve(rhs, variables, global_variables),
                        )
                    )
                else:
                    stack.append(item)
        except IndexError:
            raise ValueError(f"Bad expression '{self.source}'") from None
        if len(stack) != 1:
            raise ValueError(f"Bad expression '{self.source}'")
        return self._resolve(stack[0], variables, global_variables)

    def evaluate_boolean(
        self,
        variables: Mapping[str, Value] | None = None,
        global_variables: Mapping[str, Value] | None = None,
        error_context: str = "",
    ) -> bool:
        """Evaluate as a condition; an unresolved variable counts as false."""
        result = self.evaluate(variables, global_variables)
        if result.type not in (ValueType.BOOLEAN, ValueType.VARIABLE):
            log.error(
                "%s: Condition '%s' did not return a boolean result",
                error_context,
                self.source,
            )
        return result.as_bool()

    def is_random_condition(self) -> bool:
        """True if the expression tests the random-select index variable."""
        if self.queue and isinstance(self.queue[0], Value):
            first = self.queue[0]
            return first.is_variable() and first.data == RANDOM_ITEM_SELECT_INDEX_VAR
        return False

    def is_literal(self) -> bool:
        return (
            len(self.queue) == 1
            and isinstance(self.queue[0], Value)
            and not self.queue[0].is_variable()
        )

    def is_text_literal(self) -> bool:
        return self.is_literal() and self.queue[0].type is ValueType.TEXT

    def text_literal_value(self) -> str:
        if not self.is_text_literal():
            raise ValueError(f"'{self.source}' is not a text literal")
        return self.queue[0].data