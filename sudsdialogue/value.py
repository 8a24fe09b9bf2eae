"""Typed values held by dialogue variables and produced by expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

RANDOM_ITEM_SELECT_INDEX_VAR = "_RandomItemSelectIndex"
"""Internal variable that holds the index picked by a random select."""


class ValueType(Enum):
    """Kinds of value a dialogue variable can hold."""

    EMPTY = "Empty"
    TEXT = "Text"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    GENDER = "Gender"
    NAME = "Name"
    VARIABLE = "Variable"


class TextGender(Enum):
    """Grammatical gender used when formatting text."""

    MASCULINE = "Masculine"
    FEMININE = "Feminine"
    NEUTER = "Neuter"


_DEFAULTS: dict[ValueType, Any] = {
    ValueType.EMPTY: None,
    ValueType.TEXT: "",
    ValueType.INT: 0,
    ValueType.FLOAT: 0.0,
    ValueType.BOOLEAN: False,
    ValueType.GENDER: TextGender.NEUTER,
    ValueType.NAME: "",
    ValueType.VARIABLE: "",
}


def _checked(kind: ValueType, data: Any) -> Any:
    if kind is ValueType.EMPTY:
        if data is not None:
            raise TypeError("an empty value carries no data")
        return None
    if kind in (ValueType.TEXT, ValueType.NAME, ValueType.VARIABLE):
        if not isinstance(data, str):
            raise TypeError(f"{kind.value} value needs a str, got {data!r}")
        return data
    if kind is ValueType.INT:
        if isinstance(data, bool) or not isinstance(data, int):
            raise TypeError(f"Int value needs an int, got {data!r}")
        return data
    if kind is ValueType.FLOAT:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise TypeError(f"Float value needs a number, got {data!r}")
        return float(data)
    if kind is ValueType.BOOLEAN:
        if not isinstance(data, bool):
            raise TypeError(f"Boolean value needs a bool, got {data!r}")
        return data
    if not isinstance(data, TextGender):
        raise TypeError(f"Gender value needs a TextGender, got {data!r}")
    return data


@dataclass(frozen=True)
class Value:
    """An immutable typed value; omitted data takes the type's default."""

    type: ValueType = ValueType.EMPTY
    data: Any = None

    def __post_init__(self) -> None:
        data = _DEFAULTS[self.type] if self.data is None else self.data
        object.__setattr__(self, "data", _checked(self.type, data))

    def is_variable(self) -> bool:
        """True if this is an unresolved reference to a variable."""
        return self.type is ValueType.VARIABLE

    def is_empty(self) -> bool:
        return self.type is ValueType.EMPTY

    def as_bool(self) -> bool:
        """Truth of the value; anything not boolean or numeric is false."""
        if self.type is ValueType.BOOLEAN:
            return self.data
        if self.type in (ValueType.INT, ValueType.FLOAT):
            return self.data != 0
        return False

    def to_format_arg(self) -> Any:
        """The plain object to substitute into formatted text."""
        if self.type is ValueType.EMPTY:
            return ""
        return self.data

    def to_dict(self) -> dict[str, Any]:
        data = self.data
        if self.type is ValueType.GENDER:
            data = data.value
        return {"type": self.type.value, "value": data}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Value:
        kind = ValueType(data["type"])
        raw = data.get("value")
        if kind is ValueType.GENDER and raw is not None:
            raw = TextGender(raw)
        return Value(kind, raw)

    def __str__(self) -> str:
        if self.type is ValueType.EMPTY:
            return "Empty"
        if self.type is ValueType.BOOLEAN:
            return "True" if self.data else "False"
        if self.type is ValueType.GENDER:
            return self.data.value
        if self.type is ValueType.FLOAT:
            return repr(self.data)
        return str(self.data)


def text_value(text: str) -> Value:
    return Value(ValueType.TEXT, text)


def name_value(name: str) -> Value:
    return Value(ValueType.NAME, name)


def variable_value(name: str) -> Value:
    return Value(ValueType.VARIABLE, name)


def from_python(obj: Any) -> Value:
    """Wrap a bool, int, float, str (as text) or TextGender in a Value."""
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, bool):
        return Value(ValueType.BOOLEAN, obj)
    if isinstance(obj, int):
        return Value(ValueType.INT, obj)
    if isinstance(obj, float):
        return Value(ValueType.FLOAT, obj)
    if isinstance(obj, TextGender):
        return Value(ValueType.GENDER, obj)
    if isinstance(obj, str):
        return Value(ValueType.TEXT, obj)
    raise TypeError(f"cannot make a dialogue value from {obj!r}")