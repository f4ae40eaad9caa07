"""
Union field decoders
Normalize the "string or array" shapes allowed by devcontainer.json into plain lists of strings
"""

import json
from typing import Any, Optional


class DevContainerConfigError(Exception):
    """Base class for devcontainer.json decode failures"""


class UnsupportedTypeError(DevContainerConfigError, ValueError):
    """Raised when a union-typed field holds a JSON value of an unrecognized shape"""

    def __init__(self, value: Any, location: Optional[str] = None):
        self.value_type = _json_type_name(value)
        self.location = location
        super().__init__(self._render())

    def _render(self) -> str:
        if self.location:
            return f"unsupported type: {self.location} cannot be a JSON {self.value_type}"
        return f"unsupported type: JSON {self.value_type}"

    def with_location(self, location: str) -> "UnsupportedTypeError":
        self.location = location
        self.args = (self._render(),)
        return self


class InvalidConfigError(DevContainerConfigError):
    """Raised when a regular (non-union) field does not match its declared type"""


class JSONNumber(float):
    """
    Float that remembers the literal it was parsed from.
    Used as json parse_float hook so port numbers keep their exact digits.
    """

    def __new__(cls, literal: str):
        number = super().__new__(cls, literal)
        number.literal = literal
        return number


class IntegerLiteral:
    """Integer too long for int() conversion, only its source text is kept"""

    __slots__ = ("literal",)

    def __init__(self, literal: str):
        self.literal = literal

    def __eq__(self, other):
        return isinstance(other, IntegerLiteral) and other.literal == self.literal

    def __hash__(self):
        return hash(self.literal)

    def __repr__(self):
        return f"IntegerLiteral({self.literal[:20]}...)"


def _parse_int(literal: str):
    try:
        return int(literal)
    except ValueError:
        # past sys.get_int_max_str_digits()
        return IntegerLiteral(literal)


def is_json_integer(value: Any) -> bool:
    # bool is an int subclass, JSON true/false must not pass as 1/0
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, IntegerLiteral))


def is_json_number(value: Any) -> bool:
    return is_json_integer(value) or isinstance(value, float)


def loads(data):
    """
    Generic JSON parse. Syntax errors propagate as json.JSONDecodeError,
    including the NaN and Infinity constants the json module would otherwise accept.
    """
    if isinstance(data, (bytes, bytearray)):
        doc = data.decode(json.detect_encoding(data), "surrogatepass")
    else:
        doc = data

    def reject_constant(name):
        raise json.JSONDecodeError(f"Invalid constant {name}", doc, max(doc.find(name), 0))

    return json.loads(doc, parse_float=JSONNumber, parse_int=_parse_int, parse_constant=reject_constant)


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_json_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _string_items(items: list) -> list[str]:
    strings = []
    for item in items:
        if not isinstance(item, str):
            raise UnsupportedTypeError(item)
        strings.append(item)
    return strings


def decode_str_array(value: Any) -> list[str]:
    """
    Decode a command-like field: a single string or an array of strings.
    A single string becomes a one element list, values are never trimmed or deduplicated.
    """
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return _string_items(value)
    raise UnsupportedTypeError(value)


def decode_str_int_array(value: Any) -> list[str]:
    """
    Same as decode_str_array but a bare integer is also accepted and
    converted to its decimal text.
    """
    if is_json_integer(value):
        return [number_literal(value)]
    return decode_str_array(value)


def number_literal(value: Any) -> str:
    """Text form of a parsed JSON number, without any width or precision change"""
    literal = getattr(value, "literal", None)
    if literal is not None:
        return literal
    if isinstance(value, float):
        return repr(value)
    return str(value)


def decode_port_list(value: Any) -> list[str]:
    """
    Decode forwardPorts: an array of port numbers or "host:port" strings.
    Numbers are kept as their source text.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise UnsupportedTypeError(value)

    ports = []
    for item in value:
        if isinstance(item, str):
            ports.append(item)
        elif is_json_number(item):
            ports.append(number_literal(item))
        else:
            raise UnsupportedTypeError(item)
    return ports
