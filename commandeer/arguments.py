r"""
Commandeer argument specifications.

Overview
- ArgType: semantic type of an argument (STRING, INTEGER, LONG, DOUBLE, BOOLEAN).
- Value: closed sum over {string, integer, long, double, boolean, absent}; the result of
  binding a raw value. Accessors (as_string/as_int/as_long/as_double/as_boolean) match the
  variant and return None instead of raising when the variant does not fit.
- Argument: immutable descriptor of one positional parameter (type, numeric bounds,
  length bounds, greedy/optional flags). bind(raw) coerces and validates a raw value.
- ArgumentBuilder: immutable builder; every step returns a new builder.

Metadata (sanitized on construction)
- name: non-empty single token; identity is case-insensitive.
- type: ArgType, defaults to STRING.
- min/max: numeric types only; default to the full range of the type.
- min_len/max_len: STRING only; default to 0 / unbounded (None).
- greedy: STRING only; the argument swallows the rest of the input.
- optional: informational, rendered as [name] in usage lines. Every prefix of an
  argument chain is executable regardless of this flag.

Quick example:
    >>> amount = Argument.builder("amount").type(ArgType.INTEGER).min(1).build()
    >>> amount.bind("5").as_int()
    5
    >>> amount.bind("5").as_boolean() is None
    True
"""
import builtins
import functools
import math
import operator
import re
import sys
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from .faults import TypeCoercionError, RangeViolationError
from .utils import *


class ArgType(Enum):
    """
    Semantic types an argument value can take.

    - STRING: textual value (single token, or the rest of the input when greedy).
    - INTEGER: signed 32-bit integer.
    - LONG: signed 64-bit integer.
    - DOUBLE: finite floating-point value.
    - BOOLEAN: true or false.
    """
    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    DOUBLE = "double"
    BOOLEAN = "boolean"

    @property
    def numeric(self):
        return self in (ArgType.INTEGER, ArgType.LONG, ArgType.DOUBLE)

    @property
    def bounds(self):
        """
        Full (min, max) range of a numeric type, or None for non-numeric types.
        """
        return _BOUNDS.get(self)


_BOUNDS = {
    ArgType.INTEGER: (-2 ** 31, 2 ** 31 - 1),
    ArgType.LONG: (-2 ** 63, 2 ** 63 - 1),
    ArgType.DOUBLE: (-sys.float_info.max, sys.float_info.max),
}


def _narrow(payload, kind):
    lower, upper = kind.bounds
    if isinstance(payload, float):
        if math.isnan(payload):
            return 0
        return int(min(max(payload, lower), upper))
    return (payload - lower) % (upper - lower + 1) + lower


class Value(NamedTuple):
    """
    Bound argument value: the variant tag (an ArgType, or None when absent) and its payload.
    """
    type: ArgType | None
    payload: str | int | float | bool | None

    @property
    def present(self):
        return self.type is not None

    def as_string(self):
        match self:
            case Value(type=None):
                return None
            case Value(type=ArgType.BOOLEAN, payload=payload):
                return "true" if payload else "false"
            case Value(payload=payload):
                return str(payload)

    def as_int(self):
        """
        Numeric payload narrowed to a signed 32-bit integer: integral values wrap
        around, doubles are truncated and saturate at the range limits.
        """
        match self:
            case Value(type=ArgType.INTEGER | ArgType.LONG | ArgType.DOUBLE, payload=payload):
                return _narrow(payload, ArgType.INTEGER)
        return None

    def as_long(self):
        """
        Numeric payload narrowed to a signed 64-bit integer, like as_int().
        """
        match self:
            case Value(type=ArgType.INTEGER | ArgType.LONG | ArgType.DOUBLE, payload=payload):
                return _narrow(payload, ArgType.LONG)
        return None

    def as_double(self):
        match self:
            case Value(type=ArgType.INTEGER | ArgType.LONG | ArgType.DOUBLE, payload=payload):
                return float(payload)
        return None

    def as_boolean(self):
        match self:
            case Value(type=ArgType.BOOLEAN, payload=payload):
                return payload
        return None


ABSENT = Value(None, None)


class ArgumentType(type):
    """
    Metaclass exposing declared metadata as read-only properties.

    - every name in __introspectable__ becomes a property mirroring "_{name}";
    - __typename__ is the hyphenated class name, used in messages;
    - __repr__/__rich_repr__ list the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": typename(name),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_bounds(cls, metadata, /):
    """
    Internal: validate numeric bounds and fill in the type's full range.

    Raises
    - TypeError: bounds on a non-numeric type, or bounds of the wrong kind.
    - ValueError: bounds outside the type's range, or min greater than max.
    """
    kind = metadata["type"]
    if not kind.numeric:
        if metadata["min"] is not Unset or metadata["max"] is not Unset:
            raise TypeError(f"{kind.value} {cls.__typename__} cannot declare numeric bounds")
        metadata["min"] = metadata["max"] = None
        return

    lower, upper = kind.bounds
    for key, default in (("min", lower), ("max", upper)):
        bound = coalesce(metadata[key], default)
        if isinstance(bound, bool) or not isinstance(bound, int | float):
            raise TypeError(f"{cls.__typename__} {key!r} must be a number")
        if kind is ArgType.DOUBLE:
            bound = float(bound)
        elif not isinstance(bound, int):
            raise TypeError(f"{kind.value} {cls.__typename__} {key!r} must be an integer")
        if math.isnan(bound) or not lower <= bound <= upper:
            raise ValueError(f"{cls.__typename__} {key!r} is outside the {kind.value} range")
        metadata[key] = bound

    if metadata["min"] > metadata["max"]:
        raise ValueError(f"{cls.__typename__} 'min' cannot be greater than 'max'")


def _sanitize_lengths(cls, metadata, /):
    """
    Internal: validate string length bounds (STRING only) and the greedy flag.
    """
    kind = metadata["type"]
    if kind is not ArgType.STRING:
        if metadata["min_len"] is not Unset or metadata["max_len"] is not Unset:
            raise TypeError(f"{kind.value} {cls.__typename__} cannot declare length bounds")
        if metadata["greedy"]:
            raise TypeError(f"{kind.value} {cls.__typename__} cannot be greedy")
        metadata["min_len"] = metadata["max_len"] = None
        return

    min_len = coalesce(metadata["min_len"], 0)
    max_len = coalesce(metadata["max_len"], None)
    for key, bound in (("min_len", min_len), ("max_len", max_len)):
        if bound is None and key == "max_len":
            continue
        if isinstance(bound, bool) or not isinstance(bound, int):
            raise TypeError(f"{cls.__typename__} {key!r} must be an integer")
        if bound < 0:
            raise ValueError(f"{cls.__typename__} {key!r} cannot be negative")
    if max_len is not None and min_len > max_len:
        raise ValueError(f"{cls.__typename__} 'min_len' cannot be greater than 'max_len'")
    metadata["min_len"], metadata["max_len"] = min_len, max_len


class Argument(metaclass=ArgumentType):
    """
    Immutable descriptor of one command argument.

    Arguments are declared on a command node in positional order. The descriptor
    never stores invocation state: bind() returns a fresh Value each time.
    """

    __introspectable__ = (
        "name",
        "type",
        "min",
        "max",
        "min_len",
        "max_len",
        "greedy",
        "optional",
    )

    def __init__(
            self,
            name,
            /,
            type=ArgType.STRING,
            *,
            min=Unset,
            max=Unset,
            min_len=Unset,
            max_len=Unset,
            greedy=False,
            optional=False,
    ):
        cls = builtins.type(self)
        normalize(name, cls.__typename__)
        if not isinstance(type, ArgType):
            raise TypeError(f"{cls.__typename__} 'type' must be an ArgType")

        metadata = {
            "name": name,
            "type": type,
            "min": min,
            "max": max,
            "min_len": min_len,
            "max_len": max_len,
            "greedy": bool(greedy),
            "optional": bool(optional),
        }
        _sanitize_bounds(cls, metadata)
        _sanitize_lengths(cls, metadata)

        for key, object in metadata.items():
            setattr(self, "_" + key, object)

    @property
    def key(self):
        """
        Case-insensitive identity used by lookups.
        """
        return self._name.lower()

    @property
    def usage(self):
        label = self._name + ("..." if self._greedy else "")
        return f"[{label}]" if self._optional else f"<{label}>"

    @classmethod
    def builder(cls, name, /):
        return ArgumentBuilder(name, factory=cls)

    def bind(self, raw, /):
        """
        Coerce `raw` to the declared type and validate it against the bounds.

        Parameters
        - raw: str token from the input, or an already typed value.

        Returns
        - Value tagged with the declared type.

        Raises
        - TypeCoercionError: raw cannot be interpreted as the declared type.
        - RangeViolationError: numeric value or string length outside the bounds.
        """
        value = self._coerce(raw)

        if self._type.numeric:
            if not self._min <= value <= self._max:
                raise RangeViolationError(
                    "%s %r must be between %s and %s, found %s" % (
                        self._type.value, self._name, self._min, self._max, value
                    ),
                    argument=self,
                    raw=raw,
                )
        elif self._type is ArgType.STRING:
            if len(value) < self._min_len or (self._max_len is not None and len(value) > self._max_len):
                raise RangeViolationError(
                    "length of %r must be between %d and %s, found %d" % (
                        self._name, self._min_len, "∞" if self._max_len is None else self._max_len, len(value)
                    ),
                    argument=self,
                    raw=raw,
                )

        return Value(self._type, value)

    def _coerce(self, raw):
        def fail():
            return TypeCoercionError(
                "expected %s for %r, found %r" % (self._type.value, self._name, raw),
                argument=self,
                raw=raw,
            )

        match self._type, raw:
            case ArgType.STRING, str():
                return raw
            case ArgType.BOOLEAN, bool():
                return raw
            case ArgType.BOOLEAN, str() if raw.lower() in ("true", "false"):
                return raw.lower() == "true"
            case _, bool():
                # bool is an int subclass; it is never a number here
                raise fail()
            case ArgType.INTEGER | ArgType.LONG, int():
                return raw
            case ArgType.INTEGER | ArgType.LONG, str() if re.fullmatch(r"[+-]?\d+", raw):
                return int(raw)
            case ArgType.DOUBLE, int() | float() if not math.isnan(raw):
                return float(raw)
            case ArgType.DOUBLE, str() if re.fullmatch(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", raw):
                return float(raw)
        raise fail()

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {key: getattr(self, "_" + key) for key in type(self).__introspectable__}
        # bounds only carry over while the type stays the same
        if not self._type.numeric or "type" in overrides:
            del metadata["min"], metadata["max"]
        if self._type is not ArgType.STRING or "type" in overrides:
            del metadata["min_len"], metadata["max_len"]
        metadata |= overrides
        return type(self)(metadata.pop("name"), **metadata)


class ArgumentBuilder:
    """
    Immutable, chainable builder for Argument.

        Argument.builder("player").min_len(3).max_len(16).build()
    """

    __slots__ = ("_name", "_options", "_factory")

    def __init__(self, name, /, *, factory=Argument, **options):
        normalize(name, "argument")
        self._name = name
        self._factory = factory
        self._options = MappingProxyType(options)

    def _derive(self, key, value):
        return ArgumentBuilder(self._name, factory=self._factory, **{**self._options, key: value})

    def type(self, type, /):
        return self._derive("type", type)

    def min(self, min, /):
        return self._derive("min", min)

    def max(self, max, /):
        return self._derive("max", max)

    def min_len(self, min_len, /):
        return self._derive("min_len", min_len)

    def max_len(self, max_len, /):
        return self._derive("max_len", max_len)

    def greedy(self, greedy=True, /):
        return self._derive("greedy", greedy)

    def optional(self, optional=True, /):
        return self._derive("optional", optional)

    def build(self):
        return self._factory(self._name, **self._options)

    def __repr__(self):
        return "argument-builder(%r%s)" % (self._name, "".join(", %s=%r" % item for item in self._options.items()))


__all__ = (
    "ArgType",
    "Value",
    "ABSENT",
    "Argument",
    "ArgumentBuilder",
)
