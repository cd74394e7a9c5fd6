"""
Commandeer utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the arguments/commands/grammar layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables (grammar callbacks, reprs).

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with defensive
    copies for containers.

- normalize(name, kind)
  • Validate a command/argument/alias name and return its lowercase lookup key.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> normalize("Points", "command")
    'points'
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable and a singleton per process.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Shallow-copy container values so callers cannot mutate the backing field.

    - Sequence (non-string): tuple copy.
    - Mapping: dict copy (insertion order preserved).
    - Set: frozenset copy.
    - Anything else: returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return dict(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute "_{name}".

    Container values are returned as copies to discourage accidental mutation
    of the public API state.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def typename(name, /):
    """
    Derive a hyphenated, lowercase type label from a class name ("SubCommand" -> "sub-command").
    """
    return re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower()


def normalize(name, kind, /):
    """
    Validate a node/argument/alias name and return its case-insensitive lookup key.

    Rules
    - must be a string;
    - must be non-empty and contain no whitespace (names are single grammar tokens).

    Raises
    - TypeError: when name is not a string.
    - ValueError: when name is empty or contains whitespace.
    """
    if not isinstance(name, str):
        raise TypeError(f"{kind} name must be a string")
    if not re.fullmatch(r"\S+", name):
        raise ValueError(f"{kind} name {name!r} must be a non-empty single token")
    return name.lower()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "typename",
    "normalize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
