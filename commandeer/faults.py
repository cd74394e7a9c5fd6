"""
Commandeer faults (errors) and rendering.

Scope
- CommandException: structured, chainable error report carrying a dotted error id
  (e.g. "sender.no-permission") and an immutable key/value context. Raised by user
  command logic and by the dispatcher; routed to a registered handler.
- TypeCoercionError / RangeViolationError: argument binding failures.
- DeclarationError: structural mistakes detected while compiling a command tree.
- CommandSyntaxError: input that does not match a compiled grammar.
- MessageHandler: a ready-made handler mapping error ids to rich-rendered messages.

Integration
- The dispatcher is the only layer that catches CommandException; everything else
  propagates.
- Hosts can customize MessageHandler copy and colors through __messages__ and
  __styles__ mappings in __main__, or through explicit constructor arguments.
"""
from collections import defaultdict
from types import MappingProxyType

from rich.text import Text

from .utils import Unset, coalesce


class CommandException(Exception):
    """
    Error report raised by command logic.

    The report is immutable: with_() and copy.replace() return new reports, so a
    base report can be shared and extended safely.

        raise CommandException("points.not-enough").with_("missing", 5)
    """

    def __init__(self, error_id, /, **context):
        if not isinstance(error_id, str):
            raise TypeError("command exception error id must be a string")
        if not (error_id := error_id.strip()):
            raise ValueError("command exception error id cannot be empty")
        super().__init__(error_id)
        self._error_id = error_id
        self._context = MappingProxyType(context)

    @property
    def error_id(self):
        return self._error_id

    @property
    def context(self):
        return self._context

    def with_(self, key, value, /):
        """
        Return a new report with `key` set to `value` in its context.
        """
        if not isinstance(key, str):
            raise TypeError("command exception context key must be a string")
        return self.__replace__(**{key: value})

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        clone = type(self)(self._error_id, **{**self._context, **overrides})
        clone.__cause__ = self.__cause__
        return clone

    def __str__(self):
        return self._error_id

    def __repr__(self):
        return f"{type(self).__name__}({self._error_id!r}{"".join(
            ", %s=%r" % item for item in self._context.items()
        )})"

    def __rich__(self):
        text = Text.assemble(("[", "dim"), (self._error_id, "bold #00E5FF"), ("]", "dim"))
        for key, value in self._context.items():
            text.append(" ")
            text.append(key, "#9CE19C")
            text.append("=")
            text.append(repr(value))
        return text


class TypeCoercionError(ValueError):
    """
    Raised when a raw value cannot be interpreted as the argument's declared type.
    """

    def __init__(self, message, /, argument=Unset, raw=Unset):
        super().__init__(message)
        self.argument = coalesce(argument)
        self.raw = coalesce(raw)


class RangeViolationError(ValueError):
    """
    Raised when a numeric value or string length falls outside the declared bounds.
    """

    def __init__(self, message, /, argument=Unset, raw=Unset):
        super().__init__(message)
        self.argument = coalesce(argument)
        self.raw = coalesce(raw)


class DeclarationError(ValueError):
    """
    Raised when a command tree cannot be compiled (e.g. a greedy argument that is not last).
    """


class CommandSyntaxError(Exception):
    """
    Raised by the grammar engine when the input does not match any executable path.

    Attributes
    - message: short lowercase description.
    - input: the full input string.
    - cursor: offset in input where parsing failed (or None).
    """

    def __init__(self, message, /, input=Unset, cursor=Unset):
        super().__init__(message)
        self.message = message
        self.input = coalesce(input)
        self.cursor = coalesce(cursor)

    def context(self, width=10):
        """
        Return the input around the failure point, marked with "<--[here]".
        """
        if self.input is None or self.cursor is None:
            return None
        cursor = min(self.cursor, len(self.input))
        return "%s%s<--[here]" % ("..." if cursor > width else "", self.input[max(0, cursor - width):cursor])

    def __str__(self):
        if (context := self.context()) is None:
            return self.message
        return "%s at position %d: %s" % (self.message, self.cursor, context)

    def __rich__(self):
        text = Text(self.message, "bold #FF4DA6")
        if (context := self.context()) is not None:
            text.append(" → ", "#9CE19C dim")
            text.append(context, "italic #C8C8D0")
        return text


class _Context(dict):
    def __missing__(self, key):
        return "{" + key + "}"


class MessageHandler:
    """
    Exception handler that tells the sender what went wrong.

    Lookup
    - explicit `messages` passed to the constructor win over
    - a __messages__ mapping defined in __main__, which wins over
    - the built-in DEFAULT_MESSAGES.
    Templates use str.format syntax against the report context; unknown keys are
    left as-is. Unknown error ids fall back to `fallback`.

    Styling
    - colors come from DEFAULT_STYLES merged with __styles__ from __main__;
      colorful=False renders plain text.
    """

    DEFAULT_MESSAGES = MappingProxyType({
        "sender.no-permission": "you don't have permission to do that ({permission})",
        "executor-type.player": "this command can only be run by a player",
        "executor-type.console": "this command can only be run from the console",
    })

    DEFAULT_STYLES = MappingProxyType({
        "error-message": "#FF4DA6",
    })

    def __init__(self, messages=Unset, /, *, fallback="something went wrong ({error_id})", colorful=True):
        if not isinstance(fallback, str):
            raise TypeError("message handler fallback must be a string")
        self._messages = dict(coalesce(messages, {}))
        self._fallback = fallback
        self._colorful = bool(colorful)

    def template(self, error_id, /):
        main = __import__("__main__")
        messages = {**self.DEFAULT_MESSAGES, **getattr(main, "__messages__", {}), **self._messages}
        return messages.get(error_id, self._fallback)

    def render(self, exception, /):
        main = __import__("__main__")
        styles = defaultdict(str, {**self.DEFAULT_STYLES, **getattr(main, "__styles__", {})})
        context = _Context(exception.context, error_id=exception.error_id)
        message = self.template(exception.error_id).format_map(context)
        if not self._colorful:
            return Text(message)
        return Text(message, styles["error-message"])

    def __call__(self, sender, exception, /):
        sender.send_message(self.render(exception))

    handle = __call__


__all__ = (
    "CommandException",
    "TypeCoercionError",
    "RangeViolationError",
    "DeclarationError",
    "CommandSyntaxError",
    "MessageHandler",
)
