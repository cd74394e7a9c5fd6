"""
Command senders: the principals that invoke commands.

A sender is opaque to the dispatcher except for three capabilities:
- classification (SenderKind): an interactive player, the automated console, or
  something else (e.g. a scheduled job or remote bridge);
- has_permission(permission): permission check;
- send_message(*objects): feedback channel, printed through a rich console.

Hosts adapt their own principals by subclassing Sender and overriding
has_permission/send_message.
"""
from enum import Enum

from . import console as consoles
from .utils import *


class SenderKind(Enum):
    PLAYER = "player"
    CONSOLE = "console"
    OTHER = "other"


class Sender:
    """
    Generic sender holding a fixed permission set.

    Parameters
    - name: display name.
    - kind: SenderKind classification.
    - permissions: iterable of granted permission strings (exact match).
    - operator: when True, every permission check succeeds.
    - console: rich console used by send_message (defaults to stdout).
    """

    def __init__(self, name, /, kind=SenderKind.OTHER, permissions=(), *, operator=False, console=Unset):
        if not isinstance(name, str):
            raise TypeError("sender name must be a string")
        if not isinstance(kind, SenderKind):
            raise TypeError("sender kind must be a SenderKind")
        if isinstance(permissions, str):
            raise TypeError("sender permissions must be an iterable of strings, not a string")
        self._name = name
        self._kind = kind
        self._permissions = frozenset(permissions)
        self._operator = bool(operator)
        self._console = coalesce(console, consoles.stdout)

    name = mirror("name")
    kind = mirror("kind")
    permissions = mirror("permissions")
    operator = mirror("operator")

    @property
    def interactive(self):
        return self._kind is SenderKind.PLAYER

    @property
    def automated(self):
        return self._kind is SenderKind.CONSOLE

    def has_permission(self, permission, /):
        return self._operator or permission in self._permissions

    def send_message(self, *objects):
        self._console.print(*objects)

    def __repr__(self):
        return f"{self._kind.value}({self._name!r})"


class Player(Sender):
    """
    Interactive (human) sender.
    """

    def __init__(self, name, /, permissions=(), *, operator=False, console=Unset):
        super().__init__(name, SenderKind.PLAYER, permissions, operator=operator, console=console)


class ConsoleSender(Sender):
    """
    The automated console. It holds every permission.
    """

    def __init__(self, name="CONSOLE", /, *, console=Unset):
        super().__init__(name, SenderKind.CONSOLE, operator=True, console=console)


__all__ = (
    "SenderKind",
    "Sender",
    "Player",
    "ConsoleSender",
)
