"""
Commandeer command layer: declare command trees.

What this module provides
- ExecutorType: which class of sender may invoke a node (ANY, INTERACTIVE_ONLY,
  NONINTERACTIVE_ONLY).
- CommandNode: the shared contract of every node in a tree:
  • name (case-insensitive), optional permission and description, aliases, executor type;
  • ordered children (SubCommand) and ordered arguments (Argument);
  • abstract run(context) hook for user logic.
- Command: a root node, handed to the host registrar with its description and aliases.
- SubCommand: a nested node.
- ExecutionContext: the per-invocation record passed to run() (sender, resolved node,
  raw argument tokens and bound values).

Quick start
    from commandeer import Command, SubCommand, Argument, ArgType, CommandException

    class Add(SubCommand):
        def __init__(self):
            super().__init__("add", "points.add")
            self.register_argument(Argument("player"))
            self.register_argument(Argument("amount", ArgType.INTEGER, min=1))

        def run(self, context):
            player, amount = context["player"].as_string(), context["amount"].as_int()
            if amount > 100:
                raise CommandException("points.too-many").with_("amount", amount)
            context.sender.send_message(f"gave {amount} points to {player}")

    class Points(Command):
        def __init__(self):
            super().__init__("points", description="manage points", aliases=["pts"])
            self.register_child(Add())

        def run(self, context):
            context.sender.send_message(self.usage)

Design notes
- Children and arguments are keyed by lowercase name. Registering a second entry with
  the same name replaces the first one (last write wins); the replaced child is detached.
- Argument insertion order is the positional parse order.
- Nodes are sealed once compiled; later registrations raise RuntimeError.
- Nodes hold no invocation state: every dispatch gets a fresh ExecutionContext.
"""
import functools
import operator
from abc import ABCMeta, abstractmethod
from enum import Enum
from types import MappingProxyType

from .arguments import Argument, ABSENT
from .utils import *


class ExecutorType(Enum):
    """
    Restriction on the class of sender allowed to invoke a node.

    - ANY: every sender.
    - INTERACTIVE_ONLY: interactive (human) senders only; otherwise "executor-type.player".
    - NONINTERACTIVE_ONLY: the automated console only; otherwise "executor-type.console".
    """
    ANY = "any"
    INTERACTIVE_ONLY = "interactive-only"
    NONINTERACTIVE_ONLY = "noninteractive-only"


class CommandType(ABCMeta):
    """
    Metaclass for command nodes.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Derive __typename__ from the class name (e.g. "sub-command") for messages.
    - Provide __repr__/__rich_repr__ restricted to __displayable__ fields.
    """
    __introspectable__ = ()
    __displayable__ = ()

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
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__displayable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate node metadata in place.

    - permission: None/Unset/blank → None (no check); otherwise a trimmed string.
    - description: None/Unset/blank → None; otherwise a trimmed string.
    - aliases: iterable of single-token strings, de-duplicated case-insensitively
      in declaration order; the node's own name is dropped.
    - executor: None → ExecutorType.ANY.
    """
    for key in ("permission", "description"):
        if not isinstance(value := coalesce(metadata[key]), str | None):
            raise TypeError(f"{cls.__typename__} {key!r} must be a string")
        metadata[key] = (value or "").strip() or None

    if isinstance(aliases := metadata["aliases"], str) or aliases is None:
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
    seen = {metadata["name"].lower()}
    metadata["aliases"] = []
    for alias in aliases:
        if (key := normalize(alias, f"{cls.__typename__} alias")) in seen:
            continue
        seen.add(key)
        metadata["aliases"].append(alias)

    if (executor := coalesce(metadata["executor"])) is None:
        executor = ExecutorType.ANY
    if not isinstance(executor, ExecutorType):
        raise TypeError(f"{cls.__typename__} 'executor' must be an ExecutorType")
    metadata["executor"] = executor


class CommandNode(metaclass=CommandType):
    """
    Named, permission-guarded, executor-constrained unit of behavior.

    Subclasses implement run(context). The node itself never stores per-invocation
    data, so one instance can serve any number of invocations.
    """

    __introspectable__ = (
        "name",
        "permission",
        "description",
        "aliases",
        "executor",
        "children",
        "arguments",
        "parent",
    )

    __displayable__ = (
        "name",
        "permission",
        "description",
        "aliases",
        "executor",
        "children",
        "arguments",
    )

    def __init__(
            self,
            name,
            /,
            permission=Unset,
            description=Unset,
            aliases=(),
            executor=ExecutorType.ANY,
    ):
        cls = type(self)
        normalize(name, cls.__typename__)
        metadata = {
            "name": name,
            "permission": permission,
            "description": description,
            "aliases": aliases,
            "executor": executor,
        }
        _sanitize_metadata(cls, metadata)

        for key, object in metadata.items():
            setattr(self, "_" + key, object)
        self._children = {}
        self._arguments = {}
        self._parent = None
        self._sealed = False

    @property
    def key(self):
        return self._name.lower()

    @property
    def restricted(self):
        """
        Whether this node declares a (non-empty) permission.
        """
        return self._permission is not None

    @property
    def sealed(self):
        return self._sealed

    @property
    def root(self):
        """
        Return the topmost node of the tree this node belongs to.
        """
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def path(self):
        """
        Return the ancestry from the root to this node as a tuple (root first).
        """
        path = [node := self]
        while node._parent is not None:
            path.append(node := node._parent)
        return tuple(reversed(path))

    @property
    def usage(self):
        """
        One-line usage, e.g. "points add <player> <amount> [reason...]".
        """
        parts = [node._name for node in self.path]
        if self._children:
            parts.append("<%s>" % "|".join(child._name for child in self._children.values()))
        parts.extend(argument.usage for argument in self._arguments.values())
        return " ".join(parts)

    def matches(self, token, /):
        """
        Whether `token` case-insensitively equals this node's name or one of its aliases.
        """
        if not isinstance(token, str):
            return False
        token = token.lower()
        return token == self._name.lower() or any(token == alias.lower() for alias in self._aliases)

    def _check_mutable(self):
        if self._sealed:
            raise RuntimeError(f"{type(self).__typename__} {self._name!r} is already compiled")

    def register_child(self, node, /):
        """
        Register `node` as a child, keyed by its lowercase name.

        A previous child with the same name is replaced (last write wins) and detached.

        Raises
        - TypeError: node is not a SubCommand.
        - ValueError: node already belongs to another parent, or would create a cycle.
        - RuntimeError: this node was already compiled.
        """
        if not isinstance(node, SubCommand):
            raise TypeError(f"{type(self).__typename__} children must be sub-commands")
        self._check_mutable()
        if node in self.path:
            raise ValueError(f"{node.__typename__} {node._name!r} cannot be registered under itself")
        if node._parent is not None and node._parent is not self:
            raise ValueError(
                f"{node.__typename__} {node._name!r} is already registered under {node._parent._name!r}"
            )

        if (previous := self._children.get(node.key)) is not None and previous is not node:
            previous._parent = None
        self._children[node.key] = node
        node._parent = self
        return node

    def register_argument(self, argument, /):
        """
        Register `argument`, keyed by its lowercase name; same-name entries are replaced.

        Raises
        - TypeError: argument is not an Argument.
        - RuntimeError: this node was already compiled.
        """
        if not isinstance(argument, Argument):
            raise TypeError(f"{type(self).__typename__} arguments must be Argument instances")
        self._check_mutable()
        self._arguments[argument.key] = argument
        return argument

    def resolve_child(self, token, /):
        """
        Return the child named `token` (by name first, then by alias), or None.
        """
        if not isinstance(token, str):
            return None
        if (child := self._children.get(token.lower())) is not None:
            return child
        for child in self._children.values():
            if child.matches(token):
                return child
        return None

    def argument(self, name, /):
        """
        Return the argument named `name` (case-insensitive), or None.
        """
        if not isinstance(name, str):
            return None
        return self._arguments.get(name.lower())

    def seal(self):
        """
        Freeze this node and its whole subtree against further registrations.
        """
        self._sealed = True
        for child in self._children.values():
            child.seal()

    @abstractmethod
    def run(self, context, /):
        """
        User logic. Read bound values from `context` and raise CommandException
        for expected failures.
        """


class Command(CommandNode):
    """
    Root command. Its name, description and aliases are handed to the host registrar.
    """


class SubCommand(CommandNode):
    """
    Nested command. Resolved by name or alias under its parent.
    """


class ExecutionContext:
    """
    Per-invocation record handed to CommandNode.run().

    Attributes
    - sender: the invoking principal.
    - command: the resolved node being run.
    - args: raw argument tokens of this invocation, in parse order.
    - values: mapping of lowercase argument name → Value.

    context[name] and context.get(name) return the bound Value, or ABSENT.
    """

    def __init__(self, sender, command, /, values=Unset, args=()):
        self._sender = sender
        self._command = command
        self._values = MappingProxyType(dict(coalesce(values, {})))
        self._args = tuple(args)

    sender = mirror("sender")
    command = mirror("command")
    args = mirror("args")

    @property
    def values(self):
        return self._values

    def get(self, name, default=ABSENT, /):
        if not isinstance(name, str):
            raise TypeError("execution context keys must be strings")
        return self._values.get(name.lower(), default)

    def __getitem__(self, name, /):
        return self.get(name)

    def __contains__(self, name, /):
        return isinstance(name, str) and name.lower() in self._values

    def __repr__(self):
        return f"execution-context(sender={self._sender!r}, command={self._command._name!r}, values={dict(self._values)!r})"


__all__ = (
    "ExecutorType",
    "CommandNode",
    "Command",
    "SubCommand",
    "ExecutionContext",
)
