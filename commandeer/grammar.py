"""
Commandeer grammar engine: the host-side parser for compiled command trees.

Scope
- Nodes: RootNode, LiteralNode (fixed word, optionally redirecting to another literal
  for aliases) and ArgumentNode (typed value read by a parser). Nodes form a tree;
  any node can carry an executable callback.
- Parsers: IntegerParser/LongParser/DoubleParser (bounded numbers), BooleanParser,
  WordParser (single token, bounded length) and GreedyParser (rest of the input).
- Commands: the registrar that owns the root node. register(node, description, aliases)
  mounts a compiled command; parse()/execute() match raw input.

Parsing rules
- Tokens are separated by a single space; a leading "/" is ignored.
- Literals match case-insensitively. When the next word matches a literal child,
  argument children of the same node are not tried.
- A parse succeeds when the whole input is consumed and the last matched node is
  executable. Otherwise the most advanced failure is raised as CommandSyntaxError.

The engine never catches exceptions raised by callbacks; the callbacks compiled by
commandeer.compiler already convert every failure into a result code.
"""
import re
from types import MappingProxyType
from typing import NamedTuple

from .faults import CommandSyntaxError
from .utils import *


class Reader:
    """
    Cursor over an input string.
    """

    __slots__ = ("string", "cursor")

    def __init__(self, string, cursor=0, /):
        self.string = string
        self.cursor = cursor

    def copy(self):
        return Reader(self.string, self.cursor)

    def can_read(self, length=1, /):
        return self.cursor + length <= len(self.string)

    def peek(self):
        return self.string[self.cursor]

    def skip(self):
        self.cursor += 1

    def read_word(self):
        start = self.cursor
        while self.can_read() and self.peek() != " ":
            self.skip()
        return self.string[start:self.cursor]

    def read_remaining(self):
        start, self.cursor = self.cursor, len(self.string)
        return self.string[start:]

    def error(self, message, /, cursor=Unset):
        return CommandSyntaxError(message, input=self.string, cursor=coalesce(cursor, self.cursor))


class WordParser:
    """
    Single token with optional length bounds.
    """
    greedy = False

    def __init__(self, min_len=0, max_len=None, /):
        self.min_len = min_len
        self.max_len = max_len

    def read(self, reader, /):
        return reader.read_word()

    def parse(self, reader, /):
        start = reader.cursor
        if not (value := self.read(reader)):
            raise reader.error("expected string", start)
        if len(value) < self.min_len:
            raise reader.error("string must be at least %d characters, found %d" % (self.min_len, len(value)), start)
        if self.max_len is not None and len(value) > self.max_len:
            raise reader.error("string must be at most %d characters, found %d" % (self.max_len, len(value)), start)
        return value

    def __repr__(self):
        return f"{type(self).__name__}({self.min_len!r}, {self.max_len!r})"


class GreedyParser(WordParser):
    """
    Everything up to the end of the input, spaces included.
    """
    greedy = True

    def read(self, reader, /):
        return reader.read_remaining()


class _NumberParser:
    greedy = False
    kind = "number"
    pattern = r""

    def __init__(self, min, max, /):
        self.min = min
        self.max = max

    def convert(self, token, /):
        raise NotImplementedError

    def parse(self, reader, /):
        start = reader.cursor
        if not (token := reader.read_word()):
            raise reader.error("expected %s" % self.kind, start)
        if not re.fullmatch(self.pattern, token):
            raise reader.error("invalid %s %r" % (self.kind, token), start)
        value = self.convert(token)
        if value < self.min:
            raise reader.error("%s must not be less than %s, found %s" % (self.kind, self.min, value), start)
        if value > self.max:
            raise reader.error("%s must not be more than %s, found %s" % (self.kind, self.max, value), start)
        return value

    def __repr__(self):
        return f"{type(self).__name__}({self.min!r}, {self.max!r})"


class IntegerParser(_NumberParser):
    kind = "integer"
    pattern = r"[+-]?\d+"

    def __init__(self, min=-2 ** 31, max=2 ** 31 - 1, /):
        super().__init__(min, max)

    def convert(self, token, /):
        return int(token)


class LongParser(IntegerParser):
    kind = "long"

    def __init__(self, min=-2 ** 63, max=2 ** 63 - 1, /):
        super().__init__(min, max)


class DoubleParser(_NumberParser):
    kind = "double"
    pattern = r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?"

    def __init__(self, min=float("-inf"), max=float("inf"), /):
        super().__init__(min, max)

    def convert(self, token, /):
        return float(token)


class BooleanParser:
    greedy = False

    def parse(self, reader, /):
        start = reader.cursor
        if not (token := reader.read_word()):
            raise reader.error("expected boolean", start)
        if token.lower() not in ("true", "false"):
            raise reader.error("invalid boolean, expected true or false but found %r" % token, start)
        return token.lower() == "true"

    def __repr__(self):
        return "BooleanParser()"


class GrammarNode:
    """
    Base grammar node: ordered children plus an optional executable callback.
    """

    def __init__(self, name, /):
        self._name = name
        self._children = {}
        self._command = None

    name = mirror("name")

    @property
    def children(self):
        return dict(self._children)

    @property
    def command(self):
        return self._command

    def then(self, node, /):
        """
        Attach `node` as a child (replacing a child with the same name) and return self.
        """
        if not isinstance(node, LiteralNode | ArgumentNode):
            raise TypeError("grammar children must be literal or argument nodes")
        self._children[node.name.lower()] = node
        return self

    def executes(self, command, /):
        if not callable(command):
            raise TypeError("grammar command must be callable")
        self._command = command
        return self

    def __repr__(self):
        return f"{type(self).__name__}({self._name!r}, children={list(self._children)!r})"


class RootNode(GrammarNode):
    def __init__(self):
        super().__init__("")


class LiteralNode(GrammarNode):
    """
    Fixed word. An alias is a literal redirecting to another literal: it shares the
    target's children and callback.
    """

    def __init__(self, name, /, redirect=None):
        normalize(name, "literal")
        if redirect is not None and not isinstance(redirect, LiteralNode):
            raise TypeError("literal redirect must be a literal node")
        super().__init__(name)
        self._redirect = redirect

    @property
    def redirect(self):
        return self._redirect

    @property
    def children(self):
        if self._redirect is not None:
            return self._redirect.children
        return super().children

    @property
    def command(self):
        if self._redirect is not None:
            return self._redirect.command
        return self._command

    def matches(self, word, /):
        return word.lower() == self._name.lower()

    def parse(self, reader, /):
        start = reader.cursor
        if not self.matches(reader.read_word()):
            raise reader.error("expected literal %r" % self._name, start)
        return self._name


class ArgumentNode(GrammarNode):
    """
    Typed value read by `parser`.
    """

    def __init__(self, name, parser, /):
        normalize(name, "argument")
        if not callable(getattr(parser, "parse", None)):
            raise TypeError("argument parser must provide a parse() method")
        super().__init__(name)
        self._parser = parser

    parser = mirror("parser")

    def parse(self, reader, /):
        return self._parser.parse(reader)


class ParsedArgument(NamedTuple):
    raw: str
    value: object


class Invocation:
    """
    Result of a successful parse.

    Attributes
    - source: the sender the input came from.
    - input: the input string (without the leading "/").
    - arguments: argument name → ParsedArgument, in parse order.
    - nodes: matched grammar nodes, root excluded.
    - command: callback of the last matched node.
    """

    def __init__(self, source, input, arguments, nodes, /):
        self._source = source
        self._input = input
        self._arguments = MappingProxyType(dict(arguments))
        self._nodes = tuple(nodes)

    source = mirror("source")
    input = mirror("input")
    nodes = mirror("nodes")

    @property
    def arguments(self):
        return self._arguments

    @property
    def command(self):
        return self._nodes[-1].command if self._nodes else None

    def get(self, name, default=None, /):
        try:
            return self._arguments[name].value
        except KeyError:
            return default

    def __repr__(self):
        return f"Invocation({self._input!r}, arguments={dict(self._arguments)!r})"


class _Candidate(NamedTuple):
    reader: Reader
    arguments: dict
    nodes: tuple
    error: CommandSyntaxError | None

    @property
    def ok(self):
        return (
            self.error is None
            and not self.reader.can_read()
            and bool(self.nodes)
            and self.nodes[-1].command is not None
        )

    def rank(self):
        return self.ok, self.reader.cursor


def _relevant(node, reader):
    word = reader.copy().read_word()
    children = node.children.values()
    if literals := [child for child in children if isinstance(child, LiteralNode) and child.matches(word)]:
        return literals
    return [child for child in children if isinstance(child, ArgumentNode)]


def _walk(node, reader, arguments, nodes):
    best = None
    for child in _relevant(node, reader):
        attempt = reader.copy()
        start = attempt.cursor
        try:
            value = child.parse(attempt)
        except CommandSyntaxError as error:
            candidate = _Candidate(reader, arguments, nodes, error)
        else:
            parsed = arguments
            if isinstance(child, ArgumentNode):
                parsed = arguments | {child.name: ParsedArgument(attempt.string[start:attempt.cursor], value)}
            if attempt.can_read(2):
                attempt.skip()
                candidate = _walk(child, attempt, parsed, nodes + (child,))
            else:
                candidate = _Candidate(attempt, parsed, nodes + (child,), None)
        if best is None or candidate.rank() > best.rank():
            best = candidate
    return best or _Candidate(reader, arguments, nodes, None)


class Commands:
    """
    Host registrar and parser for compiled commands.

        commands = Commands()
        commands.register(node, "manage points", ["pts"])
        commands.execute(sender, "points add Steve 5")
    """

    def __init__(self):
        self._root = RootNode()
        self._descriptions = {}
        self._aliases = {}

    root = mirror("root")

    def register(self, node, description=None, aliases=(), /):
        """
        Mount `node` under the root, plus one redirecting literal per alias.
        """
        if not isinstance(node, LiteralNode):
            raise TypeError("registered commands must be literal nodes")
        self._root.then(node)
        self._descriptions[node.name.lower()] = description
        self._aliases[node.name.lower()] = tuple(aliases)
        for alias in aliases:
            self._root.then(LiteralNode(alias, redirect=node))
        return node

    def description(self, name, /):
        return self._descriptions.get(name.lower())

    def aliases(self, name, /):
        return self._aliases.get(name.lower(), ())

    def parse(self, source, input, /):
        """
        Match `input` against the registered grammar.

        Raises
        - CommandSyntaxError: no executable path consumes the whole input.
        """
        if not isinstance(input, str):
            raise TypeError("command input must be a string")
        reader = Reader(input.removeprefix("/"))
        best = _walk(self._root, reader, {}, ())
        if best.ok:
            return Invocation(source, reader.string, best.arguments, best.nodes)
        if best.error is not None:
            raise best.error
        if best.reader.can_read():
            message = "incorrect argument for command" if best.nodes else "unknown command"
            raise best.reader.error(message)
        raise best.reader.error("unknown or incomplete command")

    def execute(self, source, input, /):
        """
        Parse `input` and run the matched callback; returns the callback's result.
        """
        invocation = self.parse(source, input)
        return invocation.command(invocation)


__all__ = (
    "Reader",
    "WordParser",
    "GreedyParser",
    "IntegerParser",
    "LongParser",
    "DoubleParser",
    "BooleanParser",
    "GrammarNode",
    "RootNode",
    "LiteralNode",
    "ArgumentNode",
    "ParsedArgument",
    "Invocation",
    "Commands",
)
