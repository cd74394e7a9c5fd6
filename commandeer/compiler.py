"""
Commandeer tree compiler: turn a declarative command tree into a grammar.

For each node, depth-first:
- every child becomes a literal branch (build_subcommand), plus one redirecting
  literal per child alias that does not clash with a child name;
- the ordered arguments become a chain of nested argument nodes
  (build_argument_chain). Every level of the chain is executable with the arguments
  parsed so far, so trailing arguments can be left out;
- the node itself gets a zero-argument executable leaf.

Every executable leaf calls Dispatcher.dispatch() with the node it belongs to and
the values parsed on the way. Compiled nodes are sealed.
"""
from .arguments import ArgType
from .commands import Command
from .faults import DeclarationError
from .grammar import *
from .utils import *


def create_parser(argument, /):
    """
    Map an Argument onto the grammar parser enforcing its type and bounds.
    """
    match argument.type:
        case ArgType.INTEGER:
            return IntegerParser(argument.min, argument.max)
        case ArgType.LONG:
            return LongParser(argument.min, argument.max)
        case ArgType.DOUBLE:
            return DoubleParser(argument.min, argument.max)
        case ArgType.BOOLEAN:
            return BooleanParser()
        case ArgType.STRING if argument.greedy:
            return GreedyParser(argument.min_len, argument.max_len)
        case _:
            return WordParser(argument.min_len, argument.max_len)


def _executor(target, dispatcher):
    @rename("execute_" + "_".join(node.key for node in target.path))
    def execute(invocation):
        arguments = invocation.arguments
        return dispatcher.dispatch(
            invocation.source,
            target,
            {name: parsed.value for name, parsed in arguments.items()},
            args=tuple(parsed.raw for parsed in arguments.values()),
        )
    return execute


def build_argument_chain(arguments, target, dispatcher, /):
    """
    Build nested argument nodes for `arguments` (in order) and return the first one.

    Raises
    - DeclarationError: a greedy argument is followed by other arguments.
    """
    argument, *following = arguments
    if argument.greedy and following:
        raise DeclarationError(
            "greedy argument %r of %r must be the last argument" % (argument.name, target.usage)
        )
    node = ArgumentNode(argument.name, create_parser(argument))
    if following:
        node.then(build_argument_chain(following, target, dispatcher))
    return node.executes(_executor(target, dispatcher))


def build_subcommand(command, dispatcher, /):
    """
    Compile `command` and its subtree into a literal node.
    """
    literal = LiteralNode(command.name)
    children = command.children

    compiled = {}
    for key, child in children.items():
        literal.then(compiled.setdefault(key, build_subcommand(child, dispatcher)))
    for key, child in children.items():
        for alias in child.aliases:
            if alias.lower() not in children:
                literal.then(LiteralNode(alias, redirect=compiled[key]))

    if arguments := command.arguments:
        first = next(iter(arguments.values()))
        if first.key in literal.children:
            raise DeclarationError(
                "argument %r of %r clashes with a sub-command or alias of the same name" % (first.name, command.usage)
            )
        literal.then(build_argument_chain(tuple(arguments.values()), command, dispatcher))

    return literal.executes(_executor(command, dispatcher))


def compile_command(command, dispatcher, /):
    """
    Compile a root Command into a grammar literal wired to `dispatcher`, then seal it.

    Raises
    - TypeError: command is not a root Command.
    - DeclarationError: the tree contains an invalid argument chain, or a first
      argument named like a sibling sub-command or alias.
    """
    if not isinstance(command, Command):
        raise TypeError("only root commands can be compiled")
    literal = build_subcommand(command, dispatcher)
    command.seal()
    return literal


__all__ = (
    "create_parser",
    "build_argument_chain",
    "build_subcommand",
    "compile_command",
)
