"""
Registry and compiler end-to-end tests (declare, compile, register, execute).

Scope
- Validate compilation: parser mapping, executable argument prefixes, alias literals,
  greedy placement, sealing.
- Validate registration against the bundled Commands registrar.
- Validate full invocations: binding, permission failures, executor failures and
  syntax errors raised by the grammar before dispatch.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from commandeer import (
    Command,
    SubCommand,
    Argument,
    ArgType,
    ExecutorType,
    CommandException,
    CommandSyntaxError,
    DeclarationError,
    MessageHandler,
    Commands,
    Dispatcher,
    Player,
    ConsoleSender,
    SUCCESS,
    FAILURE,
    build_argument_chain,
    compile_command,
    create_parser,
    create_registry,
)
from commandeer.grammar import IntegerParser, DoubleParser, BooleanParser, WordParser, GreedyParser


class Add(SubCommand):
    def __init__(self):
        super().__init__("add", "points.add", aliases=["give"])
        self.register_argument(Argument("player", min_len=3, max_len=16))
        self.register_argument(Argument("amount", ArgType.INTEGER, min=1, optional=True))
        self.contexts = []

    def run(self, context):
        self.contexts.append(context)
        if (context["amount"].as_int() or 1) > 100:
            raise CommandException("points.too-many", limit=100).with_("amount", context["amount"].as_int())


class Reload(SubCommand):
    def __init__(self):
        super().__init__("reload", "points.reload", executor=ExecutorType.NONINTERACTIVE_ONLY)
        self.contexts = []

    def run(self, context):
        self.contexts.append(context)


class Points(Command):
    def __init__(self):
        super().__init__("points", description="manage points", aliases=["pts"])
        self.add = self.register_child(Add())
        self.reload = self.register_child(Reload())
        self.contexts = []

    def run(self, context):
        self.contexts.append(context)


class Sink:
    def __init__(self):
        self.calls = []

    def __call__(self, sender, exception):
        self.calls.append(exception)


class TestCompiler(TestCase):
    """Behavioral tests for the tree compiler."""

    def testParserMapping(self):
        self.assertIsInstance(create_parser(Argument("n", ArgType.INTEGER, min=1)), IntegerParser)
        self.assertEqual(create_parser(Argument("n", ArgType.INTEGER, min=1)).min, 1)
        self.assertIsInstance(create_parser(Argument("n", ArgType.DOUBLE)), DoubleParser)
        self.assertIsInstance(create_parser(Argument("b", ArgType.BOOLEAN)), BooleanParser)
        self.assertIsInstance(create_parser(Argument("reason", greedy=True)), GreedyParser)
        self.assertEqual(create_parser(Argument("player", min_len=3)).min_len, 3)
        self.assertIs(type(create_parser(Argument("player"))), WordParser)

    def testEveryChainPrefixIsExecutable(self):
        command = Points()
        node = build_argument_chain(tuple(command.add.arguments.values()), command.add, Dispatcher())
        self.assertIsNotNone(node.command)
        self.assertIsNotNone(node.children["amount"].command)
        self.assertEqual(node.command.__name__, "execute_points_add")

    def testGreedyMustBeLast(self):
        class Kick(Command):
            def run(self, context):
                pass

        kick = Kick("kick")
        kick.register_argument(Argument("reason", greedy=True))
        kick.register_argument(Argument("player"))
        with self.assertRaises(DeclarationError):
            compile_command(kick, Dispatcher())

    def testGreedyLastCompiles(self):
        class Kick(Command):
            def run(self, context):
                pass

        kick = Kick("kick")
        kick.register_argument(Argument("player"))
        kick.register_argument(Argument("reason", greedy=True))
        literal = compile_command(kick, Dispatcher())
        self.assertIsInstance(literal.children["player"].children["reason"].parser, GreedyParser)

    def testCompiledTreeShape(self):
        literal = compile_command(Points(), Dispatcher())
        self.assertEqual(literal.name, "points")
        self.assertEqual(set(literal.children), {"add", "reload", "give"})
        self.assertIs(literal.children["give"].redirect, literal.children["add"])
        self.assertIsNotNone(literal.command)

    def testAliasClashingWithChildIsSkipped(self):
        class Give(SubCommand):
            def run(self, context):
                pass

        command = Points()
        command.register_child(Give("give"))
        literal = compile_command(command, Dispatcher())
        self.assertIsNone(literal.children["give"].redirect)
        self.assertIsNotNone(literal.children["give"].command)

    def testArgumentNamedLikeSubCommandIsRejected(self):
        class All(SubCommand):
            def run(self, context):
                pass

        command = Points()
        command.register_child(All("all"))
        command.register_argument(Argument("ALL"))
        with self.assertRaises(DeclarationError):
            compile_command(command, Dispatcher())
        self.assertFalse(command.sealed)

    def testArgumentNamedLikeAliasIsRejected(self):
        command = Points()
        command.register_argument(Argument("give"))
        with self.assertRaises(DeclarationError):
            compile_command(command, Dispatcher())

    def testOnlyRootsCompile(self):
        with self.assertRaises(TypeError):
            compile_command(Add(), Dispatcher())

    def testCompilationSeals(self):
        command = Points()
        compile_command(command, Dispatcher())
        self.assertTrue(command.sealed)
        self.assertTrue(command.add.sealed)


class TestRegistry(TestCase):
    """End-to-end behavioral tests through the Commands registrar."""

    def setUp(self):
        self.commands = Commands()
        self.sink = Sink()
        self.registry = create_registry(self.commands, self.sink)
        self.points = Points()
        self.registry.register(self.points)

    def testRegistrarReceivesMetadata(self):
        self.assertEqual(self.commands.description("points"), "manage points")
        self.assertEqual(self.commands.aliases("points"), ("pts",))
        self.assertIs(self.registry.commands["points"], self.points)

    def testFullInvocation(self):
        sender = Player("Steve", ["points.add"])
        self.assertEqual(self.commands.execute(sender, "points add Alex 5"), SUCCESS)
        context, = self.points.add.contexts
        self.assertEqual(context["player"].as_string(), "Alex")
        self.assertEqual(context["amount"].as_int(), 5)
        self.assertEqual(context.args, ("Alex", "5"))
        self.assertEqual(self.sink.calls, [])

    def testOptionalTrailingArgument(self):
        self.assertEqual(self.commands.execute(ConsoleSender(), "points add Alex"), SUCCESS)
        self.assertFalse(self.points.add.contexts[0]["amount"].present)

    def testRootRunsWithoutArguments(self):
        self.assertEqual(self.commands.execute(Player("Steve"), "/pts"), SUCCESS)
        self.assertEqual(len(self.points.contexts), 1)

    def testSubCommandAlias(self):
        self.assertEqual(self.commands.execute(ConsoleSender(), "pts give Alex 2"), SUCCESS)
        self.assertEqual(self.points.add.contexts[0]["amount"].as_int(), 2)

    def testOutOfRangeFailsBeforeDispatch(self):
        with self.assertRaises(CommandSyntaxError):
            self.commands.execute(Player("Steve", ["points.add"]), "points add Alex 0")
        self.assertEqual(self.points.add.contexts, [])

    def testTooShortPlayerFailsBeforeDispatch(self):
        with self.assertRaises(CommandSyntaxError):
            self.commands.execute(ConsoleSender(), "points add Al 5")

    def testPermissionDenied(self):
        self.assertEqual(self.commands.execute(Player("Alex"), "points add Steve 5"), FAILURE)
        self.assertEqual(self.points.add.contexts, [])
        exception, = self.sink.calls
        self.assertEqual(exception.error_id, "sender.no-permission")
        self.assertEqual(dict(exception.context), {"permission": "points.add"})

    def testExecutorMismatch(self):
        self.assertEqual(self.commands.execute(Player("Steve", operator=True), "points reload"), FAILURE)
        self.assertEqual(self.sink.calls[0].error_id, "executor-type.console")
        self.assertEqual(self.commands.execute(ConsoleSender(), "points reload"), SUCCESS)

    def testCommandExceptionFromRun(self):
        self.assertEqual(self.commands.execute(ConsoleSender(), "points add Alex 500"), FAILURE)
        exception, = self.sink.calls
        self.assertEqual(dict(exception.context), {"limit": 100, "amount": 500})

    def testRepeatedInvocationsAreIndependent(self):
        sender = ConsoleSender()
        self.commands.execute(sender, "points add Alex 5")
        self.commands.execute(sender, "points add Alex")
        first, second = self.points.add.contexts
        self.assertTrue(first["amount"].present)
        self.assertFalse(second["amount"].present)

    def testRegisteredTreeIsSealed(self):
        with self.assertRaises(RuntimeError):
            self.points.register_child(Add())

    def testOnlyRootsRegister(self):
        with self.assertRaises(TypeError):
            self.registry.register(Add())

    def testRegistrarMustRegister(self):
        with self.assertRaises(TypeError):
            create_registry(object())

    def testMessageHandlerTellsTheSender(self):
        output = io.StringIO()
        sender = Player("Alex", console=Console(file=output, color_system=None, width=200))
        self.registry.set_exception_handler(MessageHandler())
        self.commands.execute(sender, "points add Steve 5")
        self.assertEqual(output.getvalue().strip(), "you don't have permission to do that (points.add)")

    def testExceptionHandlerProperty(self):
        self.assertIs(self.registry.exception_handler, self.sink)
        self.assertIs(self.registry.set_exception_handler(None), self.registry)
        self.assertIsNone(self.registry.dispatcher.handler)


if __name__ == '__main__':
    unittest.main()
