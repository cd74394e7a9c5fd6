"""
Commands module behavioral tests (declaration, lookup, sealing, contexts).

Scope
- Validate node metadata sanitization (permission, description, aliases, executor).
- Validate child and argument registration, including last-write-wins replacement.
- Validate resolution by name and alias, path/root/usage rendering.
- Validate sealing and ExecutionContext lookups.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commandeer import (
    Command,
    SubCommand,
    Argument,
    ArgType,
    ExecutorType,
    ExecutionContext,
    Player,
    ABSENT,
)


class Root(Command):
    def run(self, context):
        pass


class Child(SubCommand):
    def run(self, context):
        pass


class TestCommandDeclaration(TestCase):
    """Behavioral tests for node metadata."""

    def testDefaults(self):
        node = Root("points")
        self.assertIsNone(node.permission)
        self.assertIsNone(node.description)
        self.assertEqual(node.aliases, ())
        self.assertIs(node.executor, ExecutorType.ANY)
        self.assertIsNone(node.parent)
        self.assertFalse(node.restricted)

    def testBlankPermissionMeansUnrestricted(self):
        self.assertFalse(Root("points", "   ").restricted)
        self.assertEqual(Root("points", " points.use ").permission, "points.use")

    def testAliasesDeduplicatedCaseInsensitively(self):
        node = Root("points", aliases=["pts", "PTS", "points", "p"])
        self.assertEqual(node.aliases, ("pts", "p"))

    def testAliasesMustBeIterableOfTokens(self):
        with self.assertRaises(TypeError):
            Root("points", aliases="pts")
        with self.assertRaises(ValueError):
            Root("points", aliases=["two words"])

    def testNoneExecutorMeansAny(self):
        self.assertIs(Root("points", executor=None).executor, ExecutorType.ANY)
        with self.assertRaises(TypeError):
            Root("points", executor="any")

    def testRunIsAbstract(self):
        class Incomplete(Command):
            pass

        with self.assertRaises(TypeError):
            Incomplete("points")

    def testTypename(self):
        self.assertEqual(SubCommand.__typename__, "sub-command")
        self.assertTrue(repr(Child("add")).startswith("child("))


class TestCommandTree(TestCase):
    """Behavioral tests for registration and resolution."""

    def setUp(self):
        self.root = Root("points")
        self.add = self.root.register_child(Child("add", "points.add", aliases=["give"]))
        self.remove = self.root.register_child(Child("remove"))

    def testResolveByNameAndAlias(self):
        self.assertIs(self.root.resolve_child("add"), self.add)
        self.assertIs(self.root.resolve_child("ADD"), self.add)
        self.assertIs(self.root.resolve_child("give"), self.add)
        self.assertIsNone(self.root.resolve_child("missing"))

    def testNameWinsOverAlias(self):
        self.root.register_child(Child("give"))
        self.assertEqual(self.root.resolve_child("give").name, "give")

    def testLastWriteWins(self):
        replacement = self.root.register_child(Child("ADD"))
        self.assertIs(self.root.resolve_child("add"), replacement)
        self.assertEqual(list(self.root.children), ["add", "remove"])
        self.assertIsNone(self.add.parent)

    def testChildrenMustBeSubCommands(self):
        with self.assertRaises(TypeError):
            self.root.register_child(Root("other"))

    def testChildCannotHaveTwoParents(self):
        other = Root("other")
        with self.assertRaises(ValueError):
            other.register_child(self.add)

    def testChildCannotContainItself(self):
        with self.assertRaises(ValueError):
            self.add.register_child(self.add)

    def testPathAndRoot(self):
        nested = self.add.register_child(Child("bulk"))
        self.assertEqual(nested.path, (self.root, self.add, nested))
        self.assertIs(nested.root, self.root)

    def testArgumentsKeepOrderAndReplace(self):
        self.add.register_argument(Argument("player"))
        self.add.register_argument(Argument("amount", ArgType.INTEGER))
        self.add.register_argument(Argument("Player", min_len=3))
        self.assertEqual(list(self.add.arguments), ["player", "amount"])
        self.assertEqual(self.add.argument("PLAYER").min_len, 3)
        self.assertIsNone(self.add.argument("reason"))

    def testArgumentsMustBeArguments(self):
        with self.assertRaises(TypeError):
            self.add.register_argument("player")

    def testUsage(self):
        self.add.register_argument(Argument("player"))
        self.add.register_argument(Argument("amount", ArgType.INTEGER, optional=True))
        self.assertEqual(self.root.usage, "points <add|remove>")
        self.assertEqual(self.add.usage, "points add <player> [amount]")

    def testMatches(self):
        self.assertTrue(self.add.matches("GIVE"))
        self.assertFalse(self.add.matches("remove"))
        self.assertFalse(self.add.matches(None))

    def testSealFreezesSubtree(self):
        self.root.seal()
        self.assertTrue(self.add.sealed)
        with self.assertRaises(RuntimeError):
            self.add.register_argument(Argument("player"))
        with self.assertRaises(RuntimeError):
            self.root.register_child(Child("list"))

    def testChildrenViewIsACopy(self):
        self.root.children.clear()
        self.assertEqual(len(self.root.children), 2)


class TestExecutionContext(TestCase):
    """Behavioral tests for ExecutionContext lookups."""

    def testLookupsAreCaseInsensitive(self):
        amount = Argument("amount", ArgType.INTEGER).bind("5")
        context = ExecutionContext(Player("Steve"), Root("points"), {"amount": amount}, args=["5"])
        self.assertIs(context["AMOUNT"], amount)
        self.assertIn("Amount", context)
        self.assertEqual(context.args, ("5",))

    def testMissingValuesAreAbsent(self):
        context = ExecutionContext(Player("Steve"), Root("points"))
        self.assertIs(context["amount"], ABSENT)
        self.assertIsNone(context.get("amount", None))
        self.assertNotIn("amount", context)

    def testValuesAreReadOnly(self):
        context = ExecutionContext(Player("Steve"), Root("points"))
        with self.assertRaises(TypeError):
            context.values["amount"] = ABSENT


if __name__ == '__main__':
    unittest.main()
