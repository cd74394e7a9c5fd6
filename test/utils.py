"""
Tests for the internal helpers.

This module verifies:
- The Unset sentinel (singleton identity, falsy semantics, copy/pickle identity, finality).
- coalesce() only replaces Unset.
- rename() in both function and decorator forms.
- mirror() read-only properties with container copies.
- typename() and normalize().
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from commandeer.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(UnsetType(), UnsetType())
        self.assertIs(Unset, UnsetType())

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance.
        """
        results: list[UnsetType] = []
        lock: Lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetSubtype", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce/rename/mirror/typename/normalize.
    """

    def testCoalescePreservesFalseyValues(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testRenameFunctionForm(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecoratorForm(self) -> None:
        @rename("execute_points")
        def function():
            pass

        self.assertEqual(function.__name__, "execute_points")

    def testRenameRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorIsReadOnlyAndCopiesContainers(self) -> None:
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", "b"]

        holder = Holder()
        self.assertEqual(holder.items, ("a", "b"))
        with self.assertRaises(AttributeError):
            holder.items = ()
        self.assertEqual(holder._items, ["a", "b"])

    def testTypename(self) -> None:
        self.assertEqual(typename("SubCommand"), "sub-command")
        self.assertEqual(typename("Argument"), "argument")

    def testNormalize(self) -> None:
        self.assertEqual(normalize("Points", "command"), "points")
        with self.assertRaises(TypeError):
            normalize(3, "command")
        with self.assertRaises(ValueError):
            normalize("", "command")
        with self.assertRaises(ValueError):
            normalize("two words", "command")


if __name__ == '__main__':
    unittest.main()
