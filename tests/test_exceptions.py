"""Tests for arborinjectum custom exceptions."""

import unittest

from arborinjectum.exceptions import (
    CyclicDependencyError,
    FactoryNotFunctionError,
    IncorrectProviderError,
    InjectorAlreadyExistsError,
    NotInjectableError,
    ProviderNotExistsError,
    RegistrationError,
    ResolutionError,
)
from arborinjectum.tokens import Token


class Wheel:
    pass


class TestRegistrationError(unittest.TestCase):
    def test_can_be_raised_and_caught(self) -> None:
        with self.assertRaises(RegistrationError):
            raise RegistrationError("bad registration")

    def test_message_is_preserved(self) -> None:
        err = RegistrationError("duplicate key")
        self.assertEqual(str(err), "duplicate key")

    def test_subclasses(self) -> None:
        self.assertTrue(issubclass(InjectorAlreadyExistsError, RegistrationError))
        self.assertTrue(issubclass(IncorrectProviderError, RegistrationError))

    def test_already_exists_keeps_root(self) -> None:
        root = object()
        err = InjectorAlreadyExistsError(root)
        self.assertIs(err.root, root)
        self.assertIn("already exists", str(err))

    def test_incorrect_provider_keeps_provider(self) -> None:
        err = IncorrectProviderError(42)
        self.assertEqual(err.provider, 42)
        self.assertEqual(str(err), "Incorrect provider 42")


class TestResolutionError(unittest.TestCase):
    def test_can_be_raised_and_caught(self) -> None:
        with self.assertRaises(ResolutionError):
            raise ResolutionError("not found")

    def test_message_without_chain(self) -> None:
        err = ResolutionError("missing dep")
        self.assertEqual(str(err), "missing dep")
        self.assertEqual(err.chain, [])

    def test_message_with_chain(self) -> None:
        err = ResolutionError("cannot resolve", chain=["A", "B", "C"])
        self.assertIn("A -> B -> C", str(err))
        self.assertEqual(err.chain, ["A", "B", "C"])

    def test_subclasses(self) -> None:
        for cls in (NotInjectableError, ProviderNotExistsError, FactoryNotFunctionError, CyclicDependencyError):
            self.assertTrue(issubclass(cls, ResolutionError))


class TestResolutionErrorMessages(unittest.TestCase):
    def test_not_injectable(self) -> None:
        err = NotInjectableError(Wheel, chain=["Car", "Wheel"])
        self.assertEqual(
            str(err),
            "Constructor Wheel is not marked @injectable (resolution chain: Car -> Wheel)",
        )
        self.assertIs(err.target, Wheel)

    def test_provider_not_exists(self) -> None:
        err = ProviderNotExistsError(Wheel)
        self.assertEqual(str(err), "Provider Wheel does not exist")

    def test_factory_not_function_with_token(self) -> None:
        err = FactoryNotFunctionError(Token("ENGINE"))
        self.assertEqual(str(err), "Factory for ENGINE is not a function")
        err = FactoryNotFunctionError("ENGINE")
        self.assertEqual(str(err), "Factory for 'ENGINE' is not a function")

    def test_cyclic(self) -> None:
        err = CyclicDependencyError(Wheel, chain=["Wheel", "Wheel"])
        self.assertIn("Circular dependency detected for Wheel", str(err))
        self.assertEqual(err.chain, ["Wheel", "Wheel"])


if __name__ == "__main__":
    unittest.main()
