"""Tests for Scope."""

import unittest

from arborinjectum.bindings import Binding, BindingKind
from arborinjectum.exceptions import IncorrectProviderError
from arborinjectum.scope import Scope


class Wheel:
    pass


class SpareWheel:
    pass


class TestProviderLookup(unittest.TestCase):
    def test_local_binding_found(self) -> None:
        scope = Scope(providers=[Wheel])
        provider = scope.get_provider(Wheel)
        self.assertIs(provider.kind, BindingKind.SELF)
        self.assertIs(provider.target, Wheel)

    def test_lookup_delegates_to_parent(self) -> None:
        root = Scope(providers=[Binding.use_value("color", "red")])
        child = Scope(Scope(root))
        self.assertEqual(child.get_provider("color").target, "red")

    def test_nearest_binding_wins(self) -> None:
        root = Scope(providers=[Binding.use_value("color", "red")])
        child = Scope(root, [Binding.use_value("color", "blue")])
        self.assertEqual(child.get_provider("color").target, "blue")
        self.assertEqual(root.get_provider("color").target, "red")

    def test_missing_binding_returns_none(self) -> None:
        self.assertIsNone(Scope(Scope()).get_provider(Wheel))

    def test_first_local_binding_wins(self) -> None:
        scope = Scope(providers=[Binding.use_value("n", 1), Binding.use_value("n", 2)])
        self.assertEqual(scope.get_provider("n").target, 1)

    def test_add_providers_appends(self) -> None:
        scope = Scope(providers=[Wheel])
        scope.add_providers([Binding.use_value("size", 17)])
        self.assertTrue(scope.binds_locally("size"))
        self.assertEqual(len(scope.providers), 2)

    def test_add_providers_rejects_garbage(self) -> None:
        with self.assertRaises(IncorrectProviderError):
            Scope().add_providers(["not a binding"])

    def test_parent_and_root(self) -> None:
        root = Scope()
        child = Scope(root)
        self.assertTrue(root.is_root)
        self.assertFalse(child.is_root)
        self.assertIs(child.parent, root)


class TestFindCachedInstance(unittest.TestCase):
    def test_local_hit(self) -> None:
        scope = Scope()
        wheel = Wheel()
        scope.add_instance(Wheel, wheel)
        self.assertEqual(scope.find_cached_instance(Wheel, {}), (True, wheel))

    def test_ancestor_hit(self) -> None:
        root = Scope()
        wheel = Wheel()
        root.add_instance(Wheel, wheel)
        child = Scope(Scope(root))
        self.assertEqual(child.find_cached_instance(Wheel, {}), (True, wheel))

    def test_miss(self) -> None:
        self.assertEqual(Scope(Scope()).find_cached_instance(Wheel, {}), (False, None))

    def test_falsy_cached_instance_is_a_hit(self) -> None:
        scope = Scope()
        scope.add_instance(Wheel, 0)
        self.assertEqual(scope.find_cached_instance(Wheel, {}), (True, 0))

    def test_type_binding_is_a_boundary(self) -> None:
        root = Scope()
        root.add_instance(Wheel, Wheel())
        middle = Scope(root, [Binding.use_class(Wheel, SpareWheel)])
        self.assertEqual(Scope(middle).find_cached_instance(Wheel, {}), (False, None))

    def test_override_key_binding_is_a_boundary(self) -> None:
        root = Scope()
        root.add_instance(Wheel, Wheel())
        middle = Scope(root, [Binding.use_value("size", 19)])
        self.assertEqual(Scope(middle).find_cached_instance(Wheel, {0: "size"}), (False, None))
        found, _ = Scope(middle).find_cached_instance(Wheel, {0: "color"})
        self.assertTrue(found)

    def test_requested_key_binding_is_a_boundary(self) -> None:
        root = Scope()
        root.add_instance(SpareWheel, SpareWheel())
        middle = Scope(root, [Binding.use_class(Wheel, SpareWheel)])
        child = Scope(middle)
        self.assertEqual(child.find_cached_instance(SpareWheel, {}, Wheel), (False, None))
        found, _ = child.find_cached_instance(SpareWheel, {})
        self.assertTrue(found)

    def test_cache_at_boundary_itself_is_used(self) -> None:
        wheel = Wheel()
        middle = Scope(Scope(), [Wheel])
        middle.add_instance(Wheel, wheel)
        self.assertEqual(Scope(middle).find_cached_instance(Wheel, {}), (True, wheel))


class TestResolveOwningScope(unittest.TestCase):
    def test_defaults_to_root(self) -> None:
        root = Scope()
        child = Scope(Scope(root))
        self.assertIs(child.resolve_owning_scope(Wheel, {}, []), root)

    def test_root_itself(self) -> None:
        root = Scope()
        self.assertIs(root.resolve_owning_scope(Wheel, {}, []), root)

    def test_stops_at_type_binding(self) -> None:
        root = Scope()
        middle = Scope(root, [Wheel])
        child = Scope(middle)
        self.assertIs(child.resolve_owning_scope(Wheel, {}, []), middle)

    def test_stops_at_override_key_binding(self) -> None:
        root = Scope()
        middle = Scope(root, [Binding.use_value("color", "green")])
        child = Scope(middle)
        self.assertIs(child.resolve_owning_scope(Wheel, {1: "color"}, []), middle)
        self.assertIs(child.resolve_owning_scope(Wheel, {1: "size"}, []), root)

    def test_stops_where_a_dependency_is_cached(self) -> None:
        root = Scope()
        middle = Scope(root)
        leaf = object()
        middle.add_instance(Wheel, leaf)
        child = Scope(middle)
        self.assertIs(child.resolve_owning_scope(SpareWheel, {}, [leaf]), middle)
        self.assertIs(child.resolve_owning_scope(SpareWheel, {}, [object()]), root)

    def test_empty_slots_never_anchor(self) -> None:
        root = Scope()
        middle = Scope(root)
        middle.add_instance(Wheel, None)
        self.assertIs(Scope(middle).resolve_owning_scope(SpareWheel, {}, [None]), root)

    def test_stops_at_requested_key_binding(self) -> None:
        root = Scope()
        middle = Scope(root, [Binding.use_class(Wheel, SpareWheel)])
        child = Scope(middle)
        self.assertIs(child.resolve_owning_scope(SpareWheel, {}, [], Wheel), middle)


class TestInstances(unittest.TestCase):
    def test_get_instance_is_local_only(self) -> None:
        root = Scope()
        root.add_instance(Wheel, Wheel())
        self.assertIsNone(Scope(root).get_instance(Wheel))

    def test_discard_instance(self) -> None:
        scope = Scope()
        scope.add_instance(Wheel, Wheel())
        scope.discard_instance(Wheel)
        scope.discard_instance(SpareWheel)
        self.assertIsNone(scope.get_instance(Wheel))

    def test_cache_is_keyed_by_identity(self) -> None:
        class Other(Wheel):
            pass

        scope = Scope()
        scope.add_instance(Wheel, Wheel())
        self.assertEqual(scope.find_cached_instance(Other, {}), (False, None))


if __name__ == "__main__":
    unittest.main()
