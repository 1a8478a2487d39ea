"""Tests for GeneratorFactory."""

from threading import Thread

import pytest

from dataforge import (
    DataGenerator,
    DuplicateRegistrationError,
    GenerationContext,
    GeneratorFactory,
    InstantiationError,
    NotFoundError,
    get_generator_factory,
    register_builtin_generators,
    reset_generator_factory,
)
from dataforge.generators import BUILTIN_GENERATORS


class CounterGenerator(DataGenerator[int]):
    """Stateful generator counting its own calls."""

    name = "counter"

    def __init__(self, start: int = 0):
        self.value = start

    def generate(self, context: GenerationContext) -> int:
        self.value += 1
        return self.value

    def reset(self) -> None:
        self.value = 0


class OtherCounterGenerator(CounterGenerator):
    name = "counter"


class SharedGenerator(DataGenerator[str]):
    name = "shared"
    shared = True

    def generate(self, context: GenerationContext) -> str:
        return "same"


class BrokenGenerator(DataGenerator[str]):
    name = "broken"

    def __init__(self):
        raise RuntimeError("missing dependency")

    def generate(self, context: GenerationContext) -> str:
        return ""


class NotAGenerator:
    def generate(self, context):
        return None


class TestRegistration:
    """Test registering generators."""

    def test_register_class(self, factory):
        """Test registering a generator class."""
        factory.register_generator("counter", CounterGenerator)

        assert factory.is_registered("counter")
        assert "counter" in factory
        assert len(factory) == 1

    def test_lookup_is_case_sensitive(self, factory):
        """Test exact, case-sensitive name matching."""
        factory.register_generator("counter", CounterGenerator)
        assert not factory.is_registered("Counter")

    def test_register_closure(self, factory):
        """Test registering a factory closure."""
        factory.register_generator("counter_from_10", lambda: CounterGenerator(start=10))

        generator = factory.create_generator("counter_from_10")
        assert generator.generate(GenerationContext()) == 11

    def test_duplicate_rejected(self, factory):
        """Test that a second registration is rejected by default."""
        factory.register_generator("counter", CounterGenerator)

        with pytest.raises(DuplicateRegistrationError, match="already registered") as exc_info:
            factory.register_generator("counter", OtherCounterGenerator)

        assert exc_info.value.context["name"] == "counter"
        assert isinstance(factory.create_generator("counter"), CounterGenerator)
        assert not isinstance(factory.create_generator("counter"), OtherCounterGenerator)

    def test_override_replaces(self, factory):
        """Test explicit last-writer-wins."""
        factory.register_generator("counter", CounterGenerator)
        factory.register_generator("counter", OtherCounterGenerator, override=True)

        assert isinstance(factory.create_generator("counter"), OtherCounterGenerator)
        assert len(factory) == 1

    def test_reject_non_generator_class(self, factory):
        """Test classes must subclass DataGenerator."""
        with pytest.raises(TypeError, match="subclass of DataGenerator"):
            factory.register_generator("bad", NotAGenerator)  # type: ignore[arg-type]

    def test_reject_non_callable(self, factory):
        """Test non-callables are rejected."""
        with pytest.raises(TypeError, match="class or callable"):
            factory.register_generator("bad", "nope")  # type: ignore[arg-type]

    def test_reject_empty_name(self, factory):
        """Test empty names are rejected."""
        with pytest.raises(ValueError):
            factory.register_generator("", CounterGenerator)

    def test_concurrent_registration(self, factory):
        """Test registration from several threads."""

        def register_many(start: int, end: int):
            for i in range(start, end):
                factory.register_generator(f"gen_{i}", CounterGenerator)

        threads = [
            Thread(target=register_many, args=(0, 100)),
            Thread(target=register_many, args=(100, 200)),
            Thread(target=register_many, args=(200, 300)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert factory.count() == 300


class TestCreation:
    """Test creating generator instances."""

    def test_fresh_instance_per_call(self, factory):
        """Test each call returns an independent instance."""
        factory.register_generator("counter", CounterGenerator)

        first = factory.create_generator("counter")
        second = factory.create_generator("counter")

        assert first is not second
        first.generate(GenerationContext())
        assert second.generate(GenerationContext()) == 1

    def test_shared_instance(self, factory):
        """Test shared generators are built once."""
        factory.register_generator("shared", SharedGenerator)
        assert factory.create_generator("shared") is factory.create_generator("shared")

    def test_override_drops_shared_instance(self, factory):
        """Test re-registration discards the cached shared instance."""
        factory.register_generator("shared", SharedGenerator)
        before = factory.create_generator("shared")

        factory.register_generator("shared", SharedGenerator, override=True)
        assert factory.create_generator("shared") is not before

    def test_not_found(self, factory):
        """Test unknown names raise NotFoundError."""
        factory.register_generator("counter", CounterGenerator)

        with pytest.raises(NotFoundError) as exc_info:
            factory.create_generator("missing")

        assert exc_info.value.context["available"] == ["counter"]

    def test_not_found_is_lookup_error(self, factory):
        """Test NotFoundError can be caught as LookupError."""
        with pytest.raises(LookupError):
            factory.create_generator("missing")

    def test_instantiation_failure(self, factory):
        """Test construction failures are wrapped and leave the entry."""
        factory.register_generator("broken", BrokenGenerator)

        with pytest.raises(InstantiationError) as exc_info:
            factory.create_generator("broken")

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert factory.is_registered("broken")

    def test_closure_returning_wrong_type(self, factory):
        """Test closures must return DataGenerator instances."""
        factory.register_generator("wrong", lambda: NotAGenerator())

        with pytest.raises(InstantiationError, match="must return a DataGenerator"):
            factory.create_generator("wrong")

    def test_generate_convenience(self, factory):
        """Test one-shot generation by name."""
        factory.register_generator("counter", CounterGenerator)
        assert factory.generate("counter") == 1


class TestUnregistration:
    """Test removing registrations."""

    def test_unregister(self, factory):
        """Test lookups fail after unregistering."""
        factory.register_generator("counter", CounterGenerator)
        removed = factory.unregister("counter")

        assert removed is CounterGenerator
        assert not factory.is_registered("counter")
        with pytest.raises(NotFoundError):
            factory.create_generator("counter")

    def test_unregister_missing(self, factory):
        """Test unregistering an unknown name."""
        with pytest.raises(NotFoundError, match="not found"):
            factory.unregister("missing")

    def test_clear(self, factory):
        """Test clearing the factory."""
        factory.register_generator("counter", CounterGenerator)
        factory.clear()
        assert factory.list_names() == []


class TestIntrospection:
    """Test listing and statistics."""

    def test_list_names_sorted(self, factory):
        """Test names are listed in sorted order."""
        factory.register_generator("b", CounterGenerator)
        factory.register_generator("a", CounterGenerator)
        assert factory.list_names() == ["a", "b"]

    def test_copy(self, factory):
        """Test copy is independent of the factory."""
        factory.register_generator("counter", CounterGenerator)
        snapshot = factory.copy()
        snapshot.clear()
        assert factory.is_registered("counter")

    def test_get_generator_type(self, factory):
        """Test retrieving the registered type."""
        factory.register_generator("counter", CounterGenerator)
        assert factory.get_generator_type("counter") is CounterGenerator
        assert factory.get_generator_type("missing") is None

    def test_stats_by_module(self, factory):
        """Test statistics grouped by defining module."""
        register_builtin_generators(factory)
        stats = factory.get_generator_stats()
        assert stats == {"communication": 4, "identifiers": 3}

    def test_repr(self, factory):
        """Test string representation."""
        assert repr(factory) == "GeneratorFactory(name='test', generators=0)"


class TestDefaultFactory:
    """Test the process-wide factory."""

    def test_same_instance(self):
        """Test the default factory is created once."""
        assert get_generator_factory() is get_generator_factory()

    def test_builtins_registered(self):
        """Test built-ins are present in the default factory."""
        factory = get_generator_factory()
        for generator_class in BUILTIN_GENERATORS:
            assert factory.is_registered(generator_class.name)

    def test_reset(self):
        """Test reset creates a new factory on next access."""
        first = get_generator_factory()
        reset_generator_factory()
        assert get_generator_factory() is not first

    def test_builtins_disabled_by_environment(self, monkeypatch):
        """Test DATAFORGE_REGISTER_BUILTINS=false leaves the factory empty."""
        monkeypatch.setenv("DATAFORGE_REGISTER_BUILTINS", "false")
        assert len(get_generator_factory()) == 0

    def test_register_builtins_twice_fails(self):
        """Test built-ins cannot be registered twice without override."""
        factory = GeneratorFactory()
        register_builtin_generators(factory)
        with pytest.raises(DuplicateRegistrationError):
            register_builtin_generators(factory)
        register_builtin_generators(factory, override=True)
