"""Generator factory: name to generator creation.

The factory maps generator names to generator classes or factory closures
and builds fresh generator instances on demand. It is thread-safe: lookups
share a readers-writer lock and run side by side, registry mutations hold
it exclusively, and generator construction happens outside it so
concurrent callers do not queue behind each other.

The factory is priority-agnostic. Registering a name that already exists
raises :class:`~dataforge.exceptions.DuplicateRegistrationError` unless the
caller passes ``override=True``; the
:class:`~dataforge.manager.ExtensionManager` arbitrates priorities first and
then overrides explicitly.

Example:
    ```python
    from dataforge.factory import GeneratorFactory

    factory = GeneratorFactory("generators")
    factory.register_generator("sku", SkuGenerator)
    factory.register_generator("sku_v2", lambda: SkuGenerator(width=8))

    generator = factory.create_generator("sku")
    value = generator.generate(GenerationContext(index=7))
    ```
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Union

from dataforge.context import GenerationContext
from dataforge.exceptions import (
    DuplicateRegistrationError,
    InstantiationError,
    NotFoundError,
)
from dataforge.generator import DataGenerator
from dataforge.locking import ReadWriteLock

logger = logging.getLogger(__name__)

GeneratorType = Union[type[DataGenerator], Callable[[], DataGenerator]]


class GeneratorFactory:
    """Registry of generator classes and factory closures by name.

    Args:
        name: Factory name (for logging and error context)

    Example:
        ```python
        factory = GeneratorFactory("generators")
        factory.register_generator("uuid", UuidGenerator)
        factory.is_registered("uuid")
        # True
        factory.create_generator("uuid").generate(GenerationContext())
        # '0b6d6c1e-...'
        ```
    """

    def __init__(self, name: str = "generators"):
        self._name = name
        self._factories: Dict[str, GeneratorType] = {}
        self._shared: Dict[str, DataGenerator] = {}
        self._lock = ReadWriteLock()

    @property
    def name(self) -> str:
        """Get factory name."""
        return self._name

    def register_generator(
        self,
        name: str,
        generator_type: GeneratorType,
        override: bool = False,
    ) -> None:
        """Register a generator class or factory closure.

        Args:
            name: Unique generator name (case-sensitive)
            generator_type: ``DataGenerator`` subclass, or a zero-argument
                callable returning a ``DataGenerator``
            override: Replace an existing registration instead of failing

        Raises:
            DuplicateRegistrationError: If ``name`` is taken and override is False
            TypeError: If ``generator_type`` is neither a DataGenerator
                subclass nor a callable
            ValueError: If ``name`` is empty
        """
        if not name:
            raise ValueError("Generator name must be a non-empty string")

        if isinstance(generator_type, type):
            if not issubclass(generator_type, DataGenerator):
                raise TypeError(
                    f"Generator class must be a subclass of DataGenerator, "
                    f"got {generator_type.__name__}"
                )
        elif not callable(generator_type):
            raise TypeError(
                f"Generator must be a class or callable, got {type(generator_type).__name__}"
            )

        with self._lock.write():
            if not override and name in self._factories:
                raise DuplicateRegistrationError(
                    f"Generator '{name}' already registered in {self._name}. "
                    f"Use override=True to replace.",
                    context={
                        "name": name,
                        "factory": self._name,
                        "existing": _describe(self._factories[name]),
                    },
                )

            self._factories[name] = generator_type
            self._shared.pop(name, None)

        logger.debug(f"Registered generator '{name}' -> {_describe(generator_type)}")

    def unregister(self, name: str) -> GeneratorType:
        """Remove a registration.

        Args:
            name: Generator name

        Returns:
            The removed class or factory closure

        Raises:
            NotFoundError: If ``name`` is not registered
        """
        with self._lock.write():
            if name not in self._factories:
                raise NotFoundError(
                    f"Generator not found: {name}",
                    context={"name": name, "factory": self._name},
                )
            self._shared.pop(name, None)
            generator_type = self._factories.pop(name)

        logger.debug(f"Unregistered generator '{name}'")
        return generator_type

    def is_registered(self, name: str) -> bool:
        """Check whether a generator name is registered (exact match)."""
        with self._lock.read():
            return name in self._factories

    def get_generator_type(self, name: str) -> GeneratorType | None:
        """Get the registered class or closure, or None."""
        with self._lock.read():
            return self._factories.get(name)

    def create_generator(self, name: str) -> DataGenerator:
        """Create a generator instance by name.

        Each call returns an independent instance, except for generator
        classes declaring ``shared = True``, which are built once per
        registration.

        Args:
            name: Generator name

        Returns:
            Generator instance

        Raises:
            NotFoundError: If ``name`` is not registered
            InstantiationError: If the generator cannot be constructed
        """
        with self._lock.read():
            generator_type = self._factories.get(name)
            if generator_type is None:
                raise NotFoundError(
                    f"Generator not found: {name}",
                    context={
                        "name": name,
                        "factory": self._name,
                        "available": sorted(self._factories.keys()),
                    },
                )
            cached = self._shared.get(name)
            if cached is not None:
                return cached

        instance = self._instantiate(name, generator_type)

        if isinstance(generator_type, type) and generator_type.shared:
            with self._lock.write():
                # Registration may have changed while constructing
                if self._factories.get(name) is generator_type:
                    instance = self._shared.setdefault(name, instance)

        return instance

    def generate(self, name: str, context: GenerationContext | None = None) -> Any:
        """Create a generator and produce one value with it."""
        return self.create_generator(name).generate(context or GenerationContext())

    def list_names(self) -> List[str]:
        """List registered generator names, sorted."""
        with self._lock.read():
            return sorted(self._factories.keys())

    def count(self) -> int:
        with self._lock.read():
            return len(self._factories)

    def copy(self) -> Dict[str, GeneratorType]:
        """Get a copy of all registrations."""
        with self._lock.read():
            return dict(self._factories)

    def clear(self) -> None:
        """Remove every registration."""
        with self._lock.write():
            self._factories.clear()
            self._shared.clear()

    def get_generator_stats(self) -> Dict[str, int]:
        """Count registered generators by defining module.

        Returns:
            Mapping of module group (last dotted segment) to count

        Example:
            ```python
            factory.get_generator_stats()
            # {'communication': 4, 'identifiers': 3}
            ```
        """
        stats: Dict[str, int] = {}
        with self._lock.read():
            for generator_type in self._factories.values():
                module = getattr(generator_type, "__module__", None) or "unknown"
                group = module.rsplit(".", 1)[-1]
                stats[group] = stats.get(group, 0) + 1
        return stats

    @contextmanager
    def locked(self) -> Iterator["GeneratorFactory"]:
        """Hold the registry write lock across several operations.

        Lookups from other threads wait until the block exits, so they never
        see a half-applied multi-step update.
        """
        with self._lock.write():
            yield self

    def _instantiate(self, name: str, generator_type: GeneratorType) -> DataGenerator:
        try:
            instance = generator_type()
        except Exception as e:
            raise InstantiationError(
                f"Failed to create generator '{name}': {e}",
                context={"name": name, "factory": self._name, "type": _describe(generator_type)},
            ) from e

        if not isinstance(instance, DataGenerator):
            raise InstantiationError(
                f"Factory for '{name}' must return a DataGenerator instance, "
                f"got {type(instance).__name__}",
                context={"name": name, "factory": self._name},
            )
        return instance

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: str) -> bool:
        return self.is_registered(name)

    def __repr__(self) -> str:
        return f"GeneratorFactory(name='{self._name}', generators={len(self._factories)})"


def _describe(generator_type: Any) -> str:
    module = getattr(generator_type, "__module__", "")
    qualname = getattr(generator_type, "__qualname__", type(generator_type).__name__)
    return f"{module}.{qualname}" if module else qualname


def register_builtin_generators(factory: GeneratorFactory, override: bool = False) -> List[str]:
    """Register the built-in generators into ``factory``.

    Returns:
        Names that were registered
    """
    from dataforge.generators import BUILTIN_GENERATORS

    for generator_class in BUILTIN_GENERATORS:
        factory.register_generator(generator_class.name, generator_class, override=override)
    return [generator_class.name for generator_class in BUILTIN_GENERATORS]


class _GeneratorFactorySingleton:
    """Holder for the process-wide factory."""

    _instance: GeneratorFactory | None = None
    _lock = threading.Lock()

    @classmethod
    def get(cls) -> GeneratorFactory:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    from dataforge.config import load_settings

                    factory = GeneratorFactory("generators")
                    if load_settings().register_builtins:
                        register_builtin_generators(factory)
                    cls._instance = factory
                    logger.info(f"Created default generator factory ({len(factory)} built-ins)")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._instance = None


def get_generator_factory() -> GeneratorFactory:
    """Get the process-wide generator factory, creating it on first use."""
    return _GeneratorFactorySingleton.get()


def reset_generator_factory() -> None:
    """Drop the process-wide factory. Useful for testing."""
    _GeneratorFactorySingleton.reset()


__all__ = [
    "GeneratorFactory",
    "GeneratorType",
    "get_generator_factory",
    "reset_generator_factory",
    "register_builtin_generators",
]
